import logging

from minio import Minio
from minio.error import S3Error

from mediabox.core.config import Settings, settings

logger = logging.getLogger("mediabox")


def create_minio_client(source: Settings = settings) -> Minio:
    return Minio(
        source.MINIO_ENDPOINT,
        access_key=source.MINIO_ACCESS_KEY,
        secret_key=source.MINIO_SECRET_KEY,
        secure=source.MINIO_SECURE
    )


def initialize_minio_bucket(client: Minio, bucket: str) -> None:
    try:
        if not client.bucket_exists(bucket):
            client.make_bucket(bucket)
            logger.info(f"Bucket '{bucket}' created successfully")
        else:
            logger.info(f"Bucket '{bucket}' already exists")
    except S3Error as e:
        logger.error(f"MinIO error: {e}")
        raise RuntimeError(f"Failed to initialize MinIO bucket: {e}")
