from mediabox.core.config import Disk, MediaBoxConfig, Settings, settings
from mediabox.storage.base import StorageBackend
from mediabox.storage.local import LocalBackend
from mediabox.storage.minio_backend import MinioBackend


def create_backend(config: MediaBoxConfig, source: Settings = settings) -> StorageBackend:
    """Build the backend selected by ``config.disk``."""
    if config.disk is Disk.MINIO:
        from mediabox.core.minio_client import create_minio_client, initialize_minio_bucket

        client = create_minio_client(source)
        initialize_minio_bucket(client, source.MINIO_BUCKET)
        scheme = "https" if source.MINIO_SECURE else "http"
        public_url = source.MINIO_PUBLIC_URL or f"{scheme}://{source.MINIO_ENDPOINT}"
        return MinioBackend(client, source.MINIO_BUCKET, public_url)
    return LocalBackend(source.LOCAL_ROOT, source.PUBLIC_BASE_URL)


__all__ = ["StorageBackend", "LocalBackend", "MinioBackend", "create_backend"]
