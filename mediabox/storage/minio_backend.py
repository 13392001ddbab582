import io
import logging

from minio import Minio
from minio.deleteobjects import DeleteObject
from minio.error import S3Error

from mediabox.core.exceptions import BackendError
from mediabox.storage.base import StorageBackend

logger = logging.getLogger("mediabox")

_MISSING_CODES = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}


class MinioBackend(StorageBackend):
    """MinIO / S3 bucket backend. URLs are public bucket URLs, not presigned."""

    def __init__(self, client: Minio, bucket: str, public_url: str):
        self.client = client
        self.bucket = bucket
        self.public_url = public_url.rstrip("/")

    def put(self, path: str, data: bytes, content_type: str | None = None) -> None:
        try:
            self.client.put_object(
                self.bucket,
                self.key(path),
                io.BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
            )
        except S3Error as e:
            raise BackendError("put", path, str(e)) from e

    def get(self, path: str) -> bytes:
        try:
            obj = self.client.get_object(self.bucket, self.key(path))
        except S3Error as e:
            raise BackendError("get", path, str(e)) from e
        try:
            return obj.read()
        finally:
            obj.close()
            obj.release_conn()

    def size(self, path: str) -> int:
        try:
            return self.client.stat_object(self.bucket, self.key(path)).size
        except S3Error as e:
            raise BackendError("size", path, str(e)) from e

    def delete(self, path: str) -> None:
        try:
            self.client.remove_object(self.bucket, self.key(path))
        except S3Error as e:
            if e.code in _MISSING_CODES:
                logger.debug("delete skipped, object already gone: %s", path)
                return
            raise BackendError("delete", path, str(e)) from e

    def delete_directory(self, path: str) -> None:
        prefix = self.key(path) + "/"
        try:
            objects = self.client.list_objects(self.bucket, prefix=prefix, recursive=True)
            errors = list(self.client.remove_objects(
                self.bucket, (DeleteObject(o.object_name) for o in objects)
            ))
        except S3Error as e:
            raise BackendError("delete_directory", path, str(e)) from e
        if errors:
            raise BackendError("delete_directory", path, "; ".join(str(err) for err in errors))

    def exists(self, path: str) -> bool:
        try:
            self.client.stat_object(self.bucket, self.key(path))
            return True
        except S3Error as e:
            if e.code in _MISSING_CODES:
                return False
            raise BackendError("exists", path, str(e)) from e

    def url(self, path: str) -> str:
        return f"{self.public_url}/{self.bucket}/{self.key(path)}"
