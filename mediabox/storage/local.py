import logging
import os
import shutil
import tempfile
from pathlib import Path

from mediabox.core.exceptions import BackendError
from mediabox.storage.base import StorageBackend

logger = logging.getLogger("mediabox")


class LocalBackend(StorageBackend):
    """Filesystem backend; files are served from ``base_url``."""

    def __init__(self, root: str | os.PathLike, base_url: str = "/storage"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        """Join ``path`` under the root, refusing directory traversal."""
        base = self.root.resolve()
        result = (base / self.key(path)).resolve()
        if result != base and base not in result.parents:
            raise BackendError("resolve", path, "path escapes storage root")
        return result

    def put(self, path: str, data: bytes, content_type: str | None = None) -> None:
        target = self._resolve(path)
        tmp_path = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # Same directory keeps the rename atomic
            with tempfile.NamedTemporaryFile(dir=str(target.parent), delete=False, suffix=".tmp") as tmp:
                tmp_path = tmp.name
                tmp.write(data)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise BackendError("put", path, str(e)) from e

    def get(self, path: str) -> bytes:
        try:
            return self._resolve(path).read_bytes()
        except OSError as e:
            raise BackendError("get", path, str(e)) from e

    def size(self, path: str) -> int:
        try:
            return self._resolve(path).stat().st_size
        except OSError as e:
            raise BackendError("size", path, str(e)) from e

    def delete(self, path: str) -> None:
        try:
            self._resolve(path).unlink()
        except FileNotFoundError:
            logger.debug("delete skipped, file already gone: %s", path)
        except OSError as e:
            raise BackendError("delete", path, str(e)) from e

    def delete_directory(self, path: str) -> None:
        target = self._resolve(path)
        if target == self.root.resolve():
            raise BackendError("delete_directory", path, "refusing to remove storage root")
        try:
            shutil.rmtree(target)
        except FileNotFoundError:
            logger.debug("delete_directory skipped, directory already gone: %s", path)
        except OSError as e:
            raise BackendError("delete_directory", path, str(e)) from e

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{self.key(path)}"
