from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Byte storage addressed by backend-neutral paths.

    Paths are forward-slash separated and root-relative; a leading ``/`` is
    accepted and ignored. ``delete`` of a missing path succeeds. Every I/O
    failure is raised as :class:`mediabox.core.exceptions.BackendError`.
    """

    @abstractmethod
    def put(self, path: str, data: bytes, content_type: str | None = None) -> None: ...

    @abstractmethod
    def get(self, path: str) -> bytes: ...

    @abstractmethod
    def size(self, path: str) -> int: ...

    @abstractmethod
    def delete(self, path: str) -> None: ...

    @abstractmethod
    def delete_directory(self, path: str) -> None: ...

    @abstractmethod
    def exists(self, path: str) -> bool: ...

    @abstractmethod
    def url(self, path: str) -> str: ...

    @staticmethod
    def key(path: str) -> str:
        return path.replace("\\", "/").strip("/")
