from typing import Any


class MediaBoxError(Exception):
    """Base class for media box errors.

    ``context`` carries the structured fields an API layer needs to render
    an actionable message; the core never formats these for display.
    """

    code = "mediabox_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context

    def to_dict(self) -> dict:
        return {"code": self.code, "message": str(self), **self.context}


class ConfigurationError(MediaBoxError):
    code = "invalid_configuration"

    def __init__(self, option: str, value: Any):
        super().__init__(f"Invalid value for {option}: {value!r}", option=option, value=value)


class BoxAlreadyExists(MediaBoxError):
    code = "box_already_exists"

    def __init__(self, owner_id: str):
        super().__init__(f"Media box already exists for owner {owner_id}", owner_id=owner_id)


class DirectoryAlreadyExists(MediaBoxError):
    code = "directory_already_exists"

    def __init__(self, directory: str):
        super().__init__(f"Media box directory {directory!r} is already in use", directory=directory)


class QuotaExceeded(MediaBoxError):
    code = "quota_exceeded"

    def __init__(self, owner_id: str, used_size: int, max_size: int, attempted_size: int):
        super().__init__(
            f"Media box quota exceeded for owner {owner_id}: "
            f"{used_size} + {attempted_size} > {max_size} bytes",
            owner_id=owner_id,
            used_size=used_size,
            max_size=max_size,
            attempted_size=attempted_size,
        )


class UnsupportedMimeType(MediaBoxError):
    code = "unsupported_mime_type"

    def __init__(self, content_type: str | None):
        super().__init__(f"Unsupported content type: {content_type}", content_type=content_type)


class InvalidContent(MediaBoxError):
    code = "invalid_content"

    def __init__(self, reason: str):
        super().__init__(f"Content could not be decoded: {reason}", reason=reason)


class ContentAlreadyExists(MediaBoxError):
    code = "content_already_exists"

    def __init__(self, owner_id: str, subdirectory: str | None, filename: str):
        super().__init__(
            f"Content {filename!r} already exists in {subdirectory or '/'}",
            owner_id=owner_id,
            subdirectory=subdirectory,
            filename=filename,
        )


class InvalidFilter(MediaBoxError):
    code = "invalid_filter"

    def __init__(self, field: str, value: Any = None, reason: str = "unknown field"):
        super().__init__(f"Invalid filter on {field!r}: {reason}", field=field, value=value)


class BackendError(MediaBoxError):
    code = "backend_error"

    def __init__(self, operation: str, path: str, reason: str = ""):
        super().__init__(f"Storage {operation} failed for {path}: {reason}", operation=operation, path=path)


class BlindCreationError(MediaBoxError):
    code = "blind_creation"

    def __init__(self):
        super().__init__("Please use the media box upload method instead.")
