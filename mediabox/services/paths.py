import posixpath
import re
from urllib.parse import urlsplit

from mediabox.models.box import MediaBox
from mediabox.models.content import MediaContent
from mediabox.storage.base import StorageBackend

_IMAGE_TEXT = re.compile(r"data:image/.*;base64,")
_SEPARATORS = re.compile(r"/{2,}")


def is_image_text(value) -> bool:
    """True for inline ``data:image/...;base64,`` strings."""
    if not isinstance(value, str) or len(value) < 50:
        return False
    return _IMAGE_TEXT.search(value[:50]) is not None


def combine(*segments) -> str:
    """Join path segments into a ``/``-rooted, forward-slash path."""
    combined = "/"
    for segment in segments:
        if segment is None:
            continue
        part = str(segment).replace("\\", "/")
        if not part:
            continue
        combined = combined.rstrip("/") + "/" + part.lstrip("/")
    return _SEPARATORS.sub("/", combined)


def _url_path(value: str) -> str | None:
    parts = urlsplit(value)
    if parts.scheme and parts.netloc:
        return parts.path or "/"
    if value.startswith("/") and not value.startswith("//"):
        return parts.path
    return None


class PathTranslator:
    """Translate between storage paths and external URLs under one prefix.

    Values that are not ours (foreign URLs, plain strings, image text) pass
    through unchanged in both directions.
    """

    def __init__(self, prefix: str, backend: StorageBackend):
        self.prefix = prefix.strip("/")
        self.backend = backend

    def directory_of(self, box: MediaBox) -> str:
        return combine(self.prefix, box.directory)

    def path_of(self, content: MediaContent) -> str:
        return combine(self.directory_of(content.box), content.subdirectory, content.uri)

    def url_of(self, content: MediaContent) -> str:
        return self.backend.url(self.path_of(content))

    def owns(self, path: str | None) -> bool:
        if not path:
            return False
        key = path.replace("\\", "/").lstrip("/")
        return key == self.prefix or key.startswith(self.prefix + "/")

    def contains(self, directory: str, path: str) -> bool:
        return path == directory or path.startswith(directory.rstrip("/") + "/")

    @staticmethod
    def basename(path: str) -> str:
        return posixpath.basename(path.replace("\\", "/").rstrip("/"))

    def path_from_url_or_value(self, value):
        if value is None:
            return None
        if isinstance(value, MediaContent):
            return self.path_of(value)
        if not isinstance(value, str) or is_image_text(value):
            return value

        candidate = _url_path(value)
        if candidate is None:
            return value
        base = _url_path(self.backend.url(self.prefix)) or combine(self.prefix)
        if candidate == base or candidate.startswith(base.rstrip("/") + "/"):
            return combine(self.prefix, candidate[len(base):])
        return value

    def url_from_path_or_value(self, value):
        if value is None:
            return None
        if isinstance(value, MediaContent):
            return self.url_of(value)
        if not isinstance(value, str) or is_image_text(value):
            return value
        if self.owns(value):
            return self.backend.url(combine(value))
        return value
