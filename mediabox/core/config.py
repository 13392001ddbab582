import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from mediabox.core.exceptions import ConfigurationError

DEFAULT_MIME_MAP: Mapping[str, str] = MappingProxyType({
    "image/bmp": "bmp",
    "image/x-bmp": "bmp",
    "image/x-bitmap": "bmp",
    "image/x-xbitmap": "bmp",
    "image/x-win-bitmap": "bmp",
    "image/x-windows-bmp": "bmp",
    "image/ms-bmp": "bmp",
    "image/x-ms-bmp": "bmp",
    "image/gif": "gif",
    "image/jpeg": "jpeg",
    "image/pjpeg": "jpeg",
    "image/png": "png",
    "image/x-png": "png",
    "image/svg+xml": "svg",
    "image/tiff": "tiff",
    "image/webp": "webp",
})


def _optional_int(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    return int(value)


class Settings:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key")
    DATABASE_URL: str = os.getenv("MEDIABOX_DATABASE_URL", "sqlite:///./mediabox.db")

    PREFIX: str = os.getenv("MEDIABOX_PREFIX", "mbox")
    MAX_SIZE: int = int(os.getenv("MEDIABOX_MAX_SIZE", str(100 * 1024 * 1024)))
    DISK: str = os.getenv("MEDIABOX_DISK", "local")
    UPLOAD_IMAGE_MAX_WIDTH: int | None = _optional_int(os.getenv("MEDIABOX_UPLOAD_IMAGE_MAX_WIDTH"))
    IMAGE_QUALITY: int = int(os.getenv("MEDIABOX_IMAGE_QUALITY", "90"))
    USER_RELATION_TYPE: str = os.getenv("MEDIABOX_USER_RELATION_TYPE", "aggregation")
    URI_SALT: str = os.getenv("MEDIABOX_URI_SALT", SECRET_KEY)
    URI_MIN_LENGTH: int = int(os.getenv("MEDIABOX_URI_MIN_LENGTH", "32"))

    LOCAL_ROOT: str = os.getenv("MEDIABOX_LOCAL_ROOT", "./storage")
    PUBLIC_BASE_URL: str = os.getenv("MEDIABOX_PUBLIC_BASE_URL", "/storage")

    MINIO_ENDPOINT: str = os.getenv("MINIO_ENDPOINT", "minio:9000")
    MINIO_ACCESS_KEY: str = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
    MINIO_SECRET_KEY: str = os.getenv("MINIO_SECRET_KEY", "minioadmin")
    MINIO_BUCKET: str = os.getenv("MINIO_BUCKET", "mediabox")
    MINIO_SECURE: bool = os.getenv("MINIO_SECURE", "false").lower() == "true"
    MINIO_PUBLIC_URL: str = os.getenv("MINIO_PUBLIC_URL", "")


settings = Settings()


class RelationMode(str, Enum):
    """How a box relates to its owner when the owner is deleted."""

    AGGREGATION = "aggregation"
    COMPOSITION = "composition"

    @classmethod
    def parse(cls, raw: str) -> "RelationMode":
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            raise ConfigurationError("user_relation_type", raw) from None


class Disk(str, Enum):
    LOCAL = "local"
    MINIO = "minio"

    @classmethod
    def parse(cls, raw: str) -> "Disk":
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            raise ConfigurationError("disk", raw) from None


@dataclass(frozen=True)
class MediaBoxConfig:
    """Immutable configuration handed to the box services at construction."""

    prefix: str = "mbox"
    default_max_size: int = 100 * 1024 * 1024
    disk: Disk = Disk.LOCAL
    upload_image_max_width: int | None = None
    image_quality: int = 90
    relation_mode: RelationMode = RelationMode.AGGREGATION
    uri_salt: str = ""
    uri_min_length: int = 32
    mime_map: Mapping[str, str] = field(default_factory=lambda: DEFAULT_MIME_MAP)

    def __post_init__(self):
        prefix = (self.prefix or "").strip("/\\")
        if not prefix:
            raise ConfigurationError("prefix", self.prefix)
        object.__setattr__(self, "prefix", prefix)
        if self.default_max_size < 0:
            raise ConfigurationError("max_size", self.default_max_size)
        if self.upload_image_max_width is not None and self.upload_image_max_width <= 0:
            raise ConfigurationError("upload_image_max_width", self.upload_image_max_width)
        if not 1 <= self.image_quality <= 100:
            raise ConfigurationError("image_quality", self.image_quality)
        object.__setattr__(self, "mime_map", MappingProxyType(dict(self.mime_map)))

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "MediaBoxConfig":
        return cls(
            prefix=source.PREFIX,
            default_max_size=source.MAX_SIZE,
            disk=Disk.parse(source.DISK),
            upload_image_max_width=source.UPLOAD_IMAGE_MAX_WIDTH,
            image_quality=source.IMAGE_QUALITY,
            relation_mode=RelationMode.parse(source.USER_RELATION_TYPE),
            uri_salt=source.URI_SALT,
            uri_min_length=source.URI_MIN_LENGTH,
        )
