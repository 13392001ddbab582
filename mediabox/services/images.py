import base64
import binascii
import io
import logging
import os
import re
from dataclasses import dataclass, replace

from PIL import Image, UnidentifiedImageError

from mediabox.core.exceptions import InvalidContent

logger = logging.getLogger("mediabox")

_DATA_URL = re.compile(r"^data:([\w/.+\-]+)?(;[\w=.\-]+)*;base64,(.*)$", re.DOTALL)
_QUALITY_FORMATS = {"JPEG", "WEBP"}
# Camera JPEGs carrying multi-picture data open as MPO; the primary image is a plain JPEG.
_FORMAT_ALIASES = {"MPO": "JPEG"}


@dataclass
class DecodedImage:
    image: Image.Image
    format: str
    content_type: str | None
    filename: str

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


def _read_source(data) -> tuple[bytes, str]:
    """Return raw bytes and the source filename (``""`` when unknown)."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data), ""

    if isinstance(data, str):
        match = _DATA_URL.match(data.strip())
        if not match:
            raise InvalidContent("string input must be a base64 data URL")
        try:
            return base64.b64decode(match.group(3), validate=True), ""
        except (binascii.Error, ValueError) as e:
            raise InvalidContent(f"bad base64 payload: {e}") from e

    # Starlette UploadFile: the client filename lives next to the spooled file
    upload = getattr(data, "file", None)
    if upload is not None and hasattr(upload, "read") and hasattr(data, "filename"):
        if hasattr(upload, "seek"):
            upload.seek(0)
        return upload.read(), data.filename or ""

    if hasattr(data, "read"):
        raw = data.read()
        name = getattr(data, "name", "")
        filename = os.path.basename(name) if isinstance(name, str) else ""
        if isinstance(raw, str):
            raise InvalidContent("file-like input must be opened in binary mode")
        return raw, filename

    raise InvalidContent(f"unsupported input type {type(data).__name__}")


class ImageCodec:
    """Pillow-backed decode / width-bound resize / re-encode."""

    def __init__(self, max_width: int | None = None, quality: int = 90):
        self.max_width = max_width
        self.quality = quality

    def decode(self, data) -> DecodedImage:
        raw, filename = _read_source(data)
        if not raw:
            raise InvalidContent("empty content")
        try:
            image = Image.open(io.BytesIO(raw))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise InvalidContent(str(e) or type(e).__name__) from e
        fmt = image.format or ""
        fmt = _FORMAT_ALIASES.get(fmt, fmt)
        return DecodedImage(image=image, format=fmt, content_type=Image.MIME.get(fmt), filename=filename)

    @staticmethod
    def _resize(decoded: DecodedImage, width: int | None = None, height: int | None = None) -> DecodedImage:
        """Resize to the given box; a missing side keeps the aspect ratio."""
        if width is None:
            width = max(1, round(decoded.width * height / decoded.height))
        elif height is None:
            height = max(1, round(decoded.height * width / decoded.width))
        if (width, height) == (decoded.width, decoded.height):
            return decoded
        logger.debug("resizing %sx%s -> %sx%s", decoded.width, decoded.height, width, height)
        return replace(decoded, image=decoded.image.resize((width, height), Image.LANCZOS))

    def fit_width(self, decoded: DecodedImage) -> DecodedImage:
        if not self.max_width or decoded.width <= self.max_width:
            return decoded
        return self._resize(decoded, width=self.max_width)

    def encode(self, decoded: DecodedImage, quality: int | None = None) -> bytes:
        image = decoded.image
        options = {}
        if decoded.format in _QUALITY_FORMATS:
            options["quality"] = self.quality if quality is None else quality
        if decoded.format == "JPEG" and image.mode not in ("RGB", "L", "CMYK"):
            image = image.convert("RGB")
        buf = io.BytesIO()
        try:
            image.save(buf, format=decoded.format, **options)
        except (OSError, ValueError, KeyError) as e:
            raise InvalidContent(f"cannot encode {decoded.format}: {e}") from e
        return buf.getvalue()

    def resize_image_text(self, text: str, width: int | None = None, height: int | None = None,
                          quality: int = 90) -> str:
        """Resize a ``data:image/...;base64,`` string and return it as a data URL.

        Width alone or height alone scales proportionally; both set the exact
        size.
        """
        if width is None and height is None:
            raise ValueError("width or height is required")
        for name, value in (("width", width), ("height", height)):
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value!r}")
        decoded = self._resize(self.decode(text), width=width, height=height)
        payload = base64.b64encode(self.encode(decoded, quality)).decode("ascii")
        return f"data:{decoded.content_type};base64,{payload}"
