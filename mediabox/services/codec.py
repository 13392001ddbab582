import calendar
from datetime import datetime
from typing import Mapping

from hashids import Hashids

from mediabox.core.exceptions import UnsupportedMimeType

# No character here needs percent-encoding in a URL path.
URI_ALPHABET = "abcdefghijklmnopqrstuvwxyz1234567890_-"


def _epoch_seconds(timestamp) -> int:
    if isinstance(timestamp, datetime):
        # naive datetimes are UTC throughout the service
        return calendar.timegm(timestamp.utctimetuple())
    return int(timestamp)


class AddressCodec:
    """Keyed, URL-safe encoding of (content id, upload time) into an opaque name."""

    def __init__(self, salt: str, mime_map: Mapping[str, str], min_length: int = 32):
        self.mime_map = mime_map
        self._hashids = Hashids(salt=salt, min_length=min_length, alphabet=URI_ALPHABET)

    def encode(self, item_id: int, timestamp) -> str:
        token = self._hashids.encode(int(item_id), _epoch_seconds(timestamp))
        if not token:
            raise ValueError(f"cannot encode id={item_id!r} timestamp={timestamp!r}")
        return token

    def decode(self, token: str) -> tuple[int, ...]:
        return self._hashids.decode(token.split(".", 1)[0])

    def mime_to_extension(self, mime: str | None) -> str:
        key = (mime or "").split(";", 1)[0].strip().lower()
        extension = self.mime_map.get(key)
        if not extension:
            raise UnsupportedMimeType(mime)
        return extension

    def identifier(self, item_id: int, timestamp, content_type: str) -> str:
        return f"{self.encode(item_id, timestamp)}.{self.mime_to_extension(content_type)}"
