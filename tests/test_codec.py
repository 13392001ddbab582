from __future__ import annotations

import calendar
from datetime import datetime

import pytest

from mediabox.core.config import DEFAULT_MIME_MAP
from mediabox.core.exceptions import UnsupportedMimeType
from mediabox.services.codec import URI_ALPHABET, AddressCodec


@pytest.fixture()
def codec() -> AddressCodec:
    return AddressCodec("test-salt", DEFAULT_MIME_MAP, min_length=32)


def test_encode_is_deterministic(codec) -> None:
    ts = datetime(2024, 5, 1, 12, 0, 0)
    assert codec.encode(7, ts) == codec.encode(7, ts)
    assert codec.encode(7, ts) == AddressCodec("test-salt", DEFAULT_MIME_MAP).encode(7, ts)


def test_encode_distinguishes_id_timestamp_and_salt(codec) -> None:
    ts = datetime(2024, 5, 1, 12, 0, 0)
    tokens = {
        codec.encode(1, ts),
        codec.encode(2, ts),
        codec.encode(1, datetime(2024, 5, 1, 12, 0, 1)),
        AddressCodec("other-salt", DEFAULT_MIME_MAP).encode(1, ts),
    }
    assert len(tokens) == 4


def test_token_is_url_safe_and_length_bounded(codec) -> None:
    token = codec.encode(123456, datetime(2030, 1, 1))
    assert len(token) >= 32
    assert set(token) <= set(URI_ALPHABET)


def test_decode_recovers_pair(codec) -> None:
    ts = datetime(2024, 5, 1, 12, 0, 0)
    token = codec.encode(42, ts)
    assert codec.decode(token + ".png") == (42, calendar.timegm(ts.utctimetuple()))


def test_mime_to_extension(codec) -> None:
    assert codec.mime_to_extension("image/png") == "png"
    assert codec.mime_to_extension("image/pjpeg") == "jpeg"
    assert codec.mime_to_extension("IMAGE/PNG; charset=binary") == "png"


@pytest.mark.parametrize("mime", ["application/pdf", "", None])
def test_mime_to_extension_rejects_unknown(codec, mime) -> None:
    with pytest.raises(UnsupportedMimeType) as exc:
        codec.mime_to_extension(mime)
    assert exc.value.context["content_type"] == mime


def test_identifier_appends_extension(codec) -> None:
    ts = datetime(2024, 5, 1)
    assert codec.identifier(3, ts, "image/webp") == codec.encode(3, ts) + ".webp"
