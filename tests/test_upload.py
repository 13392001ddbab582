from __future__ import annotations

import base64
import dataclasses
import io
from datetime import datetime

import pytest
from PIL import Image
from sqlalchemy import func, select

from conftest import RecordingBackend, image_bytes
from mediabox.core.exceptions import (
    BackendError,
    BlindCreationError,
    ContentAlreadyExists,
    InvalidContent,
    QuotaExceeded,
    UnsupportedMimeType,
)
from mediabox.models.content import MediaContent
from mediabox.services.boxes import BoxService


class FailingBackend(RecordingBackend):
    def put(self, path, data, content_type=None):
        self.calls.append(("put", path))
        raise BackendError("put", path, "disk full")


def _row_count(db_session) -> int:
    return db_session.execute(select(func.count()).select_from(MediaContent)).scalar_one()


def test_upload_records_stored_size(boxes, box, backend) -> None:
    content = boxes.upload(box, image_bytes(), filename="a.png")
    assert content.id is not None
    assert content.size == backend.size(boxes.path_of(content))
    assert content.size > 0
    assert boxes.used_size(box) == content.size
    assert (content.width, content.height) == (64, 32)


def test_upload_from_opened_file(boxes, box, tmp_path) -> None:
    source = tmp_path / "image.png"
    source.write_bytes(image_bytes())
    with open(source, "rb") as fh:
        content = boxes.upload(box, fh)
    assert content.filename == "image.png"
    assert content.content_type == "image/png"
    assert content.uri.endswith(".png")


def test_upload_identifier_encodes_id_and_time(boxes, box) -> None:
    uploaded_at = datetime(2024, 5, 6, 7, 8, 9)
    content = boxes.upload(box, image_bytes(), filename="a.png", uploaded_at=uploaded_at)
    assert content.uploaded_at == uploaded_at
    assert content.uri == boxes.codec.identifier(content.id, uploaded_at, "image/png")
    assert len(content.uri.split(".")[0]) >= 32


def test_upload_default_subdirectory_is_upload_date(boxes, box) -> None:
    content = boxes.upload(box, image_bytes(), uploaded_at=datetime(2024, 5, 6, 7, 8, 9))
    assert content.subdirectory == "20240506"
    assert boxes.path_of(content) == f"/mbox/{box.directory}/20240506/{content.uri}"


def test_upload_normalizes_aware_timestamps(boxes, box) -> None:
    content = boxes.upload(box, image_bytes(), uploaded_at="2024-05-06T23:30:00+02:00")
    assert content.uploaded_at == datetime(2024, 5, 6, 21, 30)


def test_upload_explicit_subdirectory(boxes, box) -> None:
    content = boxes.upload(box, image_bytes(), filename="a.png", subdirectory="/avatars/")
    assert content.subdirectory == "avatars"
    assert boxes.path_of(content).endswith(f"/avatars/{content.uri}")


def test_upload_content_type_comes_from_the_bytes(boxes, box) -> None:
    content = boxes.upload(box, image_bytes(fmt="JPEG"), filename="photo.png")
    assert content.content_type == "image/jpeg"
    assert content.uri.endswith(".jpeg")


def test_upload_data_url(boxes, box) -> None:
    text = "data:image/png;base64," + base64.b64encode(image_bytes()).decode("ascii")
    content = boxes.upload(box, text)
    assert content.content_type == "image/png"
    assert content.filename == ""


def test_upload_resizes_to_max_width(db_session, config, backend) -> None:
    narrow = BoxService(db_session, dataclasses.replace(config, upload_image_max_width=32), backend)
    box = narrow.create("owner-2")
    content = narrow.upload(box, image_bytes(128, 64), filename="wide.png")
    assert (content.width, content.height) == (32, 16)

    small = narrow.upload(box, image_bytes(16, 16), filename="small.png")
    assert (small.width, small.height) == (16, 16)


def test_quota_rejection_leaves_no_trace(boxes, backend, db_session) -> None:
    box = boxes.create("tiny", max_size=1024 * 1024)
    kept = boxes.upload(box, image_bytes(), filename="kept.png")
    before = boxes.used_size(box)

    with pytest.raises(QuotaExceeded) as exc:
        boxes.upload(box, image_bytes(820, 820, noise=True), filename="big.png")

    assert exc.value.context["max_size"] == 1024 * 1024
    assert exc.value.context["used_size"] == before
    assert boxes.used_size(box) == before
    assert boxes.count(box) == 1
    assert _row_count(db_session) == 1

    put_path = backend.calls[-2][1]
    assert backend.calls[-2:] == [("put", put_path), ("delete", put_path)]
    assert not backend.exists(put_path)
    assert backend.exists(boxes.path_of(kept))


def test_quota_boundary_is_inclusive(boxes) -> None:
    probe = boxes.create("probe")
    size = boxes.upload(probe, image_bytes(), filename="a.png").size

    exact = boxes.create("exact", max_size=size)
    boxes.upload(exact, image_bytes(), filename="a.png")
    assert boxes.used_size(exact) == size
    assert boxes.usage(exact) == 100.0

    with pytest.raises(QuotaExceeded):
        boxes.upload(exact, image_bytes(), filename="b.png")
    assert boxes.count(exact) == 1


def test_invalid_content_is_rejected_before_storage(boxes, box, backend, db_session) -> None:
    with pytest.raises(InvalidContent):
        boxes.upload(box, b"definitely not an image")
    with pytest.raises(InvalidContent):
        boxes.upload(box, "not a data url")
    with pytest.raises(InvalidContent):
        boxes.upload(box, 12345)
    assert _row_count(db_session) == 0
    assert backend.calls == []


def test_unsupported_mime_type_is_rejected_before_storage(boxes, box, backend, db_session) -> None:
    with pytest.raises(UnsupportedMimeType) as exc:
        boxes.upload(box, image_bytes(fmt="ICO"), filename="favicon.ico")
    assert exc.value.context["content_type"] == "image/x-icon"
    assert _row_count(db_session) == 0
    assert backend.calls == []


def test_backend_failure_rolls_back_the_row(db_session, config, tmp_path) -> None:
    failing = FailingBackend(tmp_path / "storage")
    service = BoxService(db_session, config, failing)
    box = service.create("owner-3")

    with pytest.raises(BackendError):
        service.upload(box, image_bytes(), filename="a.png")

    assert _row_count(db_session) == 0
    assert service.used_size(box) == 0


def test_duplicate_filename_is_rejected(boxes, box, backend, db_session) -> None:
    first = boxes.upload(box, image_bytes(), filename="a.png", subdirectory="x")
    puts = [c for c in backend.calls if c[0] == "put"]

    with pytest.raises(ContentAlreadyExists):
        boxes.upload(box, image_bytes(32, 32), filename="a.png", subdirectory="x")

    assert _row_count(db_session) == 1
    assert [c for c in backend.calls if c[0] == "put"] == puts
    assert backend.exists(boxes.path_of(first))

    # same name in another subdirectory is fine
    boxes.upload(box, image_bytes(32, 32), filename="a.png", subdirectory="y")
    assert boxes.count(box) == 2


def test_blind_creation_is_refused() -> None:
    with pytest.raises(BlindCreationError):
        MediaContent(filename="a.png", content_type="image/png")


def test_multi_picture_jpeg_is_stored_as_jpeg(boxes, box, backend) -> None:
    raw = image_bytes(fmt="MPO")
    assert raw[:3] == b"\xff\xd8\xff"
    assert Image.open(io.BytesIO(raw)).format == "MPO"

    content = boxes.upload(box, raw, filename="phone.jpg")

    assert content.content_type == "image/jpeg"
    assert content.uri.endswith(".jpeg")
    stored = Image.open(io.BytesIO(backend.get(boxes.path_of(content))))
    assert stored.format == "JPEG"
    assert stored.size == (64, 32)


def test_bad_uploaded_at_is_invalid_content(boxes, box, backend) -> None:
    with pytest.raises(InvalidContent):
        boxes.upload(box, image_bytes(), uploaded_at="yesterday")
    assert backend.calls == []
