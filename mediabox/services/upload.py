import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mediabox.core.config import MediaBoxConfig
from mediabox.core.exceptions import ContentAlreadyExists, InvalidContent, MediaBoxError, QuotaExceeded
from mediabox.models.box import MediaBox
from mediabox.models.content import UPLOAD_TOKEN, MediaContent
from mediabox.monitoring.setup import report_upload, report_upload_failure
from mediabox.services import quota
from mediabox.services.codec import AddressCodec
from mediabox.services.images import ImageCodec
from mediabox.services.paths import PathTranslator
from mediabox.storage.base import StorageBackend
from mediabox.utils.timestamps import to_utc_naive

logger = logging.getLogger("mediabox")


def _normalize_uploaded_at(uploaded_at) -> datetime:
    if uploaded_at is None:
        return datetime.utcnow().replace(microsecond=0)
    try:
        return to_utc_naive(uploaded_at)
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidContent(f"bad uploaded_at {uploaded_at!r}") from e


def _normalize_subdirectory(subdirectory: str | None, uploaded_at: datetime) -> str:
    subdirectory = (subdirectory or "").replace("\\", "/").strip("/")
    return subdirectory or uploaded_at.strftime("%Y%m%d")


class UploadPipeline:
    """Decode, normalise, address, store and quota-check one upload.

    The session's transaction is committed on success and rolled back on
    failure; any file already written is deleted before the error is
    raised. Quota is checked after the write against committed rows, so
    concurrent uploads to one box may each pass while together overshooting.
    """

    def __init__(
        self,
        db: Session,
        config: MediaBoxConfig,
        backend: StorageBackend,
        paths: PathTranslator,
        codec: AddressCodec,
        images: ImageCodec,
    ):
        self.db = db
        self.config = config
        self.backend = backend
        self.paths = paths
        self.codec = codec
        self.images = images

    def run(
        self,
        box: MediaBox,
        data,
        filename: str | None = None,
        subdirectory: str | None = None,
        uploaded_at=None,
        actor: str | None = None,
    ) -> MediaContent:
        try:
            uploaded_at = _normalize_uploaded_at(uploaded_at)
            decoded = self.images.fit_width(self.images.decode(data))
            content_type = decoded.content_type
            self.codec.mime_to_extension(content_type)
            payload = self.images.encode(decoded)
        except MediaBoxError as e:
            report_upload_failure(e.code)
            raise

        filename = filename or decoded.filename or ""
        subdirectory = _normalize_subdirectory(subdirectory, uploaded_at)

        content = MediaContent(
            _token=UPLOAD_TOKEN,
            box=box,
            subdirectory=subdirectory,
            filename=filename,
            size=0,
            width=decoded.width,
            height=decoded.height,
            content_type=content_type,
            uploaded_at=uploaded_at,
            created_by=actor,
            updated_by=actor,
        )
        path = None
        try:
            self.db.add(content)
            self.db.flush()
            content.uri = self.codec.identifier(content.id, uploaded_at, content_type)
            self.db.flush()

            path = self.paths.path_of(content)
            self.backend.put(path, payload, content_type)
            written = self.backend.size(path)

            used = quota.used_size(self.db, box, exclude_id=content.id)
            limit = quota.max_size(box, self.config)
            if used + written > limit:
                raise QuotaExceeded(box.owner_id, used, limit, written)

            content.size = written
            self.db.commit()
        except IntegrityError as e:
            self._discard(content, path)
            report_upload_failure(ContentAlreadyExists.code)
            raise ContentAlreadyExists(box.owner_id, subdirectory, filename) from e
        except MediaBoxError as e:
            self._discard(content, path)
            report_upload_failure(e.code)
            raise
        except Exception:
            self._discard(content, path)
            report_upload_failure("unexpected")
            raise

        report_upload(content.size)
        logger.info("upload_complete owner_id=%s content_id=%s uri=%s size=%s",
                    box.owner_id, content.id, content.uri, content.size)
        return content

    def _discard(self, content: MediaContent, path: str | None) -> None:
        """Best-effort removal of the file and row created by a failed upload."""
        content_id = content.id
        if path is not None:
            try:
                self.backend.delete(path)
            except Exception:
                logger.exception("Upload cleanup failed to delete %s", path)
        try:
            self.db.rollback()
        except Exception:
            logger.exception("Upload cleanup failed to roll back content %s", content_id)
        logger.warning("upload_discarded content_id=%s path=%s", content_id, path)
