import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mediabox.core.config import MediaBoxConfig
from mediabox.core.exceptions import BoxAlreadyExists, DirectoryAlreadyExists
from mediabox.models.box import MediaBox
from mediabox.models.content import MediaContent
from mediabox.monitoring.setup import report_box_deleted
from mediabox.services import quota
from mediabox.services.codec import AddressCodec
from mediabox.services.filters import apply_conditions, parse_conditions
from mediabox.services.images import ImageCodec
from mediabox.services.paths import PathTranslator, combine
from mediabox.services.upload import UploadPipeline
from mediabox.storage.base import StorageBackend
from mediabox.utils.sizes import format_size

logger = logging.getLogger("mediabox")

FILTERABLE_FIELDS = (
    "subdirectory",
    "filename",
    "size",
    "width",
    "height",
    "content_type",
    "uri",
    "uploaded_at",
)


class BoxService:
    """Quota-enforced media boxes and the content stored in them."""

    def __init__(self, db: Session, config: MediaBoxConfig, backend: StorageBackend):
        self.db = db
        self.config = config
        self.backend = backend
        self.paths = PathTranslator(config.prefix, backend)
        self.codec = AddressCodec(config.uri_salt, config.mime_map, config.uri_min_length)
        self.images = ImageCodec(config.upload_image_max_width, config.image_quality)

    # -----------------------------
    # Boxes
    # -----------------------------

    def get(self, owner_id) -> MediaBox | None:
        res = self.db.execute(select(MediaBox).where(MediaBox.owner_id == str(owner_id)))
        return res.scalars().first()

    def exists(self, owner_id) -> bool:
        return self.get(owner_id) is not None

    def create(self, owner_id, directory: str | None = None, max_size: int | None = None,
               actor: str | None = None) -> MediaBox:
        owner_id = str(owner_id)
        if self.exists(owner_id):
            raise BoxAlreadyExists(owner_id)

        directory = (directory or "").replace("\\", "/").strip("/") or MediaBox.default_directory(owner_id)
        if self._directory_taken(directory):
            raise DirectoryAlreadyExists(directory)

        box = MediaBox(
            owner_id=owner_id,
            directory=directory,
            max_size=max_size,
            created_by=actor,
            updated_by=actor,
        )
        self.db.add(box)
        try:
            self.db.commit()
        except IntegrityError as e:
            # lost a creation race, or the directory is taken
            self.db.rollback()
            if self.exists(owner_id):
                raise BoxAlreadyExists(owner_id) from e
            if self._directory_taken(directory):
                raise DirectoryAlreadyExists(directory) from e
            raise
        logger.info("box_created owner_id=%s directory=%s max_size=%s", owner_id, directory, max_size)
        return box

    def _directory_taken(self, directory: str) -> bool:
        res = self.db.execute(select(MediaBox.id).where(MediaBox.directory == directory))
        return res.first() is not None

    def used_size(self, box: MediaBox) -> int:
        return quota.used_size(self.db, box)

    def max_size(self, box: MediaBox) -> int:
        return quota.max_size(box, self.config)

    def usage(self, box: MediaBox, precision: int = 2) -> float:
        return quota.usage(self.db, box, self.config, precision)

    def format_size(self, box: MediaBox, precision: int = 2) -> str:
        return format_size(self.used_size(box), precision)

    def directory_of(self, box: MediaBox) -> str:
        return self.paths.directory_of(box)

    def delete_directory(self, box: MediaBox) -> None:
        self.backend.delete_directory(self.paths.directory_of(box))

    def delete(self, box: MediaBox, trigger: str = "explicit") -> None:
        """Delete every content item (file, then row), the box row, then its directory.

        Each item is committed as soon as its file is gone, so a backend
        failure part way through leaves no row pointing at a deleted file.
        """
        owner_id = box.owner_id
        directory = self.paths.directory_of(box)
        contents = self.db.execute(
            select(MediaContent).where(MediaContent.media_box_id == box.id).order_by(MediaContent.id)
        ).scalars().all()
        for content in contents:
            self.delete_content(content)
        self.db.delete(box)
        self.db.commit()
        self.backend.delete_directory(directory)
        report_box_deleted(trigger)
        logger.info("box_deleted owner_id=%s contents=%s trigger=%s", owner_id, len(contents), trigger)

    # -----------------------------
    # Content
    # -----------------------------

    def upload(self, box: MediaBox, data, filename: str | None = None, subdirectory: str | None = None,
               uploaded_at=None, actor: str | None = None) -> MediaContent:
        pipeline = UploadPipeline(self.db, self.config, self.backend, self.paths, self.codec, self.images)
        return pipeline.run(box, data, filename=filename, subdirectory=subdirectory,
                            uploaded_at=uploaded_at, actor=actor)

    def get_content(self, content_id: int) -> MediaContent | None:
        return self.db.get(MediaContent, content_id)

    def count(self, box: MediaBox) -> int:
        stmt = select(func.count()).select_from(MediaContent).where(MediaContent.media_box_id == box.id)
        return self.db.execute(stmt).scalar_one()

    def find(self, box: MediaBox, path: str | None) -> MediaContent | None:
        """Resolve a storage path or URL to content of this box, or ``None``."""
        if not path:
            return None
        path = self.paths.path_from_url_or_value(path)
        if not self.paths.owns(path):
            return None
        path = combine(path)
        if not self.paths.contains(self.paths.directory_of(box), path):
            return None
        uri = self.paths.basename(path)
        res = self.db.execute(
            select(MediaContent).where(MediaContent.media_box_id == box.id, MediaContent.uri == uri)
        )
        return res.scalars().first()

    def search(self, box: MediaBox, filters="") -> list[MediaContent]:
        """Contents matching every ``field<op>value`` clause, newest upload first."""
        query = select(MediaContent).where(MediaContent.media_box_id == box.id)
        query = apply_conditions(query, MediaContent, parse_conditions(filters), FILTERABLE_FIELDS)
        query = query.order_by(MediaContent.uploaded_at.desc(), MediaContent.id.desc())
        return list(self.db.execute(query).scalars().all())

    def path_of(self, content: MediaContent) -> str:
        return self.paths.path_of(content)

    def url_of(self, content: MediaContent) -> str:
        return self.paths.url_of(content)

    def read(self, content: MediaContent) -> bytes:
        return self.backend.get(self.paths.path_of(content))

    def delete_content(self, content: MediaContent) -> None:
        """Remove the backing file (already-missing is fine), then the row."""
        content_id = content.id
        path = self.paths.path_of(content)
        self.backend.delete(path)
        self.db.delete(content)
        self.db.commit()
        logger.info("content_deleted content_id=%s path=%s", content_id, path)
