from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from mediabox.core.database import Base
from mediabox.core.exceptions import BlindCreationError

# Only the upload pipeline holds this; size, identifier and path are unknowable elsewhere.
UPLOAD_TOKEN = object()


class MediaContent(Base):
    __tablename__ = "media_contents"
    __table_args__ = (
        UniqueConstraint("media_box_id", "subdirectory", "filename", name="uk_media_contents"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    media_box_id = Column(Integer, ForeignKey("media_boxes.id", ondelete="CASCADE"), nullable=False, index=True)
    subdirectory = Column(String(255), nullable=True)
    filename = Column(String(255), nullable=False, default="")
    size = Column(BigInteger, nullable=False, default=0)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    content_type = Column(String(255), nullable=False)
    uri = Column(String(512), nullable=True, unique=True)
    uploaded_at = Column(DateTime, nullable=False, index=True)
    created_by = Column(String(64), nullable=True)
    updated_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    box = relationship("MediaBox")

    def __init__(self, *, _token=None, **kwargs):
        if _token is not UPLOAD_TOKEN:
            raise BlindCreationError()
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<MediaContent id={self.id} uri={self.uri!r} size={self.size}>"
