import hashlib
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from mediabox.core.database import Base


class MediaBox(Base):
    __tablename__ = "media_boxes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, unique=True, index=True)
    directory = Column(String(255), nullable=False, unique=True)
    max_size = Column(BigInteger, nullable=True)
    created_by = Column(String(64), nullable=True)
    updated_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    contents = relationship(
        "MediaContent",
        viewonly=True,
        order_by="MediaContent.uploaded_at.desc()",
    )

    @staticmethod
    def default_directory(owner_id) -> str:
        return hashlib.md5(str(owner_id).encode("utf-8")).hexdigest()

    def __repr__(self):
        return f"<MediaBox id={self.id} owner_id={self.owner_id!r} directory={self.directory!r}>"
