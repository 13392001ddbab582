from sqlalchemy import func, select
from sqlalchemy.orm import Session

from mediabox.core.config import MediaBoxConfig
from mediabox.models.box import MediaBox
from mediabox.models.content import MediaContent


def used_size(db: Session, box: MediaBox, exclude_id: int | None = None) -> int:
    """Sum of the box's content sizes, read from the database on every call."""
    stmt = select(func.coalesce(func.sum(MediaContent.size), 0)).where(MediaContent.media_box_id == box.id)
    if exclude_id is not None:
        stmt = stmt.where(MediaContent.id != exclude_id)
    return int(db.execute(stmt).scalar_one())


def max_size(box: MediaBox, config: MediaBoxConfig) -> int:
    return config.default_max_size if box.max_size is None else box.max_size


def usage(db: Session, box: MediaBox, config: MediaBoxConfig, precision: int = 2) -> float:
    """Used size as a percentage of the box's maximum size."""
    used = used_size(db, box)
    limit = max_size(box, config)
    if limit <= 0:
        return 100.0 if used else 0.0
    return round(used / limit * 100, precision)
