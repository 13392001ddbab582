from functools import lru_cache

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from mediabox.core.config import MediaBoxConfig
from mediabox.core.database import get_db
from mediabox.models.box import MediaBox
from mediabox.services.boxes import BoxService
from mediabox.services.ownership import OwnershipManager
from mediabox.storage import StorageBackend, create_backend


@lru_cache
def get_config() -> MediaBoxConfig:
    return MediaBoxConfig.from_settings()


@lru_cache
def get_backend() -> StorageBackend:
    return create_backend(get_config())


def get_box_service(
    db: Session = Depends(get_db),
    config: MediaBoxConfig = Depends(get_config),
    backend: StorageBackend = Depends(get_backend),
) -> BoxService:
    return BoxService(db, config, backend)


def get_ownership(boxes: BoxService = Depends(get_box_service)) -> OwnershipManager:
    return OwnershipManager(boxes)


def get_owner_id(x_owner_id: str | None = Header(None, alias="X-Owner-Id")) -> str:
    # Authentication lives in the host application; it forwards the owner id.
    if not x_owner_id or not x_owner_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-Owner-Id header")
    return x_owner_id.strip()


def get_current_box(
    owner_id: str = Depends(get_owner_id),
    boxes: BoxService = Depends(get_box_service),
) -> MediaBox:
    box = boxes.get(owner_id)
    if box is None:
        raise HTTPException(status_code=404, detail="Media box not found")
    return box
