import logging

from mediabox.core.config import RelationMode
from mediabox.models.box import MediaBox
from mediabox.services.boxes import BoxService

logger = logging.getLogger("mediabox")


def _owner_id(owner) -> str:
    return str(getattr(owner, "id", owner))


class OwnershipManager:
    """Binds each owner to at most one box and applies the owner-deletion policy."""

    def __init__(self, boxes: BoxService, mode: RelationMode | None = None):
        self.boxes = boxes
        self.mode = mode or boxes.config.relation_mode

    def has_box(self, owner) -> bool:
        return self.boxes.exists(_owner_id(owner))

    def box_of(self, owner) -> MediaBox | None:
        return self.boxes.get(_owner_id(owner))

    def open_box(self, owner, directory: str | None = None, max_size: int | None = None,
                 actor: str | None = None) -> MediaBox:
        return self.boxes.create(_owner_id(owner), directory=directory, max_size=max_size, actor=actor)

    def on_owner_deleted(self, owner) -> bool:
        """Apply the relation mode for a deleted owner; True if a box was removed."""
        box = self.box_of(owner)
        if box is None:
            return False
        if self.mode is RelationMode.COMPOSITION:
            self.boxes.delete(box, trigger="owner_deleted")
            return True
        logger.info("owner_deleted owner_id=%s box_id=%s kept (aggregation)", _owner_id(owner), box.id)
        return False

    def delete_owner(self, owner) -> None:
        """Delete an owner row, cascading to its box under composition."""
        self.on_owner_deleted(owner)
        db = self.boxes.db
        db.delete(owner)
        db.commit()
