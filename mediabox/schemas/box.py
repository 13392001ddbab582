from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BoxCreate(BaseModel):
    directory: str | None = Field(None, max_length=255, examples=["alice-media"])
    max_size: int | None = Field(None, ge=0, examples=[100 * 1024 * 1024])

    model_config = ConfigDict(extra="forbid")


class BoxResponse(BaseModel):
    id: int
    owner_id: str
    directory: str
    path: str
    max_size: int
    used_size: int
    usage: float
    formatted_size: str
    created_at: datetime | None = None
