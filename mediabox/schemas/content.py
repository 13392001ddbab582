from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ContentInfo(BaseModel):
    id: int
    subdirectory: str | None
    filename: str
    size: int
    width: int | None
    height: int | None
    content_type: str
    uri: str
    uploaded_at: datetime
    path: str
    url: str

    model_config = ConfigDict(from_attributes=True)


class ContentListResponse(BaseModel):
    contents: list[ContentInfo]
    total: int
    used_size: int
    max_size: int
