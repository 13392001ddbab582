from __future__ import annotations

import urllib.parse

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from mediabox.dependencies import get_box_service, get_owner_id
from mediabox.models.content import MediaContent
from mediabox.schemas.content import ContentInfo
from mediabox.services.boxes import BoxService

router = APIRouter(prefix="/contents", tags=["Contents"])


def _rfc5987_filename(value: str) -> str:
    # Build a robust Content-Disposition filename / filename* pair
    quoted = urllib.parse.quote(value, safe="")
    return f'filename="{value.encode("latin-1", "ignore").decode("latin-1")}"; filename*=UTF-8\'\'{quoted}'


def content_info(content: MediaContent, boxes: BoxService) -> ContentInfo:
    return ContentInfo(
        id=content.id,
        subdirectory=content.subdirectory,
        filename=content.filename,
        size=content.size,
        width=content.width,
        height=content.height,
        content_type=content.content_type,
        uri=content.uri,
        uploaded_at=content.uploaded_at,
        path=boxes.path_of(content),
        url=boxes.url_of(content),
    )


def _owned_content(content_id: int, owner_id: str, boxes: BoxService) -> MediaContent:
    content = boxes.get_content(content_id)
    if content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    if content.box.owner_id != owner_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return content


@router.get("/{content_id}", response_model=ContentInfo)
def get_content(
    content_id: int,
    owner_id: str = Depends(get_owner_id),
    boxes: BoxService = Depends(get_box_service),
):
    return content_info(_owned_content(content_id, owner_id, boxes), boxes)


@router.get("/{content_id}/download")
def download_content(
    content_id: int,
    owner_id: str = Depends(get_owner_id),
    boxes: BoxService = Depends(get_box_service),
):
    content = _owned_content(content_id, owner_id, boxes)
    data = boxes.read(content)
    name = content.filename or content.uri
    return Response(
        content=data,
        media_type=content.content_type,
        headers={"Content-Disposition": f"attachment; {_rfc5987_filename(name)}"},
    )


@router.delete("/{content_id}")
def delete_content(
    content_id: int,
    owner_id: str = Depends(get_owner_id),
    boxes: BoxService = Depends(get_box_service),
):
    content = _owned_content(content_id, owner_id, boxes)
    boxes.delete_content(content)
    return {"status": "ok", "id": content_id}
