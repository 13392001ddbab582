from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Query, UploadFile

from mediabox.dependencies import get_box_service, get_current_box, get_owner_id
from mediabox.models.box import MediaBox
from mediabox.schemas.box import BoxCreate, BoxResponse
from mediabox.schemas.content import ContentInfo, ContentListResponse
from mediabox.services.boxes import BoxService
from mediabox.routes.contents import content_info

router = APIRouter(prefix="/boxes", tags=["Boxes"])


def box_response(box: MediaBox, boxes: BoxService) -> BoxResponse:
    return BoxResponse(
        id=box.id,
        owner_id=box.owner_id,
        directory=box.directory,
        path=boxes.directory_of(box),
        max_size=boxes.max_size(box),
        used_size=boxes.used_size(box),
        usage=boxes.usage(box),
        formatted_size=boxes.format_size(box),
        created_at=box.created_at,
    )


@router.post("", response_model=BoxResponse, status_code=201)
def create_box(
    payload: BoxCreate | None = None,
    owner_id: str = Depends(get_owner_id),
    boxes: BoxService = Depends(get_box_service),
):
    payload = payload or BoxCreate()
    box = boxes.create(owner_id, directory=payload.directory, max_size=payload.max_size, actor=owner_id)
    return box_response(box, boxes)


@router.get("/me", response_model=BoxResponse)
def get_my_box(
    box: MediaBox = Depends(get_current_box),
    boxes: BoxService = Depends(get_box_service),
):
    return box_response(box, boxes)


@router.delete("/me")
def delete_my_box(
    box: MediaBox = Depends(get_current_box),
    boxes: BoxService = Depends(get_box_service),
):
    box_id = box.id
    boxes.delete(box)
    return {"status": "ok", "id": box_id}


@router.post("/me/upload", response_model=ContentInfo, status_code=201)
def upload_content(
    file: UploadFile,
    filename: str | None = Form(None),
    subdirectory: str | None = Form(None),
    uploaded_at: str | None = Form(None, description="ISO-8601 upload time, defaults to now"),
    owner_id: str = Depends(get_owner_id),
    box: MediaBox = Depends(get_current_box),
    boxes: BoxService = Depends(get_box_service),
):
    content = boxes.upload(box, file, filename=filename, subdirectory=subdirectory,
                           uploaded_at=uploaded_at, actor=owner_id)
    return content_info(content, boxes)


@router.get("/me/contents", response_model=ContentListResponse)
def list_contents(
    filter: str | None = Query(None, description="Conditions such as size>=1024&content_type=image/png"),
    box: MediaBox = Depends(get_current_box),
    boxes: BoxService = Depends(get_box_service),
):
    rows = boxes.search(box, filter)
    return ContentListResponse(
        contents=[content_info(r, boxes) for r in rows],
        total=len(rows),
        used_size=boxes.used_size(box),
        max_size=boxes.max_size(box),
    )


@router.get("/me/contents/find", response_model=ContentInfo)
def find_content(
    path: str = Query(..., description="Storage path or URL of the content"),
    box: MediaBox = Depends(get_current_box),
    boxes: BoxService = Depends(get_box_service),
):
    content = boxes.find(box, path)
    if content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return content_info(content, boxes)
