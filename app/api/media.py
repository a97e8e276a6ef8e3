from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from typing import List, Optional

from app.api.deps import get_admin_user
from app.models.schemas import MediaDelete, MediaFile
from app.services import media_service
from app.services.media_service import MediaError

router = APIRouter()


async def _as_upload(f: UploadFile):
    return (f.filename, await f.read(), f.content_type or "application/octet-stream")


@router.get("/list", response_model=List[MediaFile])
async def list_files(folder: Optional[str] = None, max_keys: Optional[int] = Query(None, ge=1), admin=Depends(get_admin_user)):
    return await media_service.list_files(folder, max_keys)


@router.post("/")
async def upload(file: UploadFile = File(...), folder: str = "uploads", admin=Depends(get_admin_user)):
    try:
        url = await media_service.upload_file(await _as_upload(file), folder)
    except MediaError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"success": True, "url": url}


@router.post("/multiple")
async def upload_many(files: List[UploadFile] = File(...), folder: str = "uploads", admin=Depends(get_admin_user)):
    uploads = [await _as_upload(f) for f in files]
    try:
        urls = await media_service.upload_multiple_files(uploads, folder)
    except MediaError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"success": True, "urls": urls}


@router.delete("/")
async def delete(payload: MediaDelete, admin=Depends(get_admin_user)):
    try:
        await media_service.delete_file(payload.url)
    except MediaError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"success": True}
