import logging
from typing import List, Optional, Sequence, Tuple

from app.models.schemas import MediaFile
from app.services.backend_api import BackendAPIError, request

logger = logging.getLogger(__name__)

# (filename, content, content_type) as accepted by httpx ``files=``
Upload = Tuple[str, bytes, str]


class MediaError(Exception):
    pass


async def list_files(folder: Optional[str] = None, max_keys: Optional[int] = None) -> List[MediaFile]:
    params = {}
    if folder:
        params["folder"] = folder
    if max_keys:
        params["maxKeys"] = max_keys
    try:
        data = await request("GET", "/api/upload/list", params=params)
    except BackendAPIError as e:
        logger.error("Error listing media files: %s", e.message)
        return []
    if data.get("success") and data.get("files") is not None:
        logger.debug("Listed %d media files", len(data["files"]))
        return [MediaFile(**f) for f in data["files"]]
    logger.error("Media listing failed: %s", data.get("error") or "Failed to list files")
    return []


async def upload_file(upload: Upload, folder: str = "uploads") -> str:
    try:
        data = await request("POST", "/api/upload", params={"folder": folder},
                             files={"file": upload}, data={"folder": folder})
    except BackendAPIError as e:
        raise MediaError(e.message) from e
    if data.get("success") and data.get("url"):
        return data["url"]
    raise MediaError(data.get("error") or "Failed to upload file")


async def upload_multiple_files(uploads: Sequence[Upload], folder: str = "uploads") -> List[str]:
    try:
        data = await request("POST", "/api/upload/multiple", params={"folder": folder},
                             files=[("files", u) for u in uploads])
    except BackendAPIError as e:
        raise MediaError(e.message) from e
    if data.get("success") and data.get("urls"):
        return data["urls"]
    raise MediaError(data.get("error") or "Failed to upload files")


async def delete_file(url: str) -> bool:
    try:
        data = await request("DELETE", "/api/upload", json={"url": url})
    except BackendAPIError as e:
        raise MediaError(e.message) from e
    if data.get("success"):
        return True
    raise MediaError(data.get("error") or "Failed to delete file")
