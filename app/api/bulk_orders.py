from fastapi import APIRouter, HTTPException

from app.models.schemas import BulkOrderRequest
from app.services.bulk_order_service import submit_bulk_order_request

router = APIRouter()


@router.post("/")
async def submit(payload: BulkOrderRequest):
    result = await submit_bulk_order_request(payload)
    if not result["success"]:
        raise HTTPException(status_code=502, detail=result["error"])
    return result
