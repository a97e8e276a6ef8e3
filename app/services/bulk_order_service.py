import logging

from app.models.schemas import BulkOrderRequest
from app.services.backend_api import BackendAPIError, request

logger = logging.getLogger(__name__)


async def submit_bulk_order_request(form: BulkOrderRequest) -> dict:
    """Forward a bulk-order enquiry to the backend, which emails the sales team."""
    try:
        await request("POST", "/api/bulk-orders", json=form.model_dump())
    except BackendAPIError as e:
        logger.error("Error submitting bulk order request from %s: %s", form.email, e.message)
        return {"success": False, "error": e.message or "Failed to submit request"}
    return {"success": True}
