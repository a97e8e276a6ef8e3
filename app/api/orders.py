from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from app.api.deps import get_current_user, get_optional_user, get_admin_user, is_admin
from app.models.schemas import CheckoutData, OrderCreated, OrderStatusUpdate, PaymentStatusUpdate
from app.services import orders_service
from app.services.orders_service import CheckoutError, OrderCreationError

router = APIRouter()


def _owned_order(order_id: str, user: dict) -> dict:
    order = orders_service.get_order_by_id(order_id)
    if not order or (order.get("user_id") != user["id"] and not is_admin(user)):
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/", response_model=OrderCreated, status_code=201)
async def checkout(payload: CheckoutData, user: Optional[dict] = Depends(get_optional_user)):
    try:
        return await orders_service.create_order(payload, user["id"] if user else None)
    except CheckoutError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderCreationError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/my")
def my_orders(user=Depends(get_current_user)):
    return orders_service.get_user_orders(user["id"])


@router.get("/all")
def all_orders(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100), admin=Depends(get_admin_user)):
    return orders_service.get_all_orders(page, limit)


@router.get("/track/{order_number}")
def track_order(order_number: str):
    order = orders_service.get_order_by_number(order_number)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/{order_id}")
def get_order(order_id: str, user=Depends(get_current_user)):
    return _owned_order(order_id, user)


@router.patch("/{order_id}/status")
def update_status(order_id: str, payload: OrderStatusUpdate, admin=Depends(get_admin_user)):
    order = orders_service.update_order_status(order_id, payload.status)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.patch("/{order_id}/payment")
def update_payment(order_id: str, payload: PaymentStatusUpdate, admin=Depends(get_admin_user)):
    order = orders_service.update_payment_status(order_id, payload.payment_status, payload.reference)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/{order_id}/cancel")
def cancel(order_id: str, user=Depends(get_current_user)):
    _owned_order(order_id, user)
    order = orders_service.cancel_order(order_id)
    if not order:
        raise HTTPException(status_code=500, detail="Could not cancel order")
    return order
