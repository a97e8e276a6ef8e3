from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_admin_user
from app.models.schemas import DiscountIn, DiscountUpdate
from app.services import discount_service

router = APIRouter()


@router.get("/active")
def active_discounts():
    return discount_service.get_active_discounts()


@router.get("/calculate")
def calculate(amount: float = Query(..., ge=0), applies_to: str = "all"):
    return {"amount": amount, "discount": discount_service.calculate_discount(amount, applies_to)}


@router.get("/")
def list_discounts(admin=Depends(get_admin_user)):
    return discount_service.get_discounts()


@router.post("/", status_code=201)
def create_discount(payload: DiscountIn, admin=Depends(get_admin_user)):
    discount = discount_service.create_discount(payload.model_dump(mode="json"))
    if not discount:
        raise HTTPException(status_code=500, detail="Could not create discount")
    return discount


@router.patch("/{discount_id}")
def update_discount(discount_id: str, payload: DiscountUpdate, admin=Depends(get_admin_user)):
    discount = discount_service.update_discount(discount_id, payload.model_dump(mode="json", exclude_unset=True))
    if not discount:
        raise HTTPException(status_code=404, detail="Not found")
    return discount


@router.delete("/{discount_id}")
def delete_discount(discount_id: str, admin=Depends(get_admin_user)):
    if not discount_service.delete_discount(discount_id):
        raise HTTPException(status_code=500, detail="Could not delete discount")
    return {"deleted": True}
