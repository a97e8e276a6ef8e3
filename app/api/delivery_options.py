from fastapi import APIRouter, Depends, HTTPException
from typing import List

from app.api.deps import get_admin_user
from app.models.schemas import DeliveryOption, DeliveryOptionIn, DeliveryOptionUpdate
from app.services import delivery_options_service

router = APIRouter()


@router.get("/", response_model=List[DeliveryOption])
def active_delivery_options():
    return delivery_options_service.get_active_delivery_options()


@router.get("/all")
def all_delivery_options(admin=Depends(get_admin_user)):
    try:
        return delivery_options_service.get_all_delivery_options()
    except Exception:
        raise HTTPException(status_code=500, detail="DB error")


@router.post("/")
def create_delivery_option(payload: DeliveryOptionIn, admin=Depends(get_admin_user)):
    try:
        return delivery_options_service.create_delivery_option(payload.model_dump())
    except Exception:
        raise HTTPException(status_code=500, detail="Could not create delivery option")


@router.patch("/{option_id}")
def update_delivery_option(option_id: str, payload: DeliveryOptionUpdate, admin=Depends(get_admin_user)):
    try:
        option = delivery_options_service.update_delivery_option(option_id, payload.model_dump(exclude_unset=True))
    except Exception:
        raise HTTPException(status_code=500, detail="Could not update delivery option")
    if not option:
        raise HTTPException(status_code=404, detail="Not found")
    return option


@router.delete("/{option_id}")
def delete_delivery_option(option_id: str, admin=Depends(get_admin_user)):
    try:
        delivery_options_service.delete_delivery_option(option_id)
    except Exception:
        raise HTTPException(status_code=500, detail="Could not delete delivery option")
    return {"deleted": True}
