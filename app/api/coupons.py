from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from app.api.deps import get_admin_user, get_optional_user
from app.models.schemas import CouponCreate, CouponUpdate, CouponUsageIn, CouponValidation, CouponValidationIn
from app.services import coupon_service
from app.services.coupon_service import CouponError

router = APIRouter()


@router.post("/validate", response_model=CouponValidation)
async def validate(payload: CouponValidationIn, user: Optional[dict] = Depends(get_optional_user)):
    user_id = payload.user_id or (user["id"] if user else None)
    return await coupon_service.validate_coupon(payload.code, payload.cart_amount, user_id)


@router.post("/record-usage")
async def record_usage(payload: CouponUsageIn, admin=Depends(get_admin_user)):
    recorded = await coupon_service.record_coupon_usage(
        payload.coupon_id, payload.user_id, payload.order_id, payload.discount_amount, payload.order_total
    )
    return {"success": recorded}


@router.get("/")
async def list_coupons(admin=Depends(get_admin_user)):
    return await coupon_service.get_all_coupons()


@router.get("/{coupon_id}")
async def get_coupon(coupon_id: str, admin=Depends(get_admin_user)):
    coupon = await coupon_service.get_coupon_by_id(coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Not found")
    return coupon


@router.post("/", status_code=201)
async def create_coupon(payload: CouponCreate, admin=Depends(get_admin_user)):
    body = payload.model_dump(exclude_none=True)
    body["code"] = coupon_service.normalize_code(body["code"])
    try:
        return await coupon_service.create_coupon(body)
    except CouponError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.patch("/{coupon_id}")
async def update_coupon(coupon_id: str, payload: CouponUpdate, admin=Depends(get_admin_user)):
    try:
        return await coupon_service.update_coupon(coupon_id, payload.model_dump(exclude_unset=True))
    except CouponError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.delete("/{coupon_id}")
async def delete_coupon(coupon_id: str, admin=Depends(get_admin_user)):
    return {"deleted": await coupon_service.delete_coupon(coupon_id)}
