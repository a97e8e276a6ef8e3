from fastapi import APIRouter, HTTPException

from app.services import pre_order_service

router = APIRouter()


@router.get("/products")
def pre_order_products():
    return pre_order_service.get_pre_order_products()


@router.get("/shipping-options")
def shipping_options():
    return [
        {
            **option.model_dump(),
            "estimated_delivery": pre_order_service.format_estimated_delivery(option),
            "estimated_arrival": pre_order_service.calculate_estimated_arrival(option),
        }
        for option in pre_order_service.PRE_ORDER_SHIPPING_OPTIONS
    ]


@router.get("/shipping-options/{option_id}")
def shipping_option(option_id: str):
    option = pre_order_service.get_pre_order_shipping_option(option_id)
    if option is None:
        raise HTTPException(status_code=404, detail="Unknown shipping option")
    return {
        **option.model_dump(),
        "estimated_delivery": pre_order_service.format_estimated_delivery(option),
        "estimated_arrival": pre_order_service.calculate_estimated_arrival(option),
    }
