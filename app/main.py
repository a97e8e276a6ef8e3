from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api import (
    products, categories, pre_orders, flash_deals, delivery_options, orders,
    coupons, discounts, bulk_orders, media, settings, maintenance,
)
from app.core.config import APP_NAME, CORS_ORIGINS
from app.core.logging import setup_logging

setup_logging()

app = FastAPI(title=APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
app.include_router(pre_orders.router, prefix="/api/pre-orders", tags=["pre-orders"])
app.include_router(flash_deals.router, prefix="/api/flash-deals", tags=["flash-deals"])
app.include_router(delivery_options.router, prefix="/api/delivery-options", tags=["delivery"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(coupons.router, prefix="/api/coupons", tags=["coupons"])
app.include_router(discounts.router, prefix="/api/discounts", tags=["discounts"])
app.include_router(bulk_orders.router, prefix="/api/bulk-orders", tags=["bulk-orders"])
app.include_router(media.router, prefix="/api/upload", tags=["media"])
app.include_router(settings.router, prefix="/api/settings", tags=["settings"])
app.include_router(maintenance.router, prefix="/api", tags=["settings"])

@app.get("/")
def root():
    return {"status":"ok", "app": APP_NAME}
