from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
PaymentMethod = Literal["mobile_money", "card", "cash_on_delivery", "paystack"]
DiscountType = Literal["percentage", "fixed_amount", "free_shipping"]
AppliesTo = Literal["all", "products", "shipping", "total"]

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")


# Orders
class DeliveryOption(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float = 0
    estimated_days: Optional[int] = None


class DeliveryOptionIn(BaseModel):
    name: str
    description: Optional[str] = None
    price: float = Field(0, ge=0)
    estimated_days: Optional[int] = None
    is_active: bool = True
    display_order: int = 0


class DeliveryOptionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    estimated_days: Optional[int] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None


class CartItem(BaseModel):
    id: str
    name: str
    thumbnail: Optional[str] = None
    quantity: int = Field(1, ge=1)
    original_price: float = 0
    discount_price: Optional[float] = None
    subtotal: float = 0
    selected_variants: Dict[str, Any] = Field(default_factory=dict)

    @property
    def unit_price(self) -> float:
        return self.discount_price or self.original_price


class CheckoutData(BaseModel):
    items: List[CartItem] = Field(..., min_length=1)
    delivery_address: Dict[str, Any] = Field(default_factory=dict)
    delivery_option: DeliveryOption
    payment_method: PaymentMethod
    notes: Optional[str] = None
    payment_reference: Optional[str] = None
    # discount and delivery price are recomputed server-side
    coupon_id: Optional[str] = None
    coupon_code: Optional[str] = None


class OrderItem(BaseModel):
    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: str
    product_name: str
    product_image: Optional[str] = None
    quantity: int
    unit_price: float
    subtotal: Optional[float] = None
    total_price: Optional[float] = None
    selected_variants: Dict[str, Any] = Field(default_factory=dict)


class Order(BaseModel):
    id: str
    user_id: Optional[str] = None
    order_number: str
    status: OrderStatus = "pending"
    items: List[OrderItem] = Field(default_factory=list)
    subtotal: float = 0
    discount: float = 0
    delivery_fee: float = 0
    tax: float = 0
    total: float = 0
    payment_method: Optional[str] = None
    payment_status: PaymentStatus = "pending"
    delivery_address: Optional[Dict[str, Any]] = None
    delivery_option: Optional[DeliveryOption] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    delivered_at: Optional[str] = None


class OrderCreated(BaseModel):
    order: Dict[str, Any]
    source: Literal["api", "direct"]
    side_effects_skipped: bool = False


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus
    reference: Optional[str] = None


# Coupons and discounts
class CouponValidationIn(BaseModel):
    code: str = Field(..., min_length=1)
    cart_amount: float = Field(0, ge=0)
    user_id: Optional[str] = None


class CouponValidation(BaseModel):
    is_valid: bool
    discount_amount: float = 0
    error_message: str = ""
    coupon_id: Optional[str] = None
    coupon_name: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    applies_to: Optional[AppliesTo] = None


class CouponUsageIn(BaseModel):
    coupon_id: str
    user_id: Optional[str] = None
    order_id: str
    discount_amount: float
    order_total: float


class CouponCreate(BaseModel):
    code: str
    name: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float = Field(..., ge=0)
    minimum_amount: Optional[float] = None
    maximum_discount: Optional[float] = None
    applies_to: Optional[AppliesTo] = None
    usage_limit: Optional[int] = None
    per_user_limit: Optional[int] = None
    is_active: Optional[bool] = None
    valid_from: Optional[str] = None
    valid_until: Optional[str] = None


class CouponUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    minimum_amount: Optional[float] = None
    maximum_discount: Optional[float] = None
    applies_to: Optional[AppliesTo] = None
    usage_limit: Optional[int] = None
    per_user_limit: Optional[int] = None
    is_active: Optional[bool] = None
    valid_from: Optional[str] = None
    valid_until: Optional[str] = None


class DiscountIn(BaseModel):
    name: str
    description: Optional[str] = None
    type: DiscountType
    value: float = Field(..., ge=0)
    minimum_amount: float = 0
    maximum_discount: Optional[float] = None
    is_active: bool = True
    valid_from: datetime
    valid_until: Optional[datetime] = None
    usage_limit: Optional[int] = None
    applies_to: AppliesTo = "all"


class DiscountUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[DiscountType] = None
    value: Optional[float] = Field(None, ge=0)
    minimum_amount: Optional[float] = None
    maximum_discount: Optional[float] = None
    is_active: Optional[bool] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    usage_limit: Optional[int] = None
    applies_to: Optional[AppliesTo] = None


# Catalogue
class PriceRange(BaseModel):
    min: float
    max: float
    has_range: bool = False


class PreOrderShippingOption(BaseModel):
    id: Literal["air_cargo", "ship_cargo"]
    name: str
    description: str
    price: float
    estimated_days_min: int
    estimated_days_max: int
    estimated_weeks_min: int
    estimated_weeks_max: int


# Bulk orders and media
class BulkOrderRequest(BaseModel):
    name: str
    phone: str
    email: EmailStr
    organization: Optional[str] = None
    productType: str
    quantity: str
    preferredSpecs: Optional[str] = None
    deliveryLocation: str
    paymentMethod: str
    preferredDeliveryDate: Optional[str] = None
    notes: Optional[str] = None


class MediaFile(BaseModel):
    key: str
    url: str
    size: Optional[int] = None
    lastModified: Optional[str] = None


class MediaDelete(BaseModel):
    url: str


# Settings
class SettingUpdate(BaseModel):
    value: Optional[str] = None
