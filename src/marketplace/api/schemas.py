"""Pydantic request/response schemas for the Marketplace API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field

from marketplace.order.order import OrderStatus, PaymentMethod


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class SizeStockSchema(BaseModel):
    size: str
    quantity: int = Field(ge=0, default=0)


class VariationSchema(BaseModel):
    name: str
    value: str
    price_adjustment: float = 0.0
    image: str | None = None


class AddressSchema(BaseModel):
    name: str | None = None
    street: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    phone: str | None = None


class OrderLineSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    size: str | None = None
    price: float | None = Field(default=None, ge=0)
    seller_id: str | None = None
    name: str | None = None
    variation_name: str | None = None
    variation_value: str | None = None
    image: str | None = None


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str
    description: str
    price: float = Field(ge=0)
    seller_id: str | None = None
    original_price: float | None = Field(default=None, ge=0)
    discount: float = Field(default=0.0, ge=0, le=100)
    category_id: str | None = None
    images: list[str] = []
    size_stock: list[SizeStockSchema] = []
    total_stock: int = Field(default=0, ge=0)
    variations: list[VariationSchema] = []

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Handwoven Abaca Tote",
                    "description": "Natural abaca fibre, lined interior.",
                    "price": 850.0,
                    "size_stock": [{"size": "M", "quantity": 4}, {"size": "L", "quantity": 2}],
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    original_price: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0, le=100)
    category_id: str | None = None
    images: list[str] | None = None
    size_stock: list[SizeStockSchema] | None = None
    total_stock: int | None = Field(default=None, ge=0)
    variations: list[VariationSchema] | None = None
    is_featured: bool | None = None
    is_flash_sale: bool | None = None


class RestockRequest(BaseModel):
    size: str
    quantity: int = Field(ge=0)


class ModerateProductRequest(BaseModel):
    status: str
    reason: str | None = None


class PromotionRequest(BaseModel):
    is_featured: bool | None = None
    is_flash_sale: bool | None = None
    discount: float | None = Field(default=None, ge=0, le=100)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    items: list[OrderLineSchema]
    shipping_address: AddressSchema | None = None
    payment_method: str = PaymentMethod.COD.value

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 1, "size": "M", "price": 850.0}],
                    "shipping_address": {"name": "Ana Cruz", "street": "12 Mabini St", "city": "Cebu"},
                    "payment_method": "cod",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str = Field(examples=[status.value for status in OrderStatus])
    note: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    size: str | None = None
    variation_name: str | None = None
    variation_value: str | None = None
    price: float | None = Field(default=None, ge=0)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartLineSchema(BaseModel):
    product_id: str
    quantity: int
    size: str | None = None
    variation_name: str | None = None
    variation_value: str | None = None


class SyncCartRequest(BaseModel):
    items: list[CartLineSchema]


# ---------------------------------------------------------------------------
# Review / Message Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    order_id: str
    product_id: str
    rating: int = Field(ge=1, le=5)
    comment: str
    images: list[str] = []


class ReplyRequest(BaseModel):
    comment: str


class SendMessageRequest(BaseModel):
    receiver_id: str
    message: str
    product_id: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartItemIdResponse(BaseModel):
    item_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class ReviewIdResponse(BaseModel):
    review_id: str


class MessageIdResponse(BaseModel):
    message_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class UnreadCountResponse(BaseModel):
    unread_count: int
