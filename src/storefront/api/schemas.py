"""Pydantic request/response schemas for the storefront API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Payloads use camelCase keys; snake_case keys are
accepted on input as well.
"""

from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------
class Pagination(ApiModel):
    page: int
    total_pages: int
    total_items: int


class Envelope(ApiModel, Generic[T]):
    """Every response body: outcome, human readable message and payload."""

    status: Literal["success", "error"] = "success"
    message: str
    data: T | list[Any] = Field(default_factory=list)
    pagination: Pagination | None = None

    @model_serializer(mode="wrap")
    def _omit_missing_pagination(self, handler):
        body = handler(self)
        if self.pagination is None:
            body.pop("pagination", None)
        return body


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(ApiModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    selected_size: str | None = Field(default=None, max_length=10)
    selected_color: str | None = Field(default=None, max_length=50)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "productId": "prod-001",
                    "quantity": 2,
                    "selectedSize": "M",
                    "selectedColor": "Black",
                }
            ]
        }
    )


class UpdateCartItemRequest(ApiModel):
    quantity: int


class ProductSummary(ApiModel):
    id: str
    name: str
    price: float
    sale_price: float
    is_sale: bool
    stock: int
    image: str | None = None


class CartItemView(ApiModel):
    id: str
    product_id: str
    quantity: int
    unit_price: float
    line_total: float
    selected_size: str | None = None
    selected_color: str | None = None
    product: ProductSummary | None = None


class CartView(ApiModel):
    id: str
    user_id: str
    items: list[CartItemView]
    total_price: float
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Discount
# ---------------------------------------------------------------------------
class DiscountRequest(ApiModel):
    name: str
    discount_code: str
    discount_type: str
    discount_value: float
    min_order_value: float = 0.0
    max_discount_amount: float = 0.0
    max_usage: int = 0
    start_date: datetime
    end_date: datetime
    is_active: bool | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Summer Sale",
                    "discountCode": "SUMMER10",
                    "discountType": "PERCENTAGE",
                    "discountValue": 10,
                    "minOrderValue": 50,
                    "maxDiscountAmount": 20,
                    "maxUsage": 100,
                    "startDate": "2026-06-01T00:00:00Z",
                    "endDate": "2026-08-31T23:59:59Z",
                }
            ]
        }
    )


class ApplyDiscountRequest(ApiModel):
    code: str


class DiscountView(ApiModel):
    id: str
    name: str
    discount_code: str
    discount_type: str
    discount_value: float
    min_order_value: float
    max_discount_amount: float
    max_usage: int
    usage_count: int
    start_date: datetime
    end_date: datetime
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DiscountQuote(ApiModel):
    discount_amount: float
    cart_total: float
    final_amount: float


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------
class OrderItemRequest(ApiModel):
    product_id: str = Field(validation_alias=AliasChoices("productId", "product", "product_id"))
    name: str
    unit_price: float = Field(ge=0, validation_alias=AliasChoices("unitPrice", "price", "unit_price"))
    quantity: int = Field(ge=1)
    image: str | None = None
    selected_size: str | None = Field(default=None, max_length=10)
    selected_color: str | None = Field(default=None, max_length=50)


class PlaceOrderRequest(ApiModel):
    order_items: list[OrderItemRequest]
    payment_method: str
    address_id: str = Field(validation_alias=AliasChoices("address", "addressId", "address_id"))
    username: str | None = None
    total_amount: float = Field(ge=0)
    discount_amount: float = Field(ge=0, default=0.0)
    final_amount: float = Field(ge=0)
    discount_code: str | None = None


class UpdateOrderStatusRequest(ApiModel):
    status: str


class OrderItemView(ApiModel):
    id: str
    product_id: str
    name: str
    unit_price: float
    quantity: int
    image: str | None = None
    selected_size: str | None = None
    selected_color: str | None = None


class OrderView(ApiModel):
    id: str
    order_number: str
    user_id: str
    username: str | None = None
    address_id: str
    payment_method: str
    status: str
    total_amount: float
    discount_amount: float
    final_amount: float
    discount_code: str | None = None
    items: list[OrderItemView]
    placed_at: datetime | None = None
    updated_at: datetime | None = None
