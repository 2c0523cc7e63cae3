"""FastAPI routes for the storefront: cart, discounts and orders.

The caller is identified by the ``X-User-Id`` header; requests without it
are rejected with 401 before reaching the domain.
"""

import json
import math

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    ApplyDiscountRequest,
    CartItemView,
    CartView,
    DiscountQuote,
    DiscountRequest,
    DiscountView,
    Envelope,
    OrderItemView,
    OrderView,
    Pagination,
    PlaceOrderRequest,
    ProductSummary,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveCartItem, UpdateCartItemQuantity
from storefront.cart.management import ClearCart, OpenCart
from storefront.catalog.lookup import products_by_id
from storefront.discount.application import ApplyDiscount
from storefront.discount.discount import Discount
from storefront.discount.management import CreateDiscount, DeleteDiscount, UpdateDiscount, load_discount
from storefront.order.lookup import load_order_for_user
from storefront.order.order import Order, normalize_status
from storefront.order.placement import PlaceOrder
from storefront.order.removal import DeleteOrder
from storefront.order.status import UpdateOrderStatus


def current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id.strip()


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------
def _cart_view(cart: Cart) -> CartView:
    products = products_by_id(item.product_id for item in cart.items)
    items = []
    for item in cart.items:
        product = products.get(str(item.product_id))
        summary = None
        if product is not None:
            summary = ProductSummary(
                id=str(product.id),
                name=product.name,
                price=product.price,
                sale_price=product.sale_price or 0.0,
                is_sale=bool(product.is_sale),
                stock=product.stock or 0,
                image=product.primary_image,
            )
        items.append(
            CartItemView(
                id=str(item.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
                selected_size=item.selected_size,
                selected_color=item.selected_color,
                product=summary,
            )
        )
    return CartView(
        id=str(cart.id),
        user_id=str(cart.user_id),
        items=items,
        total_price=cart.total_price or 0.0,
        updated_at=cart.updated_at,
    )


def _discount_view(discount: Discount) -> DiscountView:
    return DiscountView(
        id=str(discount.id),
        name=discount.name,
        discount_code=discount.discount_code,
        discount_type=discount.discount_type,
        discount_value=discount.discount_value,
        min_order_value=discount.min_order_value,
        max_discount_amount=discount.max_discount_amount,
        max_usage=discount.max_usage,
        usage_count=discount.usage_count,
        start_date=discount.start_date,
        end_date=discount.end_date,
        is_active=discount.is_active,
        created_at=discount.created_at,
        updated_at=discount.updated_at,
    )


def _order_view(order: Order) -> OrderView:
    return OrderView(
        id=str(order.id),
        order_number=order.order_number,
        user_id=str(order.user_id),
        username=order.username,
        address_id=str(order.address_id),
        payment_method=order.payment_method,
        status=order.status,
        total_amount=order.total_amount,
        discount_amount=order.discount_amount or 0.0,
        final_amount=order.final_amount,
        discount_code=order.discount_code,
        items=[
            OrderItemView(
                id=str(item.id),
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                image=item.image,
                selected_size=item.selected_size,
                selected_color=item.selected_color,
            )
            for item in order.items
        ],
        placed_at=order.placed_at,
        updated_at=order.updated_at,
    )


def _load_cart(cart_id) -> Cart:
    return current_domain.repository_for(Cart).get(cart_id)


def _page_of(results, page, size) -> Pagination:
    """Response pagination: one-based page number for a zero-based request."""
    return Pagination(page=page + 1, total_pages=math.ceil(results.total / size), total_items=results.total)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=Envelope[CartView])
async def get_cart(user_id: str = Depends(current_user_id)):
    cart_id = current_domain.process(OpenCart(user_id=user_id), asynchronous=False)
    return Envelope(message="Cart retrieved", data=_cart_view(_load_cart(cart_id)))


@cart_router.post("/add", response_model=Envelope[CartView])
async def add_to_cart(body: AddToCartRequest, user_id: str = Depends(current_user_id)):
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        quantity=body.quantity,
        selected_size=body.selected_size or None,
        selected_color=body.selected_color or None,
    )
    current_domain.process(command, asynchronous=False)
    cart = current_domain.repository_for(Cart).find_for_user(user_id)
    return Envelope(message="Item added to cart", data=_cart_view(cart))


@cart_router.delete("/clear", response_model=Envelope[CartView])
async def clear_cart(user_id: str = Depends(current_user_id)):
    cart_id = current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    return Envelope(message="Cart cleared", data=_cart_view(_load_cart(cart_id)))


@cart_router.put("/{item_id}", response_model=Envelope[CartView])
async def update_cart_item(item_id: str, body: UpdateCartItemRequest, user_id: str = Depends(current_user_id)):
    command = UpdateCartItemQuantity(user_id=user_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    cart = current_domain.repository_for(Cart).find_for_user(user_id)
    return Envelope(message="Cart item updated", data=_cart_view(cart))


@cart_router.delete("/{item_id}", response_model=Envelope[CartView])
async def remove_cart_item(item_id: str, user_id: str = Depends(current_user_id)):
    current_domain.process(RemoveCartItem(user_id=user_id, item_id=item_id), asynchronous=False)
    cart = current_domain.repository_for(Cart).find_for_user(user_id)
    return Envelope(message="Item removed from cart", data=_cart_view(cart))


# ---------------------------------------------------------------------------
# Discount Router
# ---------------------------------------------------------------------------
discount_router = APIRouter(prefix="/discounts", tags=["discounts"], dependencies=[Depends(current_user_id)])


def _discount_fields(body: DiscountRequest) -> dict:
    return {
        "name": body.name,
        "discount_code": body.discount_code,
        "discount_type": body.discount_type,
        "discount_value": body.discount_value,
        "min_order_value": body.min_order_value,
        "max_discount_amount": body.max_discount_amount,
        "max_usage": body.max_usage,
        "start_date": body.start_date,
        "end_date": body.end_date,
    }


@discount_router.post("/apply", response_model=Envelope[DiscountQuote])
async def apply_discount(body: ApplyDiscountRequest, user_id: str = Depends(current_user_id)):
    result = current_domain.process(ApplyDiscount(user_id=user_id, code=body.code), asynchronous=False)
    return Envelope(message="Discount applied", data=DiscountQuote(**result))


@discount_router.post("", status_code=201, response_model=Envelope[DiscountView])
async def create_discount(body: DiscountRequest):
    command = CreateDiscount(
        is_active=True if body.is_active is None else body.is_active,
        **_discount_fields(body),
    )
    discount_id = current_domain.process(command, asynchronous=False)
    return Envelope(message="Discount created", data=_discount_view(load_discount(discount_id)))


@discount_router.get("", response_model=Envelope[list[DiscountView]])
async def list_discounts(page: int = Query(default=0, ge=0), size: int = Query(default=10, ge=1, le=100)):
    results = current_domain.repository_for(Discount).newest_first(page=page, size=size)
    return Envelope(
        message="Discounts retrieved",
        data=[_discount_view(discount) for discount in results.items],
        pagination=_page_of(results, page, size),
    )


@discount_router.get("/search", response_model=Envelope[list[DiscountView]])
async def search_discounts(
    code: str | None = None,
    name: str | None = None,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=10, ge=1, le=100),
):
    results = current_domain.repository_for(Discount).search(code=code, name=name, page=page, size=size)
    return Envelope(
        message="Discounts found",
        data=[_discount_view(discount) for discount in results.items],
        pagination=_page_of(results, page, size),
    )


@discount_router.get("/{discount_id}", response_model=Envelope[DiscountView])
async def get_discount(discount_id: str):
    return Envelope(message="Discount retrieved", data=_discount_view(load_discount(discount_id)))


@discount_router.put("/{discount_id}", response_model=Envelope[DiscountView])
async def update_discount(discount_id: str, body: DiscountRequest):
    command = UpdateDiscount(discount_id=discount_id, is_active=body.is_active, **_discount_fields(body))
    current_domain.process(command, asynchronous=False)
    return Envelope(message="Discount updated", data=_discount_view(load_discount(discount_id)))


@discount_router.delete("/{discount_id}", response_model=Envelope)
async def delete_discount(discount_id: str):
    current_domain.process(DeleteDiscount(discount_id=discount_id), asynchronous=False)
    return Envelope(message="Discount deleted")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=Envelope[OrderView])
async def place_order(body: PlaceOrderRequest, user_id: str = Depends(current_user_id)):
    command = PlaceOrder(
        user_id=user_id,
        username=body.username,
        items=json.dumps([item.model_dump() for item in body.order_items]),
        address_id=body.address_id,
        payment_method=body.payment_method,
        total_amount=body.total_amount,
        discount_amount=body.discount_amount,
        final_amount=body.final_amount,
        discount_code=body.discount_code,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = load_order_for_user(order_id, user_id)
    return Envelope(message="Order placed", data=_order_view(order))


@order_router.get("", response_model=Envelope[list[OrderView]])
async def list_orders(
    status: str | None = None,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(current_user_id),  # noqa: ARG001
):
    status = normalize_status(status) if status and status.strip() else None
    results = current_domain.repository_for(Order).most_recent(status=status, page=page, size=size)
    return Envelope(
        message="Orders retrieved",
        data=[_order_view(order) for order in results.items],
        pagination=_page_of(results, page, size),
    )


@order_router.get("/search", response_model=Envelope[list[OrderView]])
async def search_orders(
    order_number: str | None = Query(default=None, alias="orderId"),
    page: int = Query(default=0, ge=0),
    size: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(current_user_id),  # noqa: ARG001
):
    if not order_number or not order_number.strip():
        raise HTTPException(status_code=400, detail="Please provide an order number to search for")
    results = current_domain.repository_for(Order).search_by_order_number(order_number, page=page, size=size)
    return Envelope(
        message="Orders found",
        data=[_order_view(order) for order in results.items],
        pagination=_page_of(results, page, size),
    )


@order_router.get("/mine", response_model=Envelope[list[OrderView]])
async def my_orders(user_id: str = Depends(current_user_id)):
    orders = current_domain.repository_for(Order).for_user(user_id)
    return Envelope(message="Orders retrieved", data=[_order_view(order) for order in orders])


@order_router.get("/{order_id}", response_model=Envelope[OrderView])
async def get_order(order_id: str, user_id: str = Depends(current_user_id)):
    return Envelope(message="Order retrieved", data=_order_view(load_order_for_user(order_id, user_id)))


@order_router.put("/{order_id}/status", response_model=Envelope[OrderView])
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    user_id: str = Depends(current_user_id),  # noqa: ARG001
):
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return Envelope(message="Order status updated", data=_order_view(order))


@order_router.delete("/{order_id}", response_model=Envelope)
async def delete_order(order_id: str, user_id: str = Depends(current_user_id)):  # noqa: ARG001
    current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)
    return Envelope(message="Order deleted")
