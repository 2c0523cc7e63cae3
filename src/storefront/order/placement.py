"""Order placement — command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalog.lookup import load_product
from storefront.catalog.variants import ensure_variant_available
from storefront.domain import storefront
from storefront.errors import EmptyOrderError
from storefront.order.order import Order, generate_order_number

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    username = String(max_length=255)
    items = Text(required=True)  # JSON: list of {product_id, name, unit_price, quantity, image, selected_size, selected_color}
    address_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)
    total_amount = Float(required=True)
    discount_amount = Float(default=0.0)
    final_amount = Float(required=True)
    discount_code = String(max_length=50)


def _unused_order_number(repo):
    order_number = generate_order_number()
    while repo.find_by_order_number(order_number) is not None:
        order_number = generate_order_number()
    return order_number


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        if not items_data:
            raise EmptyOrderError({"items": ["Order must contain at least one item"]})

        # Every referenced product must exist and offer the selected variant
        # before anything is written.
        for item_data in items_data:
            product = load_product(item_data.get("product_id"), label=item_data.get("name"))
            ensure_variant_available(
                product,
                selected_size=item_data.get("selected_size") or None,
                selected_color=item_data.get("selected_color") or None,
            )

        repo = current_domain.repository_for(Order)
        order = Order.create(
            order_number=_unused_order_number(repo),
            user_id=command.user_id,
            username=command.username,
            address_id=command.address_id,
            payment_method=command.payment_method,
            total_amount=command.total_amount,
            discount_amount=command.discount_amount,
            final_amount=command.final_amount,
            discount_code=command.discount_code,
            items_data=items_data,
        )
        repo.add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            final_amount=order.final_amount,
        )
        return str(order.id)
