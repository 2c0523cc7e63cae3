"""Cart item management — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalog.lookup import load_product
from storefront.catalog.variants import ensure_variant_available
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    selected_size = String(max_length=10)
    selected_color = String(max_length=50)


@storefront.command(part_of="Cart")
class UpdateCartItemQuantity:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = load_product(command.product_id)
        ensure_variant_available(
            product,
            selected_size=command.selected_size,
            selected_color=command.selected_color,
        )

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_open(command.user_id)
        item = cart.add_item(
            product_id=str(product.id),
            unit_price=product.price,
            quantity=command.quantity,
            selected_size=command.selected_size,
            selected_color=command.selected_color,
        )
        repo.add(cart)

        logger.info(
            "Item added to cart",
            user_id=str(command.user_id),
            product_id=str(product.id),
            quantity=command.quantity,
            total_price=cart.total_price,
        )
        return str(item.id)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_open(command.user_id)
        cart.update_item_quantity(item_id=command.item_id, quantity=command.quantity)
        repo.add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_open(command.user_id)
        cart.remove_item(item_id=command.item_id)
        repo.add(cart)
