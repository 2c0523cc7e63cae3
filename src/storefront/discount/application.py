"""Applying a discount code to the caller's cart."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.discount.discount import Discount, normalize_code
from storefront.domain import storefront
from storefront.errors import EmptyCartError, MinOrderValueError, NotFoundError, UsageExceededError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Discount")
class ApplyDiscount:
    user_id = Identifier(required=True)
    code = String(required=True, max_length=50)


@storefront.command_handler(part_of=Discount)
class ApplyDiscountHandler:
    @handle(ApplyDiscount)
    def apply_discount(self, command):
        """Price the user's cart with the code and count the redemption.

        Returns the discount amount, the cart total it was computed from and
        the amount left to pay.
        """
        code = normalize_code(command.code)
        repo = current_domain.repository_for(Discount)

        discount = repo.find_by_code(code)
        if discount is None or not discount.is_redeemable():
            raise NotFoundError({"code": ["Discount code is invalid or has expired"]})

        if discount.usage_exhausted:
            raise UsageExceededError({"code": ["Discount usage limit has been reached"]})

        cart = current_domain.repository_for(Cart).find_for_user(command.user_id)
        if cart is None or not cart.items:
            raise EmptyCartError({"cart": ["Cart is empty"]})

        cart_total = cart.total_price
        if cart_total < discount.min_order_value:
            raise MinOrderValueError(
                {"cart": [f"Minimum order value for this discount is {discount.min_order_value:.2f}"]}
            )

        discount_amount = discount.calculate_discount(cart_total)
        discount.record_usage(command.user_id, cart_total, discount_amount)
        repo.add(discount)

        logger.info(
            "Discount applied",
            code=code,
            user_id=str(command.user_id),
            cart_total=cart_total,
            discount_amount=discount_amount,
        )
        return {
            "discount_amount": discount_amount,
            "cart_total": cart_total,
            "final_amount": cart_total - discount_amount,
        }
