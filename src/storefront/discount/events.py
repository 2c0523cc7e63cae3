"""Domain events for the Discount aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Discount")
class DiscountCreated:
    __version__ = 1

    discount_id = Identifier(required=True)
    name = String(required=True)
    discount_code = String(required=True)
    discount_type = String(required=True)
    discount_value = Float(required=True)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)


@storefront.event(part_of="Discount")
class DiscountUpdated:
    __version__ = 1

    discount_id = Identifier(required=True)
    discount_code = String(required=True)
    is_active = Boolean()


@storefront.event(part_of="Discount")
class DiscountApplied:
    """A discount code was redeemed against a user's cart."""

    __version__ = 1

    discount_id = Identifier(required=True)
    discount_code = String(required=True)
    user_id = Identifier(required=True)
    cart_total = Float(required=True)
    discount_amount = Float(required=True)
    usage_count = Integer(required=True)
