"""Order aggregate: an immutable snapshot of a purchase and its pricing.

Items copy name, price, image and variant selection from the order request,
so later catalog changes never alter a placed order. Status moves freely
between the five known values; there is no transition map.
"""

import random
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.errors import InvalidStatusError
from storefront.order.events import OrderDiscarded, OrderPlaced, OrderStatusChanged


class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


def generate_order_number(moment=None):
    """``ORD-YYYYMMDD-NNNN``: the UTC date plus a random four-digit suffix."""
    moment = moment or datetime.now(UTC)
    return f"ORD-{moment:%Y%m%d}-{random.randint(1000, 9999)}"


def normalize_status(status):
    """The matching ``OrderStatus`` value, ignoring case and surrounding blanks."""
    target = (status or "").strip().upper()
    allowed = [s.value for s in OrderStatus]
    if target not in allowed:
        raise InvalidStatusError({"status": [f"Status must be one of {', '.join(allowed)}"]})
    return target


@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=1000)
    selected_size = String(max_length=10)
    selected_color = String(max_length=50)

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20)
    user_id = Identifier(required=True)
    username = String(max_length=255)
    address_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total_amount = Float(required=True, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    final_amount = Float(required=True, min_value=0.0)
    discount_code = String(max_length=50)
    items = HasMany(OrderItem)
    placed_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def final_amount_must_match_total_less_discount(self):
        if self.total_amount is None or self.final_amount is None:
            return
        expected = self.total_amount - (self.discount_amount or 0.0)
        if abs(self.final_amount - expected) > 0.01:
            raise ValidationError(
                {"final_amount": ["Final amount must equal total amount minus discount amount"]}
            )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        user_id,
        address_id,
        payment_method,
        total_amount,
        final_amount,
        items_data,
        discount_amount=0.0,
        discount_code=None,
        username=None,
    ):
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            user_id=user_id,
            username=username,
            address_id=address_id,
            payment_method=payment_method,
            status=OrderStatus.PENDING.value,
            total_amount=total_amount,
            discount_amount=discount_amount or 0.0,
            final_amount=final_amount,
            discount_code=discount_code or None,
            placed_at=now,
            updated_at=now,
        )

        for item_data in items_data:
            order.add_items(
                OrderItem(
                    product_id=item_data.get("product_id"),
                    name=item_data.get("name"),
                    unit_price=item_data.get("unit_price"),
                    quantity=item_data.get("quantity"),
                    image=item_data.get("image"),
                    selected_size=item_data.get("selected_size") or None,
                    selected_color=item_data.get("selected_color") or None,
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(user_id),
                item_count=len(order.items),
                total_amount=order.total_amount,
                discount_amount=order.discount_amount,
                final_amount=order.final_amount,
                discount_code=order.discount_code,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Behaviour
    # -------------------------------------------------------------------
    def update_status(self, status):
        """Move to any of the known statuses. Matching ignores case and surrounding blanks."""
        target = normalize_status(status)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target,
                changed_at=now,
            )
        )

    def discard_items(self):
        """Detach every item so their records are deleted with the next save."""
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)

        self.raise_(
            OrderDiscarded(
                order_id=str(self.id),
                order_number=self.order_number,
                items_removed=len(removed),
            )
        )


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_order_number(self, order_number) -> Order | None:
        found = self._dao.query.filter(order_number=order_number).all().items
        return found[0] if found else None

    def for_user(self, user_id) -> list[Order]:
        """The user's orders, most recent first."""
        return self._dao.query.filter(user_id=str(user_id)).order_by("-placed_at").all().items

    def most_recent(self, status=None, page=0, size=10):
        """One page of all orders, newest first, optionally narrowed to one status."""
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        return query.order_by("-placed_at").offset(page * size).limit(size).all()

    def search_by_order_number(self, fragment, page=0, size=10):
        """Orders whose number contains ``fragment``, ignoring case. Newest first."""
        return (
            self._dao.query.filter(order_number__icontains=fragment.strip())
            .order_by("-placed_at")
            .offset(page * size)
            .limit(size)
            .all()
        )
