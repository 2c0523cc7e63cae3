"""Cart aggregate (CQRS): one per user, holding purchase candidates before checkout.

Items keep a snapshot of the product's unit price taken when the line was
first added. ``total_price`` is derived: every mutation recomputes it from
the current items instead of patching the previous value.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityUpdated, CartItemRemoved
from storefront.domain import storefront
from storefront.errors import NotFoundError


def _ensure_positive_quantity(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be a positive integer"]})


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    selected_size = String(max_length=10)
    selected_color = String(max_length=50)
    added_at = DateTime()

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def matches(self, product_id, selected_size, selected_color):
        """Same product and the same variant selection (absence matches absence)."""
        return (
            str(self.product_id) == str(product_id)
            and (self.selected_size or None) == selected_size
            and (self.selected_color or None) == selected_color
        )


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    total_price = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            total_price=0.0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _recalculate_total(self):
        self.total_price = sum((item.line_total for item in self.items), 0.0)
        self.updated_at = datetime.now(UTC)

    def find_item(self, item_id):
        """Return the item with ``item_id`` or raise ``NotFoundError``.

        Items of other users' carts are never found here, which is what makes
        the ownership check for updates and removals.
        """
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFoundError({"item_id": ["Item not found in cart"]})
        return item

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, unit_price, quantity, selected_size=None, selected_color=None):
        """Add a product line, or increase the quantity of an identical line."""
        _ensure_positive_quantity(quantity)
        selected_size = selected_size or None
        selected_color = selected_color or None

        existing = next(
            (i for i in self.items if i.matches(product_id, selected_size, selected_color)),
            None,
        )

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                selected_size=selected_size,
                selected_color=selected_color,
                added_at=datetime.now(UTC),
            )
            self.add_items(item)

        self._recalculate_total()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                unit_price=item.unit_price,
                selected_size=selected_size,
                selected_color=selected_color,
                total_price=self.total_price,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity):
        """Set the quantity of an existing item."""
        item = self.find_item(item_id)
        _ensure_positive_quantity(quantity)

        previous_quantity = item.quantity
        item.quantity = quantity
        self._recalculate_total()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                total_price=self.total_price,
            )
        )

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        self.remove_items(item)
        self._recalculate_total()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                total_price=self.total_price,
            )
        )

    def clear(self):
        """Remove every item. The cart itself stays, empty."""
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)
        self._recalculate_total()

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed=len(removed),
            )
        )


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_for_user(self, user_id) -> Cart | None:
        """Return the user's cart, or None if one was never opened."""
        carts = self._dao.query.filter(user_id=str(user_id)).all().items
        return carts[0] if carts else None

    def get_or_open(self, user_id) -> Cart:
        """Return the user's cart, creating an unsaved empty one if missing."""
        return self.find_for_user(user_id) or Cart.create(user_id)
