"""Product aggregate: the catalog record read by carts and orders.

Products are maintained outside the pricing pipeline. Carts copy the current
price when an item is added and orders re-check that referenced products
still exist and offer the selected size and color.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, List, String, Text

from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    sale_price = Float(default=0.0, min_value=0.0)
    is_sale = Boolean(default=False)
    stock = Integer(default=0, min_value=0)
    sizes = List(content_type=String)  # XS, S, M, L, XL ...
    colors = List(content_type=String)
    images = List(content_type=String)  # Image URLs, primary first
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, price, **attributes):
        """Build a new catalog record. Variant lists are stripped of blanks and duplicates."""
        if price is None or price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        for attr in ("sizes", "colors"):
            values = attributes.get(attr) or []
            attributes[attr] = list(dict.fromkeys(v.strip() for v in values if v and v.strip()))

        now = datetime.now(UTC)
        return cls(name=name, price=price, created_at=now, updated_at=now, **attributes)

    @property
    def primary_image(self):
        return self.images[0] if self.images else None
