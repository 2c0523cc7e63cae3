"""Variant eligibility shared by cart and order placement.

A product that declares sizes (or colors) only accepts selections from that
list. A product with an empty list accepts any value, and an absent
selection is always accepted.
"""

from storefront.errors import InvalidVariantError


def ensure_variant_available(product, selected_size=None, selected_color=None):
    """Raise ``InvalidVariantError`` if the selection is not offered by ``product``."""
    if selected_size and product.sizes and selected_size not in product.sizes:
        raise InvalidVariantError(
            {"selected_size": [f'Size "{selected_size}" is not available for product "{product.name}"']}
        )

    if selected_color and product.colors and selected_color not in product.colors:
        raise InvalidVariantError(
            {"selected_color": [f'Color "{selected_color}" is not available for product "{product.name}"']}
        )
