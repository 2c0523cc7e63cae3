"""Catalog lookups used by cart and order command handlers."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.errors import NotFoundError


def load_product(product_id, label=None):
    """Fetch a product, translating a missing record into ``NotFoundError``.

    ``label`` names the product in the error message (order requests carry
    the product name alongside its id).
    """
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError:
        raise NotFoundError({"product_id": [f"Product {label or product_id} does not exist"]}) from None


def products_by_id(product_ids):
    """Map each id to its product, skipping ids no longer in the catalog."""
    repo = current_domain.repository_for(Product)
    found = {}
    for product_id in dict.fromkeys(str(pid) for pid in product_ids):
        try:
            found[product_id] = repo.get(product_id)
        except ObjectNotFoundError:
            continue
    return found
