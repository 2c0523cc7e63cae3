"""Storefront bounded context: shopping carts, discount codes and orders over a product catalog.

Carts and orders are standard CQRS aggregates persisted through Protean
repositories. Discounts are applied against a user's cart and orders snapshot
their line items at placement time.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
