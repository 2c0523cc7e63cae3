"""Order reads shared by handlers and the HTTP layer."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.errors import AccessDeniedError, NotFoundError
from storefront.order.order import Order


def load_order(order_id):
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        raise NotFoundError({"order_id": ["Order not found"]}) from None


def load_order_for_user(order_id, user_id):
    """Fetch an order on behalf of ``user_id``, refusing orders placed by anyone else."""
    order = load_order(order_id)
    if str(order.user_id) != str(user_id):
        raise AccessDeniedError({"order_id": ["You are not allowed to view this order"]})
    return order
