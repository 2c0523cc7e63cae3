"""Order removal — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.lookup import load_order
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)

        # Item records go first, then the order itself
        order.discard_items()
        repo.add(order)
        repo._dao.delete(order)

        logger.info("Order deleted", order_id=str(command.order_id), order_number=order.order_number)
