"""Discount administration commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.discount.discount import Discount, normalize_code, validate_discount_details
from storefront.domain import storefront
from storefront.errors import DuplicateCodeError, DuplicateNameError, NotFoundError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Discount")
class CreateDiscount:
    name = String(required=True, max_length=100)
    discount_code = String(required=True, max_length=50)
    discount_type = String(required=True)
    discount_value = Float(required=True)
    min_order_value = Float(default=0.0)
    max_discount_amount = Float(default=0.0)
    max_usage = Integer(default=0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)


@storefront.command(part_of="Discount")
class UpdateDiscount:
    discount_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    discount_code = String(required=True, max_length=50)
    discount_type = String(required=True)
    discount_value = Float(required=True)
    min_order_value = Float(default=0.0)
    max_discount_amount = Float(default=0.0)
    max_usage = Integer(default=0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean()


@storefront.command(part_of="Discount")
class DeleteDiscount:
    discount_id = Identifier(required=True)


def _details(command):
    return {
        "name": command.name,
        "discount_code": command.discount_code,
        "discount_type": (command.discount_type or "").strip().upper(),
        "discount_value": command.discount_value,
        "start_date": command.start_date,
        "end_date": command.end_date,
        "min_order_value": command.min_order_value,
        "max_discount_amount": command.max_discount_amount,
        "max_usage": command.max_usage,
    }


def _ensure_unique(repo, name, code, exclude_id=None):
    """Reject a name or code already used by another discount."""
    same_name = repo.find_by_name(name)
    if same_name is not None and str(same_name.id) != str(exclude_id):
        raise DuplicateNameError({"name": [f'A discount named "{name.strip()}" already exists']})

    same_code = repo.find_by_code(code)
    if same_code is not None and str(same_code.id) != str(exclude_id):
        raise DuplicateCodeError({"discount_code": [f'Discount code "{normalize_code(code)}" is already in use']})


def load_discount(discount_id):
    try:
        return current_domain.repository_for(Discount).get(str(discount_id))
    except ObjectNotFoundError:
        raise NotFoundError({"discount_id": ["Discount not found"]}) from None


@storefront.command_handler(part_of=Discount)
class ManageDiscountHandler:
    @handle(CreateDiscount)
    def create_discount(self, command):
        details = _details(command)
        validate_discount_details(**details)

        repo = current_domain.repository_for(Discount)
        _ensure_unique(repo, details["name"], details["discount_code"])

        discount = Discount.create(is_active=command.is_active, **details)
        repo.add(discount)

        logger.info("Discount created", discount_id=str(discount.id), code=discount.discount_code)
        return str(discount.id)

    @handle(UpdateDiscount)
    def update_discount(self, command):
        discount = load_discount(command.discount_id)

        details = _details(command)
        validate_discount_details(**details)

        repo = current_domain.repository_for(Discount)
        _ensure_unique(repo, details["name"], details["discount_code"], exclude_id=discount.id)

        discount.update_details(is_active=command.is_active, **details)
        repo.add(discount)

        logger.info("Discount updated", discount_id=str(discount.id), code=discount.discount_code)
        return str(discount.id)

    @handle(DeleteDiscount)
    def delete_discount(self, command):
        discount = load_discount(command.discount_id)
        current_domain.repository_for(Discount)._dao.delete(discount)

        logger.info("Discount deleted", discount_id=str(command.discount_id))
