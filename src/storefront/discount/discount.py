"""Discount aggregate: promotional codes redeemable against a cart total.

A discount is redeemable while it is active, the current moment lies within
``[start_date, end_date]`` and, when ``max_usage`` is non-zero, fewer than
``max_usage`` redemptions have been recorded. ``max_discount_amount`` and
``max_usage`` use zero to mean "unlimited".
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.discount.events import DiscountApplied, DiscountCreated, DiscountUpdated
from storefront.domain import storefront


class DiscountType(Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


def normalize_code(code):
    return (code or "").strip().upper()


def _as_utc(value):
    """Compare-safe form of a datetime: naive values are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def validate_discount_details(
    name,
    discount_code,
    discount_type,
    discount_value,
    start_date,
    end_date,
    min_order_value=0.0,
    max_discount_amount=0.0,
    max_usage=0,
):
    """Check a discount definition before it is created or updated.

    Every problem found is reported at once, keyed by field.
    """
    errors = {}

    if not name or not name.strip():
        errors["name"] = ["Name is required"]
    if not discount_code or not discount_code.strip():
        errors["discount_code"] = ["Discount code is required"]

    types = [t.value for t in DiscountType]
    if discount_type not in types:
        errors["discount_type"] = [f"Discount type must be one of {', '.join(types)}"]

    if discount_value is None or discount_value <= 0:
        errors["discount_value"] = ["Discount value must be greater than zero"]
    elif discount_type == DiscountType.PERCENTAGE.value and discount_value > 100:
        errors["discount_value"] = ["Percentage discount cannot exceed 100"]

    if start_date is None:
        errors["start_date"] = ["Start date is required"]
    if end_date is None:
        errors["end_date"] = ["End date is required"]
    if start_date is not None and end_date is not None and _as_utc(start_date) >= _as_utc(end_date):
        errors["end_date"] = ["End date must be after start date"]

    for field_name, value in (
        ("min_order_value", min_order_value),
        ("max_discount_amount", max_discount_amount),
        ("max_usage", max_usage),
    ):
        if value is not None and value < 0:
            errors[field_name] = [f"{field_name.replace('_', ' ').capitalize()} cannot be negative"]

    if errors:
        raise ValidationError(errors)


@storefront.aggregate
class Discount:
    name = String(required=True, max_length=100)
    discount_code = String(required=True, max_length=50)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True)
    min_order_value = Float(default=0.0, min_value=0.0)
    max_discount_amount = Float(default=0.0, min_value=0.0)
    max_usage = Integer(default=0, min_value=0)
    usage_count = Integer(default=0, min_value=0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def value_must_be_positive(self):
        if self.discount_value is not None and self.discount_value <= 0:
            raise ValidationError({"discount_value": ["Discount value must be greater than zero"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.discount_value or 0) > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    @invariant.post
    def window_must_be_ordered(self):
        if self.start_date and self.end_date and _as_utc(self.start_date) >= _as_utc(self.end_date):
            raise ValidationError({"end_date": ["End date must be after start date"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        discount_code,
        discount_type,
        discount_value,
        start_date,
        end_date,
        min_order_value=0.0,
        max_discount_amount=0.0,
        max_usage=0,
        is_active=True,
    ):
        now = datetime.now(UTC)
        discount = cls(
            name=name.strip(),
            discount_code=normalize_code(discount_code),
            discount_type=discount_type,
            discount_value=discount_value,
            min_order_value=min_order_value or 0.0,
            max_discount_amount=max_discount_amount or 0.0,
            max_usage=max_usage or 0,
            usage_count=0,
            start_date=start_date,
            end_date=end_date,
            is_active=True if is_active is None else is_active,
            created_at=now,
            updated_at=now,
        )
        discount.raise_(
            DiscountCreated(
                discount_id=str(discount.id),
                name=discount.name,
                discount_code=discount.discount_code,
                discount_type=discount.discount_type,
                discount_value=discount.discount_value,
                start_date=discount.start_date,
                end_date=discount.end_date,
            )
        )
        return discount

    # -------------------------------------------------------------------
    # Behaviour
    # -------------------------------------------------------------------
    def update_details(
        self,
        name,
        discount_code,
        discount_type,
        discount_value,
        start_date,
        end_date,
        min_order_value=0.0,
        max_discount_amount=0.0,
        max_usage=0,
        is_active=None,
    ):
        """Replace the definition of the discount. Redemptions recorded so far are kept."""
        with atomic_change(self):
            self.name = name.strip()
            self.discount_code = normalize_code(discount_code)
            self.discount_type = discount_type
            self.discount_value = discount_value
            self.start_date = start_date
            self.end_date = end_date
            self.min_order_value = min_order_value or 0.0
            self.max_discount_amount = max_discount_amount or 0.0
            self.max_usage = max_usage or 0
            if is_active is not None:
                self.is_active = is_active
            self.updated_at = datetime.now(UTC)

        self.raise_(
            DiscountUpdated(
                discount_id=str(self.id),
                discount_code=self.discount_code,
                is_active=self.is_active,
            )
        )

    def is_redeemable(self, now=None):
        """Active and within its validity window. Usage limits are checked separately."""
        now = _as_utc(now or datetime.now(UTC))
        return bool(self.is_active) and _as_utc(self.start_date) <= now <= _as_utc(self.end_date)

    @property
    def usage_exhausted(self):
        return self.max_usage > 0 and self.usage_count >= self.max_usage

    def calculate_discount(self, cart_total):
        """Amount taken off ``cart_total``.

        Percentage discounts are capped by ``max_discount_amount`` when it is
        set; fixed discounts are returned as configured.
        """
        if self.discount_type == DiscountType.PERCENTAGE.value:
            amount = cart_total * self.discount_value / 100
            if self.max_discount_amount > 0:
                amount = min(amount, self.max_discount_amount)
            return amount
        return self.discount_value

    def record_usage(self, user_id, cart_total, discount_amount):
        self.usage_count += 1
        self.updated_at = datetime.now(UTC)

        self.raise_(
            DiscountApplied(
                discount_id=str(self.id),
                discount_code=self.discount_code,
                user_id=str(user_id),
                cart_total=cart_total,
                discount_amount=discount_amount,
                usage_count=self.usage_count,
            )
        )


@storefront.repository(part_of=Discount)
class DiscountRepository:
    def find_by_code(self, code) -> Discount | None:
        """Case-insensitive lookup; codes are stored upper-cased."""
        found = self._dao.query.filter(discount_code=normalize_code(code)).all().items
        return found[0] if found else None

    def find_by_name(self, name) -> Discount | None:
        found = self._dao.query.filter(name=(name or "").strip()).all().items
        return found[0] if found else None

    def newest_first(self, page=0, size=10):
        """One page of discounts, most recently created first. ``page`` is zero-based."""
        return self._dao.query.order_by("-created_at").offset(page * size).limit(size).all()

    def search(self, code=None, name=None, page=0, size=10):
        """Discounts whose code and name contain the given fragments, ignoring case.

        A blank fragment does not narrow the search. Newest first, ``page`` is zero-based.
        """
        query = self._dao.query
        if code and code.strip():
            query = query.filter(discount_code__icontains=code.strip())
        if name and name.strip():
            query = query.filter(name__icontains=name.strip())
        return query.order_by("-created_at").offset(page * size).limit(size).all()
