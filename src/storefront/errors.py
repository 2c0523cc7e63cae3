"""Domain errors raised by the storefront pricing pipeline.

Every error carries a ``{field: [messages]}`` dict, like the ``ValidationError``
instances raised by aggregates and invariants.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError


class _CarriesMessages:
    """Keep the ``{field: [messages]}`` dict on ``.messages`` as ``ValidationError`` does."""

    def __init__(self, messages, *args, **kwargs):
        super().__init__(messages, *args, **kwargs)
        self.messages = messages


class NotFoundError(_CarriesMessages, ObjectNotFoundError):
    """A referenced record does not exist or is not visible to the caller."""


class AccessDeniedError(_CarriesMessages, ProteanException):
    """The record exists but belongs to someone else."""


class InvalidVariantError(ValidationError):
    """Selected size or color is not offered by the product."""


class EmptyCartError(ValidationError):
    pass


class EmptyOrderError(ValidationError):
    pass


class MinOrderValueError(ValidationError):
    pass


class UsageExceededError(ValidationError):
    pass


class InvalidStatusError(ValidationError):
    pass


class DuplicateNameError(ValidationError):
    pass


class DuplicateCodeError(ValidationError):
    pass
