"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the outer layers can catch them uniformly and display user-friendly
messages.  Each class carries a machine-readable ``code``.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "VALIDATION_ERROR"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NOT_FOUND"


class OrderNotFoundError(EntityNotFoundError):

    code = "ORDER_NOT_FOUND"


class ProductNotFoundError(EntityNotFoundError):

    code = "PRODUCT_NOT_FOUND"


class InsufficientStockError(DomainException):
    """A reservation or ship-out asked for more units than exist.

    Never retried: the caller has to change the order or restock first.
    """

    code = "INSUFFICIENT_STOCK"

    def __init__(self, message: str, title: str, available: int, requested: int) -> None:
        super().__init__(message)
        self.title = title
        self.available = available
        self.requested = requested


class TransactionAbortError(DomainException):
    """The datastore could not complete the atomic section.

    Nothing from the aborted unit of work is visible afterwards.
    """

    code = "TRANSACTION_ABORTED"
