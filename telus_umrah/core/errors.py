"""Errors raised by the booking and invoice services."""


class BookingValidationError(ValueError):
    """Raised by the sanitizers for the first offending field.

    kind is one of "missing", "invalid", "range", "order".
    """

    def __init__(self, kind: str, field: str, message: str):
        self.kind = kind
        self.field = field
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"message": self.message, "field": self.field, "kind": self.kind}


class BookingPersistenceError(Exception):
    """A write was rejected by the database."""


class DuplicateBookingError(BookingPersistenceError):
    """A write collided with a unique index (e.g. invoice number)."""


class InvoiceGenerationError(Exception):
    """PDF rendering failed; the original error is chained as __cause__."""
