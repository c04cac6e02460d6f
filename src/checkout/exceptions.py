"""Checkout failure taxonomy.

Every rejection the engine can produce is a ``CheckoutError`` subclass. The
HTTP layer maps each kind to one status code; the engine itself never deals
in status codes.

Invalid discount codes are grouped under ``InvalidDiscount`` and carry the
offending code plus a human-readable reason.
"""

from decimal import Decimal


class CheckoutError(Exception):
    """Base class for all typed checkout rejections."""

    kind = "checkout_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class UnauthorizedAccess(CheckoutError):
    kind = "unauthorized_access"

    def __init__(self, message: str = "User cannot place order for another user"):
        super().__init__(message)


class ProductNotFound(CheckoutError):
    kind = "product_not_found"

    def __init__(self, product_id):
        super().__init__(f"Product not found with ID: {product_id}")
        self.product_id = str(product_id)


class InvalidDiscount(CheckoutError):
    kind = "invalid_discount"
    reason = "discount is invalid"

    def __init__(self, code: str, reason: str | None = None):
        reason = reason or self.reason
        super().__init__(f"Invalid discount code '{code}': {reason}")
        self.code = code
        self.reason = reason

    def to_dict(self) -> dict:
        return {**super().to_dict(), "code": self.code, "reason": self.reason}


class DiscountNotFound(InvalidDiscount):
    kind = "discount_not_found"
    reason = "discount code not found"


class DiscountNotYetValid(InvalidDiscount):
    kind = "discount_not_yet_valid"
    reason = "discount is not yet valid"


class DiscountExpired(InvalidDiscount):
    kind = "discount_expired"
    reason = "discount has expired"


class DiscountExhausted(InvalidDiscount):
    kind = "discount_exhausted"
    reason = "discount has no remaining uses"


class ExcessiveDiscount(CheckoutError):
    kind = "excessive_discount"

    def __init__(self, limit: Decimal, ratio: Decimal | None = None):
        percent = (limit * 100).normalize()
        super().__init__(f"Total discount cannot exceed {percent:f}% of the original price")
        self.limit = limit
        self.ratio = ratio


class InsufficientStock(CheckoutError):
    kind = "insufficient_stock"

    def __init__(self, product_id, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, available {available}"
        )
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available


class CheckoutInternalError(CheckoutError):
    """Unexpected failure (store unavailable, aborted transaction, ...).

    The original exception is chained as ``__cause__``; its details are never
    exposed as a validation message.
    """

    kind = "internal_error"

    def __init__(self, message: str = "Checkout could not be completed due to an internal error"):
        super().__init__(message)
