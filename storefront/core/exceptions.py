# storefront/core/exceptions.py
"""
Domain errors for the cart & checkout core.

Every error is an HTTPException so routers can let them propagate untouched,
while services and tests can catch them by type. `detail` is always a
human-readable message the UI can show as-is.
"""

from fastapi import HTTPException, status


class StorefrontError(HTTPException):
    """Base class for storefront errors."""

    def __init__(self, status_code: int, detail: str, error_code: str):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code

    def __str__(self) -> str:
        return str(self.detail)


class ProductUnavailableError(StorefrontError):
    """Product was deleted, is unknown to the catalog, or is inactive."""

    def __init__(self, detail: str = "Product is no longer available"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="PRODUCT_UNAVAILABLE",
        )


class InsufficientStockError(StorefrontError):
    """Requested quantity exceeds catalog stock."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="INSUFFICIENT_STOCK",
        )

    @classmethod
    def only_available(cls, stock: int, unit: str | None) -> "InsufficientStockError":
        return cls(f"Only {stock} {unit or 'pieces'} available in stock")


class ValidationFailedError(StorefrontError):
    """A validation pass could not complete; no state was changed."""

    def __init__(self, detail: str = "Failed to validate cart prices"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code="VALIDATION_FAILED",
        )


class PaymentMethodUnavailableError(StorefrontError):
    def __init__(self, detail: str = "Selected payment method is not available"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="PAYMENT_METHOD_UNAVAILABLE",
        )


class EmptyCartError(StorefrontError):
    def __init__(self, detail: str = "Cart is empty"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="EMPTY_CART",
        )


class InvalidDealEncodingError(ValueError):
    """
    Raised by the deal parser for a malformed bundle encoding.

    Never escapes the deal engine: the item simply gets no deal.
    """
