# Overview: Domain error taxonomy for the order ledger; services raise these, routes translate them to JSON.

from __future__ import annotations


class LedgerError(Exception):
    """
    Base class for every failure the order ledger reports to a caller.

    Each subclass carries a stable `code` (the name callers switch on) and the
    HTTP status the API layer answers with. No LedgerError ever leaves partial
    state behind: services raise before commit and the transaction rolls back.
    """
    code = "LEDGER_ERROR"
    http_status = 400

    def __init__(self, message: str, *, field: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.field = field
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": str(self), "code": self.code}
        if self.field:
            body["field"] = self.field
        if self.details:
            body["details"] = self.details
        return body


# =============================================================================
# VALIDATION (400)
# =============================================================================

class OrderValidationError(LedgerError):
    """Missing or malformed input. Always recoverable by fixing the request."""
    code = "VALIDATION_ERROR"
    http_status = 400


class UnknownChannel(OrderValidationError):
    code = "UnknownChannel"


class CustomerNameRequired(OrderValidationError):
    code = "CustomerNameRequired"


class PhoneRequired(OrderValidationError):
    code = "PhoneRequired"


class RegionRequired(OrderValidationError):
    code = "RegionRequired"


class InvalidShipping(OrderValidationError):
    code = "InvalidShipping"


class InvalidContactLink(OrderValidationError):
    code = "InvalidContactLink"


class NoItems(OrderValidationError):
    code = "NoItems"


class InvalidQuantity(OrderValidationError):
    code = "InvalidQuantity"


class InvalidDiscount(OrderValidationError):
    code = "InvalidDiscount"


class DiscountReasonRequired(OrderValidationError):
    code = "DiscountReasonRequired"


class UnknownStatus(OrderValidationError):
    code = "UnknownStatus"


class InvalidAdjustment(OrderValidationError):
    code = "InvalidAdjustment"


class InvalidDateRange(OrderValidationError):
    code = "InvalidDateRange"


# =============================================================================
# AUTHORIZATION (403)
# =============================================================================

class Forbidden(LedgerError):
    code = "Forbidden"
    http_status = 403


# =============================================================================
# REFERENTIAL (404 / 400)
# =============================================================================

class NotFound(LedgerError):
    code = "NotFound"
    http_status = 404


class UnknownSku(LedgerError):
    code = "UnknownSku"
    http_status = 400

    def __init__(self, sku: str, message: str | None = None):
        super().__init__(message or f"SKU not found: {sku}", field="items", details={"sku": sku})
        self.sku = sku


class ProductArchived(UnknownSku):
    code = "ProductArchived"

    def __init__(self, sku: str):
        super().__init__(sku, f"SKU is archived: {sku}")


class CourierRateMissing(LedgerError):
    code = "CourierRateMissing"
    http_status = 400


# =============================================================================
# CONSISTENCY (409)
# =============================================================================

class DiscountExceedsSubtotal(LedgerError):
    code = "DiscountExceedsSubtotal"
    http_status = 409
