# Overview: Discount rules shared by order creation, order edits and item replacement.

from __future__ import annotations

from ..errors import DiscountExceedsSubtotal, DiscountReasonRequired, InvalidDiscount


def validate_discount(amount_cents: int, reason: str | None, items_subtotal_cents: int) -> None:
    """
    Raise if the discount is not allowed against this subtotal.

    Checks run in a fixed order: sign, then justification, then bound. Discounts
    are never clamped; an excessive discount is rejected.
    """
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise InvalidDiscount("discount_amount must be an integer (cents)", field="discount_amount_cents")
    if amount_cents < 0:
        raise InvalidDiscount("discount_amount cannot be negative", field="discount_amount_cents")
    if amount_cents > 0 and not (reason or "").strip():
        raise DiscountReasonRequired("A reason is required for any discount", field="discount_reason")
    if amount_cents > items_subtotal_cents:
        raise DiscountExceedsSubtotal(
            "Discount cannot exceed the items subtotal",
            field="discount_amount_cents",
            details={
                "discount_amount_cents": amount_cents,
                "items_subtotal_cents": items_subtotal_cents,
            },
        )


def normalize_reason(reason: str | None) -> str | None:
    """Stored reason: trimmed; None when blank."""
    reason = (reason or "").strip()
    return reason or None
