# Overview: Courier rate table (region -> courier cost) used to cost online orders.

from __future__ import annotations

from typing import Callable, Optional

from flask import current_app

from ..extensions import db
from ..models import CourierRate
from ..validation import ValidationError

# Any callable region -> cost_cents (None when the region has no rate)
RateTable = Callable[[str], Optional[int]]


def configured_regions() -> tuple[str, ...]:
    return tuple(current_app.config.get("ONLINE_REGIONS", ("luzon", "visayas", "mindanao")))


def courier_cost_for_region(region: str) -> int | None:
    """Default rate table: reads the courier_rates table."""
    row = db.session.get(CourierRate, (region or "").strip().lower())
    return row.cost_cents if row else None


def set_rate(region: str, cost_cents: int) -> CourierRate:
    region = (region or "").strip().lower()
    if region not in configured_regions():
        raise ValidationError(f"region must be one of: {', '.join(configured_regions())}", field="region")
    if isinstance(cost_cents, bool) or not isinstance(cost_cents, int) or cost_cents < 0:
        raise ValidationError("cost_cents must be a non-negative integer", field="cost_cents")

    row = db.session.get(CourierRate, region)
    if row is None:
        row = CourierRate(region=region, cost_cents=cost_cents)
        db.session.add(row)
    else:
        row.cost_cents = cost_cents
    db.session.commit()
    return row


def list_rates() -> list[CourierRate]:
    return db.session.query(CourierRate).order_by(CourierRate.region.asc()).all()
