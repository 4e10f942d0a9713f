# Overview: Append-only audit trail for order-ledger mutations.

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from ..extensions import db
from ..models import LedgerEvent

"""
Ledger event invariants

- Append-only; no updates or deletes of existing events.
- No domain logic here. Callers decide what to record.
- Events are written inside the same DB transaction as the change they record,
  so a rolled-back operation leaves no event behind.
"""


def append_ledger_event(
    *,
    event_type: str,
    entity_type: str,
    entity_id: str,
    actor_id: str | None = None,
    occurred_at: Optional[datetime] = None,
    note: Optional[str] = None,
    payload: Optional[dict[str, Any]] = None,
) -> LedgerEvent:
    ev = LedgerEvent(
        event_type=event_type,
        entity_type=entity_type,
        entity_id=str(entity_id),
        actor_id=actor_id,
        occurred_at=occurred_at,  # if None, column default applies
        note=note,
        payload=json.dumps(payload, sort_keys=True, default=str) if payload is not None else None,
    )
    db.session.add(ev)
    db.session.flush()  # ensures ev.id is assigned without committing
    return ev


def list_events_for(entity_type: str, entity_id: str) -> list[LedgerEvent]:
    """Events for one entity, oldest first."""
    return (
        db.session.query(LedgerEvent)
        .filter_by(entity_type=entity_type, entity_id=str(entity_id))
        .order_by(LedgerEvent.occurred_at.asc(), LedgerEvent.id.asc())
        .all()
    )
