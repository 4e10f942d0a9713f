"""
Auxiliary ledgers (expenses, receivables, payables) and the audit trail.

The auxiliary tables are maintained by plain list/edit screens outside this
package; the order ledger only sums them for the owner dashboard and does not
validate their contents. Status values are open | partial | closed.
"""
from __future__ import annotations

from ..extensions import db
from wholesale.time_utils import to_utc_z, utcnow


class Expense(db.Model):
    __tablename__ = "expenses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    expense_date = db.Column(db.Date, nullable=False, index=True)
    category = db.Column(db.String(64), nullable=True)
    amount_cents = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "expense_date": self.expense_date.isoformat() if self.expense_date else None,
            "category": self.category,
            "amount_cents": self.amount_cents,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }


class Receivable(db.Model):
    __tablename__ = "receivables"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    party = db.Column(db.String(255), nullable=False)
    amount_due_cents = db.Column(db.Integer, nullable=False, default=0)
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="open", index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "party": self.party,
            "amount_due_cents": self.amount_due_cents,
            "amount_paid_cents": self.amount_paid_cents,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }


class Payable(db.Model):
    __tablename__ = "payables"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    party = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="open", index=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "party": self.party,
            "amount_cents": self.amount_cents,
            "status": self.status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }


class LedgerEvent(db.Model):
    """
    Append-only audit record for order-ledger mutations.

    Written in the same transaction as the change it records; never updated or
    deleted.
    """
    __tablename__ = "ledger_events"
    __table_args__ = (
        db.Index("ix_ledger_events_entity", "entity_type", "entity_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # e.g. order.created, order.updated, order.items_replaced, inventory.adjusted
    event_type = db.Column(db.String(64), nullable=False, index=True)
    entity_type = db.Column(db.String(64), nullable=False)
    entity_id = db.Column(db.String(64), nullable=False)

    actor_id = db.Column(db.String(64), db.ForeignKey("profiles.id"), nullable=True, index=True)
    occurred_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    note = db.Column(db.String(255), nullable=True)
    payload = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_type": self.event_type,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor_id": self.actor_id,
            "occurred_at": to_utc_z(self.occurred_at),
            "note": self.note,
            "payload": self.payload,
        }
