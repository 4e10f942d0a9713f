# Overview: Atomic allocation of human-readable order codes (ORD-000123).

from __future__ import annotations

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import OrderSequence


ORDER_DOCUMENT_TYPE = "ORDER"


def next_sequence_number(document_type: str) -> int:
    """
    Atomically allocate the next number for a document type.

    Runs inside the caller's transaction: if the caller rolls back, the number
    is not consumed. The first allocation creates the counter row; a racing
    creator is resolved by retrying the UPDATE inside a savepoint.
    """
    if not document_type:
        raise ValueError("document_type is required")

    stmt = (
        update(OrderSequence)
        .where(OrderSequence.document_type == document_type)
        .values(next_number=OrderSequence.next_number + 1)
    )

    def _read_allocated() -> int:
        current = (
            db.session.query(OrderSequence.next_number)
            .filter_by(document_type=document_type)
            .scalar()
        )
        return current - 1

    result = db.session.execute(stmt)
    if result.rowcount:
        return _read_allocated()

    try:
        with db.session.begin_nested():
            db.session.add(OrderSequence(document_type=document_type, next_number=2))
        return 1
    except IntegrityError:
        result = db.session.execute(stmt)
        if not result.rowcount:
            raise
        return _read_allocated()


def format_order_code(number: int, *, prefix: str | None = None, pad: int | None = None) -> str:
    if prefix is None:
        prefix = current_app.config.get("ORDER_CODE_PREFIX", "ORD-")
    if pad is None:
        pad = int(current_app.config.get("ORDER_CODE_PAD", 6))
    return f"{prefix}{number:0{pad}d}"


def next_order_code() -> str:
    return format_order_code(next_sequence_number(ORDER_DOCUMENT_TYPE))
