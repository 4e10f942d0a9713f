from __future__ import annotations

from ..extensions import db
from wholesale.time_utils import to_utc_z, utcnow


class Profile(db.Model):
    """
    Actor profile mirrored from the identity provider.

    The id is the provider's actor id (opaque string). Authentication happens
    upstream; this table only holds what the ledger needs: role, display name
    and the commission rate applied to the actor's online orders.

    Roles: owner | admin | staff. owner and admin carry the same authority.
    """
    __tablename__ = "profiles"

    id = db.Column(db.String(64), primary_key=True)
    display_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True, unique=True)
    role = db.Column(db.String(16), nullable=False, default="staff", index=True)

    # 3000 bps = 30%
    commission_rate_bps = db.Column(db.Integer, nullable=False, default=3000)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Profile id={self.id!r} role={self.role} name={self.display_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "email": self.email,
            "role": self.role,
            "commission_rate_bps": self.commission_rate_bps,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
