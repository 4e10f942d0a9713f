# Overview: Resolves upstream actor ids to local profiles and manages profile records.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import Profile
from ..permissions import Role
from ..validation import ValidationError


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as the services see it."""
    id: str
    role: str
    display_name: str
    commission_rate_bps: int


def actor_from_profile(profile: Profile) -> Actor:
    return Actor(
        id=profile.id,
        role=profile.role,
        display_name=profile.display_name,
        commission_rate_bps=profile.commission_rate_bps,
    )


def resolve_actor(actor_id: str | None) -> Actor | None:
    """
    Map an identity-provider actor id to an Actor.

    Returns None for missing, unknown or inactive actors; the caller answers 401.
    """
    if not actor_id:
        return None
    profile = db.session.get(Profile, actor_id.strip())
    if profile is None or not profile.is_active:
        return None
    return actor_from_profile(profile)


def _validate_rate_bps(rate_bps) -> int:
    if isinstance(rate_bps, bool) or not isinstance(rate_bps, int):
        raise ValidationError("commission_rate_bps must be an integer")
    if rate_bps < 0 or rate_bps > 10000:
        raise ValidationError("commission_rate_bps must be between 0 and 10000")
    return rate_bps


def create_profile(
    *,
    actor_id: str,
    display_name: str,
    role: str = Role.STAFF,
    email: str | None = None,
    commission_rate_bps: int | None = None,
) -> Profile:
    actor_id = (actor_id or "").strip()
    if not actor_id:
        raise ValidationError("actor id is required")
    display_name = (display_name or "").strip()
    if not display_name:
        raise ValidationError("display_name is required")
    if role not in Role.ALL:
        raise ValidationError(f"role must be one of: {', '.join(Role.ALL)}")
    if db.session.get(Profile, actor_id) is not None:
        raise ValidationError(f"profile already exists: {actor_id}")

    if commission_rate_bps is None:
        commission_rate_bps = int(current_app.config.get("DEFAULT_COMMISSION_RATE_BPS", 3000))

    profile = Profile(
        id=actor_id,
        display_name=display_name,
        role=role,
        email=email,
        commission_rate_bps=_validate_rate_bps(commission_rate_bps),
        is_active=True,
    )
    db.session.add(profile)
    db.session.commit()
    return profile


def set_commission_rate(actor_id: str, rate_bps: int) -> Profile:
    """Changes apply to orders created afterwards; existing orders keep their snapshot."""
    profile = db.session.get(Profile, actor_id)
    if profile is None:
        raise ValidationError(f"profile not found: {actor_id}")
    profile.commission_rate_bps = _validate_rate_bps(rate_bps)
    db.session.commit()
    return profile


def list_profiles() -> list[Profile]:
    return db.session.query(Profile).order_by(Profile.display_name.asc(), Profile.id.asc()).all()
