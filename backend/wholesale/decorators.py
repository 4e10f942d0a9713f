# Overview: Request decorators for API routes: actor resolution from the identity gateway.

from functools import wraps
from flask import current_app, g, jsonify, request

from .services.identity_service import resolve_actor

ACTOR_HEADER = "X-Actor-Id"


def require_actor(f):
    """
    Resolve the caller from the identity gateway's X-Actor-Id header.

    Sets g.actor (an Actor). Returns 401 when the header is missing or names
    an unknown or inactive profile. Tokens are verified upstream, never here.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        actor = resolve_actor(request.headers.get(ACTOR_HEADER))
        if actor is None:
            current_app.logger.info("Rejected request to %s: no valid actor", request.path)
            return jsonify({"error": "Authentication required", "code": "Unauthenticated"}), 401

        g.actor = actor
        return f(*args, **kwargs)

    return decorated_function
