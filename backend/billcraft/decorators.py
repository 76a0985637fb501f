# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, request, jsonify, g

from .services import session_service
from .storage import DEMO_ACCOUNT_ID


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require authentication and establish the account context.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User (None for demo requests)
    - g.account_id: owner_id for every storage call in the request
    - g.session_context: The SessionContext (None for demo requests)

    DEMO MODE: requests without a token act as the demo account. A token
    that is present but invalid is still rejected.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()

        if token is None:
            if current_app.config.get("DEMO_MODE"):
                g.current_user = None
                g.account_id = DEMO_ACCOUNT_ID
                g.session_context = None
                return f(*args, **kwargs)
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.account_id = context.account_id
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_user(f):
    """Like require_auth but a real signed-in user is mandatory (no demo fallback)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if getattr(g, "current_user", None) is None:
            return jsonify({"error": "Authentication required"}), 401
        return f(*args, **kwargs)
    return decorated_function
