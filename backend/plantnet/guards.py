"""Request interceptors guarding routes.

An interceptor is a zero-argument callable run before a view. It either
returns a response, which ends the request, or ``None`` to hand over to the
next interceptor and finally the view itself.
"""

from functools import wraps
from typing import Callable, Optional

from flask import current_app, g, request

from .context import get_context
from .documents import normalize_email
from .errors import Forbidden, Unauthorized
from .tokens import verify_token

Interceptor = Callable[[], Optional[object]]


def guarded(*interceptors: Interceptor):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            for interceptor in interceptors:
                response = interceptor()
                if response is not None:
                    return response
            return view(*args, **kwargs)

        return wrapper

    return decorator


def require_session():
    cookie_name = get_context().settings.token_cookie_name
    token = request.cookies.get(cookie_name)
    if not token:
        return Unauthorized().to_response()

    try:
        identity = verify_token(token)
    except Unauthorized as exc:
        current_app.logger.warning("Rejected session token on %s: %s", request.path, exc)
        return Unauthorized().to_response()

    g.identity = identity
    return None


class RoleGate:
    """Lets the request through only when the stored role equals ``required_role``."""

    def __init__(self, required_role: str):
        self.required_role = required_role

    def __call__(self):
        identity = g.get("identity")
        if not identity:
            return Unauthorized().to_response()

        email = normalize_email(identity.get("email"))
        user = get_context().users.find_one({"email": email})
        if not user or user.get("role") != self.required_role:
            return Forbidden(
                f"Forbidden access! {self.required_role.capitalize()} only actions!"
            ).to_response()

        g.current_user = user
        return None

    def __repr__(self):
        return f"RoleGate({self.required_role!r})"


require_admin = RoleGate("admin")
require_seller = RoleGate("seller")


def current_email() -> str:
    identity = g.get("identity") or {}
    return normalize_email(identity.get("email"))
