"""Route guard protecting the catalog admin API."""

from litestar.connection import ASGIConnection
from litestar.exceptions import NotAuthorizedException
from litestar.handlers.base import BaseRouteHandler

from vitrine.auth.tokens import verify_admin_token


def admin_guard(connection: ASGIConnection, _: BaseRouteHandler) -> None:
    """Require a valid ``Authorization: Bearer <admin token>`` header.

    Skipped entirely when ``app.state.auth_enabled`` is false.
    """
    state = connection.app.state
    if not getattr(state, "auth_enabled", True):
        return

    header = connection.headers.get("authorization", "")
    if not header.startswith("Bearer "):
        raise NotAuthorizedException("Token not provided")

    if verify_admin_token(header[len("Bearer "):], state.secret_key) is None:
        raise NotAuthorizedException("Invalid token")

