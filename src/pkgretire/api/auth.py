"""
Requester extraction.

Authentication happens upstream (gateway / session middleware), which
forwards the caller's login and how they authenticated:

    X-Authenticated-User: <login>
    X-Auth-Method: cookie | token

Deleting a crate is only allowed from an interactive (cookie) session.
"""

from __future__ import annotations

from fastapi import Request

from pkgretire.core.errors import ForbiddenError, UnauthenticatedError
from pkgretire.domain.package import AuthMethod, Requester
from pkgretire.infrastructure.stores.crate_store import SqlAlchemyCrateStore
from pkgretire.infrastructure.stores.ownership import SqlAlchemyOwnershipResolver

USER_HEADER = "X-Authenticated-User"
METHOD_HEADER = "X-Auth-Method"

AUTH_REQUIRED_MESSAGE = "this action requires authentication"
WEBSITE_ONLY_MESSAGE = "this action can only be performed on the crates.io website"


def _container(request: Request):
    return request.app.state.container


def get_requester(request: Request) -> Requester:
    login = (request.headers.get(USER_HEADER) or "").strip()
    if not login:
        raise UnauthenticatedError(message=AUTH_REQUIRED_MESSAGE)

    raw_method = (request.headers.get(METHOD_HEADER) or AuthMethod.COOKIE.value).strip().lower()
    try:
        method = AuthMethod(raw_method)
    except ValueError:
        raise UnauthenticatedError(message=AUTH_REQUIRED_MESSAGE) from None

    container = _container(request)
    store = container.resolve(SqlAlchemyCrateStore)
    resolver = container.resolve(SqlAlchemyOwnershipResolver)
    with store.provider.session() as session:
        user_id = resolver.user_id_for(session, login)
    if user_id is None:
        raise UnauthenticatedError(message=AUTH_REQUIRED_MESSAGE)

    return Requester(user_id=user_id, login=login, auth_method=method)


def require_session(request: Request) -> Requester:
    """Requester that authenticated with a browser session, not an API token."""
    requester = get_requester(request)
    if not requester.via_session:
        raise ForbiddenError(message=WEBSITE_ONLY_MESSAGE)
    return requester
