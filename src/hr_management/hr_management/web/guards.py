from __future__ import annotations

from functools import wraps
from typing import Iterable

import jwt
from flask import g, request

from ..core.constants import SERVICE_ACCOUNT
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..tokens.jwt_issuer import JwtIssuer


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Missing bearer token.")
    return token.strip()


def token_required(issuer: JwtIssuer, roles: Iterable[Role] = ()):
    """Reject the request unless it carries a valid access token.

    On success ``g.current_user_id`` and ``g.current_roles`` are set. When
    ``roles`` is given the token must hold at least one of them.
    """

    required = {Role(r).value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                claims = issuer.decode(bearer_token())
            except jwt.InvalidTokenError as exc:
                raise AuthenticationError("Invalid or expired access token.") from exc

            g.current_user_id = str(claims.get("sub") or "")
            g.current_user_email = claims.get("email")
            g.current_roles = tuple(claims.get("roles") or ())
            if not g.current_user_id:
                raise AuthenticationError("Invalid or expired access token.")
            if required and not required.intersection(g.current_roles):
                raise AuthorizationError("You do not have permission to perform this action.")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_actor() -> str:
    return getattr(g, "current_user_email", None) or getattr(g, "current_user_id", None) or SERVICE_ACCOUNT
