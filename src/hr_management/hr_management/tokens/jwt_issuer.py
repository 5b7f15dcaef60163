from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict

import jwt

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_ACCESS_TOKEN_MINUTES
from ..users.model import User
from .model import AccessToken

ALGORITHM = "HS256"


class JwtIssuer:
    """Mints and reads signed HS256 access tokens."""

    def __init__(
        self,
        *,
        secret: str,
        issuer: str,
        audience: str,
        access_token_minutes: int = DEFAULT_ACCESS_TOKEN_MINUTES,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._ttl = timedelta(minutes=int(access_token_minutes))
        self._clock = clock

    def mint(self, user: User) -> AccessToken:
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._ttl
        claims = {
            "sub": user.user_id,
            "name": user.username,
            "email": user.email,
            "roles": [role.value for role in user.roles],
            "jti": str(uuid.uuid4()),
            "iat": issued_at,
            "exp": expires_at,
            "iss": self._issuer,
            "aud": self._audience,
        }
        return AccessToken(token=jwt.encode(claims, self._secret, algorithm=ALGORITHM), expires_at=expires_at)

    def decode(self, token: str, *, verify_exp: bool = True) -> Dict[str, Any]:
        """Signature, issuer and audience are always checked.

        Raises ``jwt.InvalidTokenError`` (or a subclass) when the token is rejected.
        """

        return jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            audience=self._audience,
            issuer=self._issuer,
            options={"verify_exp": verify_exp},
        )
