from __future__ import annotations

import base64
import secrets
from datetime import datetime, timedelta
from threading import Event
from typing import Callable, Optional

import jwt
import structlog

from ..common.cancellation import raise_if_cancelled
from ..common.datetime_utils import now_utc
from ..core.constants import (
    DEFAULT_REFRESH_TOKEN_DAYS,
    REASON_LOGOUT,
    REASON_REPLACED,
    REASON_REVOKED_BY_USER,
    REFRESH_TOKEN_BYTES,
)
from ..core.exceptions import InvalidRefreshToken, UserNotFound
from ..users.model import User
from ..users.repository import UserRepository
from .jwt_issuer import JwtIssuer
from .model import AuthTokens, RefreshToken
from .repository import RefreshTokenRepository

logger = structlog.get_logger(__name__)


def generate_refresh_token() -> str:
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


class TokenService:
    """Refresh-token store and rotation protocol.

    Every rejection surfaces as ``InvalidRefreshToken`` (or ``UserNotFound``
    when the token's subject is gone); nothing is retried internally.
    """

    def __init__(
        self,
        tokens: RefreshTokenRepository,
        users: UserRepository,
        issuer: JwtIssuer,
        *,
        refresh_token_days: int = DEFAULT_REFRESH_TOKEN_DAYS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._tokens = tokens
        self._users = users
        self._issuer = issuer
        self._refresh_ttl = timedelta(days=int(refresh_token_days))
        self._clock = clock

    def issue(self, user: User) -> AuthTokens:
        now = self._clock()
        access = self._issuer.mint(user)
        refresh = RefreshToken(
            token=generate_refresh_token(),
            user_id=user.user_id,
            created_at=now,
            expires_at=now + self._refresh_ttl,
        )
        self._tokens.add(refresh)
        logger.info("refresh_token_issued", user_id=user.user_id, expires_at=refresh.expires_at.isoformat())
        return AuthTokens(
            access_token=access.token,
            access_token_expires_at=access.expires_at,
            refresh_token=refresh.token,
            refresh_token_expires_at=refresh.expires_at,
            user=user,
        )

    def rotate(self, access_token: str, refresh_token: str, *, cancel: Optional[Event] = None) -> AuthTokens:
        try:
            claims = self._issuer.decode(access_token, verify_exp=False)
        except jwt.InvalidTokenError as exc:
            logger.warning("access_token_rejected", error=str(exc))
            raise InvalidRefreshToken("Invalid access token.") from exc

        user_id = claims.get("sub")
        if not user_id:
            raise InvalidRefreshToken("Invalid access token.")

        user = self._users.get_by_id(str(user_id))
        if not user or not user.is_active:
            raise UserNotFound(str(user_id))

        now = self._clock()
        stored = self._tokens.get_by_token(refresh_token)
        if not stored or not stored.is_active(now) or stored.user_id != user.user_id:
            logger.warning("refresh_token_rejected", user_id=user.user_id)
            raise InvalidRefreshToken()

        raise_if_cancelled(cancel, "token rotation")
        if not self._tokens.revoke(stored.token, revoked_at=now, reason=REASON_REPLACED):
            raise InvalidRefreshToken()

        raise_if_cancelled(cancel, "token rotation")
        issued = self.issue(user)

        raise_if_cancelled(cancel, "token rotation")
        self._tokens.set_replaced_by(stored.token, issued.refresh_token)

        logger.info("refresh_token_rotated", user_id=user.user_id)
        return issued

    def revoke(self, refresh_token: str, *, reason: str = REASON_REVOKED_BY_USER) -> None:
        now = self._clock()
        stored = self._tokens.get_by_token(refresh_token)
        if not stored or not stored.is_active(now):
            raise InvalidRefreshToken("Refresh token is invalid or already revoked.")

        if not self._tokens.revoke(stored.token, revoked_at=now, reason=reason):
            raise InvalidRefreshToken("Refresh token is invalid or already revoked.")
        logger.info("refresh_token_revoked", user_id=stored.user_id, reason=reason)

    def revoke_all(self, user_id: str, reason: str = REASON_LOGOUT, *, cancel: Optional[Event] = None) -> int:
        now = self._clock()
        revoked = 0
        for token in self._tokens.list_active_for_user(str(user_id), now=now):
            raise_if_cancelled(cancel, "token revocation")
            if self._tokens.revoke(token.token, revoked_at=now, reason=reason):
                revoked += 1

        logger.info("refresh_tokens_revoked", user_id=str(user_id), count=revoked, reason=reason)
        return revoked

    def sweep(self) -> int:
        """Delete tokens past their expiry, revoked or not."""

        deleted = self._tokens.delete_expired(now=self._clock())
        logger.info("expired_tokens_swept", count=deleted)
        return deleted
