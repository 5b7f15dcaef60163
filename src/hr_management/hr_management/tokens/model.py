from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..users.model import User


@dataclass(frozen=True)
class RefreshToken:
    """Opaque refresh token plus its revocation trail.

    ``replaced_by_token`` links a rotated token to its successor.
    """

    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime
    revoked_at: Optional[datetime] = None
    reason_revoked: Optional[str] = None
    replaced_by_token: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_active(self, now: datetime) -> bool:
        return self.revoked_at is None and not self.is_expired(now)


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthTokens:
    """What a successful login/register/refresh hands back to the client."""

    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    user: User
