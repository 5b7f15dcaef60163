from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import RefreshToken


class RefreshTokenRepository(Protocol):
    def get_by_token(self, token: str) -> Optional[RefreshToken]:
        raise NotImplementedError

    def list_active_for_user(self, user_id: str, *, now: datetime) -> Sequence[RefreshToken]:
        raise NotImplementedError

    def add(self, token: RefreshToken) -> None:
        raise NotImplementedError

    def revoke(self, token: str, *, revoked_at: datetime, reason: str) -> bool:
        """Mark the token revoked; ``False`` if it was already revoked or is unknown."""

        raise NotImplementedError

    def set_replaced_by(self, token: str, replaced_by: str) -> bool:
        raise NotImplementedError

    def delete_expired(self, *, now: datetime) -> int:
        raise NotImplementedError
