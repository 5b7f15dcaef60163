from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.exceptions import InvalidRefreshToken
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_duplicate
from .model import RefreshToken
from .repository import RefreshTokenRepository

_COLUMNS = "token, user_id, created_at, expires_at, revoked_at, reason_revoked, replaced_by_token"


def _to_token(r: Dict[str, Any]) -> RefreshToken:
    return RefreshToken(
        token=r["token"],
        user_id=str(r["user_id"]),
        created_at=r["created_at"],
        expires_at=r["expires_at"],
        revoked_at=r.get("revoked_at"),
        reason_revoked=r.get("reason_revoked"),
        replaced_by_token=r.get("replaced_by_token"),
    )


class MySQLRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_token(self, token: str) -> Optional[RefreshToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM refresh_tokens WHERE token=%s", (token,))
            r = fetchone(cur)
            return _to_token(r) if r else None

    def list_active_for_user(self, user_id: str, *, now: datetime) -> Sequence[RefreshToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM refresh_tokens
                WHERE user_id=%s AND revoked_at IS NULL AND expires_at>%s
                ORDER BY created_at ASC
                """,
                (str(user_id), now),
            )
            return [_to_token(r) for r in fetchall(cur)]

    def add(self, token: RefreshToken) -> None:
        with translate_duplicate(lambda: InvalidRefreshToken("Refresh token collision.")):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO refresh_tokens({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s)",
                    (
                        token.token,
                        token.user_id,
                        token.created_at,
                        token.expires_at,
                        token.revoked_at,
                        token.reason_revoked,
                        token.replaced_by_token,
                    ),
                )

    def revoke(self, token: str, *, revoked_at: datetime, reason: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE refresh_tokens SET revoked_at=%s, reason_revoked=%s WHERE token=%s AND revoked_at IS NULL",
                (revoked_at, reason, token),
            )
            return cur.rowcount > 0

    def set_replaced_by(self, token: str, replaced_by: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE refresh_tokens SET replaced_by_token=%s WHERE token=%s", (replaced_by, token))
            return cur.rowcount > 0

    def delete_expired(self, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM refresh_tokens WHERE expires_at<=%s", (now,))
            return int(cur.rowcount)
