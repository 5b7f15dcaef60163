from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable

import structlog
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import InvalidCredentials, UserNotFound, UserRegistrationFailed
from ..tokens.model import AuthTokens
from ..tokens.service import TokenService
from .model import Registration, User
from .repository import UserRepository

logger = structlog.get_logger(__name__)


class AuthService:
    """Use case: register, authenticate and manage sessions."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        *,
        hash_password: Callable[[str], str] = generate_password_hash,
        check_password: Callable[[str, str], bool] = check_password_hash,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._users = users
        self._tokens = tokens
        self._hash_password = hash_password
        self._check_password = check_password
        self._clock = clock

    def register(self, data: Registration) -> AuthTokens:
        email = require_email(data.email, error=UserRegistrationFailed)
        username = (data.username or "").strip() or email
        require_min_length(data.password, "Password", MIN_PASSWORD_LENGTH, error=UserRegistrationFailed)

        if self._users.get_by_email(email):
            raise UserRegistrationFailed("A user with this email already exists.")
        if data.password != data.confirm_password:
            raise UserRegistrationFailed("Passwords do not match.")

        user = User(
            user_id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=self._hash_password(data.password),
            first_name=(data.first_name or "").strip(),
            last_name=(data.last_name or "").strip(),
            employee_id=data.employee_id,
            roles=(Role.USER,),
            created_at=self._clock(),
        )
        self._users.add(user)
        logger.info("user_registered", user_id=user.user_id)
        return self._tokens.issue(user)

    def login(self, email: str, password: str) -> AuthTokens:
        email = require_non_empty(email, "Email", error=InvalidCredentials).lower()
        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            logger.warning("login_failed", reason="unknown_or_inactive")
            raise InvalidCredentials()

        try:
            ok = self._check_password(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            logger.warning("login_failed", user_id=user.user_id, reason="bad_password")
            raise InvalidCredentials()

        user = replace(user, last_login_at=self._clock())
        self._users.update(user)
        logger.info("user_logged_in", user_id=user.user_id)
        return self._tokens.issue(user)

    def refresh(self, access_token: str, refresh_token: str) -> AuthTokens:
        return self._tokens.rotate(access_token, refresh_token)

    def revoke(self, refresh_token: str) -> None:
        self._tokens.revoke(refresh_token)

    def logout(self, user_id: str) -> int:
        return self._tokens.revoke_all(user_id)

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(str(user_id))
        if not user:
            raise UserNotFound(str(user_id))
        return user
