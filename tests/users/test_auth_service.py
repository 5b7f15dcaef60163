from __future__ import annotations

from datetime import timedelta

import pytest

from src.hr_management.hr_management.core.constants import REASON_LOGOUT
from src.hr_management.hr_management.core.enums import Role
from src.hr_management.hr_management.core.exceptions import (
    ConfigurationError,
    InvalidCredentials,
    UserNotFound,
    UserRegistrationFailed,
)
from src.hr_management.hr_management.database.bootstrap import bootstrap_identity
from src.hr_management.hr_management.users.model import Registration


@pytest.fixture
def auth(container):
    return container.auth_service


def _registration(**overrides):
    data = dict(
        username="",
        email="Alice@Example.com",
        password="secret1",
        confirm_password="secret1",
        first_name="Alice",
        last_name="Smith",
    )
    data.update(overrides)
    return Registration(**data)


def test_register_creates_user_with_default_role(auth, users_repo):
    tokens = auth.register(_registration())

    stored = users_repo.get_by_email("alice@example.com")
    assert stored is not None
    assert stored.username == "alice@example.com"
    assert stored.roles == (Role.USER,)
    assert stored.password_hash != "secret1"
    assert tokens.user.user_id == stored.user_id


def test_register_rejects_duplicate_email(auth):
    auth.register(_registration())

    with pytest.raises(UserRegistrationFailed):
        auth.register(_registration(email="alice@example.com"))


def test_register_requires_matching_passwords(auth):
    with pytest.raises(UserRegistrationFailed):
        auth.register(_registration(confirm_password="secret2"))


def test_register_enforces_min_password_length(auth):
    with pytest.raises(UserRegistrationFailed):
        auth.register(_registration(password="abc", confirm_password="abc"))


def test_login_updates_last_login(auth, users_repo, clock):
    auth.register(_registration())
    clock.now = clock.now + timedelta(hours=1)

    tokens = auth.login("ALICE@example.com", "secret1")

    assert tokens.user.last_login_at == clock.now
    assert users_repo.get_by_email("alice@example.com").last_login_at == clock.now


def test_login_with_wrong_password(auth):
    auth.register(_registration())

    with pytest.raises(InvalidCredentials):
        auth.login("alice@example.com", "wrong-password")


def test_login_unknown_email(auth):
    with pytest.raises(InvalidCredentials):
        auth.login("nobody@example.com", "secret1")


def test_logout_revokes_every_session(auth, tokens_repo):
    auth.register(_registration())
    tokens = auth.login("alice@example.com", "secret1")

    assert auth.logout(tokens.user.user_id) == 2
    assert {t.reason_revoked for t in tokens_repo.items.values()} == {REASON_LOGOUT}


def test_get_user_unknown(auth):
    with pytest.raises(UserNotFound):
        auth.get_user("missing")


def test_bootstrap_identity_is_idempotent(users_repo, fixed_now):
    assert bootstrap_identity(users_repo, admin_email="Admin@HR.local", admin_password="Admin@123", clock=lambda: fixed_now)
    assert not bootstrap_identity(users_repo, admin_email="admin@hr.local", admin_password="Admin@123")

    admin = users_repo.get_by_email("admin@hr.local")
    assert Role.ADMIN in admin.roles
    assert admin.created_at == fixed_now


@pytest.mark.parametrize("password", ["", "12345"])
def test_bootstrap_identity_refuses_short_password(users_repo, password):
    with pytest.raises(ConfigurationError):
        bootstrap_identity(users_repo, admin_email="admin@hr.local", admin_password=password)

    assert users_repo.get_by_email("admin@hr.local") is None
