from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_management.hr_management.common.logging import setup_logging
from src.hr_management.hr_management.database.bootstrap import bootstrap_identity
from src.hr_management.hr_management.database.connection import DBConfig, DatabaseConnection
from src.hr_management.hr_management.users.mysql_user_repository import MySQLUserRepository


def main() -> None:
    load_dotenv(override=False)
    setup_logging(json=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    email = getattr(settings, "DEFAULT_ADMIN_EMAIL", "")
    password = getattr(settings, "DEFAULT_ADMIN_PASSWORD", "")
    if not email or not password:
        raise SystemExit("DEFAULT_ADMIN_EMAIL and DEFAULT_ADMIN_PASSWORD must be set.")

    users = MySQLUserRepository(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    created = bootstrap_identity(users, admin_email=email, admin_password=password)
    print(f"OK: Administrator {email} {'created' if created else 'already present'}")


if __name__ == "__main__":
    main()
