from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_management.hr_management.common.logging import setup_logging
from src.hr_management.hr_management.main import load_settings
from src.hr_management.hr_management.container import build_container


def main() -> None:
    load_dotenv(override=False)
    settings = load_settings(get_settings_module())
    setup_logging(settings.get("LOG_LEVEL", "INFO"), json=bool(settings.get("LOG_JSON", True)))

    container = build_container(db_config=dict(settings["DB_CONFIG"]), settings=settings)
    deleted = container.token_service.sweep()
    print(f"OK: Deleted {deleted} expired refresh token(s)")


if __name__ == "__main__":
    main()
