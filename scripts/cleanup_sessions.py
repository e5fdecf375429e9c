"""Deactivate every session whose expiry has passed.

Meant for cron; attendance validation never depends on this having run.
"""

from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.geo_attendance.geo_attendance.common.logging_setup import configure_logging
from src.geo_attendance.geo_attendance.container import build_container
from src.geo_attendance.geo_attendance.core.exceptions import InfrastructureError


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logger = configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", "") or None)

    container = build_container(db_config=dict(settings.DB_CONFIG))
    try:
        count = container.session_service.cleanup_expired()
    except InfrastructureError as e:
        logger.error("Cleanup failed: %s", e)
        return 1

    logger.info("Cleanup finished: %d session(s) deactivated", count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
