from __future__ import annotations

import importlib
import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from config import get_settings_module

from attendance_portal.common.logger import setup_logger
from attendance_portal.database.bootstrap import DEMO_EMPLOYEES, ensure_demo_users


def main() -> None:
    logger = setup_logger()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)
    for employee_id, *_rest in DEMO_EMPLOYEES:
        logger.info("demo account ready: %s", employee_id)


if __name__ == "__main__":
    main()
