from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from .common.app_logger import setup_logging
from .common.datetime_utils import parse_hhmm
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_container() -> Container:
    """Load settings for APP_ENV, configure logging and wire the services."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    db_config = getattr(settings, "DB_CONFIG")

    setup_logging(getattr(settings, "LOG_LEVEL", None))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    return build_container(
        db_config=db_config,
        employee_service_url=getattr(settings, "EMPLOYEE_SERVICE_URL"),
        employee_service_timeout=float(getattr(settings, "EMPLOYEE_SERVICE_TIMEOUT", 5.0)),
        employee_service_token=getattr(settings, "EMPLOYEE_SERVICE_TOKEN", None),
        work_start=parse_hhmm(getattr(settings, "WORK_START_TIME", "09:00")),
        grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", 0)),
    )
