import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from mediabox.core.database import DATABASE_URL

logger = logging.getLogger("mediabox")

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"
CORE_TABLES = ("users", "media_boxes", "media_contents")


def alembic_config(url: str) -> Config:
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    # keep the application's logging setup when run in-process
    cfg.attributes["configure_logger"] = False
    return cfg


def main(url: str = DATABASE_URL) -> None:
    """Bring the schema to head; databases built by ``create_all`` are stamped first."""
    engine = create_engine(url)
    try:
        insp = inspect(engine)
        has_alembic = insp.has_table("alembic_version")
        existing_core_tables = any(insp.has_table(t) for t in CORE_TABLES)
    finally:
        engine.dispose()

    cfg = alembic_config(url)
    if existing_core_tables and not has_alembic:
        logger.info("db-migrate: existing tables without alembic_version, stamping head")
        command.stamp(cfg, "head")
    else:
        logger.info("db-migrate: has_alembic=%s existing_core_tables=%s", has_alembic, existing_core_tables)

    command.upgrade(cfg, "head")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        main()
    except Exception as e:
        logger.error("db-migrate failed: %s", e)
        sys.exit(1)
