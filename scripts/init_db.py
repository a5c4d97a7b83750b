from __future__ import annotations

import argparse
import logging
from decimal import Decimal
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from lotsettle.db.engine import get_sessionmaker, make_engine
from lotsettle.models import Base, PrizeConfiguration
from lotsettle.workflows import record_prize_configuration

logger = logging.getLogger("lotsettle.init_db")

# Multipliers in use when the sales system went live
DEFAULT_MULTIPLIERS = {
    "standard": Decimal("450"),
    "rambolito_unique": Decimal("75"),
    "rambolito_double": Decimal("150"),
}


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to ``target_revision``."""
    project_root = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def missing_tables() -> list[str]:
    """Return model tables absent from the configured database."""
    engine = make_engine()
    present = set(inspect(engine).get_table_names())
    return sorted(set(Base.metadata.tables) - present)


def ensure_prize_configuration() -> bool:
    """Record the default multipliers when none exist. Returns True if added."""
    Session = get_sessionmaker(make_engine())
    with Session.begin() as session:
        if PrizeConfiguration.latest(session) is not None:
            return False
        record_prize_configuration(session, created_by="init_db", **DEFAULT_MULTIPLIERS)
        return True


def main() -> None:
    """Apply migrations and report the resulting schema."""
    parser = argparse.ArgumentParser(description="Initialise the settlement database.")
    parser.add_argument("--revision", default="head", help="Alembic target revision")
    parser.add_argument(
        "--with-default-prizes",
        action="store_true",
        help="Record the default prize multipliers if none are configured",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    upgrade_db(args.revision)
    missing = missing_tables()
    if missing:
        logger.warning("Tables not yet created: %s", ", ".join(missing))
    else:
        logger.info("All %d tables present", len(Base.metadata.tables))

    if args.with_default_prizes and not missing:
        if ensure_prize_configuration():
            logger.info("Recorded default prize configuration")


if __name__ == "__main__":
    main()
