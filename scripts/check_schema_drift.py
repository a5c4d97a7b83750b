from __future__ import annotations

import logging
import sys

from alembic.autogenerate import api as ag_api
from alembic.runtime.migration import MigrationContext

from lotsettle.db.engine import make_engine
from lotsettle.models import Base

logger = logging.getLogger("lotsettle.schema_drift")

# Exit codes consumed by CI
OK, DRIFT, ERROR = 0, 1, 2


def _describe(ops, depth: int = 0) -> list[str]:
    lines = []
    for op in ops:
        lines.append("  " * depth + f"- {op}")
        lines.extend(_describe(getattr(op, "ops", None) or [], depth + 1))
    return lines


def check(database_url: str | None = None) -> int:
    """Compare the settlement models with the live schema."""
    engine = make_engine(database_url)
    target = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as connection:
            context = MigrationContext.configure(
                connection=connection,
                opts={
                    "compare_type": True,
                    "compare_server_default": True,
                    "render_as_batch": connection.dialect.name == "sqlite",
                },
            )
            upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    except Exception:
        logger.exception("Schema drift check could not inspect %s", target)
        return ERROR

    if upgrade_ops is None:
        logger.error("Schema drift check produced no upgrade ops for %s", target)
        return ERROR
    if upgrade_ops.is_empty():
        logger.info("Schema drift check: %s matches the models", target)
        return OK
    logger.error(
        "Schema drift check: %s differs from the models:\n%s",
        target,
        "\n".join(_describe(upgrade_ops.ops or [])),
    )
    return DRIFT


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    return check(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    raise SystemExit(main())
