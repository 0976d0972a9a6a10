from __future__ import annotations

import argparse
import importlib
import logging

from config import get_settings_module

from care_roster.database.bootstrap import apply_schema, apply_seed_sql, list_tables
from care_roster.logging_config import setup_logging

logger = logging.getLogger("care_roster.scripts.init_db")


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply the care-roster schema to the configured MySQL database.")
    parser.add_argument("--seed", action="store_true", help="also load the demo company and workers")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    if args.seed:
        apply_seed_sql(db_config)

    tables = list_tables(db_config)
    logger.info(
        "database_ready",
        extra={
            "target": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
            "tables": len(tables),
        },
    )


if __name__ == "__main__":
    main()
