"""
Entry point for the pouet_sync component.
"""

import argparse
import asyncio
import json
import logging
import sys

from tqdm.contrib.logging import logging_redirect_tqdm

from .api import check_version, gen_csv, sql_query
from .application.exceptions import PouetSyncError
from .infrastructure.progress import TqdmProgress
from .settings import settings

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level)


async def run_application(args: argparse.Namespace):
    """Runs the query (or the staleness probe) requested on the command line."""

    setup_logging(level=args.log_level or settings.get("logging.level", "INFO"))

    try:
        if args.check:
            stale = await check_version(args.db)
            print("stale" if stale else "up to date")
            return

        with logging_redirect_tqdm(), TqdmProgress() as progress:
            rows = await sql_query(
                args.sql, args.db, progress, cache=False if args.no_cache else None
            )
    except PouetSyncError as e:
        logger.error(f"An application error occurred: {e}")
        sys.exit(1)

    if args.csv:
        gen_csv(rows, args.csv)
    else:
        for row in rows:
            print(json.dumps(row, ensure_ascii=False))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Query the pouet.net data dumps")

    parser.add_argument(
        "sql",
        nargs="?",
        default="SELECT * FROM version;",
        help="The SQL statement to run, e.g. 'SELECT id, name FROM prod;'",
    )

    parser.add_argument(
        "--db",
        default=None,
        help="Database file, or ':memory:'. Defaults to pouet.database.",
    )

    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore existing snapshots and download every dump.",
    )

    parser.add_argument(
        "--csv",
        default=None,
        help="Write the rows to this CSV file instead of printing them.",
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report whether the database is stale.",
    )

    parser.add_argument("--log-level", default=None)

    cli_args = parser.parse_args()

    asyncio.run(run_application(cli_args))
