"""Print the live columns of the ``test_attempts`` table and a sample row."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from frailearn.models.testing.test_attempt_model import TestAttempt
from frailearn.services import diagnostics_service
from frailearn.utils.script_utils import add_database_argument, open_session

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect the test_attempts table")
    parser.add_argument(
        "--column",
        action="append",
        dest="columns",
        default=None,
        help="Only show these columns (repeatable). Default: every column.",
    )
    add_database_argument(parser)
    args = parser.parse_args(argv)

    try:
        with open_session(args.database_url) as db:
            columns = diagnostics_service.table_columns(db)
            if args.columns:
                columns = [column for column in columns if column.name in args.columns]

            print(f"📊 Database schema for {TestAttempt.__tablename__}:")
            for column in columns:
                print(f"   {column.name}: {column.type} (nullable: {column.nullable}, default: {column.default})")

            count = diagnostics_service.count_test_attempts(db)
            print(f"\n📈 Total test attempts in database: {count}")
            if count:
                sample = db.query(TestAttempt).order_by(TestAttempt.id.asc()).first()
                print("\n📝 Sample record:")
                print(f"   ID: {sample.id}")
                print(f"   Created At: {sample.created_at}")
                print(f"   Completed At: {sample.completed_at}")
    except Exception as exc:
        logger.error("❌ Erreur: %s", exc, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
