"""
Import an EMA medicines CSV report from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from app.config import get_log_level
from app.errors import CSVParseError, CSVReadError
from app.services.medicine_import_service import get_medicine_import_service
from db.session import create_schema, get_engine, get_session_factory


def main() -> int:
    parser = argparse.ArgumentParser(description="Import an EMA medicines CSV report.")
    parser.add_argument(
        "--csv-path",
        dest="csv_path",
        default="medicines.csv",
        help="Path to the CSV report (default: medicines.csv).",
    )
    parser.add_argument(
        "--create-schema",
        dest="create_schema",
        action="store_true",
        help="Create missing tables before importing (local SQLite files).",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.create_schema:
        create_schema(get_engine())

    service = get_medicine_import_service()
    try:
        outcome = service.import_file(args.csv_path, session_factory=get_session_factory())
    except (CSVReadError, CSVParseError) as exc:
        print(f"Import failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(outcome.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
