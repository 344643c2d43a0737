"""
Run a file import from CLI.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from app.config import get_import_settings
from app.logging_utils import configure_logging
from app.services.import_service import IMPORTERS, ImportService
from app.storage.columns import column_keys


def _serialize(item: Any) -> dict[str, Any]:
    return {key: getattr(item, key) for key in column_keys(type(item))}


def main() -> int:
    parser = argparse.ArgumentParser(description="Import records from CSV or XLSX files.")
    parser.add_argument(
        "record_type",
        choices=sorted(IMPORTERS),
        help="Record type to import.",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="One or more .csv/.xlsx files; all are deduplicated together.",
    )
    parser.add_argument(
        "--show-items",
        action="store_true",
        help="Include every inserted record in the output.",
    )
    args = parser.parse_args()

    configure_logging(get_import_settings().log_level)
    summary = ImportService().import_files(args.record_type, args.files)

    payload: dict[str, Any] = {
        "record_type": summary.record_type,
        "files": list(summary.files),
        "rows_read": summary.rows_read,
        "rows_inserted": summary.rows_inserted,
        "rows_skipped": summary.rows_skipped,
    }
    if args.show_items:
        payload["items"] = [_serialize(item) for item in summary.items]
    print(json.dumps(payload, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
