#!/usr/bin/env python3
"""Dump the SQLite database, or one fiscal year as a JSON snapshot."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lpjdesa.config import SessionLocal  # noqa: E402
from lpjdesa.services.backup import export_year_snapshot, perform_sqlite_backup  # noqa: E402
from lpjdesa.services.record_store import RecordStore  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Back up the LPJ database.")
    parser.add_argument("--year", type=int, default=None, help="Write a JSON snapshot of this fiscal year instead")
    parser.add_argument("--output", default=None, help="Snapshot file path (with --year)")
    args = parser.parse_args()

    if args.year is None:
        backup_path = perform_sqlite_backup()
        if backup_path:
            print(f"SQLite backup created at {backup_path}")
        else:
            print("No SQLite backup created (non-SQLite database or file missing).")
        return

    with SessionLocal() as session:
        snapshot = export_year_snapshot(RecordStore(session), args.year)
    output = Path(args.output or f"backup_lpj_{args.year}.json")
    output.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Snapshot of {args.year} written to {output} ({snapshot['_meta']['total_records']} records)")


if __name__ == "__main__":
    main()
