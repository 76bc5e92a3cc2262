#!/usr/bin/env python3
"""Render an LPJ report from the command line.

Usage:
    python scripts/export_report.py --year 2026 --format pdf
    python scripts/export_report.py --year 2026 --format docx --scope field --field "Pembangunan Desa"
    python scripts/export_report.py --year 2026 --bundle --activity 12
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lpjdesa.config import SessionLocal, settings  # noqa: E402
from lpjdesa.core.errors import LpjError  # noqa: E402
from lpjdesa.core.logging import configure_logging  # noqa: E402
from lpjdesa.documents.view import SCOPE_KINDS, ReportScope  # noqa: E402
from lpjdesa.services import documents  # noqa: E402
from lpjdesa.services.fiscal_years import Workspace  # noqa: E402
from lpjdesa.services.record_store import RecordStore  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Export an LPJ document.")
    parser.add_argument("--year", type=int, required=True, help="Fiscal year to report on")
    parser.add_argument("--format", choices=sorted(documents.RENDERERS), default="pdf")
    parser.add_argument("--scope", choices=SCOPE_KINDS, default="year")
    parser.add_argument("--activity", type=int, default=None, help="Activity id (scope=activity)")
    parser.add_argument("--field", default=None, help="Field name (scope=field)")
    parser.add_argument("--sub-field", type=int, default=None, help="Sub-field id (scope=sub_field)")
    parser.add_argument("--receipts", action="store_true", help="Export receipt vouchers instead")
    parser.add_argument("--worker-days", action="store_true", help="Export worker-day lists instead")
    parser.add_argument("--bundle", action="store_true", help="Export the letter bundle of --activity instead")
    parser.add_argument("--locale", choices=("id", "en"), default=None)
    parser.add_argument("--output-dir", default=settings.export_output_dir)
    args = parser.parse_args()

    configure_logging(settings.log_level, json_output=False)
    workspace = Workspace()
    with SessionLocal() as session:
        records = RecordStore(session)
        try:
            workspace.switch_year(records, args.year)
            if args.receipts:
                document = documents.export_receipts(workspace, records, locale=args.locale)
            elif args.worker_days:
                document = documents.export_worker_days(workspace, records, locale=args.locale)
            elif args.bundle:
                if args.activity is None:
                    parser.error("--bundle needs --activity")
                document = documents.export_activity_bundle(workspace, records, args.activity, locale=args.locale)
            else:
                scope = ReportScope(
                    kind=args.scope,
                    activity_id=args.activity,
                    field_name=args.field,
                    sub_field_id=args.sub_field,
                )
                document = documents.export_document(workspace, records, args.format, scope=scope, locale=args.locale)
        except LpjError as exc:
            raise SystemExit(f"Export failed: {exc.message}") from exc
    path = documents.write_document(document, args.output_dir)
    print(f"Wrote {path} ({document.size} bytes)")


if __name__ == "__main__":
    main()
