#!/usr/bin/env python3
"""Apply migrations, then serve the API with auto-reload.

Usage:
    python scripts/start_dev.py [--port 8000] [--skip-migrations]
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import uvicorn  # noqa: E402
from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402

DEFAULT_PORT = int(os.environ.get("LPJ_API_PORT", "8000"))


def upgrade_database() -> None:
    print("[launcher] applying database migrations...")
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "lpjdesa" / "migrations"))
    command.upgrade(config, "head")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the LPJ Desa API for local development.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--skip-migrations", action="store_true")
    args = parser.parse_args()

    if not args.skip_migrations:
        upgrade_database()

    print(f"[launcher] api on http://{args.host}:{args.port} (Ctrl+C to stop)")
    uvicorn.run(
        "lpjdesa.main:app",
        host=args.host,
        port=args.port,
        reload=True,
        reload_dirs=[str(ROOT / "lpjdesa")],
        log_level="info",
    )


if __name__ == "__main__":
    main()
