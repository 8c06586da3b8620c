#!/usr/bin/env python3
"""
Bagshare Migration Runner
=========================
Applies pending SQL migrations from ./migrations.

Usage:
    DATABASE_URL=postgresql://... python scripts/run_migrations.py
    python scripts/run_migrations.py --dir migrations --dry-run
"""

import argparse
import logging
import sys
from pathlib import Path

import psycopg2

from bagshare.store.migrations import (
    DEFAULT_MIGRATIONS_DIR,
    ensure_migrations_table,
    executed_migrations,
    pending_migrations,
    run_pending_migrations,
)
from bagshare import config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)


def main():
    parser = argparse.ArgumentParser(description="Run database migrations")
    parser.add_argument("--dir", "-d", help="Migrations directory path")
    parser.add_argument("--dry-run", action="store_true", help="Show pending migrations without running")
    args = parser.parse_args()

    if not config.DATABASE_URL:
        print("DATABASE_URL is not set")
        sys.exit(1)

    mig_path = Path(args.dir) if args.dir else DEFAULT_MIGRATIONS_DIR

    if args.dry_run:
        conn = psycopg2.connect(config.DATABASE_URL)
        try:
            ensure_migrations_table(conn)
            executed = executed_migrations(conn)
            pending = pending_migrations(mig_path, executed)
        finally:
            conn.close()

        print(f"\nExecuted migrations: {len(executed)}")
        for name in sorted(executed):
            print(f"  ✓ {name}")
        print(f"\nPending migrations: {len(pending)}")
        for path in pending:
            print(f"  ○ {path.name}")
        return

    result = run_pending_migrations(config.DATABASE_URL, mig_path)
    sys.exit(0 if result["success"] else 1)


if __name__ == "__main__":
    main()
