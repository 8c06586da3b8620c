"""
Schema Migrations
=================
Applies the numbered ``migrations/NNN_name.sql`` files to PostgreSQL, once
each, recording them in ``_migrations``. Stops at the first failure.
"""

import hashlib
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Set

import psycopg2
from psycopg2.extras import RealDictCursor

from bagshare import config

logger = logging.getLogger(__name__)

MIGRATION_FILE_PATTERN = re.compile(r"^\d+_.*\.sql$")
DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def checksum(content: str) -> str:
    return hashlib.sha256(content.encode()).hexdigest()


def pending_migrations(migrations_dir: Path, executed: Set[str]) -> List[Path]:
    """Numbered .sql files not yet executed, in filename order."""
    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return []
    files = [
        f for f in migrations_dir.glob("*.sql")
        if MIGRATION_FILE_PATTERN.match(f.name) and f.name not in executed
    ]
    return sorted(files, key=lambda f: f.name)


def ensure_migrations_table(conn) -> None:
    with conn.cursor() as cur:
        cur.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id SERIAL PRIMARY KEY,
                filename VARCHAR(255) UNIQUE NOT NULL,
                executed_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
                checksum VARCHAR(64),
                success BOOLEAN DEFAULT true,
                error_message TEXT
            )
        """)
    conn.commit()


def executed_migrations(conn) -> Set[str]:
    with conn.cursor(cursor_factory=RealDictCursor) as cur:
        cur.execute("SELECT filename FROM _migrations WHERE success = true")
        return {row["filename"] for row in cur.fetchall()}


def _record(conn, filename: str, digest: str, error: Optional[str]) -> None:
    with conn.cursor() as cur:
        cur.execute("""
            INSERT INTO _migrations (filename, checksum, success, error_message)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (filename) DO UPDATE SET
                executed_at = NOW(),
                checksum = EXCLUDED.checksum,
                success = EXCLUDED.success,
                error_message = EXCLUDED.error_message
        """, (filename, digest, error is None, error))
    conn.commit()


def apply_migration(conn, migration_file: Path) -> bool:
    logger.info(f"Running migration: {migration_file.name}")
    content = migration_file.read_text()
    digest = checksum(content)
    try:
        with conn.cursor() as cur:
            cur.execute(content)
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        logger.error(f"Migration {migration_file.name} failed: {e}")
        _record(conn, migration_file.name, digest, str(e))
        return False

    _record(conn, migration_file.name, digest, None)
    logger.info(f"Migration {migration_file.name} completed")
    return True


def run_pending_migrations(
    database_url: Optional[str] = None,
    migrations_dir: Optional[Path] = None,
) -> Dict:
    """Apply every pending migration. Returns executed/failed/skipped counts."""
    mig_path = migrations_dir or DEFAULT_MIGRATIONS_DIR
    result = {"success": True, "executed": 0, "failed": 0, "skipped": 0, "errors": []}

    conn = psycopg2.connect(database_url or config.DATABASE_URL)
    try:
        ensure_migrations_table(conn)
        pending = pending_migrations(mig_path, executed_migrations(conn))
        logger.info(f"Pending migrations: {len(pending)}")

        for migration_file in pending:
            if apply_migration(conn, migration_file):
                result["executed"] += 1
                continue
            result["failed"] += 1
            result["success"] = False
            result["errors"].append(f"Failed: {migration_file.name}")
            break

        result["skipped"] = len(pending) - result["executed"] - result["failed"]
    finally:
        conn.close()

    logger.info(
        f"Migration summary: {result['executed']} executed, "
        f"{result['failed']} failed, {result['skipped']} skipped"
    )
    return result
