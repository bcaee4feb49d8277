"""Minimal forward-only SQL migration runner for the audit log schema.

usage: python -m dnstoggle.infrastructure.db.migrate [up|status]
"""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path

import psycopg

from dnstoggle.settings import get_settings

_DEFAULT_DIR = Path(__file__).resolve().parents[3] / "migrations"
MIGRATIONS_DIR = Path(os.environ.get("MIGRATIONS_DIR", _DEFAULT_DIR))
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""


def log(msg: str) -> None:
    print(msg, flush=True)


def list_migrations(directory: Path = MIGRATIONS_DIR) -> list[Path]:
    if not directory.exists():
        raise FileNotFoundError(f"migrations dir not found: {directory}")
    return sorted(directory.glob("*.sql"))


def applied_versions(conn: psycopg.Connection) -> set[str]:
    with conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute("SELECT version FROM schema_migrations ORDER BY version;")
        rows = cur.fetchall()
    return {r[0] for r in rows}


def apply_one(conn: psycopg.Connection, path: Path) -> None:
    version = path.stem
    log(f"==> applying {version}")
    with conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version, applied_at) VALUES (%s, now());",
            (version,),
        )
    conn.commit()
    log(f"applied {version}")


def migrate_up(dsn: str, directory: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply pending migrations in order; returns the versions applied."""
    applied: list[str] = []
    with psycopg.connect(dsn, autocommit=False) as conn:
        done = applied_versions(conn)
        conn.commit()
        for path in list_migrations(directory):
            if path.stem in done:
                continue
            try:
                apply_one(conn, path)
            except psycopg.Error:
                conn.rollback()
                raise
            applied.append(path.stem)
    return applied


def cmd_up() -> int:
    try:
        applied = migrate_up(get_settings().database_url)
    except (psycopg.Error, FileNotFoundError) as e:
        print(f"migration failed: {e}", file=sys.stderr)
        return 1
    if not applied:
        log("No pending migrations.")
    return 0


def cmd_status() -> int:
    with psycopg.connect(get_settings().database_url) as conn, conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute(
            "SELECT version, applied_at FROM schema_migrations ORDER BY version;"
        )
        rows = cur.fetchall()
    seen = set()
    print("=== Applied ===")
    for v, at in rows:
        seen.add(v)
        print(f"{v} @ {at.isoformat() if isinstance(at, datetime) else at}")
    print("=== Pending ===")
    for path in list_migrations():
        if path.stem not in seen:
            print(path.stem)
    return 0


def main(argv: list[str]) -> int:
    if len(argv) < 2 or argv[1] not in ("up", "status"):
        print(
            "usage: python -m dnstoggle.infrastructure.db.migrate [up|status]",
            file=sys.stderr,
        )
        return 2
    return cmd_up() if argv[1] == "up" else cmd_status()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
