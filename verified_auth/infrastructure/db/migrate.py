from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import psycopg

from verified_auth.logging import setup_logging
from verified_auth.settings import get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(
    os.environ.get(
        "MIGRATIONS_DIR", Path(__file__).resolve().parents[3] / "migrations"
    )
)
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""


def list_migrations(directory: Path | None = None) -> list[Path]:
    directory = directory or MIGRATIONS_DIR
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
    logger.info("applying migration", extra={"version": version})
    with conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version, applied_at) VALUES (%s, now());",
            (version,),
        )
    conn.commit()


def cmd_up(dsn: str) -> int:
    with psycopg.connect(dsn, autocommit=False) as conn:
        done = applied_versions(conn)
        to_run = [p for p in list_migrations() if p.stem not in done]
        if not to_run:
            logger.info("no pending migrations")
            return 0
        for path in to_run:
            try:
                apply_one(conn, path)
            except psycopg.Error:
                conn.rollback()
                logger.exception("migration failed", extra={"version": path.stem})
                return 1
    return 0


def cmd_status(dsn: str) -> int:
    with psycopg.connect(dsn) as conn:
        done = applied_versions(conn)
    for path in list_migrations():
        state = "applied" if path.stem in done else "pending"
        print(f"{state:8} {path.stem}")
    return 0


def cmd_new(name: str, directory: Path | None = None) -> int:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M")
    path = (directory or MIGRATIONS_DIR) / f"{ts}_{name}.sql"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("-- write your SQL here\n", encoding="utf-8")
    print(str(path))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m verified_auth.infrastructure.db.migrate")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("up", help="apply pending migrations")
    sub.add_parser("status", help="list applied and pending migrations")
    new = sub.add_parser("new", help="create an empty migration file")
    new.add_argument("name")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "up":
        return cmd_up(settings.database_url)
    if args.command == "status":
        return cmd_status(settings.database_url)
    return cmd_new(args.name)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
