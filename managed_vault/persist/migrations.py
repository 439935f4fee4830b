"""Schema migrations for the vault event journal."""
from __future__ import annotations
from typing import List, Set

from loguru import logger

MIGRATIONS: List[tuple[str, str]] = [
    (
        '0001_events_snapshots',
        """
        CREATE TABLE IF NOT EXISTS events(
            seq INTEGER PRIMARY KEY,
            ts INT NOT NULL,
            event_type TEXT NOT NULL,
            payload TEXT NOT NULL
        );
        CREATE TABLE IF NOT EXISTS snapshots(
            last_seq INTEGER PRIMARY KEY,
            created_ts INT NOT NULL,
            payload TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS ix_events_type ON events(event_type);
        """
    ),
    (
        '0002_vault_meta',
        """
        CREATE TABLE IF NOT EXISTS vault_meta(
            key TEXT PRIMARY KEY,
            value TEXT
        );
        """
    ),
]


def applied_versions(journal) -> Set[str]:
    return {r['version'] for r in journal.fetchall("SELECT version FROM migrations")}


def apply_migrations(journal) -> None:
    with journal.tx() as cur:
        cur.execute("CREATE TABLE IF NOT EXISTS migrations(version TEXT PRIMARY KEY, applied_ts INTEGER)")
    done = applied_versions(journal)
    for version, ddl in MIGRATIONS:
        if version in done:
            continue
        logger.info(f"[Journal] Applying migration {version}")
        with journal.tx() as cur:
            for stmt in filter(None, map(str.strip, ddl.split(';'))):
                cur.execute(stmt)
            cur.execute("INSERT INTO migrations(version, applied_ts) VALUES(?, strftime('%s','now')*1000)", (version,))
    logger.info("[Journal] Migrations complete")


__all__ = ["apply_migrations", "MIGRATIONS"]
