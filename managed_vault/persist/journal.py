"""SQLite event journal for vault audit trails.

Stores every committed vault event (in sequence order) plus periodic full
snapshots, so the vault's state at the last event can be rebuilt from the
newest snapshot and the events after it (see ``replay.py``).

Unlike a process-wide connection, each ``EventJournal`` owns its connection;
one journal per vault. Uses WAL mode for file databases.
"""
from __future__ import annotations
import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from loguru import logger

from managed_vault.core.events import VaultEvent, parse_event
from managed_vault.persist.migrations import apply_migrations
from managed_vault.vault.state import VaultSnapshot

PRAGMAS = [
    "PRAGMA journal_mode=WAL;",
    "PRAGMA synchronous=NORMAL;",
]


class EventJournal:
    def __init__(self, path: str = ":memory:", snapshot_every: int = 50):
        self.path = path
        self.snapshot_every = snapshot_every
        self._lock = threading.RLock()
        self._vault = None
        self._since_snapshot = 0
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False, timeout=30, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        for p in PRAGMAS:
            try:
                self._conn.execute(p)
            except sqlite3.DatabaseError as e:  # pragma: no cover
                logger.warning(f"[Journal] pragma failed {p} :: {e}")
        logger.info(f"[Journal] Opened {path}")
        apply_migrations(self)

    @contextmanager
    def tx(self, immediate: bool = False) -> Iterator[sqlite3.Cursor]:
        """Context manager for a DB transaction; rolls back and re-raises on error."""
        with self._lock:
            self._conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            cur = self._conn.cursor()
            try:
                yield cur
                self._conn.execute("COMMIT")
            except Exception:
                self._conn.execute("ROLLBACK")
                raise
            finally:
                cur.close()

    def fetchall(self, sql: str, params: tuple[Any, ...] = ()) -> List[Dict[str, Any]]:
        with self._lock:
            cur = self._conn.execute(sql, params)
            rows = [dict(r) for r in cur.fetchall()]
            cur.close()
        return rows

    def fetchone(self, sql: str, params: tuple[Any, ...] = ()) -> Optional[Dict[str, Any]]:
        with self._lock:
            cur = self._conn.execute(sql, params)
            row = cur.fetchone()
            cur.close()
        return dict(row) if row else None

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # --- Writes ---

    def append(self, events: List[VaultEvent]) -> None:
        with self.tx(immediate=True) as cur:
            for event in events:
                cur.execute(
                    "INSERT INTO events(seq, ts, event_type, payload) VALUES(?,?,?,?)",
                    (event.seq, event.timestamp, event.event_type, json.dumps(event.model_dump())),
                )

    def store_snapshot(self, snapshot: VaultSnapshot, created_ts: int = 0) -> None:
        with self.tx() as cur:
            cur.execute(
                "INSERT OR REPLACE INTO snapshots(last_seq, created_ts, payload) VALUES(?,?,?)",
                (snapshot.last_seq, created_ts, json.dumps(snapshot.model_dump())),
            )
        logger.debug(f"[Journal] snapshot stored at seq {snapshot.last_seq}")

    def set_meta(self, key: str, value: str) -> None:
        with self.tx() as cur:
            cur.execute("INSERT OR REPLACE INTO vault_meta(key, value) VALUES(?,?)", (key, value))

    def get_meta(self, key: str) -> Optional[str]:
        row = self.fetchone("SELECT value FROM vault_meta WHERE key=?", (key,))
        return row['value'] if row else None

    # --- Reads ---

    def events(self, after_seq: int = 0, limit: Optional[int] = None) -> List[VaultEvent]:
        sql = "SELECT payload FROM events WHERE seq > ? ORDER BY seq"
        params: tuple = (after_seq,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (after_seq, limit)
        return [parse_event(json.loads(r['payload'])) for r in self.fetchall(sql, params)]

    def last_seq(self) -> int:
        row = self.fetchone("SELECT MAX(seq) AS seq FROM events")
        return row['seq'] or 0 if row else 0

    def latest_snapshot(self, max_seq: Optional[int] = None) -> Optional[VaultSnapshot]:
        if max_seq is None:
            row = self.fetchone("SELECT payload FROM snapshots ORDER BY last_seq DESC LIMIT 1")
        else:
            row = self.fetchone(
                "SELECT payload FROM snapshots WHERE last_seq <= ? ORDER BY last_seq DESC LIMIT 1", (max_seq,)
            )
        return VaultSnapshot.model_validate(json.loads(row['payload'])) if row else None

    # --- Vault wiring ---

    def attach(self, vault) -> None:
        """Stores the vault's current snapshot and journals all future commits."""
        self._vault = vault
        self.store_snapshot(vault.snapshot(), created_ts=vault.clock.now())
        vault.subscribe(self._on_commit)

    def _on_commit(self, events: List[VaultEvent]) -> None:
        self.append(events)
        self._since_snapshot += len(events)
        if self.snapshot_every and self._since_snapshot >= self.snapshot_every:
            self.store_snapshot(self._vault.snapshot(), created_ts=events[-1].timestamp)
            self._since_snapshot = 0
        logger.debug(f"[Journal] appended {len(events)} event(s), last seq {events[-1].seq}")
