"""Versioned schema migrations for the discovery store.

Migrations are ``NNNN_<name>.sql`` files in a directory (by default the
``migrations`` package beside this module), applied in file-name order. Each
applied file is recorded in ``schema_migrations`` with a SHA-256 of its text;
a recorded file whose text later changes stops the store from opening.
"""

from __future__ import annotations

import hashlib
import logging
import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from cdr_discovery.shared.exceptions import MigrationError

_logger = logging.getLogger("cdr-discovery.persistence")

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"
_FILE_RE = re.compile(r"^(?P<version>\d{4}_[a-z0-9_]+)\.sql$")


@dataclass(frozen=True)
class Migration:
    version: str
    path: Path
    sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class MigrationReport:
    applied: tuple[str, ...]
    already_applied: tuple[str, ...]

    @property
    def schema_version(self) -> str:
        versions = self.already_applied + self.applied
        return max(versions) if versions else ""


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    """Every migration file in ``directory``, ordered by version; other files are ignored."""
    if not directory.is_dir():
        raise MigrationError(f"migration directory missing: {directory}")
    found = []
    for path in sorted(directory.iterdir()):
        match = _FILE_RE.match(path.name)
        if match is None:
            continue
        found.append(Migration(match.group("version"), path, path.read_text(encoding="utf-8")))
    return found


def _ensure_history(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            checksum TEXT NOT NULL,
            applied_at TEXT NOT NULL
        )
        """
    )


def list_applied_migrations(conn: sqlite3.Connection) -> dict[str, str]:
    """Version -> recorded checksum."""
    _ensure_history(conn)
    return dict(conn.execute("SELECT version, checksum FROM schema_migrations").fetchall())


def apply_sqlite_migrations(
    conn: sqlite3.Connection,
    directory: Path = MIGRATIONS_DIR,
) -> MigrationReport:
    """Bring the discovery schema up to date; safe to call on every open."""
    recorded = list_applied_migrations(conn)
    applied: list[str] = []
    skipped: list[str] = []
    for migration in discover_migrations(directory):
        checksum = recorded.get(migration.version)
        if checksum is not None:
            if checksum != migration.checksum:
                raise MigrationError(
                    f"migration {migration.version} changed after it was applied ({migration.path.name})"
                )
            skipped.append(migration.version)
            continue

        conn.executescript(migration.sql)
        conn.execute(
            "INSERT INTO schema_migrations(version, checksum, applied_at) VALUES (?, ?, ?)",
            (migration.version, migration.checksum, datetime.now(timezone.utc).isoformat()),
        )
        conn.commit()
        _logger.info("applied discovery schema migration %s", migration.version)
        applied.append(migration.version)
    return MigrationReport(applied=tuple(applied), already_applied=tuple(skipped))


__all__ = [
    "MIGRATIONS_DIR",
    "Migration",
    "MigrationReport",
    "apply_sqlite_migrations",
    "discover_migrations",
    "list_applied_migrations",
]
