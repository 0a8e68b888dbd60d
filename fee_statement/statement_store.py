"""
Statement persistence.

Two stores back every statement:
  - LocalStatementCache: one JSON snapshot per project, written on every save
    and read when the statement is reopened.
  - SqliteVersionStore: append-mostly version history, one row per saved
    version with the statement payload stored as JSON.

StatementRepository ties them together for statement_session.py.
"""

import os
import re
import json
import logging
import sqlite3
import tempfile
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from dotenv import load_dotenv

from fee_statement.database import DEFAULT_PROFIT_MARGIN
from fee_statement.statement_estimator import (
    Statement,
    StatementTotals,
    calculate_totals,
    parse_number,
)

load_dotenv()

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_CACHE_DIR = Path(tempfile.gettempdir()) / "fee_statement_cache"
DEFAULT_DB_PATH = Path(tempfile.gettempdir()) / "fee_statement_versions.db"


def get_cache_dir() -> Path:
    return Path(os.environ.get("STATEMENT_CACHE_DIR") or DEFAULT_CACHE_DIR)


def get_db_path() -> Path:
    return Path(os.environ.get("STATEMENT_DB_PATH") or DEFAULT_DB_PATH)


def get_default_profit_margin() -> float:
    return parse_number(os.environ.get("STATEMENT_PROFIT_MARGIN"), default=DEFAULT_PROFIT_MARGIN)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class StatementPersistenceError(Exception):
    """A statement could not be written to or read from storage."""


class VersionStoreError(StatementPersistenceError):
    """The version store rejected a read or write."""


class VersionNotFoundError(VersionStoreError):
    pass


class StatementLockedError(Exception):
    """Raised when saving a statement whose project is locked."""


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Local cache
# ---------------------------------------------------------------------------

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LocalStatementCache:
    """Per-project snapshot files named statement-{projectId}.json."""

    def __init__(self, cache_dir):
        self.cache_dir = Path(cache_dir)

    def path_for(self, project_id: str) -> Path:
        return self.cache_dir / f"statement-{_UNSAFE_ID_CHARS.sub('_', project_id)}.json"

    def read(self, project_id: str) -> dict | None:
        """Return the cached snapshot, or None when missing or unreadable."""
        path = self.path_for(project_id)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring corrupt statement cache {path.name}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring statement cache {path.name}: expected an object")
            return None
        return data

    def write(self, project_id: str, data: dict) -> dict:
        """Write a snapshot stamped with lastSaved; returns what was written."""
        payload = dict(data)
        payload["projectId"] = project_id
        payload["lastSaved"] = _utc_now()

        path = self.path_for(project_id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write statement cache {path}: {e}", exc_info=True)
            raise StatementPersistenceError(f"Could not save statement locally: {e}") from e
        return payload

    def clear(self, project_id: str) -> None:
        self.path_for(project_id).unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Version store
# ---------------------------------------------------------------------------

@dataclass
class StatementVersion:
    id: str
    project_id: str
    version_number: int
    statement_name: str
    statement_data: dict
    created_at: str
    file_path: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "StatementVersion":
        try:
            data = json.loads(row["statement_data"])
        except ValueError:
            logger.warning(f"Statement version {row['id']} has unreadable data")
            data = {}
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            version_number=row["version_number"],
            statement_name=row["statement_name"],
            statement_data=data,
            created_at=row["created_at"],
            file_path=row["file_path"],
        )

    def statement_totals(self) -> StatementTotals:
        """Totals recomputed from the stored payload (zero when unreadable)."""
        try:
            statement = Statement.from_dict(self.statement_data, project_id=self.project_id)
        except ValueError:
            return StatementTotals(subtotal=0.0, profit=0.0, total=0.0)
        return calculate_totals(statement.items, statement.profit_margin)

    def to_dict(self) -> dict:
        totals = self.statement_totals()
        return {
            "id": self.id,
            "projectId": self.project_id,
            "versionNumber": self.version_number,
            "statementName": self.statement_name,
            "createdAt": self.created_at,
            "filePath": self.file_path,
            "subtotal": totals.subtotal,
            "total": totals.total,
        }


SCHEMA = """
    CREATE TABLE IF NOT EXISTS statement_versions (
        id TEXT PRIMARY KEY,
        project_id TEXT NOT NULL,
        version_number INTEGER NOT NULL,
        statement_name TEXT NOT NULL,
        statement_data TEXT NOT NULL,
        created_at TEXT NOT NULL,
        file_path TEXT,
        UNIQUE (project_id, version_number)
    );

    CREATE INDEX IF NOT EXISTS idx_statement_versions_project
        ON statement_versions(project_id);
"""


class SqliteVersionStore:
    """Version history table; version numbers are per project, starting at 1."""

    def __init__(self, db_path):
        self.db_path = Path(db_path)
        self._init_db()

    def _get_db(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=5)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(self._get_db()) as conn:
                conn.executescript(SCHEMA)
                conn.commit()
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Failed to initialise version store at {self.db_path}: {e}", exc_info=True)
            raise VersionStoreError(f"Version store unavailable: {e}") from e

    def save_version(self, project_id: str, statement_data: dict, project_name: str) -> StatementVersion:
        """Insert the next version for a project, named '{project_name} - V{n}'."""
        try:
            with closing(self._get_db()) as conn:
                with conn:
                    row = conn.execute(
                        "SELECT COALESCE(MAX(version_number), 0) + 1 FROM statement_versions "
                        "WHERE project_id = ?",
                        (project_id,),
                    ).fetchone()
                    number = row[0]
                    version = StatementVersion(
                        id=str(uuid4()),
                        project_id=project_id,
                        version_number=number,
                        statement_name=f"{project_name} - V{number}",
                        statement_data=statement_data,
                        created_at=_utc_now(),
                    )
                    conn.execute(
                        "INSERT INTO statement_versions "
                        "(id, project_id, version_number, statement_name, statement_data, created_at, file_path) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?)",
                        (version.id, version.project_id, version.version_number, version.statement_name,
                         json.dumps(statement_data), version.created_at, version.file_path),
                    )
        except sqlite3.Error as e:
            logger.error(f"Error saving statement version for {project_id}: {e}", exc_info=True)
            raise VersionStoreError(f"Could not save statement version: {e}") from e

        logger.info(f"Saved {version.statement_name} for project {project_id}")
        return version

    def update_version(self, version_id: str, statement_data: dict, display_name: str) -> StatementVersion:
        """Overwrite the payload and name of an existing version in place."""
        try:
            with closing(self._get_db()) as conn:
                with conn:
                    cur = conn.execute(
                        "UPDATE statement_versions SET statement_data = ?, statement_name = ? WHERE id = ?",
                        (json.dumps(statement_data), display_name, version_id),
                    )
                    if cur.rowcount == 0:
                        raise VersionNotFoundError(f"Statement version {version_id} not found")
                    row = conn.execute(
                        "SELECT * FROM statement_versions WHERE id = ?", (version_id,)
                    ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error updating statement version {version_id}: {e}", exc_info=True)
            raise VersionStoreError(f"Could not update statement version: {e}") from e

        logger.info(f"Updated statement version {version_id} ({display_name})")
        return StatementVersion.from_row(row)

    def get_versions(self, project_id: str) -> list[StatementVersion]:
        """All versions of a project, newest first."""
        try:
            with closing(self._get_db()) as conn:
                rows = conn.execute(
                    "SELECT * FROM statement_versions WHERE project_id = ? ORDER BY version_number DESC",
                    (project_id,),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error fetching statement versions for {project_id}: {e}", exc_info=True)
            raise VersionStoreError(f"Could not list statement versions: {e}") from e
        return [StatementVersion.from_row(row) for row in rows]

    def get_version(self, version_id: str) -> StatementVersion | None:
        try:
            with closing(self._get_db()) as conn:
                row = conn.execute(
                    "SELECT * FROM statement_versions WHERE id = ?", (version_id,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error fetching statement version {version_id}: {e}", exc_info=True)
            raise VersionStoreError(f"Could not load statement version: {e}") from e
        return StatementVersion.from_row(row) if row else None

    def delete_version(self, version_id: str) -> bool:
        try:
            with closing(self._get_db()) as conn:
                with conn:
                    cur = conn.execute("DELETE FROM statement_versions WHERE id = ?", (version_id,))
        except sqlite3.Error as e:
            logger.error(f"Error deleting statement version {version_id}: {e}", exc_info=True)
            raise VersionStoreError(f"Could not delete statement version: {e}") from e
        return cur.rowcount > 0


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class StatementRepository:
    """Local snapshot + remote version history behind one interface."""

    def __init__(self, local_cache: LocalStatementCache, version_store: SqliteVersionStore):
        self.local_cache = local_cache
        self.version_store = version_store

    @classmethod
    def from_env(cls) -> "StatementRepository":
        return cls(LocalStatementCache(get_cache_dir()), SqliteVersionStore(get_db_path()))

    def load_local_snapshot(self, project_id: str) -> Statement | None:
        data = self.local_cache.read(project_id)
        if data is None:
            return None
        try:
            return Statement.from_dict(data, project_id=project_id)
        except ValueError as e:
            logger.warning(f"Ignoring cached statement for {project_id}: {e}")
            return None

    def save_local_snapshot(self, statement: Statement) -> dict:
        return self.local_cache.write(statement.project_id, statement.to_dict())

    def save_remote_version(self, statement: Statement, project_name: str,
                            version_id: str | None = None) -> StatementVersion:
        """Update version_id in place when given, otherwise append a new version."""
        data = statement.payload()
        if version_id:
            return self.version_store.update_version(version_id, data, f"{project_name} - Updated")
        return self.version_store.save_version(statement.project_id, data, project_name)

    def list_versions(self, project_id: str) -> list[StatementVersion]:
        return self.version_store.get_versions(project_id)

    def load_remote_version(self, version_id: str, project_id: str | None = None) -> Statement:
        version = self.version_store.get_version(version_id)
        if version is None or (project_id is not None and version.project_id != project_id):
            raise VersionNotFoundError(f"Statement version {version_id} not found")
        try:
            return Statement.from_dict(version.statement_data, project_id=version.project_id)
        except ValueError as e:
            logger.error(f"Statement version {version_id} has an invalid payload: {e}")
            raise StatementPersistenceError(f"Version {version.statement_name} could not be loaded: {e}") from e
