"""
User Directory Module

This module handles persistence and retrieval of user records for the
authentication service.

A UserDirectory is the only owner of UserRecord data. The authentication core
asks it to create a record once, at registration, and afterwards only reads.
Email uniqueness is enforced by the directory itself, atomically; a duplicate
insert raises DuplicateEmailError so the caller can report a conflict.

Two implementations are provided:
- InMemoryUserDirectory: dict-backed, for development and tests
- SqliteUserDirectory: SQLite database with a UNIQUE email column

Usage:
    from core.user_directory import SqliteUserDirectory

    directory = SqliteUserDirectory(db_path="storage/users.sqlite")
    user = directory.create(
        full_name="Budi Santoso",
        email="budi@mail.com",
        password_hash=stored_credential,
        face_embedding=[0.11, 0.22, 0.33],
    )
    directory.find_by_email("budi@mail.com")
"""

import json
import sqlite3
import threading
import uuid
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.errors import DuplicateEmailError

# Setup logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    """
    Data class representing a registered user.

    Attributes:
        id: Unique identifier for the user (e.g., "usr_a1b2c3d4e5f6").
        email: Lower-cased email address, unique across the directory.
        full_name: Display name (e.g., "Budi Santoso").
        password_hash: Credential string "<salt hex>:<hash hex>".
        face_embedding: Enrolled face embedding. Normally a list of floats,
                        but whatever the store holds is returned as-is so
                        corruption can be detected by the caller.
        created_at: Timezone-aware UTC creation time.
    """

    id: str
    email: str
    full_name: str
    password_hash: str
    face_embedding: Any = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def generate_user_id() -> str:
    """
    Generate a unique user ID.

    Format: "usr_" followed by 12 random hex characters.

    Returns:
        A unique user ID string (e.g., "usr_a1b2c3d4e5f6").
    """
    return f"usr_{uuid.uuid4().hex[:12]}"


class UserDirectory(ABC):
    """Abstract store of user records keyed by id and by unique email."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Return the user with this (already normalized) email, or None."""
        pass

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Return the user with this id, or None."""
        pass

    @abstractmethod
    def create(
        self,
        full_name: str,
        email: str,
        password_hash: str,
        face_embedding: List[float],
    ) -> UserRecord:
        """
        Create and persist a new user record.

        The directory assigns id and created_at.

        Raises:
            DuplicateEmailError: If a user with this email already exists.
        """
        pass

    @abstractmethod
    def count_users(self) -> int:
        pass

    def close(self) -> None:
        """Release any resources held by the directory."""


class InMemoryUserDirectory(UserDirectory):
    """Dict-backed directory. State lives only as long as the instance."""

    def __init__(self):
        self._by_id: Dict[str, UserRecord] = {}
        self._id_by_email: Dict[str, str] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            user_id = self._id_by_email.get(email)
            return self._by_id.get(user_id) if user_id else None

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            return self._by_id.get(user_id)

    def create(
        self,
        full_name: str,
        email: str,
        password_hash: str,
        face_embedding: List[float],
    ) -> UserRecord:
        record = UserRecord(
            id=generate_user_id(),
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            face_embedding=list(face_embedding),
        )

        with self._lock:
            if email in self._id_by_email:
                raise DuplicateEmailError(email)
            self._by_id[record.id] = record
            self._id_by_email[email] = record.id

        logger.debug(f"Created in-memory user {record.id}")
        return record

    def count_users(self) -> int:
        with self._lock:
            return len(self._by_id)


class SqliteUserDirectory(UserDirectory):
    """
    SQLite-backed user directory.

    Embeddings are stored as JSON text. The users table carries a UNIQUE
    constraint on email, which is the authority for rejecting concurrent
    registrations of the same address.

    A single connection is shared across threads; each operation holds an
    internal lock for the duration of its statements.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str):
        """
        Initialize the SqliteUserDirectory.

        Creates the database file and schema if they don't exist.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_database()

        logger.info(f"SqliteUserDirectory initialized: db={self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """
        Get or create the SQLite connection.

        Returns:
            SQLite connection with Row factory for dict-like access.
        """
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_database(self) -> None:
        """Create the users table if it doesn't exist."""
        with self._lock:
            conn = self._get_connection()
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    full_name TEXT NOT NULL,
                    password_hash TEXT NOT NULL,
                    face_embedding TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.commit()
        logger.debug("Database schema initialized")

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> UserRecord:
        raw_embedding = row["face_embedding"]
        try:
            face_embedding = json.loads(raw_embedding)
        except (TypeError, ValueError):
            logger.warning(f"Stored face embedding for {row['id']} is not valid JSON")
            face_embedding = raw_embedding

        return UserRecord(
            id=row["id"],
            email=row["email"],
            full_name=row["full_name"],
            password_hash=row["password_hash"],
            face_embedding=face_embedding,
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _fetch_one(self, query: str, params: tuple) -> Optional[UserRecord]:
        with self._lock:
            cursor = self._get_connection().execute(query, params)
            row = cursor.fetchone()
        return self._row_to_record(row) if row is not None else None

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._fetch_one("SELECT * FROM users WHERE email = ?", (email,))

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    def create(
        self,
        full_name: str,
        email: str,
        password_hash: str,
        face_embedding: List[float],
    ) -> UserRecord:
        """
        Insert a new user.

        Raises:
            DuplicateEmailError: If the email is already registered.
        """
        record = UserRecord(
            id=generate_user_id(),
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            face_embedding=list(face_embedding),
        )

        with self._lock:
            conn = self._get_connection()
            try:
                conn.execute("""
                    INSERT INTO users (id, email, full_name, password_hash, face_embedding, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    record.id,
                    record.email,
                    record.full_name,
                    record.password_hash,
                    json.dumps(record.face_embedding),
                    record.created_at.isoformat(),
                ))
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                if "email" in str(e):
                    raise DuplicateEmailError(email) from e
                raise

        logger.info(f"Created user {record.id}")
        return record

    def count_users(self) -> int:
        with self._lock:
            row = self._get_connection().execute(
                "SELECT COUNT(*) AS count FROM users"
            ).fetchone()
        return row["count"] or 0

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug("Database connection closed")


def create_user_directory(storage_config: Optional[Dict[str, Any]] = None) -> UserDirectory:
    """
    Build a directory from the "storage" config section.

    Args:
        storage_config: Dict with "backend" ("sqlite" or "memory") and, for
                        sqlite, "db_path" (relative paths resolve against the
                        project root).

    Raises:
        ValueError: If the backend is unknown.
    """
    if storage_config is None:
        storage_config = {}

    backend = storage_config.get("backend", "sqlite")

    if backend == "memory":
        return InMemoryUserDirectory()

    if backend == "sqlite":
        db_path = storage_config.get("db_path", "storage/users.sqlite")
        if db_path != ":memory:" and not Path(db_path).is_absolute():
            from core.config import get_project_root

            db_path = str(get_project_root() / db_path)
        return SqliteUserDirectory(db_path)

    raise ValueError(f"Unknown storage backend: {backend}")
