"""Key-value storage and the per-date trade bucket adapter."""

import logging
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from daybook.errors import MalformedBucketError
from daybook.models import dump_records, parse_records

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "dbt:trades"


class KeyValueStore(Protocol):
    """String key-value collaborator used by TradeStore."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def list_keys(self, prefix: str = "") -> list[str]: ...


class SqliteKeyValueStore:
    """SQLite-backed key-value store."""

    def __init__(self, db_path: Path):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        """Get the value stored under a key.

        Args:
            key: Entry key.

        Returns:
            Stored value, or None if the key is absent.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM entries WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Args:
            key: Entry key.
            value: Value to store.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR REPLACE INTO entries (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                (key, value, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def list_keys(self, prefix: str = "") -> list[str]:
        """List keys starting with a prefix, sorted.

        Args:
            prefix: Key prefix to match. Empty matches every key.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            # substr avoids LIKE wildcards in the prefix
            cursor.execute(
                """
                SELECT key FROM entries
                WHERE substr(key, 1, ?) = ?
                ORDER BY key
                """,
                (len(prefix), prefix),
            )
            return [row["key"] for row in cursor.fetchall()]
        finally:
            conn.close()


class MemoryKeyValueStore:
    """Dict-backed key-value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class TradeStore:
    """Reads and writes daily trade buckets.

    Each calendar date is an independent bucket stored under
    ``"<namespace>:<YYYY-MM-DD>"`` as a JSON array in creation order.
    Writes replace the whole bucket; the last writer wins.
    """

    def __init__(self, kv: KeyValueStore, namespace: str = DEFAULT_NAMESPACE):
        """Initialize the adapter.

        Args:
            kv: Key-value collaborator holding the buckets.
            namespace: Key prefix for trade buckets.
        """
        self._kv = kv
        self.namespace = namespace

    def day_key(self, day: date) -> str:
        """Storage key for a date's bucket."""
        return f"{self.namespace}:{day.isoformat()}"

    def load_day(self, day: date) -> list:
        """Load the records for a date.

        Missing or malformed data yields an empty list; this never raises
        for bad stored content.

        Args:
            day: Calendar date.

        Returns:
            Records in creation order.
        """
        key = self.day_key(day)
        raw = self._kv.get(key)
        if raw is None:
            return []
        try:
            return parse_records(raw)
        except ValidationError as e:
            logger.warning("Ignoring malformed bucket %s: %d error(s)", key, e.error_count())
            return []

    def load_day_for_update(self, day: date) -> list:
        """Load the records for a date before rewriting the bucket.

        Unlike load_day, a stored value that does not parse is an error,
        so a write never replaces records it could not read.

        Raises:
            MalformedBucketError: If the stored bucket is invalid.
        """
        key = self.day_key(day)
        raw = self._kv.get(key)
        if raw is None:
            return []
        try:
            return parse_records(raw)
        except ValidationError as e:
            raise MalformedBucketError(
                f"Stored records for {day.isoformat()} are malformed "
                f"({e.error_count()} error(s)); refusing to overwrite {key}"
            ) from e

    def save_day(self, day: date, records: list) -> None:
        """Replace the stored records for a date.

        Args:
            day: Calendar date.
            records: Complete bucket contents.
        """
        key = self.day_key(day)
        self._kv.set(key, dump_records(list(records)))
        logger.debug("Saved %d record(s) to %s", len(records), key)

    def append(self, day: date, record) -> list:
        """Append a record to a date's bucket.

        Returns:
            The bucket after the append.

        Raises:
            MalformedBucketError: If the stored bucket is invalid.
        """
        records = self.load_day_for_update(day)
        records.append(record)
        self.save_day(day, records)
        return records

    def remove(self, day: date, record_id: str) -> bool:
        """Remove a record from a date's bucket by ID.

        Returns:
            True if a record was removed, False otherwise.

        Raises:
            MalformedBucketError: If the stored bucket is invalid.
        """
        records = self.load_day_for_update(day)
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            return False
        self.save_day(day, kept)
        return True

    def list_days(self, year: Optional[int] = None, month: Optional[int] = None) -> list[date]:
        """List dates that have a stored bucket.

        Args:
            year: Optional year filter.
            month: Optional month filter, only applied with a year.

        Returns:
            Sorted list of dates.
        """
        prefix = f"{self.namespace}:"
        if year is not None:
            prefix += f"{year:04d}-"
            if month is not None:
                prefix += f"{month:02d}-"

        days = []
        for key in self._kv.list_keys(prefix):
            try:
                days.append(date.fromisoformat(key[len(self.namespace) + 1:]))
            except ValueError:
                logger.debug("Skipping key with invalid date: %s", key)
        return sorted(days)

