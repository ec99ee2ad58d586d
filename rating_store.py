"""Durable storage for the user's personal movie ratings."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

from app_config import RATINGS_STORAGE_KEY

logger = logging.getLogger(__name__)

MIN_USER_RATING = 1
MAX_USER_RATING = 10


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Process-local storage, handy for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class SQLiteStorage:
    """String key-value pairs kept in a single SQLite table."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value)
                )
        finally:
            conn.close()


def coerce_user_rating(value: object) -> Optional[int]:
    """Return an int rating, None for an empty input, or raise ValueError."""

    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid rating: {value!r}")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValueError(f"Invalid rating: {value!r}") from None
    if not number.is_integer():
        raise ValueError(f"Rating must be a whole number: {value!r}")
    rating = int(number)
    if not MIN_USER_RATING <= rating <= MAX_USER_RATING:
        raise ValueError(
            f"Rating must be between {MIN_USER_RATING} and {MAX_USER_RATING}: {value!r}"
        )
    return rating


class RatingStore:
    """Serialises the whole rating map as one JSON object under a fixed key."""

    def __init__(self, storage: KeyValueStorage, key: str = RATINGS_STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key

    def load(self) -> Dict[int, int]:
        try:
            raw = self.storage.get(self.key)
        except sqlite3.Error:
            logger.exception("Unable to read saved ratings")
            return {}
        if not raw:
            return {}

        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable saved ratings")
            return {}
        if not isinstance(decoded, dict):
            logger.warning("Ignoring saved ratings that are not a mapping")
            return {}

        ratings: Dict[int, int] = {}
        for movie_id, value in decoded.items():
            try:
                key = int(movie_id)
                rating = coerce_user_rating(value)
            except (TypeError, ValueError):
                logger.debug("Skipping saved rating %r=%r", movie_id, value)
                continue
            if rating is not None:
                ratings[key] = rating
        return ratings

    def save(self, ratings: Mapping[int, int]) -> None:
        blob = json.dumps({str(movie_id): rating for movie_id, rating in ratings.items()})
        try:
            self.storage.set(self.key, blob)
        except sqlite3.Error:
            logger.exception("Unable to save ratings")
