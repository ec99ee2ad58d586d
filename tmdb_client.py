"""Thin TMDB client for the three read-only endpoints the app consumes."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requests

from app_config import (
    DEFAULT_LANGUAGE,
    REQUEST_TIMEOUT,
    TMDB_BASE_URL,
    TMDB_IMAGE_BASE,
    YOUTUBE_WATCH_URL,
)
from models import Category, Movie, Video

logger = logging.getLogger(__name__)


class TMDBError(RuntimeError):
    """Raised when a TMDB request fails or returns something other than JSON."""


def poster_url(poster_path: Optional[str]) -> Optional[str]:
    """Return the full poster URL, or None when TMDB has no poster."""

    return f"{TMDB_IMAGE_BASE}{poster_path}" if poster_path else None


def trailer_url(trailer_key: str) -> Optional[str]:
    return f"{YOUTUBE_WATCH_URL}{trailer_key}" if trailer_key else None


class TMDBClient:
    def __init__(
        self,
        api_key: str,
        language: str = DEFAULT_LANGUAGE,
        session: Optional[requests.Session] = None,
        base_url: str = TMDB_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.language = language
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def get(self, path: str, params: Optional[Dict[str, object]] = None) -> dict:
        """Perform a single TMDB GET request and return the decoded payload."""

        merged: Dict[str, object] = {"api_key": self.api_key, "language": self.language}
        if params:
            merged.update(params)

        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(url, params=merged, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise TMDBError(f"TMDB request failed: {path}") from exc
        except ValueError as exc:
            raise TMDBError(f"TMDB returned invalid JSON: {path}") from exc

        if not isinstance(payload, dict):
            raise TMDBError(f"Unexpected TMDB payload for {path}")
        return payload

    def popular_movies(self, page: int = 1) -> List[Movie]:
        payload = self.get("movie/popular", params={"page": page})
        movies: List[Movie] = []
        for entry in payload.get("results") or []:
            if not isinstance(entry, dict):
                continue
            try:
                movies.append(Movie.from_payload(entry))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed movie entry: %r", entry)
        return movies

    def movie_genres(self) -> List[Category]:
        payload = self.get("genre/movie/list")
        categories: List[Category] = []
        for entry in payload.get("genres") or []:
            if not isinstance(entry, dict):
                continue
            try:
                categories.append(Category.from_payload(entry))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed genre entry: %r", entry)
        return categories

    def movie_videos(self, movie_id: int) -> List[Video]:
        payload = self.get(f"movie/{movie_id}/videos")
        return [
            Video.from_payload(entry)
            for entry in payload.get("results") or []
            if isinstance(entry, dict)
        ]
