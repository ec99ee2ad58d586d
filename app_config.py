"""Shared configuration helpers for the movie listing app."""

from __future__ import annotations

import logging
import os
from typing import Optional

import streamlit as st

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w500"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="

DEFAULT_LANGUAGE = "en-US"
DEFAULT_RATINGS_DB_PATH = "ratings.sqlite"
RATINGS_STORAGE_KEY = "userRatings"
REQUEST_TIMEOUT = 10

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_secret(key: str, default: Optional[str] = None) -> Optional[str]:
    """Fetch Streamlit secret values with an environment variable fallback."""

    try:
        if hasattr(st, "secrets") and key in st.secrets:
            return st.secrets[key]
    except FileNotFoundError:
        # No secrets.toml; Streamlit raises instead of reporting a missing key.
        pass
    return os.getenv(key, default)


def ensure_api_key(key: Optional[str], label: str) -> str:
    """Show a helpful error if a required API key is missing."""

    if not key:
        st.error(
            f"Missing {label}. Add it to Streamlit secrets or as an environment variable "
            f"named {label}."
        )
        st.stop()
    return key


def ratings_db_path() -> str:
    return get_secret("RATINGS_DB_PATH") or DEFAULT_RATINGS_DB_PATH


def tmdb_language() -> str:
    return get_secret("TMDB_LANGUAGE") or DEFAULT_LANGUAGE


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once, honouring LOG_LEVEL when no level is given."""

    name = (level or get_secret("LOG_LEVEL") or "INFO").upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
