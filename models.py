"""Typed records for the TMDB payloads and the user's filter choices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


def _as_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class Movie:
    id: int
    title: str
    overview: str = ""
    poster_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: str = ""
    genre_ids: Tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict) -> "Movie":
        """Build a movie from a TMDB list entry, tolerating missing fields."""

        genre_ids = tuple(
            int(genre_id)
            for genre_id in payload.get("genre_ids") or []
            if isinstance(genre_id, int) or str(genre_id).isdigit()
        )
        return cls(
            id=int(payload["id"]),
            title=payload.get("title") or payload.get("name") or "Unknown Title",
            overview=payload.get("overview") or "",
            poster_path=payload.get("poster_path") or None,
            vote_average=_as_float(payload.get("vote_average")),
            release_date=payload.get("release_date") or "",
            genre_ids=genre_ids,
        )


@dataclass(frozen=True)
class Category:
    id: int
    name: str

    @classmethod
    def from_payload(cls, payload: dict) -> "Category":
        return cls(id=int(payload["id"]), name=payload.get("name") or "")


@dataclass(frozen=True)
class Video:
    key: str
    type: str
    site: str = ""
    name: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> "Video":
        return cls(
            key=payload.get("key") or "",
            type=payload.get("type") or "",
            site=payload.get("site") or "",
            name=payload.get("name") or "",
        )


@dataclass
class FilterCriteria:
    """Active grid filters. None/0/"" are the neutral values."""

    selected_category: Optional[int] = None
    min_rating: float = 0.0
    release_year_prefix: str = ""

