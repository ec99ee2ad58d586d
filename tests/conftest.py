from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import pytest
import requests

from models import Category, Movie, Video
from rating_store import MemoryStorage, RatingStore
from tmdb_client import TMDBError


class FakeResponse:
    def __init__(self, payload: object = None, status_code: int = 200, bad_json: bool = False) -> None:
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)  # type: ignore[arg-type]

    def json(self) -> object:
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload


@dataclass
class SessionCall:
    url: str
    params: dict
    timeout: Optional[float]


class FakeSession:
    """requests.Session stand-in routing on the full URL."""

    def __init__(self, routes: Dict[str, object]) -> None:
        self.routes = routes
        self.calls: List[SessionCall] = []

    def get(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None) -> FakeResponse:
        self.calls.append(SessionCall(url=url, params=dict(params or {}), timeout=timeout))
        result = self.routes[url]
        if isinstance(result, Exception):
            raise result
        return result  # type: ignore[return-value]


@dataclass
class FakeCatalogClient:
    movies: List[Movie] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    videos: Dict[int, object] = field(default_factory=dict)
    fail_movies: bool = False
    fail_categories: bool = False
    video_calls: List[int] = field(default_factory=list)

    def popular_movies(self, page: int = 1) -> List[Movie]:
        if self.fail_movies:
            raise TMDBError("TMDB request failed: movie/popular")
        return list(self.movies)

    def movie_genres(self) -> List[Category]:
        if self.fail_categories:
            raise TMDBError("TMDB request failed: genre/movie/list")
        return list(self.categories)

    def movie_videos(self, movie_id: int) -> List[Video]:
        self.video_calls.append(movie_id)
        result = self.videos.get(movie_id, [])
        if isinstance(result, Exception):
            raise result
        return list(result)  # type: ignore[arg-type]


class DeferredExecutor:
    """Executor that only runs submitted work when a test says so."""

    def __init__(self) -> None:
        self.pending: List[tuple] = []

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run(self, future: Future) -> None:
        for index, (candidate, fn, args, kwargs) in enumerate(self.pending):
            if candidate is future:
                del self.pending[index]
                try:
                    candidate.set_result(fn(*args, **kwargs))
                except Exception as exc:  # pragma: no cover - surfaced via the future
                    candidate.set_exception(exc)
                return
        raise AssertionError("future was not submitted to this executor")

    def run_all(self) -> None:
        while self.pending:
            self.run(self.pending[0][0])

    def shutdown(self, wait: bool = True) -> None:
        self.pending.clear()


class ImmediateExecutor(DeferredExecutor):
    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        future = super().submit(fn, *args, **kwargs)
        self.run(future)
        return future


def make_movie(
    movie_id: int,
    title: str = "",
    vote_average: float = 0.0,
    release_date: str = "",
    genre_ids: tuple = (),
) -> Movie:
    return Movie(
        id=movie_id,
        title=title or f"Movie {movie_id}",
        overview=f"Overview of movie {movie_id}",
        poster_path=f"/poster{movie_id}.jpg",
        vote_average=vote_average,
        release_date=release_date,
        genre_ids=genre_ids,
    )


@pytest.fixture
def example_movies() -> List[Movie]:
    return [
        make_movie(1, "X", 7.5, "2020-05-01", (28,)),
        make_movie(2, "Y", 5.0, "2019-01-01", (35,)),
    ]


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def rating_store(memory_storage: MemoryStorage) -> RatingStore:
    return RatingStore(memory_storage)
