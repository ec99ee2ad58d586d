"""Filter, selection, and rating state behind the movie listing app.

Everything the Streamlit view shows is derived from a ``MovieBrowserState``
instance, and every user action goes through one of its methods. Network
calls run on an executor; trailer lookups are tagged with a request token so
a late answer for a movie that is no longer selected is dropped instead of
overwriting the current trailer.
"""

from __future__ import annotations

import concurrent.futures
import itertools
import logging
import math
import threading
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models import Category, FilterCriteria, Movie, Video
from rating_store import RatingStore, coerce_user_rating
from tmdb_client import TMDBClient, TMDBError

logger = logging.getLogger(__name__)

TRAILER_TYPE = "Trailer"


def coerce_min_rating(value: object) -> float:
    """Turn the raw minimum-rating input into a number; unusable input means 0."""

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def movie_matches(movie: Movie, criteria: FilterCriteria) -> bool:
    if criteria.selected_category is not None and criteria.selected_category not in movie.genre_ids:
        return False
    if movie.vote_average < coerce_min_rating(criteria.min_rating):
        return False
    prefix = criteria.release_year_prefix
    if prefix and not movie.release_date.startswith(prefix):
        return False
    return True


def visible_movies(movies: Sequence[Movie], criteria: FilterCriteria) -> List[Movie]:
    """Return the movies passing every active filter, in catalogue order."""

    return [movie for movie in movies if movie_matches(movie, criteria)]


def pick_trailer_key(videos: Iterable[Video]) -> str:
    """Return the key of the first trailer, or an empty string when there is none."""

    for video in videos:
        if video.type == TRAILER_TYPE:
            return video.key
    return ""


@dataclass(frozen=True)
class Selection:
    movie: Movie
    token: int
    trailer_key: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self.trailer_key is None


class MovieBrowserState:
    def __init__(
        self,
        client: TMDBClient,
        rating_store: RatingStore,
        executor: Optional[concurrent.futures.Executor] = None,
    ) -> None:
        self.client = client
        self.rating_store = rating_store
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="tmdb"
        )
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)

        self.movies: List[Movie] = []
        self.categories: List[Category] = []
        self.movies_loaded = False
        self.categories_loaded = False
        self.criteria = FilterCriteria()
        self.selection: Optional[Selection] = None
        self.ratings: Dict[int, int] = self.load_ratings()

    @property
    def catalog_loaded(self) -> bool:
        return self.movies_loaded

    @property
    def awaiting_results(self) -> bool:
        """True while a catalogue fetch or the selected movie's trailer lookup is running."""

        if not (self.movies_loaded and self.categories_loaded):
            return True
        selection = self.selection
        return selection is not None and selection.pending

    # Loading

    def start_catalog_load(self) -> Tuple[concurrent.futures.Future, concurrent.futures.Future]:
        """Submit the movie and genre fetches side by side without waiting.

        Each fetch stores its own collection as soon as it finishes, so the view
        can render movies while genres are still on their way, or the reverse.
        """

        movies_future = self._executor.submit(self._load_movies)
        categories_future = self._executor.submit(self._load_categories)
        return movies_future, categories_future

    def _load_movies(self) -> List[Movie]:
        try:
            movies = self.client.popular_movies()
        except TMDBError as exc:
            logger.warning("Error fetching movies: %s", exc)
            movies = []
        with self._lock:
            self.movies = movies
            self.movies_loaded = True
        logger.info("Loaded %d popular movies", len(movies))
        return movies

    def _load_categories(self) -> List[Category]:
        try:
            categories = self.client.movie_genres()
        except TMDBError as exc:
            logger.warning("Error fetching categories: %s", exc)
            categories = []
        with self._lock:
            self.categories = categories
            self.categories_loaded = True
        logger.info("Loaded %d categories", len(categories))
        return categories

    def load_ratings(self) -> Dict[int, int]:
        ratings = self.rating_store.load()
        logger.debug("Restored %d saved ratings", len(ratings))
        return ratings

    # Filters

    def visible(self) -> List[Movie]:
        return visible_movies(self.movies, self.criteria)

    def set_category(self, category_id: object) -> None:
        if category_id is None or category_id == "":
            self.criteria.selected_category = None
            return
        try:
            self.criteria.selected_category = int(category_id)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid category %r", category_id)
            self.criteria.selected_category = None

    def set_min_rating(self, value: object) -> None:
        self.criteria.min_rating = coerce_min_rating(value)

    def set_release_year_prefix(self, prefix: Optional[str]) -> None:
        self.criteria.release_year_prefix = prefix or ""

    def category_name(self, category_id: int) -> str:
        for category in self.categories:
            if category.id == category_id:
                return category.name
        return str(category_id)

    # Selection

    def select_movie(self, movie: Movie) -> concurrent.futures.Future:
        """Open ``movie`` right away and look up its trailer in the background."""

        with self._lock:
            token = next(self._tokens)
            self.selection = Selection(movie=movie, token=token)
        return self._executor.submit(self._resolve_trailer, movie, token)

    def clear_selection(self) -> None:
        with self._lock:
            self.selection = None

    def _resolve_trailer(self, movie: Movie, token: int) -> str:
        try:
            trailer_key = pick_trailer_key(self.client.movie_videos(movie.id))
        except TMDBError as exc:
            logger.warning("Error fetching trailer for movie %s: %s", movie.id, exc)
            trailer_key = ""

        with self._lock:
            current = self.selection
            if current is None or current.token != token:
                logger.debug("Discarding stale trailer result for movie %s", movie.id)
                return trailer_key
            self.selection = replace(current, trailer_key=trailer_key)
        return trailer_key

    # Ratings

    def rating_for(self, movie_id: int) -> Optional[int]:
        return self.ratings.get(movie_id)

    def set_rating(self, movie_id: int, rating: object) -> None:
        """Store a rating and persist the whole map; empty or invalid input is ignored."""

        try:
            value = coerce_user_rating(rating)
        except ValueError as exc:
            logger.warning("Ignoring rating for movie %s: %s", movie_id, exc)
            return
        if value is None:
            return
        self.ratings[movie_id] = value
        self.rating_store.save(self.ratings)

