"""Streamlit app for browsing TMDB's popular movies and rating them locally."""

import time
from typing import List, Optional

import streamlit as st

from app_config import (
    configure_logging,
    ensure_api_key,
    get_secret,
    ratings_db_path,
    tmdb_language,
)
from models import Movie
from movie_state import MovieBrowserState
from rating_store import MAX_USER_RATING, MIN_USER_RATING, RatingStore, SQLiteStorage
from tmdb_client import TMDBClient, poster_url, trailer_url

GRID_COLUMNS = 4
STATE_KEY = "browser_state"
POLL_INTERVAL = 0.5

st.set_page_config(page_title="🎬 Movie Listing", layout="wide")
configure_logging()

TMDB_API_KEY = ensure_api_key(get_secret("TMDB_API_KEY"), "TMDB_API_KEY")


def trigger_rerun() -> None:
    """Request a Streamlit rerun using the supported API for the current version."""

    if hasattr(st, "rerun"):
        st.rerun()
    elif hasattr(st, "experimental_rerun"):
        st.experimental_rerun()


def get_browser_state() -> MovieBrowserState:
    """Return the session's state object, starting the catalogue fetches on first use."""

    state = st.session_state.get(STATE_KEY)
    if state is None:
        client = TMDBClient(TMDB_API_KEY, language=tmdb_language())
        store = RatingStore(SQLiteStorage(ratings_db_path()))
        state = MovieBrowserState(client, store)
        state.start_catalog_load()
        st.session_state[STATE_KEY] = state
    return state


def ensure_filter_defaults() -> None:
    st.session_state.setdefault("filter_category", None)
    st.session_state.setdefault("filter_min_rating", 0.0)
    st.session_state.setdefault("filter_release_year", "")


def render_filter_sidebar(state: MovieBrowserState) -> None:
    """Draw the filter widgets and push their current values into the state."""

    ensure_filter_defaults()
    category_options: List[Optional[int]] = [None] + [category.id for category in state.categories]
    if st.session_state["filter_category"] not in category_options:
        st.session_state["filter_category"] = None

    with st.sidebar:
        st.header("Filters")
        if not state.categories_loaded:
            st.caption("Loading categories…")
        category = st.selectbox(
            "Category",
            category_options,
            format_func=lambda value: "All" if value is None else state.category_name(value),
            key="filter_category",
        )
        min_rating = st.number_input(
            "Min Rating",
            min_value=0.0,
            max_value=10.0,
            step=0.1,
            key="filter_min_rating",
        )
        release_year = st.text_input(
            "Release Year",
            placeholder="e.g., 2020",
            key="filter_release_year",
        )

    state.set_category(category)
    state.set_min_rating(min_rating)
    state.set_release_year_prefix(release_year)


def render_movie_card(state: MovieBrowserState, movie: Movie) -> None:
    image = poster_url(movie.poster_path)
    if image:
        st.image(image)
    st.markdown(f"**{movie.title}**")
    st.caption(f"⭐ {movie.vote_average} | 📅 {movie.release_date or 'N/A'}")
    user_rating = state.rating_for(movie.id)
    st.caption(f"📊 User Rating: {user_rating if user_rating is not None else 'Not rated'}")
    if st.button("Details", key=f"details_{movie.id}"):
        state.select_movie(movie)
        trigger_rerun()


def render_movie_grid(state: MovieBrowserState) -> None:
    if not state.catalog_loaded:
        st.info("Loading popular movies…")
        return

    movies = state.visible()
    if not movies:
        st.info("No movies found.")
        return

    st.caption(f"Showing {len(movies)} of {len(state.movies)} popular movies.")
    for start in range(0, len(movies), GRID_COLUMNS):
        columns = st.columns(GRID_COLUMNS)
        for column, movie in zip(columns, movies[start : start + GRID_COLUMNS]):
            with column:
                render_movie_card(state, movie)


def render_movie_detail(state: MovieBrowserState) -> None:
    """Display the selected movie with its rating input and trailer."""

    selection = state.selection
    if selection is None:
        return
    movie = selection.movie

    with st.container():
        layout_columns = st.columns([1, 2.4])

        with layout_columns[0]:
            image = poster_url(movie.poster_path)
            if image:
                st.image(image, width=260)

        with layout_columns[1]:
            st.markdown(f"### {movie.title}")
            if movie.overview:
                st.write(movie.overview)
            st.markdown(f"**⭐ {movie.vote_average}** | 📅 {movie.release_date or 'N/A'}")

            current = state.rating_for(movie.id)
            new_rating = st.number_input(
                "Rate this movie",
                min_value=MIN_USER_RATING,
                max_value=MAX_USER_RATING,
                value=current,
                step=1,
                placeholder="Not rated",
                key=f"user_rating_{movie.id}",
            )
            if new_rating is not None and new_rating != current:
                state.set_rating(movie.id, new_rating)

            video = trailer_url(selection.trailer_key or "")
            if selection.pending:
                st.info("Looking for a trailer…")
            elif video:
                st.video(video)
            else:
                st.info("No trailer available.")

            if st.button("Close", key="close_detail"):
                state.clear_selection()
                trigger_rerun()

    st.divider()


st.title("🎬 Movie Listing")

browser_state = get_browser_state()
render_filter_sidebar(browser_state)
render_movie_detail(browser_state)
render_movie_grid(browser_state)

if browser_state.awaiting_results:
    # Fetches finish on worker threads; poll until they land.
    time.sleep(POLL_INTERVAL)
    trigger_rerun()
