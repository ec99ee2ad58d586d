from __future__ import annotations

from models import Category, FilterCriteria, Movie, Video


def test_movie_from_payload_fills_defaults() -> None:
    movie = Movie.from_payload({"id": "27205", "vote_average": "8.4", "genre_ids": [28, "878", None]})

    assert movie.id == 27205
    assert movie.title == "Unknown Title"
    assert movie.overview == ""
    assert movie.poster_path is None
    assert movie.vote_average == 8.4
    assert movie.release_date == ""
    assert movie.genre_ids == (28, 878)


def test_movie_from_payload_treats_bad_score_as_zero() -> None:
    assert Movie.from_payload({"id": 1, "vote_average": None}).vote_average == 0.0
    assert Movie.from_payload({"id": 1, "vote_average": "n/a"}).vote_average == 0.0


def test_category_and_video_payloads() -> None:
    assert Category.from_payload({"id": 18, "name": "Drama"}) == Category(18, "Drama")
    assert Video.from_payload({"key": "SUXWAEX2jlg", "type": "Trailer", "site": "YouTube"}) == Video(
        key="SUXWAEX2jlg", type="Trailer", site="YouTube"
    )


def test_filter_criteria_defaults() -> None:
    criteria = FilterCriteria()

    assert criteria.selected_category is None
    assert criteria.min_rating == 0.0
    assert criteria.release_year_prefix == ""
