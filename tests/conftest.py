"""Shared test fixtures and configuration for pytest."""
from datetime import UTC, datetime, timedelta
from typing import Dict, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from localrecs_recommendation_service.config import RecommendationConfig
from localrecs_recommendation_service.models import MediaItem, MediaKind, WatchRecord
from localrecs_recommendation_service.models.base import Base
from localrecs_recommendation_service.repos import RecommendationRepository


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine):
    """Create a database session for testing."""
    SessionLocal = sessionmaker(bind=test_db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def recommendation_repository(test_db_session):
    """RecommendationRepository bound to the test session."""
    return RecommendationRepository(test_db_session)


# ===== Sample Data Fixtures =====

@pytest.fixture
def reference_time() -> datetime:
    """Fixed "now" so recency weights are reproducible."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def sample_movies() -> List[MediaItem]:
    """Ten movies spanning science fiction, drama, action, comedy, horror and animation."""
    return [
        MediaItem(
            id="m01", name="The Matrix", kind=MediaKind.MOVIE,
            release_year=1999, community_rating=8.7, critic_rating=88,
            external_ids={"tmdb": "603"}, path="/media/movies/matrix.mkv",
            genres=["Science Fiction", "Action"],
            actors=["Keanu Reeves", "Laurence Fishburne", "Carrie-Anne Moss"],
            directors=["Lana Wachowski", "Lilly Wachowski"],
            tags=["Cyberpunk", "Mind-bending", "Dystopian"],
        ),
        MediaItem(
            id="m02", name="Inception", kind=MediaKind.MOVIE,
            release_year=2010, community_rating=8.8, critic_rating=87,
            external_ids={"tmdb": "27205"}, path="/media/movies/inception.mkv",
            genres=["Science Fiction", "Action", "Thriller"],
            actors=["Leonardo DiCaprio", "Joseph Gordon-Levitt", "Elliot Page"],
            directors=["Christopher Nolan"],
            tags=["Mind-bending", "Heist", "Dreams"],
        ),
        MediaItem(
            id="m03", name="Blade Runner 2049", kind=MediaKind.MOVIE,
            release_year=2017, community_rating=8.0, critic_rating=88,
            path="/media/movies/bladerunner2049.mkv",
            genres=["Science Fiction", "Drama"],
            actors=["Ryan Gosling", "Harrison Ford", "Ana de Armas"],
            directors=["Denis Villeneuve"],
            tags=["Cyberpunk", "Dystopian", "Neo-Noir"],
        ),
        MediaItem(
            id="m04", name="The Godfather", kind=MediaKind.MOVIE,
            release_year=1972, community_rating=9.2, critic_rating=98,
            path="/media/movies/godfather.mkv",
            genres=["Drama", "Crime"],
            actors=["Marlon Brando", "Al Pacino", "James Caan"],
            directors=["Francis Ford Coppola"],
            tags=["Mafia", "Classic", "Epic"],
        ),
        MediaItem(
            id="m05", name="The Shawshank Redemption", kind=MediaKind.MOVIE,
            release_year=1994, community_rating=9.3, critic_rating=91,
            path="/media/movies/shawshank.mkv",
            genres=["Drama"],
            actors=["Tim Robbins", "Morgan Freeman", "Bob Gunton"],
            directors=["Frank Darabont"],
            tags=["Prison", "Classic", "Inspirational"],
        ),
        MediaItem(
            id="m06", name="The Dark Knight", kind=MediaKind.MOVIE,
            release_year=2008, community_rating=9.0, critic_rating=94,
            path="/media/movies/darkknight.mkv",
            genres=["Action", "Crime", "Drama"],
            actors=["Christian Bale", "Heath Ledger", "Aaron Eckhart"],
            directors=["Christopher Nolan"],
            tags=["Superhero", "Dark", "Epic"],
        ),
        MediaItem(
            id="m07", name="Interstellar", kind=MediaKind.MOVIE,
            release_year=2014, community_rating=8.6, critic_rating=72,
            path="/media/movies/interstellar.mkv",
            genres=["Science Fiction", "Drama", "Adventure"],
            actors=["Matthew McConaughey", "Anne Hathaway", "Jessica Chastain"],
            directors=["Christopher Nolan"],
            tags=["Space", "Epic", "Mind-bending"],
        ),
        MediaItem(
            id="m08", name="Groundhog Day", kind=MediaKind.MOVIE,
            release_year=1993, community_rating=8.0, critic_rating=96,
            path="/media/movies/groundhogday.mkv",
            genres=["Comedy", "Fantasy", "Romance"],
            actors=["Bill Murray", "Andie MacDowell", "Chris Elliott"],
            directors=["Harold Ramis"],
            tags=["Time Loop", "Classic", "Feel-good"],
        ),
        MediaItem(
            id="m09", name="Alien", kind=MediaKind.MOVIE,
            release_year=1979, community_rating=8.5, critic_rating=98,
            path="/media/movies/alien.mkv",
            genres=["Horror", "Science Fiction"],
            actors=["Sigourney Weaver", "Tom Skerritt", "John Hurt"],
            directors=["Ridley Scott"],
            tags=["Space", "Survival", "Classic"],
        ),
        MediaItem(
            id="m10", name="Toy Story", kind=MediaKind.MOVIE,
            release_year=1995, community_rating=8.3, critic_rating=100,
            path="/media/movies/toystory.mkv",
            genres=["Animation", "Comedy", "Family"],
            actors=["Tom Hanks", "Tim Allen", "Don Rickles"],
            directors=["John Lasseter"],
            tags=["Pixar", "Feel-good", "Classic"],
        ),
    ]


@pytest.fixture
def sample_series() -> List[MediaItem]:
    """Three series."""
    return [
        MediaItem(
            id="s01", name="Stranger Things", kind=MediaKind.SERIES,
            release_year=2016, community_rating=8.7, critic_rating=89,
            external_ids={"tvdb": "305288"}, path="/media/tv/strangerthings",
            genres=["Science Fiction", "Drama", "Horror"],
            actors=["Millie Bobby Brown", "Finn Wolfhard", "Winona Ryder"],
            tags=["Supernatural", "80s Nostalgia", "Coming of Age"],
        ),
        MediaItem(
            id="s02", name="Westworld", kind=MediaKind.SERIES,
            release_year=2016, community_rating=8.6, critic_rating=73,
            external_ids={"tvdb": "296762"}, path="/media/tv/westworld",
            genres=["Science Fiction", "Western", "Drama"],
            actors=["Evan Rachel Wood", "Jeffrey Wright", "Thandiwe Newton"],
            tags=["AI", "Dystopian", "Mind-bending"],
        ),
        MediaItem(
            id="s03", name="Breaking Bad", kind=MediaKind.SERIES,
            release_year=2008, community_rating=9.5, critic_rating=96,
            external_ids={"tvdb": "81189"}, path="/media/tv/breakingbad",
            genres=["Drama", "Crime", "Thriller"],
            actors=["Bryan Cranston", "Aaron Paul", "Anna Gunn"],
            tags=["Crime", "Antihero"],
        ),
    ]


@pytest.fixture
def sample_catalog(sample_movies, sample_series) -> List[MediaItem]:
    """Movies followed by series."""
    return sample_movies + sample_series


@pytest.fixture
def sci_fi_fan_history(reference_time) -> List[WatchRecord]:
    """Watched The Matrix (favorite, 3 plays, 7 days ago) and Inception (14 days ago)."""
    return [
        WatchRecord(
            item_id="m01", user_id="user-scifi",
            last_played=reference_time - timedelta(days=7),
            is_favorite=True, play_count=3,
        ),
        WatchRecord(
            item_id="m02", user_id="user-scifi",
            last_played=reference_time - timedelta(days=14),
            is_favorite=False, play_count=1,
        ),
    ]


@pytest.fixture
def drama_fan_history(reference_time) -> List[WatchRecord]:
    """Watched The Godfather, The Shawshank Redemption and Breaking Bad."""
    return [
        WatchRecord(
            item_id="m04", user_id="user-drama",
            last_played=reference_time - timedelta(days=10),
            is_favorite=True, play_count=5,
        ),
        WatchRecord(
            item_id="m05", user_id="user-drama",
            last_played=reference_time - timedelta(days=20),
            is_favorite=True, play_count=3,
        ),
        WatchRecord(
            item_id="s03", user_id="user-drama",
            last_played=reference_time - timedelta(days=30),
            is_favorite=False, play_count=1,
        ),
    ]


@pytest.fixture
def history_by_user(sci_fi_fan_history, drama_fan_history) -> Dict[str, List[WatchRecord]]:
    """Watch history for two users plus one user with none."""
    return {
        "user-scifi": sci_fi_fan_history,
        "user-drama": drama_fan_history,
        "user-new": [],
    }


@pytest.fixture
def generous_config() -> RecommendationConfig:
    """Caps large enough to keep every feature value."""
    return RecommendationConfig(
        max_vocabulary_genres=0,
        max_vocabulary_actors=0,
        max_vocabulary_directors=0,
        max_vocabulary_tags=0,
        movie_recommendation_count=5,
        series_recommendation_count=5,
    )
