"""
Tests for scripts/run_pipeline.py
"""

import json
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import localrecs_recommendation_service.models.database as db_module
from localrecs_recommendation_service.models import ScoredRecommendation, UserRecommendations
from localrecs_recommendation_service.repos import RecommendationRepository

# Import functions from the script
from scripts.run_pipeline import main, parse_args, store_results, write_output


@pytest.fixture
def export_files(tmp_path):
    """Catalog and history exports on disk."""
    catalog = [
        {"id": "m1", "name": "The Matrix", "kind": "Movie", "release_year": 1999,
         "genres": ["Science Fiction", "Action"], "actors": ["Keanu Reeves"]},
        {"id": "m2", "name": "John Wick", "kind": "Movie", "release_year": 2014,
         "genres": ["Action", "Thriller"], "actors": ["Keanu Reeves"]},
        {"id": "m3", "name": "Notting Hill", "kind": "Movie", "release_year": 1999,
         "genres": ["Romance", "Comedy"], "actors": ["Julia Roberts"]},
        {"id": "s1", "name": "Dark", "kind": "Series", "release_year": 2017,
         "genres": ["Science Fiction", "Drama"]},
    ]
    history = [
        {"user_id": "alice", "item_id": "m1", "last_played": "2024-05-01T20:00:00Z",
         "is_favorite": True, "play_count": 2},
        {"user_id": "bob", "item_id": "m3", "last_played": "2024-05-02T20:00:00Z",
         "is_favorite": False, "play_count": 1},
    ]
    catalog_path = tmp_path / "catalog.json"
    history_path = tmp_path / "history.json"
    catalog_path.write_text(json.dumps(catalog))
    history_path.write_text(json.dumps(history))
    return catalog_path, history_path


@pytest.fixture
def script_database(monkeypatch, test_db_engine):
    """Point the script's lazy database import at the test engine."""
    monkeypatch.setattr(db_module, "engine", test_db_engine)
    monkeypatch.setattr(db_module, "SessionLocal", sessionmaker(bind=test_db_engine))
    return test_db_engine


class TestParseArgs:
    """Tests for parse_args function."""

    def test_required_and_defaults(self):
        """Test required inputs and default output path."""
        args = parse_args(["--catalog", "c.json", "--history", "h.json"])

        assert args.catalog == "c.json"
        assert args.history == "h.json"
        assert args.output == "data/recommendations.json"
        assert args.store_db is False
        assert args.movie_count is None

    def test_overrides(self):
        """Test optional overrides are parsed."""
        args = parse_args([
            "--catalog", "c.csv", "--history", "h.csv", "--store-db",
            "--movie-count", "5", "--series-count", "3", "--users", "alice,bob",
        ])

        assert args.store_db is True
        assert args.movie_count == 5
        assert args.series_count == 3
        assert args.users == "alice,bob"

    def test_missing_required(self):
        """Test argparse exits when inputs are missing."""
        with pytest.raises(SystemExit):
            parse_args(["--catalog", "c.json"])


class TestWriteOutput:
    """Tests for write_output function."""

    def test_write_output(self, tmp_path):
        """Test the JSON document is keyed by user."""
        # Arrange
        output = tmp_path / "out" / "recs.json"
        results = {
            "alice": UserRecommendations("alice", movies=[ScoredRecommendation("m2", 0.8)]),
        }

        # Act
        write_output(results, output)

        # Assert
        document = json.loads(output.read_text())
        assert document == {
            "alice": {"movies": [{"item_id": "m2", "similarity_score": 0.8}], "series": []}
        }


class TestStoreResults:
    """Tests for store_results function."""

    def test_store_results(self, script_database, test_db_session):
        """Test results are written to the database."""
        # Arrange
        results = {
            "alice": UserRecommendations(
                "alice",
                movies=[ScoredRecommendation("m2", 0.8)],
                series=[ScoredRecommendation("s1", 0.3)],
            ),
        }

        # Act
        stored = store_results(results)

        # Assert
        assert stored == 2
        assert RecommendationRepository(test_db_session).count_recommendations("alice") == 2

    def test_store_results_creates_database_directory(self, tmp_path, monkeypatch):
        """Test a SQLite file under a missing directory is created on first store."""
        # Arrange
        db_path = tmp_path / "fresh" / "data" / "recs.db"
        file_engine = create_engine(f"sqlite:///{db_path}")
        monkeypatch.setattr(db_module, "engine", file_engine)
        monkeypatch.setattr(db_module, "SessionLocal", sessionmaker(bind=file_engine))
        results = {"alice": UserRecommendations("alice", movies=[ScoredRecommendation("m2", 0.8)])}

        # Act
        try:
            stored = store_results(results)
        finally:
            file_engine.dispose()

        # Assert
        assert stored == 1
        assert db_path.is_file()


class TestMain:
    """Tests for main function."""

    def test_main_success(self, export_files, tmp_path):
        """Test a full run writes recommendations for every user."""
        # Arrange
        catalog_path, history_path = export_files
        output = tmp_path / "recs.json"

        # Act
        exit_code = main([
            "--catalog", str(catalog_path), "--history", str(history_path),
            "--output", str(output), "--movie-count", "1",
        ])

        # Assert
        assert exit_code == 0
        document = json.loads(output.read_text())
        assert list(document) == ["alice", "bob"]
        assert [rec["item_id"] for rec in document["alice"]["movies"]] == ["m2"]
        assert [rec["item_id"] for rec in document["alice"]["series"]] == ["s1"]

    def test_main_filters_users(self, export_files, tmp_path):
        """Test --users restricts the run."""
        # Arrange
        catalog_path, history_path = export_files
        output = tmp_path / "recs.json"

        # Act
        exit_code = main([
            "--catalog", str(catalog_path), "--history", str(history_path),
            "--output", str(output), "--users", "bob",
        ])

        # Assert
        assert exit_code == 0
        assert list(json.loads(output.read_text())) == ["bob"]

    def test_main_store_db(self, export_files, tmp_path, script_database, test_db_session):
        """Test --store-db persists the lists."""
        # Arrange
        catalog_path, history_path = export_files

        # Act
        exit_code = main([
            "--catalog", str(catalog_path), "--history", str(history_path),
            "--output", str(tmp_path / "recs.json"), "--store-db",
        ])

        # Assert
        assert exit_code == 0
        assert RecommendationRepository(test_db_session).count_recommendations("alice") > 0

    def test_main_missing_file(self, tmp_path):
        """Test a missing input file exits with 1."""
        exit_code = main([
            "--catalog", str(tmp_path / "missing.json"), "--history", str(tmp_path / "missing.json"),
        ])

        assert exit_code == 1

    def test_main_invalid_override(self, export_files, tmp_path):
        """Test an invalid count override exits with 1."""
        catalog_path, history_path = export_files

        exit_code = main([
            "--catalog", str(catalog_path), "--history", str(history_path),
            "--output", str(tmp_path / "recs.json"), "--movie-count", "-3",
        ])

        assert exit_code == 1

    def test_main_service_error(self, export_files, tmp_path):
        """Test an error inside the pipeline is reported as exit code 1."""
        catalog_path, history_path = export_files

        with patch("scripts.run_pipeline.RecommendationRefreshService") as mock_service_class:
            mock_service_class.return_value.run.side_effect = RuntimeError("boom")

            exit_code = main([
                "--catalog", str(catalog_path), "--history", str(history_path),
                "--output", str(tmp_path / "recs.json"),
            ])

        assert exit_code == 1
