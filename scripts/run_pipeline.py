"""
Run the recommendation refresh for every user in a watch-history export.

Usage:
    # Generate recommendations and write them to JSON
    python scripts/run_pipeline.py --catalog data/catalog.json --history data/history.json

    # Also store the lists in the database
    python scripts/run_pipeline.py --catalog data/catalog.csv --history data/history.csv --store-db

    # Override list sizes
    python scripts/run_pipeline.py --catalog data/catalog.json --history data/history.json --movie-count 10
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import argparse
import json
import logging
import time
from dataclasses import replace
from typing import Dict, List, Optional

from localrecs_recommendation_service.config import load_config
from localrecs_recommendation_service.models import UserRecommendations
from localrecs_recommendation_service.services import RecommendationRefreshService
from localrecs_recommendation_service.services.catalog_loader import load_catalog, load_watch_history

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate content-based movie and series recommendations"
    )
    parser.add_argument(
        "--catalog", type=str, required=True, help="Catalog export (JSON or CSV)"
    )
    parser.add_argument(
        "--history", type=str, required=True, help="Watch history export (JSON or CSV)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="data/recommendations.json",
        help="Output JSON file (default: data/recommendations.json)",
    )
    parser.add_argument(
        "--store-db", action="store_true", help="Also store the lists in the database"
    )
    parser.add_argument(
        "--movie-count", type=int, default=None, help="Movie recommendations per user (default: from config)"
    )
    parser.add_argument(
        "--series-count", type=int, default=None, help="Series recommendations per user (default: from config)"
    )
    parser.add_argument(
        "--users", type=str, default=None, help="Comma-separated user ids to process (default: all)"
    )
    return parser.parse_args(argv)


def write_output(results: Dict[str, UserRecommendations], output_path: Path) -> None:
    """
    Write recommendation lists to a JSON file.

    Args:
        results: User id -> UserRecommendations
        output_path: Destination file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    document = {user_id: recs.to_dict() for user_id, recs in results.items()}
    with open(output_path, "w") as f:
        json.dump(document, f, indent=2)

    logger.info(f"✓ Wrote recommendations for {len(results)} users to {output_path}")


def store_results(results: Dict[str, UserRecommendations]) -> int:
    """Store all lists in the configured database."""
    from localrecs_recommendation_service.models import Base
    from localrecs_recommendation_service.models.database import (
        SessionLocal,
        engine,
        ensure_database_directory,
    )
    from localrecs_recommendation_service.repos import RecommendationRepository

    ensure_database_directory(engine.url)
    Base.metadata.create_all(engine)

    db = SessionLocal()
    try:
        repo = RecommendationRepository(db)
        return repo.bulk_store_all(results, clear_existing=False)
    finally:
        db.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    args = parse_args(argv)

    try:
        config = load_config()
        overrides = {}
        if args.movie_count is not None:
            overrides["movie_recommendation_count"] = args.movie_count
        if args.series_count is not None:
            overrides["series_recommendation_count"] = args.series_count
        config = replace(config, **overrides).ensure_valid()

        logger.info("=" * 70)
        logger.info("RECOMMENDATION PIPELINE")
        logger.info("=" * 70)
        logger.info(f"Catalog: {args.catalog}")
        logger.info(f"History: {args.history}")
        logger.info(f"Movies per user: {config.movie_recommendation_count}")
        logger.info(f"Series per user: {config.series_recommendation_count}")
        logger.info("=" * 70)

        start_time = time.time()

        catalog = load_catalog(Path(args.catalog))
        users = args.users.split(",") if args.users else None
        history = load_watch_history(Path(args.history), users=users)

        service = RecommendationRefreshService(config)
        results = service.run(catalog, history)

        write_output(results, Path(args.output))

        if args.store_db:
            stored = store_results(results)
            logger.info(f"✓ Stored {stored} rows in the database")

        elapsed = time.time() - start_time
        logger.info("\n" + "=" * 70)
        logger.info(f"✓ PIPELINE COMPLETE in {elapsed:.1f}s")
        logger.info("=" * 70)
        return 0

    except Exception as e:
        logger.error(f"Error during recommendation pipeline: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
