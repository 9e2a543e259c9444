"""Repository for persisting generated recommendation lists."""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc
from datetime import datetime, UTC
import logging

from localrecs_recommendation_service.models import (
    MediaKind,
    ScoredRecommendation,
    UserRecommendation,
    UserRecommendations,
)

logger = logging.getLogger(__name__)


class RecommendationRepository:
    """
    Repository for per-user ranked recommendation lists.
    """

    def __init__(self, db: Session):
        self.db = db

    def _build_rows(self, recommendations: UserRecommendations, computed_at: datetime) -> List[UserRecommendation]:
        rows = []
        for kind in MediaKind:
            for rank, rec in enumerate(recommendations.for_kind(kind), start=1):
                rows.append(UserRecommendation(
                    user_id=recommendations.user_id,
                    media_kind=kind.value,
                    item_id=rec.item_id,
                    rank=rank,
                    similarity_score=rec.score,
                    computed_at=computed_at
                ))
        return rows

    def store_user_recommendations(self, recommendations: UserRecommendations) -> int:
        """
        Replace a user's stored movie and series lists.

        Args:
            recommendations: Ranked lists for one user

        Returns:
            Number of rows stored
        """
        self.db.query(UserRecommendation).filter(
            UserRecommendation.user_id == recommendations.user_id
        ).delete()

        rows = self._build_rows(recommendations, datetime.now(UTC))
        self.db.add_all(rows)
        self.db.commit()

        logger.info(f"✓ Stored {len(rows)} recommendations for user {recommendations.user_id}")
        return len(rows)

    def bulk_store_all(
            self,
            all_recommendations: Dict[str, UserRecommendations],
            batch_size: int = 1000,
            clear_existing: bool = True
    ) -> int:
        """
        Store recommendation lists for many users.

        Args:
            all_recommendations: User id -> UserRecommendations
            batch_size: Number of rows to insert per batch
            clear_existing: Whether to clear all stored lists first

        Returns:
            Total number of rows stored
        """
        if clear_existing:
            logger.info("Clearing existing recommendations...")
            self.db.query(UserRecommendation).delete()
            self.db.commit()
        else:
            for user_id in all_recommendations:
                self.db.query(UserRecommendation).filter(
                    UserRecommendation.user_id == user_id
                ).delete()
            self.db.commit()

        computed_at = datetime.now(UTC)
        all_rows = []
        for recommendations in all_recommendations.values():
            all_rows.extend(self._build_rows(recommendations, computed_at))

        total_count = 0
        logger.info(f"Inserting {len(all_rows)} recommendation records...")

        for i in range(0, len(all_rows), batch_size):
            batch = all_rows[i:i + batch_size]
            self.db.add_all(batch)
            self.db.commit()
            total_count += len(batch)

        logger.info(f"✓ Stored {total_count} recommendations for {len(all_recommendations)} users")
        return total_count

    def get_recommendations(
            self,
            user_id: str,
            media_kind: MediaKind,
            n: Optional[int] = None
    ) -> List[ScoredRecommendation]:
        """
        Read back a user's stored list in rank order.

        Args:
            user_id: User identifier
            media_kind: Movie or Series
            n: Maximum number of entries (all when None)

        Returns:
            List of ScoredRecommendation
        """
        query = (
            self.db.query(UserRecommendation)
            .filter(
                UserRecommendation.user_id == str(user_id),
                UserRecommendation.media_kind == MediaKind(media_kind).value
            )
            .order_by(UserRecommendation.rank)
        )
        if n is not None:
            query = query.limit(n)

        return [
            ScoredRecommendation(item_id=row.item_id, score=row.similarity_score)
            for row in query.all()
        ]

    def count_recommendations(self, user_id: Optional[str] = None) -> int:
        """Count stored rows, for one user or all users."""
        query = self.db.query(UserRecommendation)

        if user_id is not None:
            query = query.filter(UserRecommendation.user_id == str(user_id))

        return query.count()

    def delete_user(self, user_id: str) -> int:
        """
        Delete all stored recommendations for a user.

        Returns:
            Number of deleted rows
        """
        count = (
            self.db.query(UserRecommendation)
            .filter(UserRecommendation.user_id == str(user_id))
            .delete()
        )
        self.db.commit()

        logger.info(f"Deleted {count} recommendations for user {user_id}")
        return count

    def get_stats(self) -> Dict:
        """Get statistics about stored recommendations."""
        total_records = self.db.query(UserRecommendation).count()
        unique_users = (
            self.db.query(UserRecommendation.user_id)
            .distinct()
            .count()
        )

        latest = (
            self.db.query(UserRecommendation.computed_at)
            .order_by(desc(UserRecommendation.computed_at))
            .first()
        )

        return {
            'total_records': total_records,
            'unique_users': unique_users,
            'avg_recommendations_per_user': total_records / unique_users if unique_users > 0 else 0,
            'last_computed': latest[0] if latest else None
        }
