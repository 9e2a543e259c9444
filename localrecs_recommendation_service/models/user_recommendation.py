"""Stores generated recommendation lists per user."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from localrecs_recommendation_service.models.base import Base


class UserRecommendation(Base):
    """One ranked entry in a user's movie or series recommendation list."""

    __tablename__ = "user_recommendations"

    # Composite primary key
    user_id = Column(String(64), primary_key=True)
    media_kind = Column(String(16), primary_key=True)
    item_id = Column(String(64), primary_key=True)

    rank = Column(Integer, nullable=False)
    similarity_score = Column(Float, nullable=False)

    computed_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_user_kind_rank", "user_id", "media_kind", "rank"),
    )

    def __repr__(self):
        return (
            f"<UserRecommendation(user_id={self.user_id}, kind={self.media_kind}, "
            f"item_id={self.item_id}, rank={self.rank}, score={self.similarity_score:.3f})>"
        )
