"""工具评价模型

Review note:
- (tool_id, user_id) 唯一：每个用户对同一工具只能评价一次。
- helpful_count / total_votes 由投票表重新统计得到，不做增量维护。
- flagged 与 is_active 是两个独立的状态位，审核驳回会同时设置 is_active=False 和 flagged=True。
"""
from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint, Index,
)
from datetime import datetime

from app.models.base import Base, TimestampMixin

FLAG_REASONS = ("spam", "inappropriate", "fake", "offensive", "other")


class ToolReview(TimestampMixin, Base):
    """工具评价表"""
    __tablename__ = "tool_reviews"

    tool_id = Column(String(50), ForeignKey("tools.id"), nullable=False, index=True)
    user_id = Column(String(50), ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(String(1000), nullable=True)
    recommend = Column(Boolean, nullable=False, default=True)
    helpful_count = Column(Integer, nullable=False, default=0)
    total_votes = Column(Integer, nullable=False, default=0)
    verified = Column(Boolean, nullable=False, default=False)  # 评价者确实使用过该工具

    # 官方回复（同一时间只保留一条）
    response_message = Column(String(500), nullable=True)
    responded_by = Column(String(50), ForeignKey("users.id"), nullable=True)
    responded_at = Column(DateTime, nullable=True)

    flagged = Column(Boolean, nullable=False, default=False)
    flag_reason = Column(String(20), nullable=True)
    moderated_by = Column(String(50), ForeignKey("users.id"), nullable=True)
    moderated_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("tool_id", "user_id", name="uq_tool_review_tool_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_review_rating"),
        CheckConstraint(
            "flag_reason IS NULL OR flag_reason IN ('spam', 'inappropriate', 'fake', 'offensive', 'other')",
            name="check_review_flag_reason",
        ),
        Index("ix_tool_reviews_tool_rating", "tool_id", "rating"),
        Index("ix_tool_reviews_tool_created_at", "tool_id", "created_at"),
        Index("ix_tool_reviews_user_created_at", "user_id", "created_at"),
    )

    @property
    def response(self):
        if not self.response_message:
            return None
        return {
            "message": self.response_message,
            "responded_by": self.responded_by,
            "responded_at": self.responded_at,
        }

    @property
    def helpful_percentage(self) -> int:
        if not self.total_votes:
            return 0
        # 四舍五入取整，.5 进位
        return int(self.helpful_count * 100 / self.total_votes + 0.5)

    @property
    def rating_display(self) -> str:
        return "★" * self.rating + "☆" * (5 - self.rating)

    def __repr__(self):
        return f"<ToolReview tool={self.tool_id} user={self.user_id} rating={self.rating}>"


class ToolReviewVote(Base):
    """评价的有用/无用投票（每个用户每条评价一票）"""
    __tablename__ = "tool_review_votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(String(50), ForeignKey("tool_reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(50), ForeignKey("users.id"), nullable=False)
    helpful = Column(Boolean, nullable=False)
    voted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_vote_review_user"),
    )

    def __repr__(self):
        return f"<ToolReviewVote review={self.review_id} user={self.user_id} helpful={self.helpful}>"
