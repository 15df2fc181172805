"""工具评价的CRUD与统计查询

Review note:
- 重复评价依赖 (tool_id, user_id) 唯一约束，IntegrityError 转为 DuplicateReviewError。
- 本文件只负责单表读写；评价写入后的工具评分刷新由 services/tools/reviews.py 显式调用。
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime

from app.exceptions import DuplicateReviewError
from app.models.tool_review import ToolReview, ToolReviewVote
from app.models.user import User
from app.schemas.tool_review import ToolReviewCreate, ReviewWithAuthor

RATINGS = (1, 2, 3, 4, 5)


def _full_name(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    if first_name is None:
        return None
    return f"{first_name} {last_name or ''}".strip()


class CRUDToolReview:
    """评价CRUD操作"""

    async def get(self, db: AsyncSession, review_id: str) -> Optional[ToolReview]:
        """获取单条评价"""
        result = await db.execute(
            select(ToolReview).where(ToolReview.id == review_id)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        tool_id: str,
        user_id: str,
        obj_in: ToolReviewCreate,
        verified: bool = False,
    ) -> ToolReview:
        """创建评价，同一用户对同一工具重复评价时抛出 DuplicateReviewError"""
        db_obj = ToolReview(
            tool_id=tool_id,
            user_id=user_id,
            rating=obj_in.rating,
            comment=obj_in.comment,
            recommend=obj_in.recommend,
            verified=verified,
        )
        db.add(db_obj)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateReviewError()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, review: ToolReview) -> None:
        """删除评价及其投票"""
        await db.execute(
            delete(ToolReviewVote).where(ToolReviewVote.review_id == review.id)
        )
        await db.execute(
            delete(ToolReview).where(ToolReview.id == review.id)
        )
        await db.commit()

    async def list_by_tool(
        self,
        db: AsyncSession,
        tool_id: str,
        page: int = 1,
        limit: int = 10,
        rating: Optional[int] = None,
    ) -> Tuple[List[ReviewWithAuthor], int]:
        """分页获取启用中的评价，可按评分筛选"""
        conditions = [ToolReview.tool_id == tool_id, ToolReview.is_active.is_(True)]
        if rating is not None:
            conditions.append(ToolReview.rating == rating)

        total = (await db.execute(
            select(func.count(ToolReview.id)).where(*conditions)
        )).scalar_one()

        result = await db.execute(
            select(ToolReview, User.first_name, User.last_name, User.profile_image)
            .outerjoin(User, User.id == ToolReview.user_id)
            .where(*conditions)
            .order_by(ToolReview.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        reviews = [
            ReviewWithAuthor.from_review(
                review,
                user_name=_full_name(first_name, last_name),
                user_profile_image=profile_image,
            )
            for review, first_name, last_name, profile_image in result.all()
        ]
        return reviews, total

    async def get_recent_reviews(
        self,
        db: AsyncSession,
        tool_id: str,
        limit: int = 10,
    ) -> List[ReviewWithAuthor]:
        """最新的启用中评价，附带作者姓名和头像"""
        reviews, _ = await self.list_by_tool(db, tool_id, page=1, limit=limit)
        return reviews

    async def get_user_review(
        self,
        db: AsyncSession,
        tool_id: str,
        user_id: str,
    ) -> Optional[ReviewWithAuthor]:
        """用户对该工具的启用中评价，有回复时附带回复人姓名"""
        author = aliased(User)
        responder = aliased(User)
        result = await db.execute(
            select(
                ToolReview,
                author.first_name,
                author.last_name,
                author.profile_image,
                responder.first_name,
                responder.last_name,
            )
            .outerjoin(author, author.id == ToolReview.user_id)
            .outerjoin(responder, responder.id == ToolReview.responded_by)
            .where(
                ToolReview.tool_id == tool_id,
                ToolReview.user_id == user_id,
                ToolReview.is_active.is_(True),
            )
        )
        row = result.first()
        if row is None:
            return None
        review, first_name, last_name, profile_image, responder_first, responder_last = row
        return ReviewWithAuthor.from_review(
            review,
            user_name=_full_name(first_name, last_name),
            user_profile_image=profile_image,
            responder_name=_full_name(responder_first, responder_last),
        )

    async def get_tool_review_stats(self, db: AsyncSession, tool_id: str) -> Dict[str, Any]:
        """一次聚合得到评价数、平均分、推荐率和 1-5 分分布"""
        distribution_columns = [
            func.sum(case((ToolReview.rating == rating, 1), else_=0)).label(f"rating_{rating}")
            for rating in RATINGS
        ]
        result = await db.execute(
            select(
                func.count(ToolReview.id).label("total"),
                func.avg(ToolReview.rating).label("average"),
                func.sum(case((ToolReview.recommend.is_(True), 1), else_=0)).label("recommended"),
                *distribution_columns,
            ).where(ToolReview.tool_id == tool_id, ToolReview.is_active.is_(True))
        )
        row = result.one()._mapping

        total = row["total"]
        distribution = {rating: int(row[f"rating_{rating}"] or 0) for rating in RATINGS}
        if not total:
            return {
                "total_reviews": 0,
                "average_rating": 0.0,
                "recommendation_rate": 0.0,
                "rating_distribution": distribution,
            }
        return {
            "total_reviews": total,
            "average_rating": round(float(row["average"]), 1),
            "recommendation_rate": round(int(row["recommended"] or 0) * 100 / total, 1),
            "rating_distribution": distribution,
        }

    async def get_rating_summaries(
        self,
        db: AsyncSession,
        tool_ids: List[str],
    ) -> Dict[str, Tuple[float, int]]:
        """批量计算工具的实时平均分和评价数"""
        if not tool_ids:
            return {}
        result = await db.execute(
            select(ToolReview.tool_id, func.avg(ToolReview.rating), func.count(ToolReview.id))
            .where(ToolReview.tool_id.in_(tool_ids), ToolReview.is_active.is_(True))
            .group_by(ToolReview.tool_id)
        )
        return {
            tool_id: (round(float(avg), 1), count)
            for tool_id, avg, count in result.all()
        }

    async def get_votes(self, db: AsyncSession, review_id: str) -> List[ToolReviewVote]:
        """评价的全部投票"""
        result = await db.execute(
            select(ToolReviewVote)
            .where(ToolReviewVote.review_id == review_id)
            .order_by(ToolReviewVote.voted_at)
        )
        return list(result.scalars().all())

    async def add_helpful_vote(
        self,
        db: AsyncSession,
        review: ToolReview,
        user_id: str,
        helpful: bool,
    ) -> ToolReview:
        """投票，同一用户的旧投票被替换，随后重新统计有用数"""
        await db.execute(
            delete(ToolReviewVote).where(
                ToolReviewVote.review_id == review.id,
                ToolReviewVote.user_id == user_id,
            )
        )
        db.add(ToolReviewVote(
            review_id=review.id,
            user_id=user_id,
            helpful=helpful,
            voted_at=datetime.utcnow(),
        ))
        await db.flush()

        result = await db.execute(
            select(
                func.count(ToolReviewVote.id),
                func.sum(case((ToolReviewVote.helpful.is_(True), 1), else_=0)),
            ).where(ToolReviewVote.review_id == review.id)
        )
        total_votes, helpful_count = result.one()
        review.total_votes = total_votes
        review.helpful_count = int(helpful_count or 0)

        await db.commit()
        await db.refresh(review)
        return review

    async def add_response(
        self,
        db: AsyncSession,
        review: ToolReview,
        responder_id: str,
        message: str,
    ) -> ToolReview:
        """写入官方回复（覆盖已有回复）"""
        review.response_message = message
        review.responded_by = responder_id
        review.responded_at = datetime.utcnow()
        await db.commit()
        await db.refresh(review)
        return review

    async def flag(self, db: AsyncSession, review: ToolReview, reason: str) -> ToolReview:
        """举报评价"""
        review.flagged = True
        review.flag_reason = reason
        await db.commit()
        await db.refresh(review)
        return review

    async def moderate(
        self,
        db: AsyncSession,
        review: ToolReview,
        moderator_id: str,
        approved: bool,
    ) -> ToolReview:
        """审核评价，驳回时同时标记为已举报"""
        review.is_active = approved
        review.moderated_by = moderator_id
        review.moderated_at = datetime.utcnow()
        if not approved:
            review.flagged = True
        await db.commit()
        await db.refresh(review)
        return review


# 创建实例
tool_review_crud = CRUDToolReview()
