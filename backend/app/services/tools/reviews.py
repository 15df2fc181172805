"""评价用例

每次评价写入（创建、投票、回复、举报、审核）和删除提交后，都显式刷新工具的平均分。
刷新失败只记录日志并回滚本次刷新，不影响已提交的评价。并发写入同一工具时以最后一次刷新为准。
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.crud.tool import tool_crud
from app.crud.tool_review import tool_review_crud
from app.crud.tool_usage import tool_usage_crud
from app.exceptions import ToolNotFoundError
from app.models.tool_review import ToolReview
from app.schemas.tool_review import ToolReviewCreate

logger = logging.getLogger("uvicorn.error")


async def refresh_tool_rating(db: AsyncSession, tool_id: str) -> bool:
    """重新计算工具平均分，刷新出错时返回 False；工具已不存在不算出错"""
    try:
        average_rating = await tool_crud.update_average_rating(db, tool_id)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("tool-rating-refresh-failed tool_id=%s error=%s", tool_id, str(exc)[:180])
        return False
    if average_rating is None:
        logger.warning("tool-rating-refresh-skipped tool_id=%s reason=tool-missing", tool_id)
    else:
        logger.info("tool-rating-refreshed tool_id=%s average_rating=%s", tool_id, average_rating)
    return True


async def _refresh_after_write(db: AsyncSession, review: ToolReview) -> None:
    if not await refresh_tool_rating(db, review.tool_id):
        # 回滚会使会话中的对象过期，重新加载评价供调用方读取
        await db.refresh(review)


async def submit_review(
    db: AsyncSession,
    tool_id: str,
    user_id: str,
    obj_in: ToolReviewCreate,
) -> ToolReview:
    """提交评价；评价者使用过该工具时标记为已验证"""
    tool = await tool_crud.get(db, tool_id, active_only=True)
    if not tool:
        raise ToolNotFoundError(tool_id)

    verified = await tool_usage_crud.has_used(db, tool_id, user_id)
    review = await tool_review_crud.create(db, tool_id, user_id, obj_in, verified=verified)
    await _refresh_after_write(db, review)
    return review


async def vote_review(db: AsyncSession, review: ToolReview, user_id: str, helpful: bool) -> ToolReview:
    review = await tool_review_crud.add_helpful_vote(db, review, user_id, helpful)
    await _refresh_after_write(db, review)
    return review


async def respond_to_review(
    db: AsyncSession,
    review: ToolReview,
    responder_id: str,
    message: str,
) -> ToolReview:
    review = await tool_review_crud.add_response(db, review, responder_id, message)
    await _refresh_after_write(db, review)
    return review


async def flag_review(db: AsyncSession, review: ToolReview, reason: str) -> ToolReview:
    review = await tool_review_crud.flag(db, review, reason)
    await _refresh_after_write(db, review)
    return review


async def moderate_review(
    db: AsyncSession,
    review: ToolReview,
    moderator_id: str,
    approved: bool,
) -> ToolReview:
    review = await tool_review_crud.moderate(db, review, moderator_id, approved)
    await _refresh_after_write(db, review)
    return review


async def remove_review(db: AsyncSession, review: ToolReview) -> None:
    tool_id = review.tool_id
    await tool_review_crud.delete(db, review)
    await refresh_tool_rating(db, tool_id)
