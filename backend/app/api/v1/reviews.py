"""工具评价API"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from app.api.deps import get_current_user, require_admin, is_admin
from app.config import settings
from app.crud.tool import tool_crud
from app.crud.tool_review import tool_review_crud
from app.database import get_session
from app.exceptions import ToolNotFoundError, ReviewNotFoundError, NotReviewOwnerError
from app.models.tool_review import ToolReview
from app.models.user import User
from app.schemas.tool_review import (
    ToolReviewCreate,
    ToolReviewResponse,
    ReviewWithAuthor,
    ReviewListResponse,
    ToolReviewStats,
    HelpfulVoteRequest,
    HelpfulVoteResponse,
    ReviewResponseRequest,
    FlagRequest,
    ModerateRequest,
)
from app.services.tools import reviews as review_service

router = APIRouter()


async def ensure_tool(db: AsyncSession, tool_id: str) -> None:
    tool = await tool_crud.get(db, tool_id)
    if not tool:
        raise ToolNotFoundError(tool_id)


async def get_review_or_404(db: AsyncSession, review_id: str) -> ToolReview:
    review = await tool_review_crud.get(db, review_id)
    if not review:
        raise ReviewNotFoundError(review_id)
    return review


# ========== 按工具 ==========

@router.post("/tools/{tool_id}/reviews", response_model=ToolReviewResponse, status_code=201)
async def submit_review(
    tool_id: str,
    review_in: ToolReviewCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
):
    """提交评价（每个用户每个工具一次）"""
    return await review_service.submit_review(db, tool_id, user.id, review_in)


@router.get("/tools/{tool_id}/reviews", response_model=ReviewListResponse)
async def get_reviews(
    tool_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    rating: Optional[int] = Query(None, ge=1, le=5),
    db: AsyncSession = Depends(get_session)
):
    """分页获取评价"""
    await ensure_tool(db, tool_id)
    reviews, total = await tool_review_crud.list_by_tool(db, tool_id, page, limit, rating)
    return {"reviews": reviews, "page": page, "limit": limit, "total_count": total}


@router.get("/tools/{tool_id}/reviews/stats", response_model=ToolReviewStats)
async def get_review_stats(
    tool_id: str,
    db: AsyncSession = Depends(get_session)
):
    """评价统计"""
    await ensure_tool(db, tool_id)
    return await tool_review_crud.get_tool_review_stats(db, tool_id)


@router.get("/tools/{tool_id}/reviews/recent", response_model=List[ReviewWithAuthor])
async def get_recent_reviews(
    tool_id: str,
    limit: int = Query(settings.RECENT_REVIEWS_LIMIT, ge=1, le=50),
    db: AsyncSession = Depends(get_session)
):
    """最新评价"""
    await ensure_tool(db, tool_id)
    return await tool_review_crud.get_recent_reviews(db, tool_id, limit)


@router.get("/tools/{tool_id}/reviews/mine", response_model=Optional[ReviewWithAuthor])
async def get_my_review(
    tool_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
):
    """当前用户对该工具的评价，没有时返回 null"""
    await ensure_tool(db, tool_id)
    return await tool_review_crud.get_user_review(db, tool_id, user.id)


# ========== 按评价 ==========

@router.post("/reviews/{review_id}/helpful", response_model=ToolReviewResponse)
async def vote_helpful(
    review_id: str,
    vote_in: HelpfulVoteRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
):
    """有用/无用投票，重复投票覆盖之前的选择"""
    review = await get_review_or_404(db, review_id)
    return await review_service.vote_review(db, review, user.id, vote_in.helpful)


@router.get("/reviews/{review_id}/votes", response_model=List[HelpfulVoteResponse])
async def get_votes(
    review_id: str,
    db: AsyncSession = Depends(get_session)
):
    """评价的投票列表"""
    await get_review_or_404(db, review_id)
    return await tool_review_crud.get_votes(db, review_id)


@router.post("/reviews/{review_id}/response", response_model=ToolReviewResponse)
async def respond(
    review_id: str,
    response_in: ReviewResponseRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
):
    """官方回复"""
    review = await get_review_or_404(db, review_id)
    return await review_service.respond_to_review(db, review, admin.id, response_in.message)


@router.post("/reviews/{review_id}/flag", response_model=ToolReviewResponse)
async def flag(
    review_id: str,
    flag_in: FlagRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
):
    """举报评价"""
    review = await get_review_or_404(db, review_id)
    return await review_service.flag_review(db, review, flag_in.reason)


@router.post("/reviews/{review_id}/moderate", response_model=ToolReviewResponse)
async def moderate(
    review_id: str,
    moderate_in: ModerateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
):
    """审核评价"""
    review = await get_review_or_404(db, review_id)
    return await review_service.moderate_review(db, review, admin.id, moderate_in.approved)


@router.delete("/reviews/{review_id}")
async def delete_review(
    review_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
):
    """删除评价（作者或管理员）"""
    review = await get_review_or_404(db, review_id)
    if review.user_id != user.id and not is_admin(user):
        raise NotReviewOwnerError(review_id)
    await review_service.remove_review(db, review)
    return {"success": True, "message": "Review deleted"}
