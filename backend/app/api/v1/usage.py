"""工具使用记录与使用分析API"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Literal
from datetime import datetime, timedelta

from app.api.deps import get_optional_user
from app.config import settings
from app.crud.tool import tool_crud
from app.crud.tool_review import tool_review_crud
from app.crud.tool_usage import tool_usage_crud
from app.database import get_session
from app.exceptions import ToolNotFoundError, UsageNotFoundError
from app.models.user import User
from app.schemas.tool_usage import (
    ToolUsageCreate,
    ToolUsageResponse,
    ActionCreate,
    ToolUsageStats,
    UsageTimelineResponse,
    TopUsersResponse,
    ToolAnalyticsResponse,
)
from app.services.tools.usage import record_usage

router = APIRouter()

# 分析周期 -> 回溯天数
ANALYTICS_PERIODS = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "1y": 365,
}


async def ensure_tool(db: AsyncSession, tool_id: str) -> None:
    tool = await tool_crud.get(db, tool_id)
    if not tool:
        raise ToolNotFoundError(tool_id)


@router.post("/tools/{tool_id}/usage", response_model=ToolUsageResponse, status_code=201)
async def track_tool_usage(
    tool_id: str,
    usage_in: ToolUsageCreate,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session)
):
    """记录一次工具使用（允许匿名）"""
    return await record_usage(
        db,
        tool_id,
        usage_in,
        user_id=user.id if user else None,
        request_user_agent=request.headers.get("user-agent"),
        request_ip=request.client.host if request.client else None,
    )


@router.post("/usage/{usage_id}/actions", response_model=ToolUsageResponse)
async def add_usage_action(
    usage_id: str,
    action_in: ActionCreate,
    db: AsyncSession = Depends(get_session)
):
    """为使用记录追加操作"""
    usage = await tool_usage_crud.get(db, usage_id)
    if not usage:
        raise UsageNotFoundError(usage_id)
    return await tool_usage_crud.add_action(db, usage, action_in.action, action_in.details)


@router.get("/tools/{tool_id}/usage/stats", response_model=ToolUsageStats)
async def get_usage_stats(
    tool_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_session)
):
    """时间窗口内的使用统计"""
    await ensure_tool(db, tool_id)
    return await tool_usage_crud.get_tool_stats(db, tool_id, start_date, end_date)


@router.get("/tools/{tool_id}/usage/timeline", response_model=UsageTimelineResponse)
async def get_usage_timeline(
    tool_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    group_by: Literal["hour", "day", "week", "month"] = "day",
    db: AsyncSession = Depends(get_session)
):
    """按小时/日/周/月统计使用量"""
    await ensure_tool(db, tool_id)
    buckets = await tool_usage_crud.get_usage_over_time(
        db, tool_id, start_date, end_date, group_by
    )
    return {"group_by": group_by, "buckets": buckets}


@router.get("/tools/{tool_id}/usage/top-users", response_model=TopUsersResponse)
async def get_top_users(
    tool_id: str,
    limit: int = Query(settings.TOP_USERS_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_session)
):
    """使用次数最多的用户"""
    await ensure_tool(db, tool_id)
    return {"users": await tool_usage_crud.get_top_users(db, tool_id, limit)}


@router.get("/tools/{tool_id}/analytics", response_model=ToolAnalyticsResponse)
async def get_tool_analytics(
    tool_id: str,
    period: str = "30d",
    db: AsyncSession = Depends(get_session)
):
    """工具综合分析：总量、周期内使用、去重用户、评分分布和每日使用量"""
    await ensure_tool(db, tool_id)

    since = datetime.utcnow() - timedelta(days=ANALYTICS_PERIODS.get(period, 30))
    daily = await tool_usage_crud.get_usage_over_time(db, tool_id, start_date=since, group_by="day")
    review_stats = await tool_review_crud.get_tool_review_stats(db, tool_id)

    return {
        "period": period,
        "total_usage": await tool_usage_crud.count(db, tool_id),
        "period_usage": await tool_usage_crud.count(db, tool_id, since=since),
        "unique_users": await tool_usage_crud.count_unique_users(db, tool_id, since=since),
        "average_rating": review_stats["average_rating"],
        "total_reviews": review_stats["total_reviews"],
        "rating_distribution": review_stats["rating_distribution"],
        "usage_over_time": [
            {
                "date": "{year:04d}-{month:02d}-{day:02d}".format(**bucket["period"]),
                "usage": bucket["usage"],
            }
            for bucket in daily
        ],
    }
