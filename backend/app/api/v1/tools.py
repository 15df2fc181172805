"""工具目录API"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
from datetime import datetime, timedelta

from app.api.deps import require_admin
from app.config import settings
from app.crud.tool import tool_crud
from app.crud.tool_review import tool_review_crud
from app.crud.tool_usage import tool_usage_crud
from app.database import get_session
from app.exceptions import ToolNotFoundError
from app.models.tool import Tool, TOOL_CATEGORIES
from app.models.user import User
from app.schemas.tool import (
    ToolCreate,
    ToolUpdate,
    ToolResponse,
    ToolSummary,
    ToolListResponse,
    ToolDetailResponse,
    FeaturedToolsResponse,
    ToolsByCategoryResponse,
)

router = APIRouter()


async def build_summaries(db: AsyncSession, tools: List[Tool]) -> List[ToolSummary]:
    """附加实时统计的使用次数、平均分和评价数"""
    tool_ids = [tool.id for tool in tools]
    usage_counts = await tool_usage_crud.count_by_tools(db, tool_ids)
    ratings = await tool_review_crud.get_rating_summaries(db, tool_ids)

    summaries = []
    for tool in tools:
        average_rating, review_count = ratings.get(tool.id, (0.0, 0))
        summaries.append(ToolSummary(
            id=tool.id,
            name=tool.name,
            description=tool.description,
            category=tool.category,
            icon=tool.icon,
            color=tool.color,
            path=tool.path,
            external_url=tool.external_url,
            available=tool.available,
            featured=tool.featured,
            difficulty=tool.difficulty,
            estimated_time=tool.estimated_time,
            keywords=tool.keywords or [],
            total_usage=usage_counts.get(tool.id, 0),
            average_rating=average_rating,
            review_count=review_count,
        ))
    return summaries


@router.get("/tools", response_model=ToolListResponse)
async def get_tools(
    category: Optional[str] = None,
    available: Optional[bool] = None,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_session)
):
    """获取工具列表（分类、可用性、关键字筛选）"""
    tools, total = await tool_crud.search(
        db,
        category=category,
        available=available,
        search=search,
        page=page,
        limit=limit,
    )
    summaries = await build_summaries(db, tools)
    return {
        "tools": summaries,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": len(summaries),
            "total_count": total,
        },
    }


@router.get("/tools/featured", response_model=FeaturedToolsResponse)
async def get_featured_tools(
    limit: int = Query(settings.FEATURED_TOOLS_LIMIT, ge=1, le=20),
    db: AsyncSession = Depends(get_session)
):
    """获取精选工具"""
    tools = await tool_crud.get_featured(db, limit)
    return {"tools": await build_summaries(db, tools)}


@router.get("/tools/categories", response_model=ToolsByCategoryResponse)
async def get_tools_by_category(db: AsyncSession = Depends(get_session)):
    """按分类分组获取工具"""
    categories = {}
    for category in TOOL_CATEGORIES:
        tools = await tool_crud.get_by_category(db, category, settings.CATEGORY_TOOLS_LIMIT)
        categories[category] = await build_summaries(db, tools)
    return {"categories": categories}


@router.get("/tools/category/{category}", response_model=FeaturedToolsResponse)
async def get_category_tools(
    category: str,
    limit: int = Query(settings.CATEGORY_TOOLS_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_session)
):
    """获取单个分类下的工具"""
    tools = await tool_crud.get_by_category(db, category, limit)
    return {"tools": await build_summaries(db, tools)}


@router.get("/tools/{tool_id}", response_model=ToolDetailResponse)
async def get_tool(
    tool_id: str,
    db: AsyncSession = Depends(get_session)
):
    """获取工具详情"""
    tool = await tool_crud.get(db, tool_id)
    if not tool:
        raise ToolNotFoundError(tool_id)

    total_usage = await tool_usage_crud.count(db, tool_id)
    recent_usage = await tool_usage_crud.count(
        db, tool_id, since=datetime.utcnow() - timedelta(days=30)
    )
    stats = await tool_review_crud.get_tool_review_stats(db, tool_id)
    reviews = await tool_review_crud.get_recent_reviews(db, tool_id, settings.RECENT_REVIEWS_LIMIT)

    data = ToolResponse.model_validate(tool).model_dump()
    data["average_rating"] = stats["average_rating"]
    return ToolDetailResponse(
        **data,
        total_usage=total_usage,
        recent_usage=recent_usage,
        review_count=stats["total_reviews"],
        rating_distribution=stats["rating_distribution"],
        reviews=reviews,
    )


@router.post("/tools", response_model=ToolResponse, status_code=201)
async def create_tool(
    tool_in: ToolCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
):
    """创建工具"""
    return await tool_crud.create(db, tool_in, created_by=admin.id)


@router.put("/tools/{tool_id}", response_model=ToolResponse)
async def update_tool(
    tool_id: str,
    tool_in: ToolUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
):
    """更新工具"""
    tool = await tool_crud.update(db, tool_id, tool_in)
    if not tool:
        raise ToolNotFoundError(tool_id)
    return tool


@router.delete("/tools/{tool_id}")
async def delete_tool(
    tool_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
):
    """停用工具"""
    success = await tool_crud.soft_delete(db, tool_id)
    if not success:
        raise ToolNotFoundError(tool_id)
    return {"success": True, "message": "Tool deactivated"}
