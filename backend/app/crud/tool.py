"""工具目录的CRUD操作"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, or_, cast, String
from typing import Optional, List, Tuple
from datetime import datetime

from app.models.tool import Tool
from app.models.tool_review import ToolReview
from app.schemas.tool import ToolCreate, ToolUpdate


def _escape_like(text: str) -> str:
    """转义 LIKE 通配符，关键字按字面匹配"""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CRUDTool:
    """工具CRUD操作"""

    async def get(
        self,
        db: AsyncSession,
        tool_id: str,
        active_only: bool = False,
    ) -> Optional[Tool]:
        """获取单个工具"""
        query = select(Tool).where(Tool.id == tool_id)
        if active_only:
            query = query.where(Tool.is_active.is_(True))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def search(
        self,
        db: AsyncSession,
        category: Optional[str] = None,
        available: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[Tool], int]:
        """分页查询启用中的工具，可按分类、可用性和关键字筛选"""
        conditions = [Tool.is_active.is_(True)]
        if category:
            conditions.append(Tool.category == category)
        if available is not None:
            conditions.append(Tool.available.is_(available))
        if search:
            pattern = f"%{_escape_like(search.lower())}%"
            conditions.append(or_(
                func.lower(Tool.name).like(pattern, escape="\\"),
                func.lower(Tool.description).like(pattern, escape="\\"),
                func.lower(cast(Tool.keywords, String)).like(pattern, escape="\\"),
            ))

        total = (await db.execute(
            select(func.count(Tool.id)).where(*conditions)
        )).scalar_one()

        result = await db.execute(
            select(Tool)
            .where(*conditions)
            .order_by(Tool.featured.desc(), Tool.priority.desc(), Tool.name.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_featured(self, db: AsyncSession, limit: int = 6) -> List[Tool]:
        """获取精选工具：按优先级、使用次数、创建时间倒序"""
        result = await db.execute(
            select(Tool)
            .where(
                Tool.featured.is_(True),
                Tool.available.is_(True),
                Tool.is_active.is_(True),
            )
            .order_by(Tool.priority.desc(), Tool.usage_count.desc(), Tool.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_by_category(
        self,
        db: AsyncSession,
        category: str,
        limit: int = 10,
    ) -> List[Tool]:
        """获取分类下启用中的工具"""
        result = await db.execute(
            select(Tool)
            .where(Tool.category == category, Tool.is_active.is_(True))
            .order_by(Tool.featured.desc(), Tool.priority.desc(), Tool.name.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(
        self,
        db: AsyncSession,
        obj_in: ToolCreate,
        created_by: Optional[str] = None,
    ) -> Tool:
        """创建工具"""
        data = obj_in.model_dump(exclude={"metadata"})
        db_obj = Tool(
            **data,
            tool_metadata=obj_in.metadata.model_dump(),
            created_by=created_by,
        )
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        tool_id: str,
        obj_in: ToolUpdate,
    ) -> Optional[Tool]:
        """更新工具"""
        db_obj = await self.get(db, tool_id)
        if not db_obj:
            return None

        update_data = obj_in.model_dump(exclude_unset=True)
        metadata = update_data.pop("metadata", None)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        if metadata is not None:
            db_obj.tool_metadata = metadata
            db_obj.last_updated = datetime.utcnow()

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(db_obj)
        return db_obj

    async def soft_delete(self, db: AsyncSession, tool_id: str) -> bool:
        """停用工具（is_active=False），使用记录和评价保留"""
        result = await db.execute(
            update(Tool)
            .where(Tool.id == tool_id, Tool.is_active.is_(True))
            .values(is_active=False, updated_at=datetime.utcnow())
        )
        await db.commit()
        return result.rowcount > 0

    async def increment_usage(self, db: AsyncSession, tool_id: str) -> bool:
        """原子地将使用次数加一，并记录元数据更新时间"""
        result = await db.execute(
            update(Tool)
            .where(Tool.id == tool_id)
            .values(usage_count=Tool.usage_count + 1, last_updated=datetime.utcnow())
        )
        await db.commit()
        return result.rowcount > 0

    async def update_average_rating(self, db: AsyncSession, tool_id: str) -> Optional[float]:
        """根据启用中的评价重新计算平均分（保留一位小数，无评价为0）"""
        result = await db.execute(
            select(func.avg(ToolReview.rating))
            .where(ToolReview.tool_id == tool_id, ToolReview.is_active.is_(True))
        )
        avg = result.scalar()
        average_rating = round(float(avg), 1) if avg is not None else 0.0

        result = await db.execute(
            update(Tool)
            .where(Tool.id == tool_id)
            .values(average_rating=average_rating)
        )
        await db.commit()
        if result.rowcount == 0:
            return None
        return average_rating


# 创建实例
tool_crud = CRUDTool()
