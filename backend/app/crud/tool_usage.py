"""工具使用记录的CRUD与统计查询

Review note:
- 时间分桶使用 SQLite strftime 按日历字段分组（小时/日/周/月），周为以周日起算的年内周序号。
- 去重用户/会话数不统计空值，匿名记录只计入总使用量。
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, case, cast, distinct, Integer
from typing import Optional, List, Dict, Any
from datetime import datetime, timedelta

from app.models.tool_usage import ToolUsage
from app.models.user import User
from app.schemas.tool_usage import ToolUsageCreate
from app.services.tools.device import UserAgentParser, detect_device

# 分桶粒度 -> [(字段名, strftime 格式)]
BUCKET_FIELDS = {
    "hour": [("year", "%Y"), ("month", "%m"), ("day", "%d"), ("hour", "%H")],
    "day": [("year", "%Y"), ("month", "%m"), ("day", "%d")],
    "week": [("year", "%Y"), ("week", "%U")],
    "month": [("year", "%Y"), ("month", "%m")],
}


def _window(tool_id: str, start_date: Optional[datetime], end_date: Optional[datetime]) -> list:
    conditions = [ToolUsage.tool_id == tool_id]
    if start_date is not None:
        conditions.append(ToolUsage.used_at >= start_date)
    if end_date is not None:
        conditions.append(ToolUsage.used_at <= end_date)
    return conditions


class CRUDToolUsage:
    """使用记录CRUD操作"""

    async def get(self, db: AsyncSession, usage_id: str) -> Optional[ToolUsage]:
        """获取单条使用记录"""
        result = await db.execute(
            select(ToolUsage).where(ToolUsage.id == usage_id)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        tool_id: str,
        obj_in: ToolUsageCreate,
        user_id: Optional[str] = None,
        parser: Optional[UserAgentParser] = None,
    ) -> ToolUsage:
        """创建使用记录，设备信息仅在此时由 user agent 推断"""
        db_obj = ToolUsage(
            tool_id=tool_id,
            user_id=user_id,
            session_id=obj_in.session_id,
            user_agent=obj_in.user_agent,
            ip_address=obj_in.ip_address,
            used_at=obj_in.used_at or datetime.utcnow(),
            duration=obj_in.duration,
            actions=[],
            referrer=obj_in.referrer,
            successful=obj_in.successful,
            error_message=obj_in.error_message,
        )
        if obj_in.screen is not None:
            db_obj.screen_width = obj_in.screen.width
            db_obj.screen_height = obj_in.screen.height
        if obj_in.location is not None:
            db_obj.country = obj_in.location.country
            db_obj.region = obj_in.location.region
            db_obj.city = obj_in.location.city
            if obj_in.location.coordinates is not None:
                db_obj.latitude = obj_in.location.coordinates.lat
                db_obj.longitude = obj_in.location.coordinates.lng

        device = detect_device(obj_in.user_agent, parser)
        if device is not None:
            db_obj.device_type = device.type
            db_obj.device_browser = device.browser
            db_obj.device_os = device.os

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def add_action(
        self,
        db: AsyncSession,
        usage: ToolUsage,
        action: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> ToolUsage:
        """追加一条带时间戳的操作"""
        entry = {
            "action": action,
            "timestamp": datetime.utcnow().isoformat(),
            "details": details or {},
        }
        # JSON 列需要整体赋值才能被识别为变更
        usage.actions = [*(usage.actions or []), entry]
        await db.commit()
        await db.refresh(usage)
        return usage

    async def count(
        self,
        db: AsyncSession,
        tool_id: str,
        since: Optional[datetime] = None,
    ) -> int:
        """使用次数"""
        result = await db.execute(
            select(func.count(ToolUsage.id)).where(*_window(tool_id, since, None))
        )
        return result.scalar_one()

    async def count_by_tools(self, db: AsyncSession, tool_ids: List[str]) -> Dict[str, int]:
        """批量统计工具的使用次数"""
        if not tool_ids:
            return {}
        result = await db.execute(
            select(ToolUsage.tool_id, func.count(ToolUsage.id))
            .where(ToolUsage.tool_id.in_(tool_ids))
            .group_by(ToolUsage.tool_id)
        )
        return {tool_id: count for tool_id, count in result.all()}

    async def count_unique_users(
        self,
        db: AsyncSession,
        tool_id: str,
        since: Optional[datetime] = None,
    ) -> int:
        """去重登录用户数"""
        result = await db.execute(
            select(func.count(distinct(ToolUsage.user_id))).where(*_window(tool_id, since, None))
        )
        return result.scalar_one()

    async def has_used(self, db: AsyncSession, tool_id: str, user_id: str) -> bool:
        """用户是否使用过该工具"""
        result = await db.execute(
            select(ToolUsage.id)
            .where(ToolUsage.tool_id == tool_id, ToolUsage.user_id == user_id)
            .limit(1)
        )
        return result.first() is not None

    async def get_tool_stats(
        self,
        db: AsyncSession,
        tool_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """时间窗口内的使用统计"""
        successful = func.sum(case((ToolUsage.successful.is_(True), 1), else_=0))
        result = await db.execute(
            select(
                func.count(ToolUsage.id),
                func.count(distinct(ToolUsage.user_id)),
                func.count(distinct(ToolUsage.session_id)),
                func.avg(ToolUsage.duration),
                func.sum(ToolUsage.duration),
                successful,
            ).where(*_window(tool_id, start_date, end_date))
        )
        total, users, sessions, avg_duration, total_duration, successful_usage = result.one()

        if not total:
            return {
                "total_usage": 0,
                "unique_users": 0,
                "unique_sessions": 0,
                "avg_duration": 0.0,
                "total_duration": 0,
                "successful_usage": 0,
                "success_rate": 0.0,
            }

        successful_usage = int(successful_usage or 0)
        return {
            "total_usage": total,
            "unique_users": users,
            "unique_sessions": sessions,
            "avg_duration": round(float(avg_duration or 0), 2),
            "total_duration": int(total_duration or 0),
            "successful_usage": successful_usage,
            "success_rate": round(successful_usage * 100 / total, 2),
        }

    async def get_usage_over_time(
        self,
        db: AsyncSession,
        tool_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        group_by: str = "day",
    ) -> List[Dict[str, Any]]:
        """按日历字段分桶统计使用量和去重用户数，按时间先后排序"""
        fields = BUCKET_FIELDS.get(group_by, BUCKET_FIELDS["day"])
        columns = [
            cast(func.strftime(fmt, ToolUsage.used_at), Integer).label(name)
            for name, fmt in fields
        ]
        result = await db.execute(
            select(
                *columns,
                func.count(ToolUsage.id).label("usage"),
                func.count(distinct(ToolUsage.user_id)).label("unique_users"),
            )
            .where(*_window(tool_id, start_date, end_date))
            .group_by(*columns)
            .order_by(*columns)
        )

        buckets = []
        for row in result.all():
            mapping = row._mapping
            buckets.append({
                "period": {name: mapping[name] for name, _ in fields},
                "usage": mapping["usage"],
                "unique_users": mapping["unique_users"],
            })
        return buckets

    async def get_top_users(
        self,
        db: AsyncSession,
        tool_id: str,
        limit: int = 10,
    ) -> List[Dict[str, Any]]:
        """使用次数最多的登录用户，附带姓名和邮箱"""
        usage_count = func.count(ToolUsage.id).label("usage_count")
        ranked = (
            select(
                ToolUsage.user_id.label("user_id"),
                usage_count,
                func.sum(ToolUsage.duration).label("total_duration"),
                func.max(ToolUsage.used_at).label("last_used"),
            )
            .where(ToolUsage.tool_id == tool_id, ToolUsage.user_id.is_not(None))
            .group_by(ToolUsage.user_id)
            .order_by(usage_count.desc())
            .limit(limit)
            .subquery()
        )
        result = await db.execute(
            select(ranked, User.first_name, User.last_name, User.email)
            .outerjoin(User, User.id == ranked.c.user_id)
            .order_by(ranked.c.usage_count.desc(), ranked.c.last_used.desc())
        )

        users = []
        for row in result.all():
            user_name = None
            if row.first_name is not None:
                user_name = f"{row.first_name} {row.last_name or ''}".strip()
            users.append({
                "user_id": row.user_id,
                "usage_count": row.usage_count,
                "total_duration": int(row.total_duration or 0),
                "last_used": row.last_used,
                "user_name": user_name,
                "user_email": row.email,
            })
        return users

    async def purge_expired(
        self,
        db: AsyncSession,
        retention_days: int,
        now: Optional[datetime] = None,
    ) -> int:
        """删除超出保留窗口的使用记录，返回删除条数"""
        cutoff = (now or datetime.utcnow()) - timedelta(days=retention_days)
        result = await db.execute(
            delete(ToolUsage).where(ToolUsage.used_at < cutoff)
        )
        await db.commit()
        return result.rowcount


# 创建实例
tool_usage_crud = CRUDToolUsage()
