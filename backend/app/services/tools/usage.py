"""使用记录用例"""
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.crud.tool import tool_crud
from app.crud.tool_usage import tool_usage_crud
from app.exceptions import ToolNotFoundError
from app.models.tool_usage import ToolUsage
from app.schemas.tool_usage import ToolUsageCreate
from app.services.tools.device import UserAgentParser

logger = logging.getLogger("uvicorn.error")


async def record_usage(
    db: AsyncSession,
    tool_id: str,
    obj_in: ToolUsageCreate,
    user_id: Optional[str] = None,
    request_user_agent: Optional[str] = None,
    request_ip: Optional[str] = None,
    parser: Optional[UserAgentParser] = None,
) -> ToolUsage:
    """记录一次使用并累加工具使用次数

    请求体未提供 user_agent / ip_address 时使用请求本身的值。
    """
    tool = await tool_crud.get(db, tool_id)
    if not tool:
        raise ToolNotFoundError(tool_id)

    updates = {}
    if not obj_in.user_agent and request_user_agent:
        updates["user_agent"] = request_user_agent[:500]
    if not obj_in.ip_address and request_ip:
        updates["ip_address"] = request_ip[:45]
    if updates:
        obj_in = obj_in.model_copy(update=updates)

    usage = await tool_usage_crud.create(db, tool_id, obj_in, user_id=user_id, parser=parser)
    await tool_crud.increment_usage(db, tool_id)

    logger.info(
        "tool-usage-recorded tool_id=%s usage_id=%s user_id=%s device=%s",
        tool_id,
        usage.id,
        user_id or "-",
        usage.device_type,
    )
    return usage
