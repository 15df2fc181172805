"""使用记录保留窗口清理

启动时执行一次，之后按 USAGE_PURGE_INTERVAL_SEC 周期执行，删除 used_at 早于保留窗口的记录。
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import Optional
from datetime import datetime
import asyncio
import logging

from app.config import settings
from app.crud.tool_usage import tool_usage_crud

logger = logging.getLogger("uvicorn.error")


async def purge_expired_usage(
    session_maker: async_sessionmaker,
    retention_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> int:
    """执行一次清理，返回删除条数"""
    days = retention_days if retention_days is not None else settings.USAGE_RETENTION_DAYS
    async with session_maker() as session:
        deleted = await tool_usage_crud.purge_expired(session, days, now=now)
    if deleted:
        logger.info("usage-retention-purged deleted=%s retention_days=%s", deleted, days)
    return deleted


async def run_retention_loop(
    session_maker: async_sessionmaker,
    interval_sec: Optional[int] = None,
) -> None:
    """后台清理循环，直到任务被取消"""
    interval = interval_sec or settings.USAGE_PURGE_INTERVAL_SEC
    while True:
        try:
            await purge_expired_usage(session_maker)
        except SQLAlchemyError as exc:
            logger.warning("usage-retention-failed error=%s", str(exc)[:180])
        except Exception:
            # 单次清理出错不终止循环，下一周期重试
            logger.exception("usage-retention-crashed")
        await asyncio.sleep(interval)
