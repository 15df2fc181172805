"""SQLAlchemy基类"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase
from datetime import datetime
import uuid


def generate_id() -> str:
    """生成字符串主键"""
    return str(uuid.uuid4())


class Base(AsyncAttrs, DeclarativeBase):
    """所有模型的基类"""
    pass


class TimestampMixin:
    """主键与创建/更新时间"""
    id = Column(String(50), primary_key=True, default=generate_id)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
