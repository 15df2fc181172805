"""工具模型

Review note:
- path 与 external_url 至少一个非空，写入前由 mapper 事件校验，任何写入路径都无法绕过。
- average_rating 是评价表的缓存聚合，由评价服务在每次评价写入/删除后显式刷新。
"""
from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, DateTime, JSON, ForeignKey,
    CheckConstraint, Index, event,
)
from datetime import datetime

from app.exceptions import ToolLocationError
from app.models.base import Base, TimestampMixin

TOOL_CATEGORIES = (
    "Educational Tools",
    "Navigation & Geography",
    "Language & Culture",
    "Utilities & Converters",
    "Mobile & Apps",
)

TOOL_DIFFICULTIES = ("beginner", "intermediate", "advanced")


def _in_clause(column: str, values) -> str:
    quoted = ", ".join("'" + value.replace("'", "''") + "'" for value in values)
    return f"{column} IN ({quoted})"


class Tool(TimestampMixin, Base):
    """工具目录表"""
    __tablename__ = "tools"

    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    long_description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)
    icon = Column(String(100), nullable=False, default="FaTools")  # 前端图标组件名
    color = Column(String(50), nullable=False, default="bg-blue-500")  # 前端样式类
    path = Column(String(500), nullable=True)
    external_url = Column(String(500), nullable=True)
    available = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    priority = Column(Integer, nullable=False, default=0)
    difficulty = Column(String(20), nullable=False, default="beginner")
    estimated_time = Column(Integer, nullable=True)  # 分钟
    keywords = Column(JSON, nullable=False, default=list)
    requirements = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    screenshots = Column(JSON, nullable=False, default=list)  # [{url, caption, order}]
    instructions = Column(JSON, nullable=False, default=list)  # [{step, title, description, image}]
    usage_count = Column(Integer, nullable=False, default=0)
    average_rating = Column(Float, nullable=False, default=0.0)
    # "metadata" 是 Declarative 保留属性名，列名保持 metadata
    tool_metadata = Column("metadata", JSON, nullable=False, default=dict)  # {version, tags, platform, language}
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_by = Column(String(50), ForeignKey("users.id"), nullable=True)

    __table_args__ = (
        CheckConstraint(_in_clause("category", TOOL_CATEGORIES), name="check_tool_category"),
        CheckConstraint(_in_clause("difficulty", TOOL_DIFFICULTIES), name="check_tool_difficulty"),
        CheckConstraint("average_rating >= 0 AND average_rating <= 5", name="check_tool_average_rating"),
        Index("ix_tools_category_available", "category", "available"),
        Index("ix_tools_featured_priority", "featured", "priority"),
    )

    def __repr__(self):
        return f"<Tool {self.name}>"


def check_tool_location(tool: Tool) -> None:
    """path 与 external_url 至少提供一个"""
    if not (tool.path or "").strip() and not (tool.external_url or "").strip():
        raise ToolLocationError(tool.name)


@event.listens_for(Tool, "before_insert")
@event.listens_for(Tool, "before_update")
def _validate_location(mapper, connection, target):
    check_tool_location(target)
