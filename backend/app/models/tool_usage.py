"""工具使用记录模型

Review note:
- 允许匿名使用：user_id / session_id 均可为空，此时靠 ip_address 与 user_agent 追溯。
- device_type/browser/os 仅在创建时根据 user_agent 推断一次。
- used_at 上的索引服务于保留窗口清理（默认 730 天）。
"""
from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime, JSON, ForeignKey,
    CheckConstraint, Index,
)
from datetime import datetime

from app.models.base import Base, TimestampMixin

DEVICE_TYPES = ("desktop", "mobile", "tablet")


class ToolUsage(TimestampMixin, Base):
    """工具使用记录表"""
    __tablename__ = "tool_usages"

    tool_id = Column(String(50), ForeignKey("tools.id"), nullable=False, index=True)
    user_id = Column(String(50), ForeignKey("users.id"), nullable=True, index=True)
    session_id = Column(String(100), nullable=True, index=True)
    user_agent = Column(String(500), nullable=True)
    ip_address = Column(String(45), nullable=True)  # IPv6 最大长度
    used_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    duration = Column(Integer, nullable=False, default=0)  # 秒
    actions = Column(JSON, nullable=False, default=list)  # [{action, timestamp, details}]
    referrer = Column(String(500), nullable=True)

    device_type = Column(String(20), nullable=False, default="desktop")
    device_browser = Column(String(50), nullable=True)
    device_os = Column(String(50), nullable=True)
    screen_width = Column(Integer, nullable=True)
    screen_height = Column(Integer, nullable=True)

    country = Column(String(100), nullable=True)
    region = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    successful = Column(Boolean, nullable=False, default=True)
    error_message = Column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("device_type IN ('desktop', 'mobile', 'tablet')", name="check_usage_device_type"),
        CheckConstraint("duration >= 0", name="check_usage_duration"),
        Index("ix_tool_usages_tool_used_at", "tool_id", "used_at"),
        Index("ix_tool_usages_user_used_at", "user_id", "used_at"),
    )

    @property
    def device(self) -> dict:
        screen = None
        if self.screen_width is not None or self.screen_height is not None:
            screen = {"width": self.screen_width, "height": self.screen_height}
        return {
            "type": self.device_type,
            "browser": self.device_browser,
            "os": self.device_os,
            "screen": screen,
        }

    @property
    def location(self) -> dict:
        coordinates = None
        if self.latitude is not None and self.longitude is not None:
            coordinates = {"lat": self.latitude, "lng": self.longitude}
        return {
            "country": self.country,
            "region": self.region,
            "city": self.city,
            "coordinates": coordinates,
        }

    def __repr__(self):
        return f"<ToolUsage tool={self.tool_id} at={self.used_at}>"
