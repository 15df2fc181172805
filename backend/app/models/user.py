"""用户模型"""
from sqlalchemy import Column, String

from app.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """用户表（评价、投票、回复和使用排行引用的最小用户信息）"""
    __tablename__ = "users"

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    profile_image = Column(String(500), nullable=True)
    role = Column(String(20), nullable=False, default="visitor")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<User {self.email}>"
