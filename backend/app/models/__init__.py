"""模型包初始化"""
from app.models.base import Base
from app.models.user import User
from app.models.tool import Tool
from app.models.tool_usage import ToolUsage
from app.models.tool_review import ToolReview, ToolReviewVote

__all__ = [
    "Base",
    "User",
    "Tool",
    "ToolUsage",
    "ToolReview",
    "ToolReviewVote",
]
