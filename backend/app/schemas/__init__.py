"""Schemas包初始化"""
from app.schemas.user import UserCreate, UserResponse
from app.schemas.tool_review import (
    ToolReviewCreate,
    ToolReviewResponse,
    ReviewWithAuthor,
    ReviewListResponse,
    ToolReviewStats,
    HelpfulVoteRequest,
    HelpfulVoteResponse,
    ReviewResponseRequest,
    FlagRequest,
    ModerateRequest,
)
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
from app.schemas.tool_usage import (
    ToolUsageCreate,
    ToolUsageResponse,
    ActionCreate,
    ToolUsageStats,
    UsageTimelineResponse,
    TopUsersResponse,
    ToolAnalyticsResponse,
)

__all__ = [
    # User schemas
    "UserCreate",
    "UserResponse",
    # Review schemas
    "ToolReviewCreate",
    "ToolReviewResponse",
    "ReviewWithAuthor",
    "ReviewListResponse",
    "ToolReviewStats",
    "HelpfulVoteRequest",
    "HelpfulVoteResponse",
    "ReviewResponseRequest",
    "FlagRequest",
    "ModerateRequest",
    # Tool schemas
    "ToolCreate",
    "ToolUpdate",
    "ToolResponse",
    "ToolSummary",
    "ToolListResponse",
    "ToolDetailResponse",
    "FeaturedToolsResponse",
    "ToolsByCategoryResponse",
    # Usage schemas
    "ToolUsageCreate",
    "ToolUsageResponse",
    "ActionCreate",
    "ToolUsageStats",
    "UsageTimelineResponse",
    "TopUsersResponse",
    "ToolAnalyticsResponse",
]
