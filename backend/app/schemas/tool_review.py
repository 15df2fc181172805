"""评价相关的Pydantic schemas"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict, Literal
from datetime import datetime

FlagReason = Literal["spam", "inappropriate", "fake", "offensive", "other"]


class ToolReviewCreate(BaseModel):
    """提交评价"""
    rating: int = Field(..., ge=1, le=5, description="评分 1-5")
    comment: Optional[str] = Field(None, max_length=1000)
    recommend: bool = True

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v):
        return v.strip() if v is not None else v


class HelpfulVoteRequest(BaseModel):
    helpful: bool


class ReviewResponseRequest(BaseModel):
    """官方回复"""
    message: str = Field(..., min_length=1, max_length=500)


class FlagRequest(BaseModel):
    reason: FlagReason


class ModerateRequest(BaseModel):
    approved: bool


class ReviewReply(BaseModel):
    message: str
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    responder_name: Optional[str] = None


class ToolReviewResponse(BaseModel):
    """评价响应"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    tool_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    recommend: bool
    helpful_count: int
    total_votes: int
    helpful_percentage: int
    rating_display: str
    verified: bool
    response: Optional[ReviewReply] = None
    flagged: bool
    flag_reason: Optional[str] = None
    moderated_by: Optional[str] = None
    moderated_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ReviewWithAuthor(ToolReviewResponse):
    """带作者信息的评价"""
    user_name: Optional[str] = None
    user_profile_image: Optional[str] = None

    @classmethod
    def from_review(
        cls,
        review,
        user_name: Optional[str] = None,
        user_profile_image: Optional[str] = None,
        responder_name: Optional[str] = None,
    ) -> "ReviewWithAuthor":
        data = ToolReviewResponse.model_validate(review).model_dump()
        if data["response"] is not None:
            data["response"]["responder_name"] = responder_name
        return cls(**data, user_name=user_name, user_profile_image=user_profile_image)


class ReviewListResponse(BaseModel):
    reviews: List[ReviewWithAuthor]
    page: int
    limit: int
    total_count: int


class ToolReviewStats(BaseModel):
    """评价统计"""
    total_reviews: int = 0
    average_rating: float = 0.0
    recommendation_rate: float = 0.0
    rating_distribution: Dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    )


class HelpfulVoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    helpful: bool
    voted_at: datetime
