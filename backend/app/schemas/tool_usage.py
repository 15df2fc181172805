"""使用记录与使用统计相关的Pydantic schemas"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Any, Dict, Literal
from datetime import datetime


class ScreenSize(BaseModel):
    width: Optional[int] = Field(None, ge=0)
    height: Optional[int] = Field(None, ge=0)


class Coordinates(BaseModel):
    lat: float
    lng: float


class DeviceInfo(BaseModel):
    """设备信息（type/browser/os 由 user agent 推断）"""
    type: str = "desktop"
    browser: Optional[str] = None
    os: Optional[str] = None
    screen: Optional[ScreenSize] = None


class LocationInfo(BaseModel):
    country: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    coordinates: Optional[Coordinates] = None


class UsageAction(BaseModel):
    """使用过程中的一次操作"""
    action: str
    timestamp: datetime
    details: Dict[str, Any] = Field(default_factory=dict)


class ToolUsageCreate(BaseModel):
    """记录一次工具使用"""
    session_id: Optional[str] = Field(None, max_length=100, description="匿名会话ID")
    user_agent: Optional[str] = Field(None, max_length=500, description="缺省时取请求头")
    ip_address: Optional[str] = Field(None, max_length=45, description="缺省时取客户端地址")
    used_at: Optional[datetime] = None
    duration: int = Field(default=0, ge=0, description="使用时长（秒）")
    referrer: Optional[str] = Field(None, max_length=500)
    screen: Optional[ScreenSize] = None
    location: Optional[LocationInfo] = None
    successful: bool = True
    error_message: Optional[str] = Field(None, max_length=500)


class ActionCreate(BaseModel):
    """追加操作"""
    action: str = Field(..., min_length=1, max_length=100, description="如 opened, used_feature, completed")
    details: Dict[str, Any] = Field(default_factory=dict)


class ToolUsageResponse(BaseModel):
    """使用记录响应"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    tool_id: str
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    used_at: datetime
    duration: int
    actions: List[UsageAction] = Field(default_factory=list)
    referrer: Optional[str] = None
    device: DeviceInfo
    location: LocationInfo
    successful: bool
    error_message: Optional[str] = None


class ToolUsageStats(BaseModel):
    """工具使用统计"""
    total_usage: int = 0
    unique_users: int = 0
    unique_sessions: int = 0
    avg_duration: float = 0.0
    total_duration: int = 0
    successful_usage: int = 0
    success_rate: float = 0.0


class UsageBucket(BaseModel):
    """按时间分桶的使用量"""
    period: Dict[str, int]
    usage: int
    unique_users: int


class UsageTimelineResponse(BaseModel):
    group_by: Literal["hour", "day", "week", "month"]
    buckets: List[UsageBucket]


class TopUser(BaseModel):
    user_id: str
    usage_count: int
    total_duration: int
    last_used: datetime
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class TopUsersResponse(BaseModel):
    users: List[TopUser]


class DailyUsage(BaseModel):
    date: str
    usage: int


class ToolAnalyticsResponse(BaseModel):
    """工具综合分析"""
    period: str
    total_usage: int
    period_usage: int
    unique_users: int
    average_rating: float
    total_reviews: int
    rating_distribution: Dict[int, int]
    usage_over_time: List[DailyUsage]
