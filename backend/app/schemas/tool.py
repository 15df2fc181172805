"""工具相关的Pydantic schemas"""
from pydantic import BaseModel, Field, ConfigDict, AliasChoices, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import datetime

from app.models.tool import TOOL_CATEGORIES, TOOL_DIFFICULTIES
from app.schemas.tool_review import ReviewWithAuthor


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in TOOL_CATEGORIES:
        raise ValueError(f"category must be one of: {', '.join(TOOL_CATEGORIES)}")
    return value


def _check_difficulty(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in TOOL_DIFFICULTIES:
        raise ValueError(f"difficulty must be one of: {', '.join(TOOL_DIFFICULTIES)}")
    return value


class ToolScreenshot(BaseModel):
    """截图"""
    url: str = Field(..., min_length=1, max_length=500)
    caption: Optional[str] = Field(None, max_length=200)
    order: int = 0


class ToolInstruction(BaseModel):
    """使用步骤"""
    step: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image: Optional[str] = None


class ToolMetadata(BaseModel):
    """工具元数据"""
    version: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    platform: List[str] = Field(default_factory=list)
    language: List[str] = Field(default_factory=list)


class ToolBase(BaseModel):
    """工具基础模型"""
    name: str = Field(..., min_length=1, max_length=100, description="工具名称")
    description: str = Field(..., min_length=1, max_length=500, description="简短描述")
    long_description: Optional[str] = Field(None, description="详细描述")
    category: str = Field(..., description="所属分类")
    icon: str = Field(default="FaTools", max_length=100, description="前端图标名")
    color: str = Field(default="bg-blue-500", max_length=50, description="前端颜色样式")
    path: Optional[str] = Field(None, max_length=500, description="站内路径")
    external_url: Optional[str] = Field(None, max_length=500, description="外部链接")
    available: bool = True
    featured: bool = False
    priority: int = Field(default=0, description="排序权重，越大越靠前")
    difficulty: str = Field(default="beginner", description="难度")
    estimated_time: Optional[int] = Field(None, ge=0, description="预计用时（分钟）")
    keywords: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    screenshots: List[ToolScreenshot] = Field(default_factory=list)
    instructions: List[ToolInstruction] = Field(default_factory=list)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)

    @field_validator("difficulty")
    @classmethod
    def validate_difficulty(cls, v):
        return _check_difficulty(v)


class ToolCreate(ToolBase):
    """创建工具"""
    metadata: ToolMetadata = Field(default_factory=ToolMetadata)

    @model_validator(mode="after")
    def check_location(self):
        if not (self.path or "").strip() and not (self.external_url or "").strip():
            raise ValueError("Either path or external_url is required")
        return self


class ToolUpdate(BaseModel):
    """更新工具"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    long_description: Optional[str] = None
    category: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=50)
    path: Optional[str] = Field(None, max_length=500)
    external_url: Optional[str] = Field(None, max_length=500)
    available: Optional[bool] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    difficulty: Optional[str] = None
    estimated_time: Optional[int] = Field(None, ge=0)
    keywords: Optional[List[str]] = None
    requirements: Optional[List[str]] = None
    features: Optional[List[str]] = None
    screenshots: Optional[List[ToolScreenshot]] = None
    instructions: Optional[List[ToolInstruction]] = None
    metadata: Optional[ToolMetadata] = None

    # 可省略但不可显式置空的字段；path/external_url/long_description/estimated_time 允许清空
    @field_validator(
        "name", "description", "category", "icon", "color", "available", "featured",
        "is_active", "priority", "difficulty", "keywords", "requirements", "features",
        "screenshots", "instructions", "metadata",
        mode="before",
    )
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)

    @field_validator("difficulty")
    @classmethod
    def validate_difficulty(cls, v):
        return _check_difficulty(v)


class ToolResponse(ToolBase):
    """工具响应"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    is_active: bool
    usage_count: int
    average_rating: float
    metadata: ToolMetadata = Field(
        default_factory=ToolMetadata,
        validation_alias=AliasChoices("tool_metadata", "metadata"),
    )
    last_updated: datetime
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, v):
        return v or {}


class ToolSummary(BaseModel):
    """列表中的工具（评分和使用量为实时统计）"""
    id: str
    name: str
    description: str
    category: str
    icon: str
    color: str
    path: Optional[str] = None
    external_url: Optional[str] = None
    available: bool
    featured: bool
    difficulty: str
    estimated_time: Optional[int] = None
    keywords: List[str] = Field(default_factory=list)
    total_usage: int = 0
    average_rating: float = 0.0
    review_count: int = 0


class Pagination(BaseModel):
    """分页信息"""
    page: int
    limit: int
    total: int
    total_count: int


class ToolListResponse(BaseModel):
    """工具列表响应"""
    tools: List[ToolSummary]
    pagination: Pagination


class FeaturedToolsResponse(BaseModel):
    """精选工具响应"""
    tools: List[ToolSummary]


class ToolsByCategoryResponse(BaseModel):
    """按分类分组的工具"""
    categories: Dict[str, List[ToolSummary]]


class ToolDetailResponse(ToolResponse):
    """工具详情（附带使用量、评价统计和最新评价）"""
    total_usage: int = 0
    recent_usage: int = 0
    review_count: int = 0
    rating_distribution: Dict[int, int] = Field(default_factory=dict)
    reviews: List[ReviewWithAuthor] = Field(default_factory=list)
