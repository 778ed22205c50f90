"""Pydantic schemas for the blog package."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Visibility(str, Enum):
    PUBLIC = "public"
    REPAIRERS = "repairers"
    BOTH = "both"


class PostStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class SlugResolution(str, Enum):
    """How to proceed when a post's slug is already used by another post."""

    RENAME = "rename"
    OVERWRITE = "overwrite"


class BlogPostDraft(BaseModel):
    """Editor payload. ``id`` is set when editing an existing post."""

    id: Optional[str] = None
    title: str = ""
    slug: str = ""
    excerpt: Optional[str] = None
    content: str = ""
    category_id: Optional[str] = None
    visibility: Visibility = Visibility.PUBLIC
    status: PostStatus = PostStatus.DRAFT
    featured_image_url: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    ai_generated: bool = False

    @field_validator("category_id", "featured_image_url", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class SavePostRequest(BaseModel):
    post: BlogPostDraft
    resolution: Optional[SlugResolution] = None


class BlogPost(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str = ""
    category_id: Optional[str] = None
    author_id: Optional[str] = None
    visibility: str = Visibility.PUBLIC.value
    status: str = PostStatus.DRAFT.value
    featured_image_url: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    ai_generated: bool = False
    view_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("id", "category_id", "author_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("keywords", mode="before")
    @classmethod
    def null_keywords(cls, v: Any) -> Any:
        return v or []

    @field_validator("view_count", "comment_count", "share_count", mode="before")
    @classmethod
    def null_counter(cls, v: Any) -> Any:
        return v or 0


class PostFilters(BaseModel):
    status: Optional[str] = None
    category_id: Optional[str] = None
    search: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=500)


class BlogCategory(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class EnhanceMode(str, Enum):
    IMPROVE = "improve"
    SEO = "seo"
    SHORTEN = "shorten"
    EXPAND = "expand"


class EnhanceRequest(BaseModel):
    text: str
    mode: EnhanceMode = EnhanceMode.IMPROVE


class ImageRequest(BaseModel):
    prompt: str
    style: str = "realistic"
    size: str = "1792x1024"


class ArticleRequest(BaseModel):
    topic: str
    category_id: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    target_audience: Visibility = Visibility.PUBLIC
    tone: str = "professionnel"
    auto_publish: bool = False


class SeoContentRequest(BaseModel):
    city: str
    device_type: str = "smartphone"


class GeneratedText(BaseModel):
    content: str


class ImageResult(BaseModel):
    image_url: str
