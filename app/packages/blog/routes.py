"""FastAPI routes for the blog back office (administrators only)."""

from typing import Any, Dict, List

import structlog
from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel

from api.dependencies.rate_limits import get_limiter
from infrastructure.operations.http import raise_for_result
from infrastructure.services import AdminUserDep, SettingsDep, TenantBackendDep
from packages.blog import service
from packages.blog.schemas import (
    ArticleRequest,
    BlogCategory,
    BlogPost,
    EnhanceRequest,
    GeneratedText,
    ImageRequest,
    ImageResult,
    PostFilters,
    SavePostRequest,
    SeoContentRequest,
)

logger = structlog.get_logger()
limiter = get_limiter()
router = APIRouter(prefix="/blog", tags=["blog"])


class MessageResponse(BaseModel):
    message: str


@router.get("/posts", response_model=List[BlogPost])
def get_posts(
    admin: AdminUserDep,
    backend: TenantBackendDep,
    filters: PostFilters = Depends(),
) -> List[BlogPost]:
    result = service.list_posts(backend, filters)
    raise_for_result(result)
    return result.data


@router.get("/posts/{post_id}", response_model=BlogPost)
def get_post(post_id: str, admin: AdminUserDep, backend: TenantBackendDep) -> BlogPost:
    result = service.get_post(backend, post_id)
    raise_for_result(result)
    return result.data


@router.post("/posts", response_model=BlogPost)
def save_post(
    payload: SavePostRequest,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> BlogPost:
    """Create or update a post.

    Answers 409 with ``detail.conflict`` when the slug is taken and no
    ``resolution`` was sent; resend with ``rename`` or ``overwrite``.
    """
    result = service.save_post(backend, admin, settings, payload.post, payload.resolution)
    raise_for_result(result)
    return result.data


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str, admin: AdminUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> MessageResponse:
    result = service.delete_post(backend, admin, settings, post_id)
    raise_for_result(result)
    return MessageResponse(message=result.message)


@router.post("/posts/{post_id}/publish", response_model=BlogPost)
def publish_post(
    post_id: str, admin: AdminUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> BlogPost:
    result = service.publish_post(backend, admin, settings, post_id)
    raise_for_result(result)
    return result.data


@router.get("/categories", response_model=List[BlogCategory])
def get_categories(admin: AdminUserDep, backend: TenantBackendDep) -> List[BlogCategory]:
    result = service.list_categories(backend)
    raise_for_result(result)
    return result.data


@router.post("/ai/enhance", response_model=GeneratedText)
@limiter.limit("20/minute")
def post_enhance(
    request: Request,
    payload: EnhanceRequest,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> GeneratedText:
    result = service.enhance_content(backend, settings, payload.text, payload.mode)
    raise_for_result(result)
    return GeneratedText(content=result.data)


@router.post("/ai/image", response_model=ImageResult)
@limiter.limit("10/minute")
def post_image(
    request: Request,
    payload: ImageRequest,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> ImageResult:
    result = service.generate_image(
        backend, settings, payload.prompt, payload.style, payload.size
    )
    raise_for_result(result)
    return ImageResult(image_url=result.data)


@router.post("/ai/article")
@limiter.limit("10/minute")
def post_article(
    request: Request,
    payload: ArticleRequest,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Dict[str, Any]:
    logger.info("article_generation_requested", admin_user_id=admin.id)
    result = service.generate_article(backend, admin, settings, payload)
    raise_for_result(result)
    return result.data


@router.post("/ai/seo")
@limiter.limit("10/minute")
def post_seo(
    request: Request,
    payload: SeoContentRequest,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Any:
    result = service.generate_seo_content(backend, settings, payload.city, payload.device_type)
    raise_for_result(result)
    return result.data


@router.post("/images", response_model=ImageResult, status_code=201)
def post_image_upload(
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
    file: UploadFile = File(...),
) -> ImageResult:
    content = file.file.read()
    result = service.upload_featured_image(
        backend, settings, file.filename or "image", content, file.content_type
    )
    raise_for_result(result)
    return ImageResult(image_url=result.data)
