"""
Business logic for the blog back office.

Posts and categories are backend rows; AI writing help (enhancement,
images, full articles, local SEO pages) comes from named backend functions.
"""

import mimetypes
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from infrastructure.audit import audit_action
from infrastructure.clients.backend import BackendClient, TableQuery
from infrastructure.configuration import Settings
from infrastructure.identity import User
from infrastructure.operations import OperationResult
from packages.blog.schemas import (
    ArticleRequest,
    BlogCategory,
    BlogPost,
    BlogPostDraft,
    EnhanceMode,
    PostFilters,
    PostStatus,
    SlugResolution,
)
from utils.slugs import next_free_slug, slugify

logger = structlog.get_logger()

POSTS_TABLE = "blog_posts"
CATEGORIES_TABLE = "blog_categories"

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})
MAX_IMAGE_BYTES = 5 * 1024 * 1024

# Keys under which the AI functions return generated text or image URLs
TEXT_KEYS = ("content", "response", "text", "enhanced_text")
IMAGE_KEYS = ("image_url", "imageUrl", "url")


def generate_slug(title: str) -> str:
    """URL slug for a post title."""
    return slugify(title)


def parse_keywords(raw: str) -> List[str]:
    """Split a comma separated keyword string, dropping blanks.

    Example:
        parse_keywords("a, b,,c") -> ["a", "b", "c"]
    """
    return [keyword.strip() for keyword in (raw or "").split(",") if keyword.strip()]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _post_values(draft: BlogPostDraft, slug: str) -> Dict[str, Any]:
    values = draft.model_dump(mode="json", exclude={"id"})
    values["slug"] = slug
    if draft.status == PostStatus.PUBLISHED:
        values["published_at"] = _now()
    return values


def _write(
    backend: BackendClient, user: User, values: Dict[str, Any], post_id: Optional[str]
) -> OperationResult:
    if post_id is None:
        result = backend.insert(POSTS_TABLE, {**values, "author_id": user.id})
    else:
        result = backend.update(POSTS_TABLE, values, TableQuery().eq("id", post_id))
    if not result.is_success:
        return result
    if not result.data:
        return OperationResult.not_found("Article introuvable")
    return OperationResult.success(data=BlogPost.model_validate(result.data[0]))


def save_post(
    backend: BackendClient,
    user: User,
    settings: Settings,
    draft: BlogPostDraft,
    resolution: Optional[SlugResolution] = None,
) -> OperationResult:
    """Create or update a post, resolving slug clashes.

    One lookup fetches every post whose slug is the requested one or one of
    its numbered variants, then one write stores the post. When the slug
    belongs to another post and no resolution is given nothing is written
    and a CONFLICT result offers both ways forward:

    - ``rename``: store under the first free ``<slug>-N`` (N >= 2)
    - ``overwrite``: replace the post currently holding the slug

    Returns:
        OperationResult with the saved BlogPost, or a conflict whose data is
        ``{"slug", "existing_post_id", "suggested_slug", "options"}``.
    """
    if not draft.title.strip() or not draft.content.strip():
        return OperationResult.permanent_error(
            "Le titre et le contenu sont requis", error_code="VALIDATION_ERROR"
        )

    slug = generate_slug(draft.slug or draft.title)
    if not slug:
        return OperationResult.permanent_error(
            "Impossible de générer un slug pour ce titre", error_code="INVALID_SLUG"
        )

    log = logger.bind(operation="save_post", slug=slug, post_id=draft.id)

    lookup = backend.select(
        POSTS_TABLE,
        TableQuery().select("id, slug").or_(f"slug.eq.{slug},slug.like.{slug}-%"),
    )
    if not lookup.is_success:
        log.warning("slug_lookup_failed", error=lookup.message)
        return lookup

    rows = lookup.data
    holder = next(
        (row for row in rows if row["slug"] == slug and str(row["id"]) != draft.id),
        None,
    )

    target_id = draft.id
    if holder is not None:
        suggested = next_free_slug(slug, (row["slug"] for row in rows))
        if resolution is None:
            log.info("slug_conflict", existing_post_id=holder["id"], suggested_slug=suggested)
            return OperationResult.conflict(
                f"Le slug « {slug} » est déjà utilisé par un autre article",
                data={
                    "slug": slug,
                    "existing_post_id": str(holder["id"]),
                    "suggested_slug": suggested,
                    "options": [SlugResolution.RENAME.value, SlugResolution.OVERWRITE.value],
                },
            )
        if resolution == SlugResolution.RENAME:
            slug = suggested
        else:
            target_id = str(holder["id"])

    result = _write(backend, user, _post_values(draft, slug), target_id)
    if not result.is_success:
        log.warning("post_save_failed", error=result.message)
        return result

    post: BlogPost = result.data
    action = "create" if target_id is None else "update"
    details = {"slug": post.slug}
    if resolution is not None and holder is not None:
        details["slug_resolution"] = resolution.value
    audit_action(
        backend, user, action, "blog_post", post.id, details=details,
        table=settings.audit.AUDIT_TABLE,
    )
    log.info("post_saved", action=action, saved_slug=post.slug)
    return OperationResult.success(data=post, message="Article enregistré")


def list_posts(backend: BackendClient, filters: Optional[PostFilters] = None) -> OperationResult:
    filters = filters or PostFilters()
    query = TableQuery()
    if filters.status and filters.status != "all":
        query.eq("status", filters.status)
    if filters.category_id and filters.category_id != "all":
        query.eq("category_id", filters.category_id)
    if filters.search and filters.search.strip():
        query.ilike("title", f"%{filters.search.strip()}%")
    query.order("created_at", ascending=False).limit(filters.limit)

    result = backend.select(POSTS_TABLE, query)
    if not result.is_success:
        return result
    return OperationResult.success(data=[BlogPost.model_validate(row) for row in result.data])


def get_post(backend: BackendClient, post_id: str) -> OperationResult:
    result = backend.select_one(POSTS_TABLE, TableQuery().eq("id", post_id))
    if not result.is_success:
        return result
    return OperationResult.success(data=BlogPost.model_validate(result.data))


def delete_post(
    backend: BackendClient, user: User, settings: Settings, post_id: str
) -> OperationResult:
    result = backend.delete(POSTS_TABLE, TableQuery().eq("id", post_id))
    if not result.is_success:
        return result
    if not result.data:
        return OperationResult.not_found("Article introuvable")
    audit_action(backend, user, "delete", "blog_post", post_id, table=settings.audit.AUDIT_TABLE)
    return OperationResult.success(message="Article supprimé")


def publish_post(
    backend: BackendClient, user: User, settings: Settings, post_id: str
) -> OperationResult:
    result = _write(
        backend,
        user,
        {"status": PostStatus.PUBLISHED.value, "published_at": _now()},
        post_id,
    )
    if not result.is_success:
        return result
    audit_action(backend, user, "publish", "blog_post", post_id, table=settings.audit.AUDIT_TABLE)
    return OperationResult.success(data=result.data, message="Article publié")


def list_categories(backend: BackendClient) -> OperationResult:
    result = backend.select(CATEGORIES_TABLE, TableQuery().order("name"))
    if not result.is_success:
        return result
    return OperationResult.success(
        data=[BlogCategory.model_validate(row) for row in result.data]
    )


def _pick(payload: Any, keys) -> Optional[str]:
    if isinstance(payload, str):
        return payload or None
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
        nested = payload.get("data")
        if isinstance(nested, dict):
            return _pick(nested, keys)
    return None


def enhance_content(
    backend: BackendClient, settings: Settings, text: str, mode: EnhanceMode = EnhanceMode.IMPROVE
) -> OperationResult:
    """Rewrite ``text`` with the AI router."""
    if not text or not text.strip():
        return OperationResult.permanent_error("Aucun texte à améliorer", error_code="EMPTY_INPUT")

    result = backend.invoke_function(
        settings.blog.BLOG_ENHANCE_FUNCTION,
        {"action": "enhance_content", "text": text, "mode": mode.value, "language_hint": "fr"},
    )
    if not result.is_success:
        return result

    content = _pick(result.data, TEXT_KEYS)
    if content is None:
        return OperationResult.transient_error(
            "Réponse IA vide", error_code="EMPTY_AI_RESPONSE"
        )
    return OperationResult.success(data=content)


def generate_image(
    backend: BackendClient,
    settings: Settings,
    prompt: str,
    style: str = "realistic",
    size: str = "1792x1024",
) -> OperationResult:
    """Generate an illustration and return its URL."""
    if not prompt or not prompt.strip():
        return OperationResult.permanent_error("Aucune description d'image", error_code="EMPTY_INPUT")

    result = backend.invoke_function(
        settings.blog.BLOG_IMAGE_FUNCTION, {"prompt": prompt, "style": style, "size": size}
    )
    if not result.is_success:
        return result

    image_url = _pick(result.data, IMAGE_KEYS)
    if image_url is None:
        return OperationResult.transient_error(
            "Aucune image générée", error_code="EMPTY_AI_RESPONSE"
        )
    return OperationResult.success(data=image_url)


def generate_article(
    backend: BackendClient, user: User, settings: Settings, request: ArticleRequest
) -> OperationResult:
    """Have the generator function write (and store) a full article."""
    if not request.topic or not request.topic.strip():
        return OperationResult.permanent_error("Le sujet est requis", error_code="EMPTY_INPUT")

    log = logger.bind(operation="generate_article", topic=request.topic)
    body = {"action": "generate", **request.model_dump(mode="json")}
    result = backend.invoke_function(settings.blog.BLOG_GENERATOR_FUNCTION, body)
    if not result.is_success:
        log.warning("article_generation_failed", error=result.message)
        return result

    payload = result.data if isinstance(result.data, dict) else {}
    post = payload.get("post") or payload.get("article")
    audit_action(
        backend,
        user,
        "create",
        "blog_post",
        (post or {}).get("id"),
        details={"ai_generated": True, "topic": request.topic},
        table=settings.audit.AUDIT_TABLE,
    )
    log.info("article_generated")
    return OperationResult.success(data=payload, message="Article généré")


def generate_seo_content(
    backend: BackendClient, settings: Settings, city: str, device_type: str
) -> OperationResult:
    """Generate a local SEO page for a city and device type."""
    if not city or not city.strip():
        return OperationResult.permanent_error("La ville est requise", error_code="EMPTY_INPUT")

    return backend.invoke_function(
        settings.blog.BLOG_SEO_FUNCTION,
        {"city": city.strip(), "serviceType": device_type, "regenerate": True},
    )


def upload_featured_image(
    backend: BackendClient,
    settings: Settings,
    filename: str,
    content: bytes,
    content_type: Optional[str] = None,
) -> OperationResult:
    """Store a featured image and return its public URL."""
    content_type = content_type or mimetypes.guess_type(filename)[0] or ""
    if content_type not in ALLOWED_IMAGE_TYPES:
        return OperationResult.permanent_error(
            f"Type de fichier non supporté: {content_type or 'inconnu'}",
            error_code="UNSUPPORTED_FILE_TYPE",
        )
    if not content:
        return OperationResult.permanent_error("Fichier vide", error_code="EMPTY_INPUT")
    if len(content) > MAX_IMAGE_BYTES:
        return OperationResult.permanent_error(
            "Image trop volumineuse (5 Mo maximum)", error_code="FILE_TOO_LARGE"
        )

    stem, _, extension = filename.rpartition(".")
    name = slugify(stem or extension) or "image"
    extension = extension.lower() if stem else (mimetypes.guess_extension(content_type) or "").lstrip(".")
    path = f"featured/{uuid.uuid4().hex}-{name}.{extension}"

    result = backend.upload_file(
        settings.backend.BACKEND_STORAGE_BUCKET, path, content, content_type
    )
    if not result.is_success:
        return result
    return OperationResult.success(data=result.data["public_url"], message="Image téléversée")
