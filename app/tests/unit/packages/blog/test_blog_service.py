"""Unit tests for the blog service."""

from unittest.mock import patch

import pytest

from infrastructure.operations import OperationResult, OperationStatus
from packages.blog import service
from packages.blog.schemas import (
    ArticleRequest,
    BlogPostDraft,
    EnhanceMode,
    PostFilters,
    SlugResolution,
)


@pytest.fixture(autouse=True)
def audit():
    with patch("packages.blog.service.audit_action") as mock_audit:
        yield mock_audit


def stored(post_id, slug, **extra):
    return OperationResult.success(
        data=[{"id": post_id, "title": "Écran cassé", "slug": slug, **extra}]
    )


@pytest.fixture
def draft():
    return BlogPostDraft(title="Écran cassé", content="Que faire ?")


@pytest.mark.unit
class TestHelpers:
    def test_generate_slug(self):
        assert service.generate_slug("Écran cassé : que faire ?") == "ecran-casse-que-faire"

    def test_parse_keywords(self):
        assert service.parse_keywords("a, b,,c ,") == ["a", "b", "c"]
        assert service.parse_keywords("") == []


@pytest.mark.unit
class TestSavePost:
    def test_new_post(self, mock_backend, admin_user, settings, draft, audit):
        mock_backend.insert.return_value = stored(1, "ecran-casse")

        result = service.save_post(mock_backend, admin_user, settings, draft)

        assert result.data.id == "1"
        table, row = mock_backend.insert.call_args.args
        assert table == service.POSTS_TABLE
        assert row["slug"] == "ecran-casse"
        assert row["author_id"] == "admin-1"
        assert "published_at" not in row
        assert audit.call_args.args[2] == "create"
        assert audit.call_args.kwargs["details"] == {"slug": "ecran-casse"}

    def test_lookup_covers_numbered_variants(self, mock_backend, admin_user, settings, draft):
        mock_backend.insert.return_value = stored(1, "ecran-casse")

        service.save_post(mock_backend, admin_user, settings, draft)

        params = mock_backend.select.call_args.args[1].params()
        assert ("or", "(slug.eq.ecran-casse,slug.like.ecran-casse-%)") in params

    def test_explicit_slug_is_normalized(self, mock_backend, admin_user, settings):
        mock_backend.insert.return_value = stored(1, "mon-slug")
        draft = BlogPostDraft(title="T", content="C", slug="Mon Slug")

        service.save_post(mock_backend, admin_user, settings, draft)

        assert mock_backend.insert.call_args.args[1]["slug"] == "mon-slug"

    def test_published_post_gets_published_at(self, mock_backend, admin_user, settings):
        mock_backend.insert.return_value = stored(1, "t")
        draft = BlogPostDraft(title="T", content="C", status="published")

        service.save_post(mock_backend, admin_user, settings, draft)

        assert mock_backend.insert.call_args.args[1]["published_at"]

    @pytest.mark.parametrize("title,content", [("", "C"), ("T", "   ")])
    def test_title_and_content_required(self, mock_backend, admin_user, settings, title, content):
        result = service.save_post(
            mock_backend, admin_user, settings, BlogPostDraft(title=title, content=content)
        )

        assert result.error_code == "VALIDATION_ERROR"
        mock_backend.select.assert_not_called()

    def test_unusable_slug(self, mock_backend, admin_user, settings):
        result = service.save_post(
            mock_backend, admin_user, settings, BlogPostDraft(title="???", content="C")
        )
        assert result.error_code == "INVALID_SLUG"

    def test_conflict_without_resolution_writes_nothing(
        self, mock_backend, admin_user, settings, draft, audit
    ):
        mock_backend.select.return_value = OperationResult.success(
            data=[{"id": 7, "slug": "ecran-casse"}, {"id": 8, "slug": "ecran-casse-2"}]
        )

        result = service.save_post(mock_backend, admin_user, settings, draft)

        assert result.error_code == "CONFLICT"
        assert result.data == {
            "slug": "ecran-casse",
            "existing_post_id": "7",
            "suggested_slug": "ecran-casse-3",
            "options": ["rename", "overwrite"],
        }
        mock_backend.insert.assert_not_called()
        mock_backend.update.assert_not_called()
        audit.assert_not_called()

    def test_rename_uses_suggested_slug(self, mock_backend, admin_user, settings, draft, audit):
        mock_backend.select.return_value = OperationResult.success(
            data=[{"id": 7, "slug": "ecran-casse"}]
        )
        mock_backend.insert.return_value = stored(9, "ecran-casse-2")

        result = service.save_post(
            mock_backend, admin_user, settings, draft, SlugResolution.RENAME
        )

        assert result.data.slug == "ecran-casse-2"
        assert mock_backend.insert.call_args.args[1]["slug"] == "ecran-casse-2"
        assert audit.call_args.kwargs["details"]["slug_resolution"] == "rename"

    def test_overwrite_updates_holder(self, mock_backend, admin_user, settings, draft, audit):
        mock_backend.select.return_value = OperationResult.success(
            data=[{"id": 7, "slug": "ecran-casse"}]
        )
        mock_backend.update.return_value = stored(7, "ecran-casse")

        result = service.save_post(
            mock_backend, admin_user, settings, draft, SlugResolution.OVERWRITE
        )

        assert result.data.id == "7"
        mock_backend.insert.assert_not_called()
        assert ("id", "eq.7") in mock_backend.update.call_args.args[2].params(include_select=False)
        assert audit.call_args.args[2] == "update"

    def test_editing_own_post_is_not_a_conflict(self, mock_backend, admin_user, settings):
        mock_backend.select.return_value = OperationResult.success(
            data=[{"id": 7, "slug": "ecran-casse"}]
        )
        mock_backend.update.return_value = stored(7, "ecran-casse")
        draft = BlogPostDraft(id="7", title="Écran cassé", content="Nouveau")

        result = service.save_post(mock_backend, admin_user, settings, draft)

        assert result.is_success
        assert "id" not in mock_backend.update.call_args.args[1]

    def test_update_of_missing_post(self, mock_backend, admin_user, settings):
        draft = BlogPostDraft(id="404", title="T", content="C")

        result = service.save_post(mock_backend, admin_user, settings, draft)

        assert result.status == OperationStatus.NOT_FOUND

    def test_lookup_failure(self, mock_backend, admin_user, settings, draft):
        mock_backend.select.return_value = OperationResult.transient_error("down")

        result = service.save_post(mock_backend, admin_user, settings, draft)

        assert result.status == OperationStatus.TRANSIENT_ERROR
        mock_backend.insert.assert_not_called()


@pytest.mark.unit
class TestPosts:
    def test_list_filters(self, mock_backend):
        mock_backend.select.return_value = OperationResult.success(
            data=[{"id": 1, "title": "T", "slug": "t", "keywords": None, "view_count": None}]
        )

        result = service.list_posts(
            mock_backend, PostFilters(status="published", category_id="all", search=" ecran ")
        )

        post = result.data[0]
        assert post.keywords == []
        assert post.view_count == 0
        params = mock_backend.select.call_args.args[1].params()
        assert ("status", "eq.published") in params
        assert ("title", "ilike.%ecran%") in params
        assert not any(column == "category_id" for column, _ in params)
        assert ("order", "created_at.desc") in params

    def test_delete(self, mock_backend, admin_user, settings, audit):
        mock_backend.delete.return_value = OperationResult.success(data=[{"id": 1}])

        assert service.delete_post(mock_backend, admin_user, settings, "1").is_success
        assert audit.call_args.args[2] == "delete"

    def test_delete_missing(self, mock_backend, admin_user, settings):
        result = service.delete_post(mock_backend, admin_user, settings, "1")
        assert result.status == OperationStatus.NOT_FOUND

    def test_publish(self, mock_backend, admin_user, settings, audit):
        mock_backend.update.return_value = stored(1, "t", status="published")

        result = service.publish_post(mock_backend, admin_user, settings, "1")

        assert result.data.status == "published"
        values = mock_backend.update.call_args.args[1]
        assert values["status"] == "published"
        assert values["published_at"]
        assert audit.call_args.args[2] == "publish"


@pytest.mark.unit
class TestAiHelpers:
    @pytest.mark.parametrize(
        "payload",
        [
            {"content": "Mieux"},
            {"enhanced_text": "Mieux"},
            {"data": {"text": "Mieux"}},
            "Mieux",
        ],
    )
    def test_enhance_response_shapes(self, mock_backend, settings, payload):
        mock_backend.invoke_function.return_value = OperationResult.success(data=payload)

        result = service.enhance_content(mock_backend, settings, "Bien", EnhanceMode.SEO)

        assert result.data == "Mieux"
        name, body = mock_backend.invoke_function.call_args.args
        assert name == settings.blog.BLOG_ENHANCE_FUNCTION
        assert body == {
            "action": "enhance_content",
            "text": "Bien",
            "mode": "seo",
            "language_hint": "fr",
        }

    def test_enhance_empty_response(self, mock_backend, settings):
        result = service.enhance_content(mock_backend, settings, "Bien")
        assert result.error_code == "EMPTY_AI_RESPONSE"

    def test_enhance_empty_input(self, mock_backend, settings):
        result = service.enhance_content(mock_backend, settings, "  ")

        assert result.error_code == "EMPTY_INPUT"
        mock_backend.invoke_function.assert_not_called()

    def test_generate_image(self, mock_backend, settings):
        mock_backend.invoke_function.return_value = OperationResult.success(
            data={"imageUrl": "https://cdn.test/a.png"}
        )

        assert service.generate_image(mock_backend, settings, "atelier").data == "https://cdn.test/a.png"

    def test_generate_article(self, mock_backend, admin_user, settings, audit):
        mock_backend.invoke_function.return_value = OperationResult.success(
            data={"success": True, "post": {"id": 12, "title": "Batterie"}}
        )

        result = service.generate_article(
            mock_backend, admin_user, settings, ArticleRequest(topic="Batterie", keywords=["iphone"])
        )

        assert result.data["post"]["id"] == 12
        body = mock_backend.invoke_function.call_args.args[1]
        assert body["action"] == "generate"
        assert body["keywords"] == ["iphone"]
        assert audit.call_args.args[4] == 12

    def test_generate_seo_content(self, mock_backend, settings):
        service.generate_seo_content(mock_backend, settings, " Lyon ", "tablette")

        mock_backend.invoke_function.assert_called_once_with(
            settings.blog.BLOG_SEO_FUNCTION,
            {"city": "Lyon", "serviceType": "tablette", "regenerate": True},
        )


@pytest.mark.unit
class TestUploadFeaturedImage:
    def test_upload(self, mock_backend, settings):
        mock_backend.upload_file.return_value = OperationResult.success(
            data={"path": "p", "public_url": "https://cdn.test/p"}
        )

        result = service.upload_featured_image(
            mock_backend, settings, "Photo Écran.PNG", b"img", "image/png"
        )

        assert result.data == "https://cdn.test/p"
        bucket, path, content, content_type = mock_backend.upload_file.call_args.args
        assert bucket == settings.backend.BACKEND_STORAGE_BUCKET
        assert path.startswith("featured/")
        assert path.endswith("-photo-ecran.png")
        assert content_type == "image/png"

    def test_type_guessed_from_name(self, mock_backend, settings):
        mock_backend.upload_file.return_value = OperationResult.success(
            data={"public_url": "https://cdn.test/p"}
        )

        assert service.upload_featured_image(mock_backend, settings, "a.jpg", b"img").is_success
        assert mock_backend.upload_file.call_args.args[3] == "image/jpeg"

    def test_rejects_other_types(self, mock_backend, settings):
        result = service.upload_featured_image(mock_backend, settings, "notes.txt", b"x")

        assert result.error_code == "UNSUPPORTED_FILE_TYPE"
        mock_backend.upload_file.assert_not_called()

    def test_rejects_large_files(self, mock_backend, settings):
        content = b"x" * (service.MAX_IMAGE_BYTES + 1)

        result = service.upload_featured_image(mock_backend, settings, "a.png", content, "image/png")

        assert result.error_code == "FILE_TOO_LARGE"
