"""Blog content management feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class BlogFeatureSettings(FeatureSettings):
    """Blog CMS configuration.

    Environment Variables:
        BLOG_GENERATOR_FUNCTION: Remote function generating full articles
        BLOG_ENHANCE_FUNCTION: Remote function rewriting/enhancing text
        BLOG_IMAGE_FUNCTION: Remote function generating featured images
        BLOG_SEO_FUNCTION: Remote function generating local SEO content
    """

    BLOG_GENERATOR_FUNCTION: str = Field(
        default="blog-ai-generator", alias="BLOG_GENERATOR_FUNCTION"
    )
    BLOG_ENHANCE_FUNCTION: str = Field(default="ai-router", alias="BLOG_ENHANCE_FUNCTION")
    BLOG_IMAGE_FUNCTION: str = Field(
        default="generate-blog-image", alias="BLOG_IMAGE_FUNCTION"
    )
    BLOG_SEO_FUNCTION: str = Field(
        default="generate-local-seo-v3", alias="BLOG_SEO_FUNCTION"
    )
