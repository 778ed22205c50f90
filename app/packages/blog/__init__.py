"""Blog package - posts, categories, AI writing help and featured images."""

from packages.blog.routes import router as blog_router

__all__ = ["blog_router"]
