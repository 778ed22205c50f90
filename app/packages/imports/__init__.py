"""CSV import package - file preview, column auto-mapping and record import."""

from packages.imports.routes import router as imports_router

__all__ = ["imports_router"]
