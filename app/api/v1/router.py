from fastapi import APIRouter
from packages.audit import audit_router
from packages.blog import blog_router
from packages.imports import imports_router
from packages.monitoring import monitoring_router
from packages.storefront import storefront_router


router = APIRouter()
router.include_router(audit_router)
router.include_router(monitoring_router)
router.include_router(blog_router)
router.include_router(storefront_router)
router.include_router(imports_router)
