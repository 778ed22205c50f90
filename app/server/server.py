from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies.rate_limits import setup_rate_limiter
from api.router import api_router
from infrastructure.configuration import settings
from infrastructure.logging import get_module_logger
from server.lifespan import lifespan
from server.middleware import CorrelationIdMiddleware

logger = get_module_logger()


handler = FastAPI(title="Ops Console", version=settings.GIT_SHA, lifespan=lifespan)
setup_rate_limiter(handler)


allow_origins = (
    [settings.server.CONSOLE_URL]
    if settings.is_production
    else settings.server.CORS_ALLOWED_ORIGINS
)
handler.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)
handler.add_middleware(CorrelationIdMiddleware)


handler.include_router(api_router)
