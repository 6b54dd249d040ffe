import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi import APIRouter

from .config import get_settings
# API routers
from .api.chat import router as chat_router
from .api.health import router as health_router
from .api.models import router as models_router
from .core.errors import install_exception_handlers
from .core.gate import ErrorHandlingMiddleware, RequestGateMiddleware, SecurityHeadersMiddleware
from .core.logging import setup_logging
from .core.ratelimit import api_limiter, brute_force_guard
from .services.chat_service import chat_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Backend server running on port %d", settings.port)
    logger.info("Frontend URL: %s", settings.frontend_url)
    yield
    await chat_service.aclose()


def create_app() -> FastAPI:
    settings = get_settings()
    # Setup logging early
    setup_logging(settings.log_level)
    app = FastAPI(title="AI Chat Proxy", version="0.1.0", lifespan=lifespan)

    install_exception_handlers(app)

    # Innermost first: CORS and security headers wrap the gate and error envelope
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(
        RequestGateMiddleware,
        limiter=api_limiter,
        guard=brute_force_guard,
        max_body_bytes=settings.max_body_bytes,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    api = APIRouter()
    api.include_router(chat_router)
    api.include_router(models_router)
    app.include_router(api, prefix="/api")
    app.include_router(health_router)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("chatproxy.main:app", host="0.0.0.0", port=settings.port)
