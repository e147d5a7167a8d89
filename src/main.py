"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.middleware.error_handler import error_handler_middleware, register_exception_handlers
from src.api.middleware.latency_logging import latency_logging_middleware
from src.api.routes import health, listings, profiles
from src.core.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to the application.
    """
    settings = get_settings()
    logger.info("Starting %s in %s mode", settings.app_name, settings.app_env)
    logger.info("Profiles table: %s", settings.profiles_table)
    if settings.profile_allowed_fields_list:
        logger.info("Profile allow-list: %s", ", ".join(settings.profile_allowed_fields_list))
    yield
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="MealShare API",
        description="Surplus-food redistribution platform backend",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Last added runs outermost: the error handler wraps latency logging
    app.add_middleware(BaseHTTPMiddleware, dispatch=latency_logging_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=error_handler_middleware)

    register_exception_handlers(app)

    app.include_router(health.router)

    api_v1_router = APIRouter(prefix="/api/v1")
    api_v1_router.include_router(profiles.router)
    api_v1_router.include_router(listings.router)
    app.include_router(api_v1_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
