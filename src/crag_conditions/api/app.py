"""FastAPI application factory.

Creates and configures the FastAPI application with all routes and middleware.

## Usage

```python
from crag_conditions.api import create_app

app = create_app()

# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
```

## Configuration

The app is configured via environment variables. See `crag_conditions.config`
for available settings.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crag_conditions.api.dependencies import ResponseCache, build_weather_provider
from crag_conditions.config import get_settings
from crag_conditions.logging_config import configure_logging
from crag_conditions.providers.base import ProviderError, RateLimitError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Closes the weather provider's HTTP client on shutdown.
    """
    settings = get_settings()

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    yield

    # Shutdown
    logger.info("Shutting down")
    await app.state.weather_provider.aclose()


async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    """Report weather provider failures as a bad gateway."""
    logger.error(f"Weather provider {exc.provider} failed: {exc}")
    headers = {}
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Weather provider unavailable", "provider": exc.provider},
        headers=headers,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Rock climbing conditions and optimal climbing windows",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.weather_provider = build_weather_provider(settings)
    app.state.conditions_cache = ResponseCache(
        settings.conditions_cache_ttl_seconds,
        max_entries=settings.conditions_cache_max_entries,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ProviderError, provider_error_handler)

    # Include routers
    from crag_conditions.api.routes import conditions

    app.include_router(conditions.router, prefix="/api/conditions", tags=["Conditions"])

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app
