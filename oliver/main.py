"""FastAPI application factory."""
from __future__ import annotations

from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from oliver.api.v1 import api_router
from oliver.config import settings
from oliver.utils.exceptions import (
    AllSourcesFailedError,
    ApiError,
    ValidationError,
    handle_all_sources_failed,
    handle_api_error,
    handle_validation_error,
)


tags_metadata: List[dict[str, str]] = [
    {"name": "review", "description": "Classified and paginated FSRS review queue."},
    {"name": "recommendations", "description": "Paged AI recommendations and feedback."},
    {"name": "leaderboard", "description": "Aggregated leaderboard panels."},
]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Review queue and recommendation front end for the Oliver FSRS backend.",
        version="0.1.0",
        openapi_tags=tags_metadata,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors(), "message": "Validation failed"},
        )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        http_exc = handle_api_error(exc)
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    @app.exception_handler(ValidationError)
    async def client_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        http_exc = handle_validation_error(exc)
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    @app.exception_handler(AllSourcesFailedError)
    async def all_sources_failed_handler(
        request: Request, exc: AllSourcesFailedError
    ) -> JSONResponse:
        http_exc = handle_all_sources_failed(exc)
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    @app.get(f"{settings.API_V1_STR}/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
