"""Main entry point for the Slicr API server."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slicr import __version__
from slicr.api.deps import init_services
from slicr.api.routes import files, health, music, preview, process, uploads
from slicr.config import settings
from slicr.errors import SlicrError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize resources on startup."""
    settings.ensure_directories()
    init_services(settings)
    yield


async def slicr_error_handler(request: Request, exc: SlicrError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc)})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"success": False, "error": details})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Slicr",
        description="Silence removal, tempo fitting, subtitles and background music for voice-overs",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Requested-With", "X-API-Key"],
    )

    app.add_exception_handler(SlicrError, slicr_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include API routes
    app.include_router(health.router)
    app.include_router(process.router)
    app.include_router(music.router)
    app.include_router(uploads.router)
    app.include_router(preview.router)
    app.include_router(files.router)

    return app


app = create_app()


def main() -> None:
    """Run the application."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings.ensure_directories()
    uvicorn.run(
        "slicr.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
