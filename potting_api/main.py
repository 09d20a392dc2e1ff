"""Main FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from potting_api import __version__
from potting_api.api.v1 import api_router
from potting_api.config import settings
from potting_api.database import Base, engine
from potting_api import models  # noqa: F401

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Potting Machine Service",
        description="Batch coordination for the seed potting machine",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    Base.metadata.create_all(bind=engine)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Malformed bodies are rejected operations like any other invalid input
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    # Include API router
    app.include_router(api_router, prefix="/v1")

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        db_status = "disconnected"
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                db_status = "connected"
        except Exception as e:
            logger.error(f"Health check database error: {e}")
            db_status = f"error: {str(e)}"

        return {
            "status": "ok" if db_status == "connected" else "degraded",
            "db": db_status,
            "hardware_enabled": settings.hardware_enabled,
        }

    logger.info(f"Potting service started ({settings.environment})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "potting_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
