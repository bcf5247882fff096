"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from credit_assessor.api.middleware import RequestContextMiddleware
from credit_assessor.api.v1 import health, process, upload
from credit_assessor.config import settings
from credit_assessor.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Credit Assessor",
        description="Document extraction and credit recommendation service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(RequestContextMiddleware)

    # Liveness probe
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(upload.router, prefix="/v1", tags=["documents"])
    app.include_router(process.router, prefix="/v1", tags=["analysis"])
    app.include_router(health.router, prefix="/v1", tags=["health"])

    return app


app = create_app()
