"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from societal_debt.api.middleware import RequestIDMiddleware, MetricsMiddleware
from societal_debt.api.v1 import credit, impact
from societal_debt.infrastructure.observability.logging import setup_logging
from societal_debt.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Societal Debt Service",
        description="Scores classified transactions into societal debt and tracks applied credit",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(impact.router, prefix="/v1", tags=["impact"])
    app.include_router(credit.router, prefix="/v1", tags=["credit"])

    return app


app = create_app()
