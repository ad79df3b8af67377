"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from produce_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from produce_ledger.api.v1 import access_tokens, fees, finance, savings, settlements
from produce_ledger.infrastructure.observability.logging import setup_logging
from produce_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Produce Ledger",
        description="Fee deductions, producer savings and settlements for the produce marketplace",
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
    app.include_router(fees.router, prefix="/v1", tags=["fees"])
    app.include_router(savings.router, prefix="/v1", tags=["savings"])
    app.include_router(settlements.router, prefix="/v1", tags=["settlements"])
    app.include_router(access_tokens.router, prefix="/v1", tags=["access-tokens"])
    app.include_router(finance.router, prefix="/v1", tags=["finance"])

    return app


app = create_app()
