"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from market_gateway.api.errors import domain_exception_handler
from market_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from market_gateway.api.v1 import transactions, vehicles
from market_gateway.domain.exceptions import DomainException
from market_gateway.infrastructure.observability.logging import setup_logging
from market_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Vehicle Marketplace Gateway",
        description="Vehicle listings and sale transactions with financing",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(vehicles.router, prefix="/v1", tags=["vehicles"])

    return app


app = create_app()
