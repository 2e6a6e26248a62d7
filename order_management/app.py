"""
Main FastAPI application.

This file wires together all layers:
- Domain: Business entities and rules
- Infrastructure: Dataverse client and connection
- Repositories: Data access
- Services: Business logic orchestration
- Routers: HTTP endpoints
"""

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .dependencies import set_dataverse_connection
from .domain.exceptions import OrderManagementException
from .infrastructure.dataverse_connection import DataverseConnection, DataverseSettings
from .logging_config import bind_request_id, clear_request_context, setup_logging
from .metrics import metrics_endpoint, track_request
from .routers import accounts_router, health_router, orders_router

setup_logging(settings.LOG_LEVEL, use_json=settings.LOG_JSON)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "Starting Order Management Service",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
    )

    connection = DataverseConnection(DataverseSettings.from_settings(settings))
    set_dataverse_connection(connection)

    # The service starts without Dataverse; requests connect lazily
    try:
        await connection.connect()
    except OrderManagementException as e:
        logger.warning(
            "Dataverse not available at startup, will connect on first request",
            error=e.message,
        )

    logger.info("Order Management Service started successfully")

    yield

    logger.info("Shutting down Order Management Service...")
    await connection.close()
    set_dataverse_connection(None)
    logger.info("Order Management Service shut down complete")


app = FastAPI(
    title="Order Management Service",
    description="CRUD API for orders and accounts stored in Microsoft Dataverse",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID for distributed tracing."""
    request_id = bind_request_id(request.headers.get("X-Request-ID"))
    # Read by the global exception handler, which runs outside this middleware
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


# Metrics middleware
@app.middleware("http")
async def track_metrics(request: Request, call_next):
    """Track Prometheus metrics."""
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception:
        # Unhandled errors are answered by the global handler with a 500
        _track(request, 500, start_time)
        raise

    _track(request, response.status_code, start_time)
    return response


def _track(request: Request, status_code: int, start_time: float) -> None:
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    track_request(request.method, endpoint, status_code, time.time() - start_time)


# Include routers
app.include_router(orders_router.router)
app.include_router(accounts_router.router)
app.include_router(health_router.router)


# Prometheus metrics endpoint
@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return metrics_endpoint()


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "operational",
        "docs": "/docs",
        "health": "/api/v1/health",
        "ready": "/api/v1/ready",
    }


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID"
    )
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        request_id=request_id,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        headers={"X-Request-ID": request_id} if request_id else None,
        content={
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred",
            "request_id": request_id,
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "order_management.app:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
