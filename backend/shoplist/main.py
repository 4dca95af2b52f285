"""FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from .config import settings
from .domain_errors import DomainError
from .problem_details import build_problem_details_response
from .routers import dashboard, items, requests, fulfillments, threshold, notifications

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create app
app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Backend API for the shared office shopping list"
)

# Production safety checks (fail closed on insecure config).
if settings.ENV.lower() == "production" and settings.JWT_SECRET_KEY == "dev-secret-change-me":
    raise RuntimeError("JWT_SECRET_KEY must be set in production.")
if settings.ENV.lower() == "production" and not settings.cors_origins:
    raise RuntimeError("ALLOWED_ORIGINS must be set in production (explicit frontend origin required).")
if settings.ENV.lower() == "production" and any(origin == "*" for origin in settings.cors_origins):
    raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard when using credentials).")

# CORS
cors_headers = ["Authorization", "Content-Type"]
if settings.ENV.lower() != "production":
    cors_headers = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=cors_headers,
)


@app.exception_handler(DomainError)
async def handle_domain_error(request: Request, exc: DomainError):
    logger.info(
        "domain_error code=%s status=%s path=%s",
        exc.code,
        exc.http_status,
        request.url.path,
    )
    return build_problem_details_response(exc)


# Include routers
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(items.router, prefix="/api/v1")
app.include_router(requests.router, prefix="/api/v1")
app.include_router(fulfillments.router, prefix="/api/v1")
app.include_router(threshold.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")


@app.get("/api/v1/system/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
    }


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Office Shopping List API",
        "version": "1.0.0",
        "docs": "/docs"
    }
