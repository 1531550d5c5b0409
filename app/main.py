# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Sayso API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import SaysoException, sayso_exception_handler
from app.middleware import AccessControlMiddleware
from app.routers import access, admin, businesses, claims, health, onboarding, pages, profile
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown.
    """
    logger.info(f"Starting Sayso API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down Sayso API")


# Create FastAPI application
app = FastAPI(
    title="Sayso API",
    description="""
## Role-Based Access & Business Ownership API

Sayso has two account contexts: personal accounts that discover and review
businesses, and business accounts that manage the listings they own.
Administrators review ownership claims.

### Page Access

Every page request passes through the access middleware, which sends the
visitor to the sign-in page, their next onboarding step or their account's
home when the page isn't theirs to open.

| Account | Home | Can open |
|---------|------|----------|
| **Personal** | `/home` | personal pages, messages, shared pages |
| **Business** | `/my-businesses` | business dashboard, messages, shared pages |
| **Admin** | `/admin` | everything |

### Ownership Claims

1. **Claim** - a business account submits `POST /api/v1/claims`
2. **Review** - an admin approves or rejects the pending claim
3. **Manage** - once approved, the listing appears in `GET /api/v1/businesses/mine`
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Verify tokens and fetch the signed-in account",
        },
        {
            "name": "Access",
            "description": "Page access decisions",
        },
        {
            "name": "Profile",
            "description": "Profile, account type and account deletion",
        },
        {
            "name": "Onboarding",
            "description": "Personal account onboarding steps",
        },
        {
            "name": "Businesses",
            "description": "Owned listings and owner edits",
        },
        {
            "name": "Claims",
            "description": "Business ownership claims",
        },
        {
            "name": "Admin",
            "description": "Claim review, ownership revocation and role changes",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# Page access control - runs inside CORS
app.add_middleware(AccessControlMiddleware)

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(SaysoException)
async def handle_sayso_exception(request: Request, exc: SaysoException):
    """Handle custom Sayso exceptions."""
    return await sayso_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1",
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Access decision endpoint
app.include_router(
    access.router,
    prefix="/api/v1",
    tags=["Access"]
)

# Profile endpoints
app.include_router(
    profile.router,
    prefix="/api/v1/profile",
    tags=["Profile"]
)

# Onboarding endpoints
app.include_router(
    onboarding.router,
    prefix="/api/v1/onboarding",
    tags=["Onboarding"]
)

# Owner listing endpoints
app.include_router(
    businesses.router,
    prefix="/api/v1/businesses",
    tags=["Businesses"]
)

# Claim endpoints
app.include_router(
    claims.router,
    prefix="/api/v1/claims",
    tags=["Claims"]
)

# Administrator endpoints
app.include_router(
    admin.router,
    prefix="/api/v1/admin",
    tags=["Admin"]
)

# Page surfaces (guarded by AccessControlMiddleware)
app.include_router(pages.router)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Sayso API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
