"""
queueplan - Main FastAPI Application
Subscription entitlement and usage-metering engine
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import logging
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Import API routers
from queueplan.api import plans, subscriptions
from queueplan.api.admin import plans as admin_plans
from queueplan.api.admin import subscriptions as admin_subscriptions
from queueplan.errors import ErrorKind, SubscriptionError
from queueplan.utils.database import engine, create_tables

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_TIER: 404,
    ErrorKind.VALIDATION_ERROR: 400,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    await create_tables()
    yield
    # Shutdown
    await engine.dispose()

# Initialize FastAPI app
app = FastAPI(
    title="queueplan",
    description="Subscription entitlement and usage-metering engine",
    version="1.0.0",
    docs_url="/api/docs" if os.getenv("DEBUG", "false").lower() == "true" else None,
    lifespan=lifespan
)

# Middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure based on environment
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SubscriptionError)
async def subscription_error_handler(request: Request, exc: SubscriptionError):
    """Map engine errors to HTTP status codes"""
    status_code = ERROR_STATUS.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"Request failed: path={request.url.path}, kind={exc.kind.value}, error={exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind.value, "operation": exc.operation},
    )

# API Routes
app.include_router(plans.router, prefix="/api/v1/plans", tags=["plans"])
app.include_router(subscriptions.router, prefix="/api/v1/subscriptions", tags=["subscriptions"])

# Admin Routes
app.include_router(admin_plans.router, prefix="/admin/plans", tags=["admin-plans"])
app.include_router(admin_subscriptions.router, prefix="/admin/subscriptions", tags=["admin-subscriptions"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "queueplan-api"}


@app.get("/api/v1/health")
async def api_health():
    """API health check"""
    return {"status": "healthy", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "queueplan.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8012")),
        reload=os.getenv("DEBUG", "false").lower() == "true"
    )
