"""
ActionLink API - Main Application
FastAPI service for shareable on-chain action links (tips and NFT sales)
"""

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

import httpx

from actionlink import __version__
from actionlink.actions.store import ActionStore
from actionlink.api.deps import get_action_store
from actionlink.api.v1 import api_router
from actionlink.core.config import settings
from actionlink.core.exceptions import ActionLinkError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Chain: {settings.CHAIN_NAME} ({settings.CHAIN_ID})")

    # Shared client for off-chain NFT metadata documents
    app.state.http_client = httpx.AsyncClient(follow_redirects=False)

    # Test Supabase connection
    try:
        await get_action_store().health_check()
        logger.info("✓ Supabase connection established")
    except Exception as e:
        logger.error(f"✗ Supabase connection failed: {e}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    await app.state.http_client.aclose()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Short links that resolve to signable tip and NFT purchase transactions",
    version=__version__,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler for ActionLinkError
@app.exception_handler(ActionLinkError)
async def action_link_exception_handler(request: Request, exc: ActionLinkError):
    """Render typed errors as {"error": {code, message, details}}"""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.error_code,
                "message": exc.message,
                "details": exc.details
            }
        }
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.ENVIRONMENT == "development" else None
            }
        }
    )


# Health check endpoint
@app.get("/health")
async def health_check(store: ActionStore = Depends(get_action_store)):
    """Health check endpoint; 503 when the action store cannot be read"""
    body = {
        "status": "healthy",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "store": "ok"
    }
    try:
        await store.health_check()
    except ActionLinkError as e:
        logger.error(f"Health check failed: {e.message}")
        body.update(status="unhealthy", store="unavailable")
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "chain_id": settings.CHAIN_ID,
        "docs": "/docs" if settings.ENVIRONMENT == "development" else "disabled"
    }


# Include API router
app.include_router(
    api_router,
    prefix=f"/{settings.API_VERSION}"
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "actionlink.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
