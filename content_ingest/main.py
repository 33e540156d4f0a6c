"""
FastAPI application initialization.
Bilingual curriculum bulk-upload API.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from content_ingest.core.config import settings
from content_ingest.core.logging_config import logger
from content_ingest.api.routes import router
from content_ingest.services.store_provider import create_content_store
from content_ingest.utils.exceptions import IngestException, InvalidUploadError


# Initialize FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=settings.api_description,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler for IngestException
@app.exception_handler(IngestException)
async def ingest_exception_handler(request: Request, exc: IngestException):
    """Malformed uploads are 400s; everything else in the family is a 500."""
    status_code = 400 if isinstance(exc, InvalidUploadError) else 500
    logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"error": str(exc)}
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": str(exc) if settings.environment == "development" else "An unexpected error occurred"
        }
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Storage backend: {settings.storage_backend}")
    app.state.content_store = create_content_store(settings)


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info(f"Shutting down {settings.api_title}")


# Include routers
app.include_router(router, tags=["Bulk Upload"])


# Health check for load balancers/monitoring
@app.get("/ping")
async def ping():
    """Simple ping endpoint for monitoring."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "content_ingest.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )
