from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from friendships.config import settings
from friendships.database import init_db
from friendships.logging_config import configure_logging
from friendships.middleware.request_id import RequestIDMiddleware
from friendships.routers import friendships
from friendships.utils.logger import get_logger

# Configure logging first
configure_logging()
logger = get_logger(__name__)

# Conditional docs configuration
if settings.DEBUG:
    docs_config = {
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "openapi_url": "/openapi.json"
    }
else:
    docs_config = {
        "docs_url": None,
        "redoc_url": None,
        "openapi_url": None
    }

app = FastAPI(
    title="Friendships API",
    description="Two-party friendships with status transitions and soft delete",
    version="1.0.0",
    **docs_config
)

# Add Request ID middleware first for proper request tracing
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(friendships.router)

@app.on_event("startup")
async def startup_event():
    """Create tables in this worker process and log the mode we run in."""
    init_db()
    logger.info(f"Friendships API started in {'DEBUG' if settings.DEBUG else 'PRODUCTION'} mode")

@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "service": "friendships-api"}
