"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from survey_boundary.config import settings
from survey_boundary.middleware.error_handler import ErrorHandlerMiddleware
from survey_boundary.api.v1.routers import boundaries

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Pipeline config: duplicate_tolerance={settings.duplicate_tolerance_m}m, "
                f"cluster_eps={settings.cluster_eps_m}m, "
                f"min_polygon_vertices={settings.min_polygon_vertices}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Boundary Reconstruction API for Survey Exports

    This API turns raw surveyed coordinate records into clean, closed boundary
    polygons suitable for cadastral and engineering drawings.

    ## Features

    - **Header-tolerant ingestion**: JSON rows or CSV uploads with common
      header variants (name/point, easting/x/E, northing/y/N)
    - **Duplicate collapsing**: repeated observations of a point are merged
      and reported
    - **Parcel separation**: density clustering splits files holding several
      parcels
    - **Line-aware ordering**: point names such as `Fence-L1-P2` or `Wall-P7`
      are traced into a connected boundary
    - **Validation**: area, winding and self-intersection checks per polygon
    - **Rate Limiting**: Protects the API from abuse

    ## Ordering Strategies

    1. Trace the connectivity graph of surveyed lines
    2. Sort by numeric suffix of the point names
    3. Sort by polar angle around the centroid
    4. Convex hull when the ordering self-intersects
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(boundaries.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
