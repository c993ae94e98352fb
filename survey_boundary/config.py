"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Duplicate Collapsing
    duplicate_tolerance_m: float = Field(
        default=0.01,
        description="Radius within which two observations are the same physical point"
    )

    # Density Clustering
    cluster_eps_m: float = Field(
        default=25.0,
        description="Connectivity distance for grouping points into parcels"
    )
    geometric_cluster_eps_m: float = Field(
        default=300.0,
        description="Connectivity distance used by the geometric (hull-only) mode"
    )

    # Polygon Construction
    min_polygon_vertices: int = Field(
        default=3,
        description="Minimum cluster size for building a polygon"
    )
    connectivity_match_tolerance_m: float = Field(
        default=1.0,
        description="Distance within which a line point matches a cluster point"
    )
    node_precision: int = Field(
        default=2,
        description="Decimal places used to key connectivity graph nodes"
    )
    concave_hull_k: int = Field(
        default=3,
        description="Initial neighbour count for concave hull growth"
    )
    concave_hull_max_retries: int = Field(
        default=3,
        description="Number of larger-k retries before giving up on the concave hull"
    )

    # Validation
    min_valid_area_m2: float = Field(
        default=1.0,
        description="Polygons smaller than this area are reported invalid"
    )

    # Uploads
    max_upload_bytes: int = Field(
        default=5_000_000,
        description="Maximum accepted CSV upload size in bytes"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Survey Boundary Reconstruction Service",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
