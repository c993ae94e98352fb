"""
API request models using Pydantic.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from survey_boundary.config import settings
from survey_boundary.services.domain.boundary_reconstructor import ReconstructionConfig


class PipelineOptions(BaseModel):
    """Per-request pipeline parameters; omitted values come from settings."""
    duplicate_tolerance_m: Optional[float] = Field(
        default=None,
        gt=0,
        description="Radius within which observations are merged (meters)",
        examples=[0.01],
    )
    cluster_eps_m: Optional[float] = Field(
        default=None,
        gt=0,
        description="Connectivity distance between points of one parcel (meters)",
        examples=[25.0],
    )
    min_polygon_vertices: Optional[int] = Field(
        default=None,
        ge=3,
        description="Smallest cluster that gets a polygon",
        examples=[3],
    )
    mode: Literal["boundary", "geometric"] = Field(
        default="boundary",
        description="'boundary' orders points into a ring, 'geometric' wraps clusters in hulls",
    )

    def to_config(self) -> ReconstructionConfig:
        """Merge these options over the settings defaults."""
        config = ReconstructionConfig.from_settings(self.mode)
        if self.duplicate_tolerance_m is not None:
            config.duplicate_tolerance_m = self.duplicate_tolerance_m
        if self.cluster_eps_m is not None:
            config.cluster_eps_m = self.cluster_eps_m
        if self.min_polygon_vertices is not None:
            config.min_polygon_vertices = self.min_polygon_vertices
        return config


class ReconstructRequest(BaseModel):
    """Request body for reconstructing boundaries from rows."""
    rows: List[Dict[str, Any]] = Field(
        description="Rows keyed by column header, as read from a CSV export"
    )
    options: PipelineOptions = Field(default_factory=PipelineOptions)
    utm_zone: Optional[int] = Field(
        default=None,
        ge=1,
        le=60,
        description="UTM zone of the coordinates; adds lat/lon to the selected boundary",
    )
    hemisphere: Literal["north", "south"] = "north"

    class Config:
        json_schema_extra = {
            "example": {
                "rows": [
                    {"name": "P1", "easting": 500000.0, "northing": 4000000.0},
                    {"name": "P2", "easting": 500010.0, "northing": 4000000.0},
                    {"name": "P3", "easting": 500010.0, "northing": 4000010.0},
                    {"name": "P4", "easting": 500000.0, "northing": 4000010.0},
                ],
                "options": {"duplicate_tolerance_m": 0.01, "cluster_eps_m": settings.cluster_eps_m},
                "utm_zone": 39,
                "hemisphere": "north",
            }
        }
