"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import Field

from survey_boundary.domain.models import BoundaryResult, GeoSurveyPoint


class BoundaryResponse(BoundaryResult):
    """Response model for boundary reconstruction endpoints."""
    point_count: int = Field(
        description="Number of usable points after normalization"
    )
    selected_boundary_latlon: Optional[List[GeoSurveyPoint]] = Field(
        default=None,
        description="Selected boundary with WGS84 coordinates (only when a UTM zone is given)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "point_count": 4,
                "all_points": [
                    {"id": 0, "name": "P1", "easting": 0.0, "northing": 0.0},
                ],
                "duplicates_mapping": [],
                "clusters_summary": [
                    {
                        "cluster_id": 0,
                        "number_of_points": 4,
                        "bounding_box": {
                            "min_easting": 0.0, "max_easting": 10.0,
                            "min_northing": 0.0, "max_northing": 10.0,
                        },
                    }
                ],
                "polylines": [],
                "polygons": [],
                "validation_report": [
                    {
                        "cluster_id": 0, "valid": True, "issues": [],
                        "area": 100.0, "orientation": "counterclockwise",
                    }
                ],
                "selected_boundary": [],
            }
        }
