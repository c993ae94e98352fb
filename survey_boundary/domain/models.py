"""
Domain models for surveyed points and reconstructed boundaries.

These models represent the core domain entities and should be independent
of any infrastructure concerns (HTTP, files, projections).
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


PolygonMethod = Literal[
    "connectivity",
    "numeric_sort",
    "polar_angle",
    "convex_hull",
    "concave_hull",
]
Orientation = Literal["clockwise", "counterclockwise"]


class SurveyPoint(BaseModel):
    """A single surveyed point. Stages produce decorated copies."""
    id: int = Field(description="Zero-based row index in the raw input")
    name: str
    easting: float = Field(description="Planar easting in meters")
    northing: float = Field(description="Planar northing in meters")
    code: Optional[str] = None
    description: Optional[str] = None
    sequence_number: Optional[int] = None
    cluster_id: Optional[int] = None

    class Config:
        frozen = True

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.easting, self.northing)


class DuplicateRecord(BaseModel):
    """An observation absorbed into another point's duplicate group."""
    cluster_id: int = Field(description="Index of the duplicate group")
    kept_point: SurveyPoint
    duplicate_point: SurveyPoint
    dx: float
    dy: float


class BoundingBox(BaseModel):
    min_easting: float
    max_easting: float
    min_northing: float
    max_northing: float


class SpatialCluster(BaseModel):
    """Points transitively connected within the clustering distance."""
    id: int
    points: List[SurveyPoint]
    bounding_box: BoundingBox

    @property
    def number_of_points(self) -> int:
        return len(self.points)


class ClusterSummary(BaseModel):
    cluster_id: int
    number_of_points: int
    bounding_box: BoundingBox


class Polyline(BaseModel):
    """An ordered surveyed line derived from point names."""
    id: str
    points: List[SurveyPoint]
    type: Literal["polyline"] = "polyline"
    kind: Literal["segment", "chain"] = "segment"


class Polygon(BaseModel):
    """A closed ring built for one cluster (first point repeated at the end)."""
    cluster_id: int
    points: List[SurveyPoint]
    method: PolygonMethod

    class Config:
        frozen = True

    @property
    def vertices(self) -> List[SurveyPoint]:
        """Ring without the closing repeat."""
        return self.points[:-1]


class Centroid(BaseModel):
    easting: float
    northing: float


class ValidationReport(BaseModel):
    """Validation outcome and measurements for one polygon."""
    cluster_id: int
    valid: bool
    issues: List[str] = Field(default_factory=list)
    area: float = Field(description="Area in m²")
    orientation: Orientation
    perimeter: float = Field(default=0.0, description="Perimeter in meters")
    edge_lengths: List[float] = Field(
        default_factory=list,
        description="Length of each edge in meters, closing edge last"
    )
    centroid: Optional[Centroid] = None


class BoundaryResult(BaseModel):
    """Everything the pipeline produced for one input."""
    all_points: List[SurveyPoint] = Field(default_factory=list)
    duplicates_mapping: List[DuplicateRecord] = Field(default_factory=list)
    clusters_summary: List[ClusterSummary] = Field(default_factory=list)
    polylines: List[Polyline] = Field(default_factory=list)
    polygons: List[Polygon] = Field(default_factory=list)
    validation_report: List[ValidationReport] = Field(default_factory=list)
    selected_boundary: List[SurveyPoint] = Field(default_factory=list)


class GeoSurveyPoint(SurveyPoint):
    """A survey point decorated with WGS84 coordinates."""
    lat: float = Field(description="Latitude in degrees")
    lon: float = Field(description="Longitude in degrees")
