"""
Domain service: Boundary reconstruction from raw survey records.

Runs the full pipeline:
- Record normalization
- Duplicate collapsing
- Density clustering
- Polyline extraction
- Polygon construction (connectivity, numeric, polar, hull fallbacks)
- Validation
- Boundary selection

The pipeline is pure: it reads only its inputs and configuration and
returns a new BoundaryResult on every call.
"""
from typing import Any, Iterable, Literal, Mapping, Optional
from dataclasses import dataclass
import logging

from survey_boundary.domain.models import (
    BoundaryResult,
    ClusterSummary,
    Polygon,
    SurveyPoint,
    ValidationReport,
)
from survey_boundary.services.domain.record_normalizer import normalize_records
from survey_boundary.services.domain.duplicate_collapser import collapse_duplicates
from survey_boundary.services.domain.density_clusterer import cluster_points
from survey_boundary.services.domain.polyline_extractor import extract_polylines
from survey_boundary.services.domain.polygon_constructor import (
    ConstructionOptions,
    construct_hull_polygon,
    construct_polygon,
)
from survey_boundary.services.domain.polygon_validator import validate_polygon
from survey_boundary.services.domain.boundary_selector import select_boundary
from survey_boundary.config import settings

logger = logging.getLogger(__name__)


ReconstructionMode = Literal["boundary", "geometric"]


@dataclass
class ReconstructionConfig:
    """Configuration for the boundary reconstruction pipeline."""

    # Duplicate collapsing
    duplicate_tolerance_m: float = 0.01
    """Observations within this distance of a seed are the same point"""

    # Clustering
    cluster_eps_m: float = 25.0
    """Hop distance connecting points of one parcel"""

    mode: ReconstructionMode = "boundary"
    """'boundary' runs the ordering strategies, 'geometric' wraps clusters in hulls"""

    # Polygon construction
    min_polygon_vertices: int = 3
    """Clusters smaller than this produce no polygon"""

    connectivity_match_tolerance_m: float = 1.0
    """Distance for matching line points to cluster points"""

    node_precision: int = 2
    """Decimal places of connectivity graph node keys"""

    concave_hull_k: int = 3
    concave_hull_max_retries: int = 3

    # Validation
    min_valid_area_m2: float = 1.0
    """Polygons smaller than this are invalid"""

    @classmethod
    def from_settings(cls, mode: ReconstructionMode = "boundary") -> "ReconstructionConfig":
        """Build a config from application settings for the given mode."""
        return cls(
            duplicate_tolerance_m=settings.duplicate_tolerance_m,
            cluster_eps_m=(
                settings.geometric_cluster_eps_m if mode == "geometric" else settings.cluster_eps_m
            ),
            mode=mode,
            min_polygon_vertices=settings.min_polygon_vertices,
            connectivity_match_tolerance_m=settings.connectivity_match_tolerance_m,
            node_precision=settings.node_precision,
            concave_hull_k=settings.concave_hull_k,
            concave_hull_max_retries=settings.concave_hull_max_retries,
            min_valid_area_m2=settings.min_valid_area_m2,
        )

    @property
    def construction_options(self) -> ConstructionOptions:
        return ConstructionOptions(
            min_vertices=self.min_polygon_vertices,
            match_tolerance=self.connectivity_match_tolerance_m,
            node_precision=self.node_precision,
            concave_hull_k=self.concave_hull_k,
            concave_hull_max_retries=self.concave_hull_max_retries,
        )


class BoundaryReconstructor:
    """
    Domain service turning unordered survey points into boundary polygons.

    Features:
    - Header-tolerant record normalization
    - Seed-based duplicate collapsing with a mapping of what was merged
    - Parcel separation by density clustering
    - Ordering from surveyed lines, numbering or geometry
    - Self-intersection fallback to the convex hull
    - Validation and best-boundary selection
    """

    def __init__(self, config: Optional[ReconstructionConfig] = None):
        """
        Initialize the reconstructor.

        Args:
            config: Pipeline configuration (defaults from settings)
        """
        self.config = config or ReconstructionConfig.from_settings()

        logger.info(f"Initialized BoundaryReconstructor with config: "
                    f"mode={self.config.mode}, "
                    f"duplicate_tolerance={self.config.duplicate_tolerance_m}, "
                    f"cluster_eps={self.config.cluster_eps_m}")

    def reconstruct(self, rows: Iterable[Mapping[str, Any]]) -> BoundaryResult:
        """
        Reconstruct boundaries from raw tabular rows.

        Args:
            rows: Rows keyed by column header

        Returns:
            BoundaryResult (empty at every stage when no row is usable)
        """
        points = normalize_records(rows)
        return self.reconstruct_points(points)

    def reconstruct_points(self, points: list[SurveyPoint]) -> BoundaryResult:
        """
        Reconstruct boundaries from already normalized points.

        Args:
            points: Normalized survey points

        Returns:
            BoundaryResult
        """
        logger.info(f"Starting boundary reconstruction for {len(points)} points")
        if not points:
            logger.warning("No usable points in input")
            return BoundaryResult()

        # Step 1: Collapse repeated observations
        unique_points, duplicates = collapse_duplicates(
            points, tolerance=self.config.duplicate_tolerance_m
        )

        # Step 2: Separate parcels
        clusters = cluster_points(unique_points, eps=self.config.cluster_eps_m)

        # Step 3: Lines encoded in point names
        polylines = extract_polylines(unique_points)

        # Step 4: One polygon per eligible cluster
        options = self.config.construction_options
        polygons: list[Polygon] = []
        for cluster in clusters:
            if cluster.number_of_points < self.config.min_polygon_vertices:
                logger.debug(f"Cluster {cluster.id} too small ({cluster.number_of_points} points)")
                continue

            if self.config.mode == "geometric":
                polygon = construct_hull_polygon(cluster.id, cluster.points, options)
            else:
                polygon = construct_polygon(cluster.id, cluster.points, polylines, options)

            if polygon is not None:
                polygons.append(polygon)
        logger.info(f"Constructed {len(polygons)} polygons from {len(clusters)} clusters")

        # Step 5: Validate
        reports: list[ValidationReport] = [
            validate_polygon(polygon, min_area=self.config.min_valid_area_m2)
            for polygon in polygons
        ]
        valid_count = sum(1 for r in reports if r.valid)
        logger.info(f"Valid polygons: {valid_count}/{len(reports)}")

        # Step 6: Pick what to present
        selected = select_boundary(polygons, reports, unique_points)

        return BoundaryResult(
            all_points=points,
            duplicates_mapping=duplicates,
            clusters_summary=[
                ClusterSummary(
                    cluster_id=cluster.id,
                    number_of_points=cluster.number_of_points,
                    bounding_box=cluster.bounding_box,
                )
                for cluster in clusters
            ],
            polylines=polylines,
            polygons=polygons,
            validation_report=reports,
            selected_boundary=selected,
        )
