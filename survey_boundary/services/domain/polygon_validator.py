"""
Domain service: Validation and measurement of constructed polygons.
"""
import logging

from survey_boundary.domain.models import Centroid, Polygon, ValidationReport
from survey_boundary.utils.spatial_helpers import (
    edge_lengths,
    has_self_intersection,
    ring_centroid,
    signed_area,
)

logger = logging.getLogger(__name__)


AREA_TOO_SMALL = "Area too small"
SELF_INTERSECTION = "Self-intersection detected"
TOO_FEW_VERTICES = "Too few vertices"


def validate_polygon(polygon: Polygon, min_area: float = 1.0) -> ValidationReport:
    """
    Validate a polygon and compute its measurements.

    The closing repeat is excluded; area uses the shoelace formula with
    wrap-around indexing, orientation comes from the sign of the sum.

    Args:
        polygon: Closed polygon to check
        min_area: Smallest acceptable area in m²

    Returns:
        ValidationReport for the polygon
    """
    coords = [p.coordinates for p in polygon.vertices]

    signed = signed_area(coords)
    area = abs(signed)
    lengths = edge_lengths(coords)
    centroid = ring_centroid(coords)

    issues = []
    if area < min_area:
        issues.append(AREA_TOO_SMALL)
    if has_self_intersection(coords):
        issues.append(SELF_INTERSECTION)
    if len(coords) < 3:
        issues.append(TOO_FEW_VERTICES)

    report = ValidationReport(
        cluster_id=polygon.cluster_id,
        valid=not issues,
        issues=issues,
        area=area,
        orientation="counterclockwise" if signed > 0 else "clockwise",
        perimeter=float(sum(lengths)),
        edge_lengths=lengths,
        centroid=Centroid(easting=centroid[0], northing=centroid[1]) if centroid else None,
    )

    if issues:
        logger.info(f"Cluster {polygon.cluster_id} polygon invalid: {', '.join(issues)}")
    else:
        logger.debug(f"Cluster {polygon.cluster_id} polygon valid: area={area:.2f}m², "
                     f"{report.orientation}")
    return report
