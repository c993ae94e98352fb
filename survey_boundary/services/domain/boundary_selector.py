"""
Domain service: Choosing the boundary to present.
"""
import logging

from survey_boundary.domain.models import Polygon, SurveyPoint, ValidationReport

logger = logging.getLogger(__name__)


def select_boundary(
    polygons: list[Polygon],
    reports: list[ValidationReport],
    fallback_points: list[SurveyPoint],
) -> list[SurveyPoint]:
    """
    Pick the best boundary as an open ring.

    Preference:
    1. the valid polygon with the largest area
    2. the polygon with the most vertices, valid or not
    3. the fallback points sorted by name

    Args:
        polygons: Constructed polygons
        reports: Validation reports, one per polygon in the same order
        fallback_points: Deduplicated points used when no polygon exists

    Returns:
        Ordered points without the closing repeat
    """
    valid = [(polygon, report) for polygon, report in zip(polygons, reports) if report.valid]
    if valid:
        best, report = max(valid, key=lambda pair: pair[1].area)
        logger.info(f"Selected valid polygon of cluster {best.cluster_id} "
                    f"({report.area:.2f}m², {best.method})")
        return list(best.vertices)

    if polygons:
        best = max(polygons, key=lambda polygon: len(polygon.vertices))
        logger.warning(f"No valid polygon, selected cluster {best.cluster_id} by vertex count")
        return list(best.vertices)

    logger.warning("No polygon constructed, falling back to the point list")
    return sorted(fallback_points, key=lambda p: p.name)
