"""
Domain service: Ordering a cluster's points into a closed polygon.

Orderings are produced by an explicit list of strategies, tried in turn
until one yields at least three points:

1. connectivity  - trace the surveyed lines (boundary_tracer)
2. numeric_sort  - every name ends in a number: sort by it
3. polar_angle   - sort by angle around the centroid

A self-intersecting ordering is never repaired in place; a new polygon is
built from the convex hull instead. The geometric mode skips the chain and
wraps each cluster in a concave hull.
"""
from typing import Callable, Optional
from dataclasses import dataclass
import re
import logging

from survey_boundary.domain.models import Polygon, PolygonMethod, Polyline, SurveyPoint
from survey_boundary.services.domain.boundary_tracer import build_boundary
from survey_boundary.utils.spatial_helpers import (
    concave_hull_indices,
    convex_hull_indices,
    has_self_intersection,
    polar_angle_order,
)

logger = logging.getLogger(__name__)


NUMERIC_SUFFIX = re.compile(r"(\d+)$")


@dataclass(frozen=True)
class ConstructionOptions:
    """Parameters shared by the ordering strategies and hull builders."""

    min_vertices: int = 3
    """Smallest cluster that gets a polygon"""

    match_tolerance: float = 1.0
    """Distance for matching line points to cluster points"""

    node_precision: int = 2
    """Decimal places used for connectivity graph node keys"""

    concave_hull_k: int = 3
    """Initial neighbour count for the concave hull"""

    concave_hull_max_retries: int = 3
    """Larger-k retries before falling back to the convex hull"""


OrderingStrategy = Callable[
    [list[SurveyPoint], list[Polyline], ConstructionOptions],
    Optional[list[SurveyPoint]],
]


def order_by_connectivity(
    points: list[SurveyPoint],
    polylines: list[Polyline],
    options: ConstructionOptions,
) -> Optional[list[SurveyPoint]]:
    return build_boundary(
        points,
        polylines,
        match_tolerance=options.match_tolerance,
        precision=options.node_precision,
    )


def numeric_suffix(name: str) -> Optional[int]:
    match = NUMERIC_SUFFIX.search(name)
    return int(match.group(1)) if match else None


def order_by_numeric_suffix(
    points: list[SurveyPoint],
    polylines: list[Polyline],
    options: ConstructionOptions,
) -> Optional[list[SurveyPoint]]:
    """Sort by trailing number; only applies when every name has one."""
    suffixes = [numeric_suffix(p.name) for p in points]
    if any(s is None for s in suffixes):
        return None
    order = sorted(range(len(points)), key=lambda i: suffixes[i])
    return [points[i] for i in order]


def order_by_polar_angle(
    points: list[SurveyPoint],
    polylines: list[Polyline],
    options: ConstructionOptions,
) -> Optional[list[SurveyPoint]]:
    order = polar_angle_order([p.coordinates for p in points])
    return [points[i] for i in order]


ORDERING_STRATEGIES: list[tuple[PolygonMethod, OrderingStrategy]] = [
    ("connectivity", order_by_connectivity),
    ("numeric_sort", order_by_numeric_suffix),
    ("polar_angle", order_by_polar_angle),
]


def close_ring(points: list[SurveyPoint]) -> list[SurveyPoint]:
    """Append the first point so the ring is explicitly closed."""
    return list(points) + [points[0]]


def convex_hull_polygon(cluster_id: int, points: list[SurveyPoint]) -> Optional[Polygon]:
    """Polygon from the convex hull, or None for collinear/degenerate input."""
    hull = convex_hull_indices([p.coordinates for p in points])
    if len(hull) < 3:
        logger.debug(f"Cluster {cluster_id}: convex hull is degenerate")
        return None
    return Polygon(
        cluster_id=cluster_id,
        points=close_ring([points[i] for i in hull]),
        method="convex_hull",
    )


def construct_polygon(
    cluster_id: int,
    points: list[SurveyPoint],
    polylines: list[Polyline],
    options: Optional[ConstructionOptions] = None,
) -> Optional[Polygon]:
    """
    Build the polygon for one cluster.

    Args:
        cluster_id: Cluster the points belong to
        points: Points of the cluster
        polylines: All extracted polylines (filtered per cluster by the tracer)
        options: Construction parameters

    Returns:
        Closed Polygon, or None if the cluster is too small or degenerate
    """
    options = options or ConstructionOptions()
    if len(points) < max(options.min_vertices, 3):
        return None

    for method, strategy in ORDERING_STRATEGIES:
        ordering = strategy(points, polylines, options)
        if ordering is None or len(ordering) < 3:
            continue

        if has_self_intersection([p.coordinates for p in ordering]):
            logger.info(f"Cluster {cluster_id}: {method} ordering self-intersects, "
                        f"using convex hull")
            return convex_hull_polygon(cluster_id, points)

        logger.debug(f"Cluster {cluster_id}: ordered {len(ordering)} points by {method}")
        return Polygon(cluster_id=cluster_id, points=close_ring(ordering), method=method)

    return None


def construct_hull_polygon(
    cluster_id: int,
    points: list[SurveyPoint],
    options: Optional[ConstructionOptions] = None,
) -> Optional[Polygon]:
    """
    Build a shape-following hull polygon for one cluster.

    Falls back to the convex hull when the concave hull cannot be grown.
    """
    options = options or ConstructionOptions()
    if len(points) < max(options.min_vertices, 3):
        return None

    hull = concave_hull_indices(
        [p.coordinates for p in points],
        k=options.concave_hull_k,
        max_retries=options.concave_hull_max_retries,
    )
    if hull is not None and len(hull) >= 3:
        ordering = [points[i] for i in hull]
        if not has_self_intersection([p.coordinates for p in ordering]):
            return Polygon(cluster_id=cluster_id, points=close_ring(ordering), method="concave_hull")

    logger.info(f"Cluster {cluster_id}: concave hull failed, using convex hull")
    return convex_hull_polygon(cluster_id, points)
