"""
Domain service: Collapsing repeated observations of the same physical point.

Grouping is greedy and seed-based: each unvisited point absorbs the later
unvisited points lying within the tolerance of *that seed*. Points chained
through intermediate neighbours but farther than the tolerance from the
seed stay in separate groups.
"""
import re
import logging

from survey_boundary.domain.models import SurveyPoint, DuplicateRecord
from survey_boundary.utils.spatial_helpers import build_kdtree, distance

logger = logging.getLogger(__name__)


# Index queries are widened slightly; membership is decided by the exact distance
SEARCH_SLACK = 1e-9

LINE_POINT_PATTERN = re.compile(r"^.+-L\d+-P[12]$")


def keep_preference(point: SurveyPoint) -> tuple[int, int]:
    """Sort key for choosing the kept point: line-named first, then longer name."""
    return (1 if LINE_POINT_PATTERN.match(point.name) else 0, len(point.name))


def choose_kept_point(group: list[SurveyPoint]) -> SurveyPoint:
    """
    Pick the canonical point of a duplicate group.

    Ties keep the earliest member (the seed).
    """
    best = group[0]
    for point in group[1:]:
        if keep_preference(point) > keep_preference(best):
            best = point
    return best


def collapse_duplicates(
    points: list[SurveyPoint],
    tolerance: float = 0.01,
) -> tuple[list[SurveyPoint], list[DuplicateRecord]]:
    """
    Collapse near-coincident points into one kept point per group.

    Args:
        points: Normalized points in input order
        tolerance: Maximum distance from the seed to be absorbed (meters)

    Returns:
        Tuple of:
            - Kept points, one per group, in seed order
            - One DuplicateRecord per absorbed point
    """
    if not points:
        return [], []

    coords = [p.coordinates for p in points]
    kdtree = build_kdtree(coords)
    visited = [False] * len(points)

    unique_points = []
    records = []

    for i in range(len(points)):
        if visited[i]:
            continue
        visited[i] = True

        members = [i]
        for j in sorted(kdtree.query_ball_point(coords[i], tolerance + SEARCH_SLACK)):
            if j <= i or visited[j]:
                continue
            if distance(coords[i], coords[j]) <= tolerance:
                visited[j] = True
                members.append(j)

        group = [points[m] for m in members]
        kept = choose_kept_point(group)
        group_id = len(unique_points)
        unique_points.append(kept)

        for member in group:
            if member is kept:
                continue
            records.append(DuplicateRecord(
                cluster_id=group_id,
                kept_point=kept,
                duplicate_point=member,
                dx=member.easting - kept.easting,
                dy=member.northing - kept.northing,
            ))

    if records:
        logger.info(f"Collapsed {len(records)} duplicate observations "
                    f"({len(points)} -> {len(unique_points)} points)")
    return unique_points, records
