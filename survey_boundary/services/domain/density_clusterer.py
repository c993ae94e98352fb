"""
Domain service: Density-based partitioning of points into parcels.

Region growing with transitive expansion: a cluster keeps absorbing any
unclustered point within eps of any of its members. This is DBSCAN with
min_samples = 1, so isolated points become singleton clusters.
"""
from collections import deque
import logging

from survey_boundary.domain.models import BoundingBox, SpatialCluster, SurveyPoint
from survey_boundary.utils.spatial_helpers import bounding_box, build_kdtree, distance

logger = logging.getLogger(__name__)

SEARCH_SLACK = 1e-9


def make_cluster(cluster_id: int, points: list[SurveyPoint]) -> SpatialCluster:
    """Build a SpatialCluster with its bounding box, tagging each member."""
    members = [p.model_copy(update={"cluster_id": cluster_id}) for p in points]
    min_x, max_x, min_y, max_y = bounding_box([p.coordinates for p in members])
    return SpatialCluster(
        id=cluster_id,
        points=members,
        bounding_box=BoundingBox(
            min_easting=min_x,
            max_easting=max_x,
            min_northing=min_y,
            max_northing=max_y,
        ),
    )


def cluster_points(points: list[SurveyPoint], eps: float = 25.0) -> list[SpatialCluster]:
    """
    Partition points into spatially connected clusters.

    Args:
        points: Deduplicated points
        eps: Maximum hop distance between connected points (meters)

    Returns:
        Clusters in order of discovery; members keep input order
    """
    if not points:
        return []

    coords = [p.coordinates for p in points]
    kdtree = build_kdtree(coords)
    assignment = [-1] * len(points)
    clusters = []

    for seed in range(len(points)):
        if assignment[seed] != -1:
            continue

        cluster_id = len(clusters)
        assignment[seed] = cluster_id
        members = [seed]
        queue = deque([seed])

        while queue:
            current = queue.popleft()
            for neighbor in sorted(kdtree.query_ball_point(coords[current], eps + SEARCH_SLACK)):
                if assignment[neighbor] != -1:
                    continue
                if distance(coords[current], coords[neighbor]) <= eps:
                    assignment[neighbor] = cluster_id
                    members.append(neighbor)
                    queue.append(neighbor)

        members.sort()
        clusters.append(make_cluster(cluster_id, [points[m] for m in members]))

    singletons = sum(1 for c in clusters if c.number_of_points == 1)
    logger.info(f"Found {len(clusters)} clusters (eps={eps:.2f}m, {singletons} singletons)")
    return clusters
