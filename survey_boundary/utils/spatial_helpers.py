"""
Spatial analysis helper functions.

Provides utilities for:
- KD-Tree spatial indexing
- Segment orientation and intersection tests
- Ring measurements (shoelace area, winding, perimeter, centroid)
- Convex and concave hull construction

All functions work on plain (x, y) tuples so they stay independent of the
domain models. Hull and ordering helpers return indices into the input list.
"""
from typing import Optional
import math
import numpy as np
from scipy.spatial import KDTree
from shapely.geometry import Point, Polygon
import logging

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]


def build_kdtree(coordinates: list[Coordinate]) -> KDTree:
    """
    Build a KD-Tree for efficient spatial queries.

    Args:
        coordinates: List of (x, y) coordinate tuples

    Returns:
        KDTree instance
    """
    points = np.array(coordinates, dtype=float)
    return KDTree(points)


def distance(point1: Coordinate, point2: Coordinate) -> float:
    """Euclidean planar distance between two points."""
    return math.hypot(point2[0] - point1[0], point2[1] - point1[1])


def cross(origin: Coordinate, a: Coordinate, b: Coordinate) -> float:
    """Z component of (a - origin) x (b - origin)."""
    return (a[0] - origin[0]) * (b[1] - origin[1]) - (a[1] - origin[1]) * (b[0] - origin[0])


def orientation(a: Coordinate, b: Coordinate, c: Coordinate) -> int:
    """
    Orientation of the ordered triple (a, b, c).

    Returns:
        1 for counter-clockwise, -1 for clockwise, 0 for collinear
    """
    value = cross(a, b, c)
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _on_segment(a: Coordinate, b: Coordinate, p: Coordinate) -> bool:
    """Whether p, known to be collinear with a-b, lies within the segment's box."""
    return (
        min(a[0], b[0]) <= p[0] <= max(a[0], b[0])
        and min(a[1], b[1]) <= p[1] <= max(a[1], b[1])
    )


def segments_intersect(
    p1: Coordinate,
    p2: Coordinate,
    q1: Coordinate,
    q2: Coordinate,
) -> bool:
    """
    Test whether segment p1-p2 and segment q1-q2 share any point.

    Proper crossings and touching (an endpoint on the other segment) both
    count. The result does not depend on the direction of either segment.
    """
    o1 = orientation(p1, p2, q1)
    o2 = orientation(p1, p2, q2)
    o3 = orientation(q1, q2, p1)
    o4 = orientation(q1, q2, p2)

    if o1 * o2 < 0 and o3 * o4 < 0:
        return True

    if o1 == 0 and _on_segment(p1, p2, q1):
        return True
    if o2 == 0 and _on_segment(p1, p2, q2):
        return True
    if o3 == 0 and _on_segment(q1, q2, p1):
        return True
    if o4 == 0 and _on_segment(q1, q2, p2):
        return True

    return False


def open_ring(coordinates: list[Coordinate]) -> list[Coordinate]:
    """Drop the closing repeat of a ring if present."""
    if len(coordinates) > 1 and coordinates[0] == coordinates[-1]:
        return coordinates[:-1]
    return list(coordinates)


def has_self_intersection(coordinates: list[Coordinate]) -> bool:
    """
    Check whether any two non-adjacent edges of a ring intersect.

    Edges are (i, i+1) with wrap-around. Pairs sharing a vertex are skipped,
    including the first and last edge.

    Args:
        coordinates: Ring vertices, closed or open

    Returns:
        True if the ring crosses or touches itself
    """
    ring = open_ring(coordinates)
    n = len(ring)
    if n < 4:
        return False

    for i in range(n):
        a1 = ring[i]
        a2 = ring[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            b1 = ring[j]
            b2 = ring[(j + 1) % n]
            if segments_intersect(a1, a2, b1, b2):
                logger.debug(f"Edges {i} and {j} intersect")
                return True

    return False


def signed_area(coordinates: list[Coordinate]) -> float:
    """
    Shoelace signed area of a ring.

    Positive for counter-clockwise rings, negative for clockwise ones.
    """
    ring = open_ring(coordinates)
    n = len(ring)
    if n < 3:
        return 0.0

    total = 0.0
    for i in range(n):
        x1, y1 = ring[i]
        x2, y2 = ring[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2.0


def polygon_area(coordinates: list[Coordinate]) -> float:
    """Unsigned shoelace area."""
    return abs(signed_area(coordinates))


def winding_orientation(coordinates: list[Coordinate]) -> str:
    """'counterclockwise' when the signed area is positive, else 'clockwise'."""
    return "counterclockwise" if signed_area(coordinates) > 0 else "clockwise"


def edge_lengths(coordinates: list[Coordinate]) -> list[float]:
    """Length of every edge of a ring, the closing edge last."""
    ring = open_ring(coordinates)
    n = len(ring)
    if n < 2:
        return []
    return [distance(ring[i], ring[(i + 1) % n]) for i in range(n)]


def ring_centroid(coordinates: list[Coordinate]) -> Optional[Coordinate]:
    """
    Area centroid of a ring.

    Falls back to the vertex mean when the ring has no area.
    """
    ring = open_ring(coordinates)
    if not ring:
        return None

    if len(ring) >= 3:
        centroid = Polygon(ring).centroid
        if not centroid.is_empty and math.isfinite(centroid.x) and math.isfinite(centroid.y):
            return (float(centroid.x), float(centroid.y))

    points = np.array(ring, dtype=float)
    mean = points.mean(axis=0)
    return (float(mean[0]), float(mean[1]))


def bounding_box(coordinates: list[Coordinate]) -> tuple[float, float, float, float]:
    """Return (min_x, max_x, min_y, max_y)."""
    points = np.array(coordinates, dtype=float)
    return (
        float(points[:, 0].min()),
        float(points[:, 0].max()),
        float(points[:, 1].min()),
        float(points[:, 1].max()),
    )


def turn_angle(
    previous: Coordinate,
    current: Coordinate,
    candidate: Coordinate,
) -> float:
    """
    Absolute change of heading when walking previous -> current -> candidate.

    Returns:
        Angle in radians in [0, π]
    """
    heading_in = math.atan2(current[1] - previous[1], current[0] - previous[0])
    heading_out = math.atan2(candidate[1] - current[1], candidate[0] - current[0])
    delta = heading_out - heading_in
    # Normalize to (-π, π]
    while delta <= -math.pi:
        delta += 2 * math.pi
    while delta > math.pi:
        delta -= 2 * math.pi
    return abs(delta)


def polar_angle_order(coordinates: list[Coordinate]) -> list[int]:
    """
    Indices sorted by polar angle around the vertex mean.

    Ties keep input order.
    """
    if not coordinates:
        return []
    points = np.array(coordinates, dtype=float)
    cx, cy = points.mean(axis=0)
    angles = [math.atan2(y - cy, x - cx) for x, y in coordinates]
    return sorted(range(len(coordinates)), key=lambda i: angles[i])


def _unique_indices(coordinates: list[Coordinate]) -> list[int]:
    """Indices of the first occurrence of every distinct coordinate."""
    seen = set()
    unique = []
    for i, coord in enumerate(coordinates):
        key = (float(coord[0]), float(coord[1]))
        if key in seen:
            continue
        seen.add(key)
        unique.append(i)
    return unique


def convex_hull_indices(coordinates: list[Coordinate]) -> list[int]:
    """
    Convex hull using the monotone chain variant of the Graham scan.

    Points are sorted by x then y; lower and upper chains keep only strict
    left turns, so collinear boundary points are dropped.

    Args:
        coordinates: List of (x, y) coordinate tuples

    Returns:
        Hull indices in counter-clockwise order (fewer than 3 when the
        input is degenerate)
    """
    order = sorted(
        _unique_indices(coordinates),
        key=lambda i: (coordinates[i][0], coordinates[i][1]),
    )
    if len(order) < 3:
        return order

    lower: list[int] = []
    for i in order:
        while len(lower) >= 2 and cross(coordinates[lower[-2]], coordinates[lower[-1]], coordinates[i]) <= 0:
            lower.pop()
        lower.append(i)

    upper: list[int] = []
    for i in reversed(order):
        while len(upper) >= 2 and cross(coordinates[upper[-2]], coordinates[upper[-1]], coordinates[i]) <= 0:
            upper.pop()
        upper.append(i)

    hull = lower[:-1] + upper[:-1]
    logger.debug(f"Convex hull: {len(hull)} of {len(coordinates)} points")
    return hull


def _crosses_hull(
    points: np.ndarray,
    hull: list[int],
    start: int,
    end: int,
    closing: bool,
) -> bool:
    """Whether the edge start-end hits an existing hull edge it does not share a vertex with."""
    p1 = tuple(points[start])
    p2 = tuple(points[end])
    last_edge = len(hull) - 2

    for i in range(len(hull) - 1):
        if i == last_edge:
            continue
        if closing and i == 0:
            continue
        if segments_intersect(p1, p2, tuple(points[hull[i]]), tuple(points[hull[i + 1]])):
            return True
    return False


def _grow_concave_hull(points: np.ndarray, k: int) -> Optional[list[int]]:
    """
    One k-nearest-neighbour boundary growth attempt.

    Walks clockwise from the lowest-left point, at each step taking the
    most outward of the k nearest unvisited points whose edge does not
    cross the hull built so far.
    """
    n = len(points)
    first = int(np.lexsort((points[:, 1], points[:, 0]))[0])

    available = np.ones(n, dtype=bool)
    available[first] = False
    hull = [first]
    current = first
    first_restored = False
    # Pretend we arrived heading north, so the walk turns clockwise
    back_angle = -math.pi / 2

    while True:
        if len(hull) >= 3 and not first_restored:
            available[first] = True
            first_restored = True

        candidates = np.flatnonzero(available)
        if candidates.size == 0:
            return None

        deltas = points[candidates] - points[current]
        distances = np.hypot(deltas[:, 0], deltas[:, 1])
        nearest = candidates[np.argsort(distances, kind="stable")[:k]]

        def outward_rank(j: int) -> float:
            angle = math.atan2(points[j, 1] - points[current, 1], points[j, 0] - points[current, 0])
            return (angle - back_angle) % (2 * math.pi)

        ordered = sorted((int(j) for j in nearest), key=outward_rank, reverse=True)

        chosen = None
        for j in ordered:
            if not _crosses_hull(points, hull, current, j, closing=(j == first)):
                chosen = j
                break

        if chosen is None:
            return None
        if chosen == first:
            break

        hull.append(chosen)
        available[chosen] = False
        back_angle = math.atan2(points[current, 1] - points[chosen, 1], points[current, 0] - points[chosen, 0])
        current = chosen

    if len(hull) < 3:
        return None

    ring = Polygon([tuple(points[i]) for i in hull])
    if not ring.is_valid:
        return None

    covering = ring.buffer(1e-6)
    if not all(covering.covers(Point(p)) for p in points):
        return None

    return hull


def concave_hull_indices(
    coordinates: list[Coordinate],
    k: int = 3,
    max_retries: int = 3,
) -> Optional[list[int]]:
    """
    Concave hull by k-nearest-neighbour boundary growth.

    Each failed attempt (no non-crossing candidate, ring cannot close, or
    points left outside) is retried with k + 1.

    The ring is simple and covers every point, but it need not pass through
    every boundary sample: near a concave corner a farther, more outward
    neighbour can be taken, leaving the skipped samples inside.

    Args:
        coordinates: List of (x, y) coordinate tuples
        k: Initial number of neighbours considered (at least 3)
        max_retries: Number of retries with larger k

    Returns:
        Hull indices in clockwise order, or None if every attempt failed
    """
    unique = _unique_indices(coordinates)
    if len(unique) < 3:
        return None
    if len(unique) == 3:
        return unique

    points = np.array([coordinates[i] for i in unique], dtype=float)
    k = max(k, 3)

    for attempt in range(max_retries + 1):
        neighbours = min(k + attempt, len(unique) - 1)
        hull = _grow_concave_hull(points, neighbours)
        if hull is not None:
            logger.debug(f"Concave hull with k={neighbours}: {len(hull)} of {len(unique)} points")
            return [unique[i] for i in hull]
        if neighbours >= len(unique) - 1:
            break

    logger.debug(f"Concave hull failed after {max_retries} retries")
    return None
