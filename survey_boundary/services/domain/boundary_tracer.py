"""
Domain service: Connectivity graph over surveyed lines and boundary tracing.

Line endpoints become graph nodes keyed by their rounded coordinates, so
lines surveyed to a shared corner meet at one node. Line ends left dangling
(degree 1) are bridged to the nearest dangling end of another line, which
closes the gaps between separately surveyed boundary lines.

The trace is a greedy walk: from each candidate start it keeps choosing the
unvisited neighbour reached with the smallest change of heading, and the
longest walk wins.
"""
from typing import Optional
import logging

from survey_boundary.domain.models import Polyline, SurveyPoint
from survey_boundary.utils.spatial_helpers import build_kdtree, distance, turn_angle

logger = logging.getLogger(__name__)

NodeKey = tuple[float, float]
BRIDGE = "bridge"


class ConnectivityGraph:
    """
    Undirected graph of line endpoints.

    Nodes map a rounded coordinate to its representative point; adjacency
    lists keep insertion order so every walk is deterministic.
    """

    def __init__(self, precision: int = 2):
        self.precision = precision
        self.nodes: dict[NodeKey, SurveyPoint] = {}
        self.adjacency: dict[NodeKey, list[NodeKey]] = {}
        self.edge_lines: dict[frozenset, str] = {}

    def key_for(self, point: SurveyPoint) -> NodeKey:
        return (round(point.easting, self.precision), round(point.northing, self.precision))

    def add_node(self, point: SurveyPoint) -> NodeKey:
        key = self.key_for(point)
        if key not in self.nodes:
            self.nodes[key] = point
            self.adjacency[key] = []
        return key

    def add_edge(self, a: SurveyPoint, b: SurveyPoint, line_id: str) -> None:
        key_a = self.add_node(a)
        key_b = self.add_node(b)
        if key_a == key_b or key_b in self.adjacency[key_a]:
            return
        self.adjacency[key_a].append(key_b)
        self.adjacency[key_b].append(key_a)
        self.edge_lines[frozenset((key_a, key_b))] = line_id

    def degree(self, key: NodeKey) -> int:
        return len(self.adjacency[key])

    @property
    def edge_count(self) -> int:
        return len(self.edge_lines)

    @classmethod
    def from_polylines(cls, polylines: list[Polyline], precision: int = 2) -> "ConnectivityGraph":
        """Build the graph with one edge per consecutive pair of line points."""
        graph = cls(precision)
        for polyline in polylines:
            for start, end in zip(polyline.points, polyline.points[1:]):
                graph.add_edge(start, end, polyline.id)
        return graph

    def bridge_dangling_ends(self) -> int:
        """
        Connect degree-1 nodes of different lines, closest pairs first.

        Each dangling node takes part in at most one bridge.

        Returns:
            Number of bridges added
        """
        dangling = [key for key in self.nodes if self.degree(key) == 1]
        owner = {
            key: self.edge_lines[frozenset((key, self.adjacency[key][0]))]
            for key in dangling
        }

        pairs = []
        for i, a in enumerate(dangling):
            for j in range(i + 1, len(dangling)):
                b = dangling[j]
                if owner[a] == owner[b]:
                    continue
                pairs.append((distance(a, b), i, j))
        pairs.sort()

        used = set()
        bridges = 0
        for _, i, j in pairs:
            if i in used or j in used:
                continue
            used.update((i, j))
            self.add_edge(self.nodes[dangling[i]], self.nodes[dangling[j]], BRIDGE)
            bridges += 1

        if bridges:
            logger.debug(f"Bridged {bridges} gaps between line ends")
        return bridges

    def walk(self, start: NodeKey) -> list[NodeKey]:
        """Greedy straightest-continuation walk from start until stuck."""
        path = [start]
        visited = {start}
        previous: Optional[NodeKey] = None
        current = start

        while True:
            options = [n for n in self.adjacency[current] if n not in visited]
            if not options:
                break

            if previous is None:
                chosen = options[0]
            else:
                chosen = min(options, key=lambda n: turn_angle(previous, current, n))

            path.append(chosen)
            visited.add(chosen)
            previous, current = current, chosen

        return path

    def trace_longest_path(self) -> list[SurveyPoint]:
        """
        Walk from every preferred start and keep the longest path.

        Nodes of degree <= 2 are preferred starts; every node is tried
        when none qualifies.
        """
        starts = [key for key in self.nodes if self.degree(key) <= 2] or list(self.nodes)

        best: list[NodeKey] = []
        for start in starts:
            path = self.walk(start)
            if len(path) > len(best):
                best = path

        return [self.nodes[key] for key in best]


def relevant_polylines(
    cluster_points: list[SurveyPoint],
    polylines: list[Polyline],
    match_tolerance: float = 1.0,
) -> list[Polyline]:
    """
    Keep polylines whose every point lies within match_tolerance of a cluster point.

    Matched points are replaced by the cluster's own points so the traced
    ring carries cluster membership.
    """
    if not cluster_points or not polylines:
        return []

    kdtree = build_kdtree([p.coordinates for p in cluster_points])
    relevant = []

    for polyline in polylines:
        distances, indices = kdtree.query([p.coordinates for p in polyline.points])
        if all(d <= match_tolerance for d in distances):
            matched = [
                cluster_points[int(i)].model_copy(update={"sequence_number": p.sequence_number})
                for p, i in zip(polyline.points, indices)
            ]
            relevant.append(polyline.model_copy(update={"points": matched}))

    return relevant


def build_boundary(
    cluster_points: list[SurveyPoint],
    polylines: list[Polyline],
    match_tolerance: float = 1.0,
    precision: int = 2,
) -> Optional[list[SurveyPoint]]:
    """
    Trace a boundary ordering for a cluster from its surveyed lines.

    Args:
        cluster_points: Points of one cluster
        polylines: All extracted polylines
        match_tolerance: Distance for matching line points to cluster points
        precision: Decimal places used for node keys

    Returns:
        Ordered open ring of at least 3 points, or None when the lines are
        too sparse to trace
    """
    lines = relevant_polylines(cluster_points, polylines, match_tolerance)
    if len(lines) < 2:
        logger.debug(f"Only {len(lines)} lines match the cluster, cannot trace")
        return None

    graph = ConnectivityGraph.from_polylines(lines, precision)
    graph.bridge_dangling_ends()
    path = graph.trace_longest_path()

    logger.debug(f"Connectivity graph: {len(graph.nodes)} nodes, {graph.edge_count} edges, "
                 f"longest trace {len(path)} points")

    if len(path) < 3:
        return None
    return path
