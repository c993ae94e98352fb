"""
Domain service: Surveyed lines encoded in point names.

Two naming grammars are recognized:
- "<base>-L<line>-P<1|2>": two-point segments grouped by "<base>-L<line>"
- "<base>-P<seq>": open chains of any length grouped by "<base>"

The segment grammar is tried first, so "Fence-L3-P1" is never read as a
chain point of "Fence-L3".
"""
from typing import Optional
import re
import logging

from survey_boundary.domain.models import Polyline, SurveyPoint

logger = logging.getLogger(__name__)


SEGMENT_NAME = re.compile(r"^(?P<line>(?P<base>.+)-L(?P<number>\d+))-P(?P<seq>[12])$")
CHAIN_NAME = re.compile(r"^(?P<base>.+)-P(?P<seq>\d+)$")


def parse_line_name(name: str) -> Optional[tuple[str, str, int]]:
    """
    Parse a point name against the line grammars.

    Returns:
        (line_id, kind, sequence) or None if the name encodes no line
    """
    match = SEGMENT_NAME.match(name)
    if match:
        return match.group("line"), "segment", int(match.group("seq"))

    match = CHAIN_NAME.match(name)
    if match:
        return match.group("base"), "chain", int(match.group("seq"))

    return None


def extract_polylines(points: list[SurveyPoint]) -> list[Polyline]:
    """
    Group line-named points into ordered polylines.

    Args:
        points: Deduplicated points

    Returns:
        Polylines with at least two points, in order of first appearance,
        each sorted by its sequence number
    """
    groups: dict[tuple[str, str], list[SurveyPoint]] = {}

    for point in points:
        parsed = parse_line_name(point.name)
        if parsed is None:
            continue
        line_id, kind, sequence = parsed
        groups.setdefault((kind, line_id), []).append(
            point.model_copy(update={"sequence_number": sequence})
        )

    polylines = []
    for (kind, line_id), members in groups.items():
        if len(members) < 2:
            logger.debug(f"Line {line_id} has a single point, skipped")
            continue
        members.sort(key=lambda p: p.sequence_number)
        polylines.append(Polyline(id=line_id, points=members, kind=kind))

    logger.info(f"Extracted {len(polylines)} polylines")
    return polylines
