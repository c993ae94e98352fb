"""
Domain service: Normalization of raw tabular rows into survey points.

Field-equipment exports disagree on header names, so every field has a
ranked list of accepted keys. Exact keys are tried first in rank order,
then the same keys case-insensitively. Rows without a usable name or
finite coordinates are dropped without raising.
"""
from typing import Any, Iterable, Mapping, Optional
import math
import re
import logging

from survey_boundary.domain.models import SurveyPoint

logger = logging.getLogger(__name__)


NAME_KEYS = ("name", "Name", "point", "id")
EASTING_KEYS = ("easting", "Easting", "x", "X", "E", "east")
NORTHING_KEYS = ("northing", "Northing", "y", "Y", "N", "north")
CODE_KEYS = ("code", "Code")
DESCRIPTION_KEYS = ("description", "Description", "desc")

# Three digits after the comma read as a thousands group, not a fraction
DECIMAL_COMMA = re.compile(r"^[+-]?\d+,(\d{1,2}|\d{4,})$")


def _lookup(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    """
    Find the value for the first accepted key present in the row.

    Args:
        row: Raw row keyed by column header
        keys: Accepted header names, best first

    Returns:
        The raw value, or None when no accepted header is present
    """
    for key in keys:
        if key in row:
            return row[key]

    folded = {}
    for header, value in row.items():
        if not isinstance(header, str):
            continue
        folded.setdefault(header.strip().lower(), value)

    for key in keys:
        lowered = key.lower()
        if lowered in folded:
            return folded[lowered]

    return None


def parse_coordinate(value: Any) -> Optional[float]:
    """
    Parse a coordinate value into a finite float.

    Accepts numbers and numeric strings; a single comma is read as the
    decimal separator when no dot is present ("1234,56"). A comma followed
    by exactly three digits ("1,234") could be a thousands separator and
    is rejected.

    Returns:
        The float, or None when the value is missing, non-numeric or
        not finite
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        if DECIMAL_COMMA.match(text):
            text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return None

    if not math.isfinite(number):
        return None
    return number


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_record(index: int, row: Mapping[str, Any]) -> Optional[SurveyPoint]:
    """
    Convert a single raw row into a SurveyPoint.

    Args:
        index: Zero-based position of the row in the raw input
        row: Raw row keyed by column header

    Returns:
        SurveyPoint, or None if the row cannot be used
    """
    name = _optional_text(_lookup(row, NAME_KEYS))
    if not name:
        return None

    easting = parse_coordinate(_lookup(row, EASTING_KEYS))
    northing = parse_coordinate(_lookup(row, NORTHING_KEYS))
    if easting is None or northing is None:
        return None

    return SurveyPoint(
        id=index,
        name=name,
        easting=easting,
        northing=northing,
        code=_optional_text(_lookup(row, CODE_KEYS)),
        description=_optional_text(_lookup(row, DESCRIPTION_KEYS)),
    )


def normalize_records(rows: Iterable[Mapping[str, Any]]) -> list[SurveyPoint]:
    """
    Normalize raw rows into survey points, preserving input order.

    Args:
        rows: Raw rows as produced by a CSV-with-header reader

    Returns:
        List of SurveyPoint; unusable rows are skipped
    """
    points = []
    dropped = 0

    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            dropped += 1
            continue
        point = normalize_record(index, row)
        if point is None:
            dropped += 1
            continue
        points.append(point)

    if dropped:
        logger.info(f"Dropped {dropped} rows without a name or finite coordinates")
    logger.debug(f"Normalized {len(points)} points")
    return points
