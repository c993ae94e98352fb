"""
Geospatial projection utilities for decorating planar points.

The reconstruction pipeline works in planar UTM meters only; these helpers
are the boundary to the geographic world, used after the pipeline has run.
"""
from typing import List, Literal
from pyproj import Transformer

from survey_boundary.domain.models import GeoSurveyPoint, SurveyPoint


Hemisphere = Literal["north", "south"]


def get_utm_crs(zone: int, hemisphere: Hemisphere = "north") -> str:
    """
    Get the UTM CRS (Coordinate Reference System) for a zone.

    Args:
        zone: UTM zone number (1-60)
        hemisphere: 'north' or 'south'

    Returns:
        EPSG code for the UTM zone

    Raises:
        ValueError: If the zone or hemisphere is out of range
    """
    if not 1 <= zone <= 60:
        raise ValueError(f"UTM zone must be between 1 and 60, got {zone}")
    if hemisphere not in ("north", "south"):
        raise ValueError(f"Hemisphere must be 'north' or 'south', got {hemisphere!r}")

    # Northern hemisphere: EPSG:326XX, Southern hemisphere: EPSG:327XX
    prefix = "6" if hemisphere == "north" else "7"
    return f"EPSG:32{prefix}{zone:02d}"


def project_points_to_latlon(
    points: List[SurveyPoint],
    zone: int,
    hemisphere: Hemisphere = "north",
) -> List[GeoSurveyPoint]:
    """
    Decorate planar UTM points with latitude/longitude.

    Args:
        points: Points with easting/northing in the given UTM zone
        zone: UTM zone number
        hemisphere: 'north' or 'south'

    Returns:
        Copies of the points carrying lat/lon, in the same order
    """
    if not points:
        return []

    transformer = Transformer.from_crs(
        get_utm_crs(zone, hemisphere),
        "EPSG:4326",  # WGS84 (lat/lon)
        always_xy=True  # Ensure (x, y) -> (lon, lat) order
    )

    decorated = []
    for point in points:
        lon, lat = transformer.transform(point.easting, point.northing)
        decorated.append(GeoSurveyPoint(**point.model_dump(), lat=lat, lon=lon))

    return decorated
