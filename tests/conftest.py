"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample survey rows (square, bowtie, line-named rectangle, two parcels)
- Sample survey points
- FastAPI test client
"""
import pytest
from fastapi.testclient import TestClient

from survey_boundary.main import app
from survey_boundary.domain.models import SurveyPoint


# ============================================================
# Helpers
# ============================================================

def make_points(named_coords: list[tuple[str, float, float]]) -> list[SurveyPoint]:
    """Build survey points with ids in list order."""
    return [
        SurveyPoint(id=i, name=name, easting=x, northing=y)
        for i, (name, x, y) in enumerate(named_coords)
    ]


def make_rows(named_coords: list[tuple[str, float, float]]) -> list[dict]:
    """Build raw rows as a CSV reader would produce them."""
    return [
        {"name": name, "easting": x, "northing": y}
        for name, x, y in named_coords
    ]


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def square_coords() -> list[tuple[str, float, float]]:
    """10 x 10 square named P1..P4 counter-clockwise."""
    return [
        ("P1", 0.0, 0.0),
        ("P2", 10.0, 0.0),
        ("P3", 10.0, 10.0),
        ("P4", 0.0, 10.0),
    ]


@pytest.fixture
def square_rows(square_coords) -> list[dict]:
    return make_rows(square_coords)


@pytest.fixture
def square_points(square_coords) -> list[SurveyPoint]:
    return make_points(square_coords)


@pytest.fixture
def bowtie_rows() -> list[dict]:
    """Square corners numbered so that the numeric ordering crosses itself."""
    return make_rows([
        ("P1", 0.0, 0.0),
        ("P2", 10.0, 10.0),
        ("P3", 10.0, 0.0),
        ("P4", 0.0, 10.0),
    ])


@pytest.fixture
def line_rectangle_coords() -> list[tuple[str, float, float]]:
    """Two surveyed lines forming the opposite sides of a 10 x 10 rectangle."""
    return [
        ("Base-L1-P1", 0.0, 0.0),
        ("Base-L1-P2", 10.0, 0.0),
        ("Base-L2-P1", 10.0, 10.0),
        ("Base-L2-P2", 0.0, 10.0),
    ]


@pytest.fixture
def line_rectangle_rows(line_rectangle_coords) -> list[dict]:
    return make_rows(line_rectangle_coords)


@pytest.fixture
def line_rectangle_points(line_rectangle_coords) -> list[SurveyPoint]:
    return make_points(line_rectangle_coords)


@pytest.fixture
def two_parcel_rows() -> list[dict]:
    """A 20 x 20 parcel and a small triangle 1 km away."""
    return make_rows([
        ("A1", 0.0, 0.0),
        ("A2", 20.0, 0.0),
        ("A3", 20.0, 20.0),
        ("A4", 0.0, 20.0),
        ("B1", 1000.0, 1000.0),
        ("B2", 1010.0, 1000.0),
        ("B3", 1005.0, 1008.0),
    ])


@pytest.fixture
def u_shape_coords() -> list[tuple[float, float]]:
    """Boundary of a U-shaped parcel sampled every 2 m (area 288 m²)."""
    corners = [
        (0, 0), (20, 0), (20, 20), (14, 20),
        (14, 6), (6, 6), (6, 20), (0, 20), (0, 0),
    ]
    coords = []
    for (x1, y1), (x2, y2) in zip(corners, corners[1:]):
        steps = int(max(abs(x2 - x1), abs(y2 - y1)) // 2)
        for s in range(steps):
            point = (float(x1 + (x2 - x1) * s / steps), float(y1 + (y2 - y1) * s / steps))
            if point not in coords:
                coords.append(point)
    return coords


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
