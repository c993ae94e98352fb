"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle, with the application service
mocked where a failure has to be forced.
"""
import pytest
from unittest.mock import MagicMock

from survey_boundary.main import app
from survey_boundary.api.dependencies import get_boundary_service
from survey_boundary.services.application.boundary_service import BoundaryService


RECONSTRUCT_URL = "/api/v1/boundaries/reconstruct"
UPLOAD_URL = "/api/v1/boundaries/upload"


@pytest.fixture
def failing_service():
    """Install a BoundaryService mock that raises, and remove it afterwards."""
    mock_service = MagicMock(spec=BoundaryService)
    app.dependency_overrides[get_boundary_service] = lambda: mock_service
    yield mock_service
    app.dependency_overrides.clear()


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        """Root endpoint should return healthy status."""
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        """Health endpoint should return healthy status."""
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


# ============================================================
# Reconstruct Endpoint Tests
# ============================================================

class TestReconstructEndpoint:
    """Tests for reconstruction from JSON rows."""

    def test_square(self, test_client, square_rows):
        response = test_client.post(RECONSTRUCT_URL, json={"rows": square_rows})

        assert response.status_code == 200
        data = response.json()
        assert data["point_count"] == 4
        assert len(data["polygons"]) == 1
        assert data["polygons"][0]["method"] == "numeric_sort"
        assert data["validation_report"][0]["valid"] is True
        assert data["validation_report"][0]["area"] == pytest.approx(100.0)
        assert [p["name"] for p in data["selected_boundary"]] == ["P1", "P2", "P3", "P4"]
        assert data["selected_boundary_latlon"] is None

    def test_response_structure(self, test_client, two_parcel_rows):
        response = test_client.post(RECONSTRUCT_URL, json={"rows": two_parcel_rows})

        assert response.status_code == 200
        data = response.json()
        for key in (
            "all_points",
            "duplicates_mapping",
            "clusters_summary",
            "polylines",
            "polygons",
            "validation_report",
            "selected_boundary",
        ):
            assert key in data
        assert len(data["clusters_summary"]) == 2
        assert "bounding_box" in data["clusters_summary"][0]

    def test_options_are_applied(self, test_client, square_rows):
        response = test_client.post(
            RECONSTRUCT_URL,
            json={"rows": square_rows, "options": {"min_polygon_vertices": 5}},
        )

        assert response.status_code == 200
        assert response.json()["polygons"] == []

    def test_geographic_decoration(self, test_client):
        rows = [
            {"name": "P1", "easting": 500000.0, "northing": 4000000.0},
            {"name": "P2", "easting": 500010.0, "northing": 4000000.0},
            {"name": "P3", "easting": 500010.0, "northing": 4000010.0},
            {"name": "P4", "easting": 500000.0, "northing": 4000010.0},
        ]

        response = test_client.post(RECONSTRUCT_URL, json={"rows": rows, "utm_zone": 39})

        assert response.status_code == 200
        latlon = response.json()["selected_boundary_latlon"]
        assert len(latlon) == 4
        # Zone 39 central meridian is 51°E
        assert latlon[0]["lon"] == pytest.approx(51.0, abs=1e-6)
        assert 35.0 < latlon[0]["lat"] < 37.0
        assert latlon[0]["easting"] == 500000.0

    def test_no_usable_rows(self, test_client):
        response = test_client.post(
            RECONSTRUCT_URL,
            json={"rows": [{"name": "A", "easting": "n/a", "northing": 1}]},
        )

        assert response.status_code == 422
        assert "Insufficient data" in response.json()["detail"]

    def test_empty_rows(self, test_client):
        response = test_client.post(RECONSTRUCT_URL, json={"rows": []})

        assert response.status_code == 422

    @pytest.mark.parametrize("options", [
        {"cluster_eps_m": -1},
        {"duplicate_tolerance_m": 0},
        {"min_polygon_vertices": 2},
        {"mode": "freeform"},
    ])
    def test_invalid_options(self, test_client, square_rows, options):
        response = test_client.post(RECONSTRUCT_URL, json={"rows": square_rows, "options": options})

        assert response.status_code == 422

    def test_invalid_utm_zone(self, test_client, square_rows):
        response = test_client.post(RECONSTRUCT_URL, json={"rows": square_rows, "utm_zone": 61})

        assert response.status_code == 422


# ============================================================
# Upload Endpoint Tests
# ============================================================

class TestUploadEndpoint:
    """Tests for reconstruction from CSV uploads."""

    def test_comma_csv(self, test_client):
        content = b"Name,Easting,Northing\nP1,0,0\nP2,10,0\nP3,10,10\nP4,0,10\n"

        response = test_client.post(
            UPLOAD_URL,
            files={"file": ("survey.csv", content, "text/csv")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["point_count"] == 4
        assert data["validation_report"][0]["area"] == pytest.approx(100.0)

    def test_semicolon_csv_with_comma_decimals(self, test_client):
        content = (
            "name;x;y\n"
            "P1;0,5;0,5\n"
            "P2;10,5;0,5\n"
            "P3;10,5;10,5\n"
            "P4;0,5;10,5\n"
        ).encode("utf-8")

        response = test_client.post(
            UPLOAD_URL,
            files={"file": ("survey.csv", content, "text/csv")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["all_points"][0]["easting"] == pytest.approx(0.5)
        assert data["validation_report"][0]["area"] == pytest.approx(100.0)

    def test_form_options(self, test_client):
        content = b"name,easting,northing\nA,0,0\nB,10,0\nC,500,0\nD,510,0\nE,505,8\n"

        response = test_client.post(
            UPLOAD_URL,
            files={"file": ("survey.csv", content, "text/csv")},
            data={"cluster_eps_m": "1000"},
        )

        assert response.status_code == 200
        assert len(response.json()["clusters_summary"]) == 1

    def test_empty_file(self, test_client):
        response = test_client.post(
            UPLOAD_URL,
            files={"file": ("survey.csv", b"", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid upload"

    def test_header_only(self, test_client):
        response = test_client.post(
            UPLOAD_URL,
            files={"file": ("survey.csv", b"name,easting,northing\n", "text/csv")},
        )

        assert response.status_code == 422


# ============================================================
# Error Handling Tests
# ============================================================

class TestErrorHandling:
    """Tests for the global error handling middleware."""

    def test_unexpected_error_returns_500(self, test_client, failing_service, square_rows):
        failing_service.reconstruct_rows.side_effect = RuntimeError("boom")

        response = test_client.post(RECONSTRUCT_URL, json={"rows": square_rows})

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Internal server error"
        assert "boom" not in data["detail"]

    def test_value_error_returns_400(self, test_client, failing_service, square_rows):
        failing_service.reconstruct_rows.side_effect = ValueError("UTM zone must be between 1 and 60")

        response = test_client.post(RECONSTRUCT_URL, json={"rows": square_rows})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
