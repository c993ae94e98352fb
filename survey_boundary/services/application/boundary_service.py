"""
Application service: Orchestration layer for boundary reconstruction.
"""
from typing import Any, Dict, List, Mapping, Optional
from dataclasses import dataclass

from survey_boundary.domain.models import BoundaryResult, GeoSurveyPoint
from survey_boundary.infrastructure.csv_reader import read_csv_rows
from survey_boundary.services.domain.boundary_reconstructor import (
    BoundaryReconstructor,
    ReconstructionConfig,
)
from survey_boundary.utils.geo_projection import Hemisphere, project_points_to_latlon


@dataclass
class BoundaryReconstruction:
    """Pipeline result plus the optional geographic decoration."""
    result: BoundaryResult
    selected_boundary_latlon: Optional[List[GeoSurveyPoint]] = None


class BoundaryService:
    """
    Application service for boundary reconstruction requests.

    Coordinates input decoding, the domain pipeline and the geographic
    decoration of its output. No geometry happens here.
    """

    def __init__(self, default_config: Optional[ReconstructionConfig] = None):
        """
        Initialize the service.

        Args:
            default_config: Config used when a request supplies none
        """
        self.default_config = default_config

    def reconstruct_rows(
        self,
        rows: List[Mapping[str, Any]],
        config: Optional[ReconstructionConfig] = None,
        utm_zone: Optional[int] = None,
        hemisphere: Hemisphere = "north",
    ) -> BoundaryReconstruction:
        """
        Reconstruct boundaries from already parsed rows.

        Args:
            rows: Rows keyed by column header
            config: Pipeline configuration for this request
            utm_zone: UTM zone of the coordinates, enables lat/lon output
            hemisphere: Hemisphere of the UTM zone

        Returns:
            BoundaryReconstruction

        Raises:
            ValueError: If the UTM zone is invalid
        """
        reconstructor = BoundaryReconstructor(config or self.default_config)
        result = reconstructor.reconstruct(rows)

        latlon = None
        if utm_zone is not None:
            latlon = project_points_to_latlon(result.selected_boundary, utm_zone, hemisphere)

        return BoundaryReconstruction(result=result, selected_boundary_latlon=latlon)

    def reconstruct_csv(
        self,
        content: bytes,
        config: Optional[ReconstructionConfig] = None,
        utm_zone: Optional[int] = None,
        hemisphere: Hemisphere = "north",
    ) -> BoundaryReconstruction:
        """
        Reconstruct boundaries from an uploaded CSV export.

        Raises:
            UploadError: If the file cannot be read
            ValueError: If the UTM zone is invalid
        """
        rows: List[Dict[str, Any]] = read_csv_rows(content)
        return self.reconstruct_rows(rows, config, utm_zone, hemisphere)
