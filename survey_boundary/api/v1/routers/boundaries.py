"""
API router for boundary reconstruction endpoints.
"""
from typing import Annotated, Literal, Optional
from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from survey_boundary.api.dependencies import BoundaryServiceDep
from survey_boundary.api.v1.models.requests import PipelineOptions, ReconstructRequest
from survey_boundary.api.v1.models.responses import BoundaryResponse
from survey_boundary.services.application.boundary_service import BoundaryReconstruction


router = APIRouter(
    prefix="/boundaries",
    tags=["boundaries"],
)


INSUFFICIENT_DATA = "Insufficient data: no row has a name and finite easting/northing"


def _to_response(reconstruction: BoundaryReconstruction) -> BoundaryResponse:
    """Turn a reconstruction into the response model, rejecting empty input."""
    result = reconstruction.result
    if not result.all_points:
        raise HTTPException(status_code=422, detail=INSUFFICIENT_DATA)

    return BoundaryResponse(
        **result.model_dump(),
        point_count=len(result.all_points),
        selected_boundary_latlon=reconstruction.selected_boundary_latlon,
    )


@router.post(
    "/reconstruct",
    response_model=BoundaryResponse,
    summary="Reconstruct boundaries from survey rows",
    description="""
    Reconstruct closed boundary polygons from raw survey rows.

    The pipeline:
    1. Normalizes rows (header synonyms, finite coordinates only)
    2. Collapses duplicate observations of the same point
    3. Separates parcels by density clustering
    4. Extracts surveyed lines from point names
    5. Orders each parcel into a ring (lines, numbering, polar angle)
    6. Falls back to the convex hull for self-intersecting rings
    7. Validates area, winding and simplicity, and selects the best ring
    """,
    responses={
        422: {"description": "No usable points in the input"},
        500: {"description": "Internal server error"},
    },
)
async def reconstruct_boundary(
    request: ReconstructRequest,
    boundary_service: BoundaryServiceDep,
) -> BoundaryResponse:
    """
    Reconstruct boundaries from JSON rows.

    Args:
        request: Rows, options and optional UTM zone
        boundary_service: Boundary service (injected dependency)

    Returns:
        BoundaryResponse with every pipeline stage's output
    """
    reconstruction = boundary_service.reconstruct_rows(
        rows=request.rows,
        config=request.options.to_config(),
        utm_zone=request.utm_zone,
        hemisphere=request.hemisphere,
    )
    return _to_response(reconstruction)


@router.post(
    "/upload",
    response_model=BoundaryResponse,
    summary="Reconstruct boundaries from a CSV export",
    responses={
        400: {"description": "File could not be decoded"},
        413: {"description": "File too large"},
        422: {"description": "No header row or no usable points"},
    },
)
async def upload_survey(
    boundary_service: BoundaryServiceDep,
    file: Annotated[UploadFile, File(description="CSV export with a header row")],
    duplicate_tolerance_m: Annotated[Optional[float], Form(gt=0)] = None,
    cluster_eps_m: Annotated[Optional[float], Form(gt=0)] = None,
    min_polygon_vertices: Annotated[Optional[int], Form(ge=3)] = None,
    mode: Annotated[Literal["boundary", "geometric"], Form()] = "boundary",
    utm_zone: Annotated[Optional[int], Form(ge=1, le=60)] = None,
    hemisphere: Annotated[Literal["north", "south"], Form()] = "north",
) -> BoundaryResponse:
    """
    Reconstruct boundaries from an uploaded CSV file.

    Raises:
        HTTPException: If the upload holds no usable points
    """
    options = PipelineOptions(
        duplicate_tolerance_m=duplicate_tolerance_m,
        cluster_eps_m=cluster_eps_m,
        min_polygon_vertices=min_polygon_vertices,
        mode=mode,
    )
    content = await file.read()

    # UploadError is mapped to its status code by ErrorHandlerMiddleware
    reconstruction = boundary_service.reconstruct_csv(
        content,
        config=options.to_config(),
        utm_zone=utm_zone,
        hemisphere=hemisphere,
    )

    return _to_response(reconstruction)
