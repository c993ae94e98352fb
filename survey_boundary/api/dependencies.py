"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from survey_boundary.services.application.boundary_service import BoundaryService


def get_boundary_service() -> BoundaryService:
    """
    Dependency factory for BoundaryService.

    Returns:
        BoundaryService instance
    """
    return BoundaryService()


# Type aliases for cleaner route signatures
BoundaryServiceDep = Annotated[BoundaryService, Depends(get_boundary_service)]
