"""
Health and status endpoints.
"""

from fastapi import APIRouter
from tenjin_core import __version__
from tenjin_core.api.models import HealthResponse

router = APIRouter()

@router.get("/health", response_model=HealthResponse)
def health():
    """Get API health status"""
    return HealthResponse(status="healthy", version=__version__)
