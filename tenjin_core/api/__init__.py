"""
API module for tenjin-core.
"""

from .models import GenerateRequest, PolicyDiffRequest, HealthResponse
from .api import app

__all__ = [
    "GenerateRequest",
    "PolicyDiffRequest",
    "HealthResponse",
    "app"
]
