"""
Pydantic models for API requests and responses.
"""

from typing import Any, Dict, List
from pydantic import BaseModel, Field

class GenerateRequest(BaseModel):
    """Request model for migration generation."""
    schema_definition: Dict[str, Any] = Field(..., description="Schema definition as accepted by Schema.from_dict")
    description: str = Field("Tenjin schema migration", description="Description placed in the migration header")
    output_format: str = Field("sql", description="Output format: sql or json")

class PolicyDiffRequest(BaseModel):
    """Request model for policy reconciliation between two schema versions."""
    old_schema: Dict[str, Any] = Field(..., description="Previous schema definition")
    new_schema: Dict[str, Any] = Field(..., description="Updated schema definition")

class StatementsResponse(BaseModel):
    """Ordered list of generated SQL statements."""
    statements: List[str] = Field(default_factory=list)

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., examples=["healthy"])
    version: str = Field(..., examples=["0.1.0"])

class ErrorResponse(BaseModel):
    """Error body returned for rejected or failed compilations."""
    error: str = Field(..., examples=["Invalid schema definition"])
    detail: str = Field(..., examples=["Invalid policy action 'bogus'"])
