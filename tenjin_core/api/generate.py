"""
Migration generation endpoint.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from tenjin_core.api.models import ErrorResponse, GenerateRequest, StatementsResponse
from tenjin_core.lib.migration import format_migration_sql, generate_statements
from tenjin_core.lib.schema import Schema

router = APIRouter()

@router.post("/generate", responses={
    400: {"model": ErrorResponse, "description": "Invalid schema definition"},
    200: {
        "description": "Compiled migration",
        "content": {
            "text/plain": {
                "example": """-- Tenjin schema migration
-- Created: 2024-01-01T00:00:00+00:00
-- Generated by: Tenjin Framework

CREATE TABLE users (
  id uuid PRIMARY KEY DEFAULT gen_random_uuid()
);"""
            },
            "application/json": {
                "example": {"statements": ["CREATE TABLE users (\n  id uuid PRIMARY KEY DEFAULT gen_random_uuid()\n);"]}
            }
        }
    }
})
async def generate(request: GenerateRequest):
    """
    Compile a schema definition into a migration.

    Returns the full migration document as text, or the ordered statement
    list when output_format is json.
    """
    if request.output_format not in ["sql", "json"]:
        raise HTTPException(status_code=400, detail="output_format must be 'sql' or 'json'")

    schema = Schema.from_dict(request.schema_definition)
    statements = generate_statements(schema)

    if request.output_format == "json":
        return StatementsResponse(statements=statements)
    return PlainTextResponse(format_migration_sql(request.description, statements))
