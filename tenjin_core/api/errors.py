"""
Exception handlers mapping compiler errors onto HTTP responses.

A SchemaError means the submitted definition is wrong, so it becomes a 400.
Any other TenjinError is a failure on our side and becomes a 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from tenjin_core.api.models import ErrorResponse
from tenjin_core.lib.errors import SchemaError, TenjinError


async def schema_error_handler(request: Request, exc: SchemaError):
    logging.info(f"Rejected schema definition on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Invalid schema definition", detail=str(exc)).model_dump()
    )


async def tenjin_error_handler(request: Request, exc: TenjinError):
    logging.error(f"Compilation failed on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Compilation failed", detail=str(exc)).model_dump()
    )


async def not_found_handler(request: Request, exc):
    return JSONResponse(
        status_code=404,
        content={"error": "Endpoint not found", "path": str(request.url.path)}
    )


def register_error_handlers(app: FastAPI) -> None:
    # Starlette picks the most specific class first, so SchemaError wins over TenjinError
    app.add_exception_handler(SchemaError, schema_error_handler)
    app.add_exception_handler(TenjinError, tenjin_error_handler)
    app.add_exception_handler(404, not_found_handler)
