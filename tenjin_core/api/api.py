"""
FastAPI application exposing the compiler over HTTP.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tenjin_core import __version__
from .errors import register_error_handlers
from .generate import router as generate_router
from .health import router as health_router
from .policies import router as policies_router

app = FastAPI(
    title="Tenjin",
    description="Compile declarative schema definitions into PostgreSQL migrations and RLS policies",
    version=__version__
)

# Browser tooling posts schema definitions directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(health_router, tags=["system"])
app.include_router(generate_router, tags=["migrations"])
app.include_router(policies_router, tags=["policies"])

register_error_handlers(app)
