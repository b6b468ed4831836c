"""API layer module.

Contains FastAPI routers, middleware and request/response schemas.
"""

from shoptagger.api.generator import router as generator_router
from shoptagger.api.health import router as health_router
from shoptagger.api.tagger import router as tagger_router

__all__ = [
    "generator_router",
    "health_router",
    "tagger_router",
]
