"""Routes package for the Permitsy web shim."""

from .health import router as health_router
from .spa import router as spa_router

__all__ = ["health_router", "spa_router"]
