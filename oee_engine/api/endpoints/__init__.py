from .health import router as health_router
from .oee import router as oee_router

__all__ = ["health_router", "oee_router"]
