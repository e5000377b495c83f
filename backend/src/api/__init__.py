# API routes module
# Contains all API endpoint definitions

from .history_routes import router as history_router

__all__ = ["history_router"]
