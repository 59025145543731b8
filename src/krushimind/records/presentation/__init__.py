"""Records presentation layer."""

from records.presentation.routes import preferences_router, router

__all__ = ["preferences_router", "router"]
