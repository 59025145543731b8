"""Sync presentation layer."""

from sync.presentation.routes import router

__all__ = ["router"]
