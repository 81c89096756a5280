"""Identity provider callback redirect."""

from .routes import create_callback_router

__all__ = ["create_callback_router"]
