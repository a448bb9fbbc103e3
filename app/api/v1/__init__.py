"""Version 1 API routers."""

from app.api.v1 import debug, generation

__all__ = ["debug", "generation"]
