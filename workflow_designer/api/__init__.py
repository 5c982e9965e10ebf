"""HTTP API for the workflow designer."""

from .endpoints import router, init_dependencies

__all__ = ["router", "init_dependencies"]
