"""FastAPI routers acting as controllers in the MVC architecture."""

from . import langassist

__all__ = ["langassist"]
