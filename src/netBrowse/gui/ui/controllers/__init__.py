"""Controllers coordinating the browse window."""

from .browse_controller import BrowseController

__all__ = ["BrowseController"]
