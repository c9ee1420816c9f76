"""Service objects coordinating background browse work for the GUI."""

from .fetch_orchestrator import FetchOrchestrator
from .selection_tracker import SelectionTracker

__all__ = ["FetchOrchestrator", "SelectionTracker"]
