"""Expose Qt models used by the GUI."""

from .network_tree_model import NetworkTreeModel, NetworkTreeRole

__all__ = ["NetworkTreeModel", "NetworkTreeRole"]
