"""In-memory view of the discovered network: devices and browse trees."""

from .registry import DeviceRegistry
from .tree import BrowseNode, BrowseTree, NodeKind, NodeState

__all__ = ["BrowseNode", "BrowseTree", "DeviceRegistry", "NodeKind", "NodeState"]
