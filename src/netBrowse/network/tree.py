"""Tree node structures for browsing media servers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterable, Iterator, List, Optional

from ..models.types import Descriptor, Device


class NodeKind(Enum):
    """Variants a node of the browse tree can take."""

    DEVICE = auto()
    CONTAINER = auto()
    LEAF = auto()


class NodeState(Enum):
    """Fetch state of the children of a device root or container."""

    IDLE = auto()
    LOADING = auto()
    EMPTY = auto()
    ERROR = auto()
    POPULATED = auto()


@dataclass(slots=True, eq=False)
class BrowseNode:
    """A device root, container or leaf discovered while browsing."""

    kind: NodeKind
    title: str
    depth: int
    object_id: str = ""
    locator: Optional[str] = None
    device: Optional[Device] = None
    parent: Optional["BrowseNode"] = field(default=None, repr=False)
    children: List["BrowseNode"] = field(default_factory=list, repr=False)
    state: NodeState = NodeState.IDLE
    error: Optional[str] = None
    generation: int = 0

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def for_device(cls, device: Device) -> "BrowseNode":
        return cls(NodeKind.DEVICE, device.friendly_name, 0, device=device)

    @classmethod
    def from_descriptor(cls, descriptor: Descriptor, parent: "BrowseNode") -> "BrowseNode":
        """Materialise *descriptor* as a child of *parent*."""

        kind = NodeKind.CONTAINER if descriptor.is_container else NodeKind.LEAF
        return cls(
            kind,
            descriptor.title,
            parent.depth + 1,
            object_id=descriptor.id,
            locator=None if descriptor.is_container else descriptor.locator,
            device=parent.device,
            parent=parent,
        )

    # ------------------------------------------------------------------
    # Structural accessors
    # ------------------------------------------------------------------
    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF

    @property
    def is_browsable(self) -> bool:
        """Return ``True`` if navigating into the node issues a fetch."""

        if self.kind is NodeKind.CONTAINER:
            return True
        if self.kind is NodeKind.DEVICE:
            return self.device is not None and self.device.supports_browse
        return False

    @property
    def children_known(self) -> bool:
        """``True`` once a fetch completed and ``children`` is authoritative."""

        return self.state in {NodeState.EMPTY, NodeState.POPULATED}

    @property
    def display_label(self) -> str:
        if self.kind is NodeKind.DEVICE and self.device is not None:
            return self.device.friendly_name
        return self.title

    def child(self, index: int) -> Optional["BrowseNode"]:
        if 0 <= index < len(self.children):
            return self.children[index]
        return None

    def child_count(self) -> int:
        return len(self.children)

    def row(self) -> int:
        if self.parent is None:
            return 0
        try:
            return self.parent.children.index(self)
        except ValueError:
            return 0

    def descendants(self) -> Iterator["BrowseNode"]:
        for child in self.children:
            yield child
            yield from child.descendants()

    # ------------------------------------------------------------------
    # Mutation helpers (used by the fetch orchestrator only)
    # ------------------------------------------------------------------
    def drop_children(self) -> int:
        """Detach every descendant and return how many direct children were dropped.

        Dropped nodes get a new generation so that fetches still in flight
        for them are recognised as stale when they complete.
        """

        for node in self.descendants():
            node.generation += 1
            node.state = NodeState.IDLE
        count = len(self.children)
        for child in self.children:
            child.parent = None
        self.children = []
        return count

    def install_children(self, children: List["BrowseNode"]) -> None:
        """Replace the child list and mark it authoritative in one step."""

        self.children = children
        self.error = None
        self.state = NodeState.POPULATED if children else NodeState.EMPTY


def filter_media_servers(devices: Iterable[Device]) -> List[Device]:
    """Return the devices whose type URN identifies a media server."""

    return [device for device in devices if device.is_media_server()]


class BrowseTree:
    """Root level of the browse tree: the known media servers."""

    def __init__(self) -> None:
        self._devices: List[BrowseNode] = []
        self._by_udn: Dict[str, BrowseNode] = {}
        self.expanded: Optional[BrowseNode] = None

    def device_nodes(self) -> List[BrowseNode]:
        return list(self._devices)

    def device_count(self) -> int:
        return len(self._devices)

    def device_node(self, index: int) -> Optional[BrowseNode]:
        if 0 <= index < len(self._devices):
            return self._devices[index]
        return None

    def device_row(self, node: BrowseNode) -> int:
        try:
            return self._devices.index(node)
        except ValueError:
            return -1

    def node_for_udn(self, udn: str) -> Optional[BrowseNode]:
        return self._by_udn.get(udn)

    def replace_devices(self, devices: Iterable[Device]) -> List[BrowseNode]:
        """Install *devices* as the root level and return the nodes that vanished.

        Nodes are reused by UDN so an expanded device keeps its subtree across
        updates. When a reused device changed its description the node adopts
        the new :class:`Device` value.
        """

        nodes: List[BrowseNode] = []
        by_udn: Dict[str, BrowseNode] = {}
        for device in devices:
            if device.udn in by_udn:
                continue
            node = self._by_udn.get(device.udn)
            if node is None:
                node = BrowseNode.for_device(device)
            else:
                node.device = device
                node.title = device.friendly_name
            nodes.append(node)
            by_udn[device.udn] = node
        removed = [node for udn, node in self._by_udn.items() if udn not in by_udn]
        self._devices = nodes
        self._by_udn = by_udn
        return removed

    def contains(self, node: BrowseNode) -> bool:
        """Return ``True`` if *node* is still reachable from the root level."""

        current = node
        while current.parent is not None:
            if current not in current.parent.children:
                return False
            current = current.parent
        if current.kind is not NodeKind.DEVICE:
            return False
        if current is node:
            return current in self._devices
        return current is self.expanded and current in self._devices


__all__ = ["BrowseNode", "BrowseTree", "NodeKind", "NodeState", "filter_media_servers"]
