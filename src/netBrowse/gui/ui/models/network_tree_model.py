"""Qt item model exposing the media servers and their browse trees."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from PySide6.QtCore import QAbstractItemModel, QModelIndex, QObject, Qt, Slot

from ....config import LOADING_PLACEHOLDER
from ....network.registry import DeviceRegistry
from ....network.tree import BrowseNode, BrowseTree, NodeKind, NodeState
from ...services.fetch_orchestrator import FetchOrchestrator

_LOGGER = logging.getLogger(__name__)


class NetworkTreeRole(int, Enum):
    """Custom roles exposed by :class:`NetworkTreeModel`."""

    NODE_KIND = Qt.ItemDataRole.UserRole + 1
    NODE_STATE = Qt.ItemDataRole.UserRole + 2
    LOCATOR = Qt.ItemDataRole.UserRole + 3
    BROWSE_NODE = Qt.ItemDataRole.UserRole + 4


class NetworkTreeModel(QAbstractItemModel):
    """Read-only tree model over the state kept by :class:`FetchOrchestrator`.

    Every query answers from memory and never starts a fetch; views request
    new levels through explicit navigation. A node whose children are not
    known (loading, failed or never opened) reports no rows.
    """

    def __init__(self, orchestrator: FetchOrchestrator, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._orchestrator = orchestrator
        self._registry: DeviceRegistry | None = None
        orchestrator.rootAboutToBeReset.connect(self._on_root_about_to_be_reset)
        orchestrator.rootReset.connect(self._on_root_reset)
        orchestrator.childrenAboutToBeRemoved.connect(self._on_children_about_to_be_removed)
        orchestrator.childrenRemoved.connect(self._on_children_removed)
        orchestrator.childrenAboutToBeInserted.connect(self._on_children_about_to_be_inserted)
        orchestrator.childrenInserted.connect(self._on_children_inserted)
        orchestrator.nodeStateChanged.connect(self._on_node_state_changed)

    @property
    def _tree(self) -> BrowseTree:
        return self._orchestrator.tree

    # ------------------------------------------------------------------
    # Registry subscription
    # ------------------------------------------------------------------
    def attach(self, registry: DeviceRegistry) -> None:
        """Follow *registry* and load its current device list."""

        if self._registry is registry:
            return
        self.detach()
        self._registry = registry
        registry.devicesUpdated.connect(self._on_devices_updated)
        self._on_devices_updated()

    def detach(self) -> None:
        """Stop following the registry and drop every known node."""

        registry = self._registry
        if registry is None:
            return
        registry.devicesUpdated.disconnect(self._on_devices_updated)
        self._registry = None
        self._orchestrator.teardown()
        self._orchestrator.replace_devices(())

    @Slot()
    def _on_devices_updated(self) -> None:
        if self._registry is None:
            return
        self._orchestrator.replace_devices(self._registry.devices())
        _LOGGER.debug("Root level now lists %d media servers", self.root_count())

    # ------------------------------------------------------------------
    # Query API
    # ------------------------------------------------------------------
    def root_count(self) -> int:
        return self._tree.device_count()

    def root_child(self, index: int) -> BrowseNode:
        node = self._tree.device_node(index)
        if node is None:
            raise IndexError(f"Device index {index} out of range")
        return node

    def child_count(self, node: BrowseNode) -> int:
        if node.kind is NodeKind.LEAF:
            return 0
        if node.kind is NodeKind.DEVICE:
            if node is not self._tree.expanded or not node.children_known:
                return 0
            return node.child_count()
        if node.kind is NodeKind.CONTAINER:
            return node.child_count() if node.children_known else 0
        raise AssertionError(f"Unhandled node kind {node.kind!r}")

    def child(self, node: BrowseNode, index: int) -> BrowseNode:
        if not 0 <= index < self.child_count(node):
            raise IndexError(f"Child index {index} out of range for {node.display_label!r}")
        child = node.child(index)
        assert child is not None
        return child

    def is_leaf(self, node: BrowseNode) -> bool:
        return node.kind is NodeKind.LEAF

    def display_label(self, node: BrowseNode) -> str:
        return node.display_label

    def node_state(self, node: BrowseNode) -> NodeState:
        return node.state

    # ------------------------------------------------------------------
    # QAbstractItemModel API
    # ------------------------------------------------------------------
    def columnCount(self, _parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802
        return 1

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802
        if parent.isValid() and parent.column() != 0:
            return 0
        node = self.node_from_index(parent)
        if node is None:
            return self.root_count()
        return self.child_count(node)

    def hasChildren(self, parent: QModelIndex = QModelIndex()) -> bool:  # noqa: N802
        node = self.node_from_index(parent)
        if node is None:
            return self.root_count() > 0
        return node.is_browsable

    def index(self, row: int, column: int, parent: QModelIndex = QModelIndex()):  # noqa: N802
        if column != 0 or row < 0:
            return QModelIndex()
        parent_node = self.node_from_index(parent)
        try:
            if parent_node is None:
                node = self.root_child(row)
            else:
                node = self.child(parent_node, row)
        except IndexError:
            return QModelIndex()
        return self.createIndex(row, column, node)

    def parent(self, index: QModelIndex) -> QModelIndex:  # noqa: N802
        node = self.node_from_index(index)
        if node is None or node.parent is None:
            return QModelIndex()
        return self.index_for_node(node.parent)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):  # noqa: N802
        node = self.node_from_index(index)
        if node is None:
            return None
        if role == Qt.ItemDataRole.DisplayRole:
            return self.display_label(node)
        if role == Qt.ItemDataRole.ToolTipRole:
            if node.state is NodeState.LOADING:
                return LOADING_PLACEHOLDER
            if node.state is NodeState.ERROR:
                return node.error
            if node.kind is NodeKind.LEAF:
                return node.locator
            if node.kind is NodeKind.DEVICE and node.device is not None:
                return node.device.location or None
            return None
        if role == NetworkTreeRole.NODE_KIND:
            return node.kind
        if role == NetworkTreeRole.NODE_STATE:
            return node.state
        if role == NetworkTreeRole.LOCATOR:
            return node.locator
        if role == NetworkTreeRole.BROWSE_NODE:
            return node
        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:  # noqa: N802
        node = self.node_from_index(index)
        if node is None:
            return Qt.ItemFlag.NoItemFlags
        flags = Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable
        if not node.is_browsable:
            flags |= Qt.ItemFlag.ItemNeverHasChildren
        return flags

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def node_from_index(self, index: QModelIndex) -> Optional[BrowseNode]:
        if not index.isValid():
            return None
        node = index.internalPointer()
        if isinstance(node, BrowseNode):
            return node
        return None

    def index_for_node(self, node: BrowseNode) -> QModelIndex:
        """Return the model index of *node*, or an invalid index if detached."""

        if node.kind is NodeKind.DEVICE:
            row = self._tree.device_row(node)
            if row < 0:
                return QModelIndex()
            return self.createIndex(row, 0, node)
        if not self._tree.contains(node):
            return QModelIndex()
        return self.createIndex(node.row(), 0, node)

    # ------------------------------------------------------------------
    # Orchestrator notifications
    # ------------------------------------------------------------------
    @Slot()
    def _on_root_about_to_be_reset(self) -> None:
        self.beginResetModel()

    @Slot()
    def _on_root_reset(self) -> None:
        self.endResetModel()

    @Slot(object, int, int)
    def _on_children_about_to_be_removed(self, node: BrowseNode, first: int, last: int) -> None:
        self.beginRemoveRows(self.index_for_node(node), first, last)

    @Slot(object)
    def _on_children_removed(self, _node: BrowseNode) -> None:
        self.endRemoveRows()

    @Slot(object, int, int)
    def _on_children_about_to_be_inserted(self, node: BrowseNode, first: int, last: int) -> None:
        self.beginInsertRows(self.index_for_node(node), first, last)

    @Slot(object)
    def _on_children_inserted(self, _node: BrowseNode) -> None:
        self.endInsertRows()

    @Slot(object)
    def _on_node_state_changed(self, node: BrowseNode) -> None:
        index = self.index_for_node(node)
        if index.isValid():
            self.dataChanged.emit(index, index)


__all__ = ["NetworkTreeModel", "NetworkTreeRole"]
