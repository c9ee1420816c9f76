"""Controller translating view events into browse operations."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from PySide6.QtCore import QModelIndex, QObject, QThreadPool, Signal, Slot

from ....errors import NoPlayableSelectionError
from ....network.registry import DeviceRegistry
from ....network.tree import BrowseNode
from ....upnp.content_directory import DirectoryFetchClient
from ...services.fetch_orchestrator import FetchOrchestrator
from ...services.selection_tracker import SelectionTracker
from ..models.network_tree_model import NetworkTreeModel

_LOGGER = logging.getLogger(__name__)


class BrowseController(QObject):
    """Wire the registry, orchestrator, model and selection tracker together."""

    selectionOpened = Signal(list)
    errorRaised = Signal(str)

    def __init__(
        self,
        registry: DeviceRegistry,
        client: DirectoryFetchClient,
        *,
        pool: Optional[QThreadPool] = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._registry = registry
        self._orchestrator = FetchOrchestrator(client, pool=pool, parent=self)
        self._model = NetworkTreeModel(self._orchestrator, parent=self)
        self._selection = SelectionTracker(self)
        self._orchestrator.fetchFailed.connect(self._on_fetch_failed)
        self._orchestrator.rootReset.connect(self._on_root_reset)
        self._orchestrator.childrenRemoved.connect(self._on_children_removed)

    @property
    def model(self) -> NetworkTreeModel:
        return self._model

    @property
    def orchestrator(self) -> FetchOrchestrator:
        return self._orchestrator

    @property
    def selection(self) -> SelectionTracker:
        return self._selection

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Subscribe to the registry and show its devices."""

        self._model.attach(self._registry)

    def close(self) -> None:
        """Forget the selection and every browsed node."""

        self._selection.clear()
        self._model.detach()

    # ------------------------------------------------------------------
    # View events
    # ------------------------------------------------------------------
    def on_user_navigate(self, index: QModelIndex) -> bool:
        """Open the level below *index* when it is a device or container."""

        node = self._model.node_from_index(index)
        if node is None or node.is_leaf:
            return False
        if not node.is_browsable:
            _LOGGER.info("%s does not offer a ContentDirectory service", node.display_label)
            return False
        return self._orchestrator.navigate_into(node)

    def on_selection_changed(self, indexes: Iterable[QModelIndex]) -> None:
        nodes: List[Optional[BrowseNode]] = [self._model.node_from_index(index) for index in indexes]
        self._selection.update(nodes)

    def open_selection(self) -> List[str]:
        """Return the locators of the selected leaves and announce them."""

        if not self._selection.has_playable_selection():
            raise NoPlayableSelectionError("The selection contains no playable items.")
        locators = self._selection.playable_locators()
        self.selectionOpened.emit(locators)
        return locators

    @Slot()
    def _on_root_reset(self) -> None:
        # Qt clears the view selection on reset without announcing it.
        self._drop_detached_selection()

    @Slot(object)
    def _on_children_removed(self, _node: BrowseNode) -> None:
        self._drop_detached_selection()

    def _drop_detached_selection(self) -> None:
        self._selection.retain(self._orchestrator.tree.contains)

    @Slot(object, str)
    def _on_fetch_failed(self, node: BrowseNode, message: str) -> None:
        self.errorRaised.emit(f"Could not list {node.display_label}: {message}")


__all__ = ["BrowseController"]
