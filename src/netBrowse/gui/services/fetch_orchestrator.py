"""Drive directory fetches and merge their results into the browse tree."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from ...config import ROOT_OBJECT_ID
from ...models.types import Device
from ...network.tree import BrowseNode, BrowseTree, NodeKind, NodeState, filter_media_servers
from ...upnp.content_directory import DirectoryFetchClient
from ..ui.tasks.fetch_worker import FetchRequest, FetchResult, FetchSignals, FetchWorker, fetch_pool

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class _PendingFetch:
    node: BrowseNode
    generation: int
    worker: FetchWorker


class FetchOrchestrator(QObject):
    """Own every mutation of the browse tree.

    All methods must be called on the GUI thread. Network work runs on a
    :class:`QThreadPool` and its results come back through queued signals, so
    the tree only ever changes between two event-loop iterations. Each
    navigation stamps the target node with a new generation; results whose
    generation no longer matches are dropped.

    The ``children*`` signals bracket every change of a node's child list so
    an item model can forward them as row insertions and removals.
    """

    rootAboutToBeReset = Signal()
    rootReset = Signal()
    childrenAboutToBeRemoved = Signal(object, int, int)
    childrenRemoved = Signal(object)
    childrenAboutToBeInserted = Signal(object, int, int)
    childrenInserted = Signal(object)
    nodeStateChanged = Signal(object)
    levelInvalidated = Signal(object)
    """Emitted whenever the child level below a node must be redrawn."""

    fetchFinished = Signal(object)
    fetchFailed = Signal(object, str)

    def __init__(
        self,
        client: DirectoryFetchClient,
        *,
        pool: Optional[QThreadPool] = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._pool = pool if pool is not None else fetch_pool()
        self._tree = BrowseTree()
        self._request_ids = itertools.count(1)
        self._inflight: Dict[int, _PendingFetch] = {}
        # Workers forgotten by teardown, held until they report back.
        self._abandoned: Dict[int, FetchWorker] = {}
        # Sort criteria negotiated when the current device was expanded.
        self._sort_spec: Optional[str] = None
        self._signals = FetchSignals(self)
        self._signals.finished.connect(self._on_fetch_finished)
        self._signals.error.connect(self._on_fetch_failed)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def tree(self) -> BrowseTree:
        return self._tree

    def pending_count(self) -> int:
        """Return the number of fetches whose completion has not been handled."""

        return len(self._inflight)

    def replace_devices(self, devices: Iterable[Device]) -> None:
        """Install the media servers among *devices* as the root level."""

        filtered = filter_media_servers(devices)
        self.rootAboutToBeReset.emit()
        removed = self._tree.replace_devices(filtered)
        expanded = self._tree.expanded
        if expanded is not None and expanded in removed:
            _LOGGER.info("Expanded device %s disappeared", expanded.display_label)
            self._collapse(expanded, notify=False)
        self.rootReset.emit()

    def navigate_into(self, node: BrowseNode) -> bool:
        """Start listing the children of *node*.

        Returns ``True`` when a fetch was issued. Navigating into the device
        that is already expanded does nothing unless its last fetch failed.
        """

        if not node.is_browsable:
            raise ValueError(f"Cannot navigate into {node.kind.name.lower()} {node.title!r}")
        if not self._tree.contains(node):
            _LOGGER.debug("Ignoring navigation into detached node %r", node.title)
            return False

        if node.kind is NodeKind.DEVICE:
            if node is self._tree.expanded and node.state is not NodeState.ERROR:
                return False
            previous = self._tree.expanded
            if previous is not None and previous is not node:
                self._collapse(previous)
            self._tree.expanded = node
            self._sort_spec = None
            object_id = ROOT_OBJECT_ID
        else:
            object_id = node.object_id

        self._clear_children(node)
        node.generation += 1
        node.state = NodeState.LOADING
        node.error = None
        self.nodeStateChanged.emit(node)
        self.levelInvalidated.emit(node)
        self._submit(node, object_id)
        return True

    def teardown(self) -> None:
        """Drop the expanded device subtree, e.g. when the browser closes.

        Fetches still in flight are forgotten; their results are discarded
        when they arrive.
        """

        expanded = self._tree.expanded
        if expanded is not None:
            self._collapse(expanded)
        for request_id, pending in self._inflight.items():
            self._abandoned[request_id] = pending.worker
        self._inflight.clear()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _submit(self, node: BrowseNode, object_id: str) -> None:
        expanded = self._tree.expanded
        assert expanded is not None and expanded.device is not None
        request = FetchRequest(
            request_id=next(self._request_ids),
            device=expanded.device,
            object_id=object_id,
            sort_spec=self._sort_spec,
        )
        worker = FetchWorker(self._client, request, self._signals)
        self._inflight[request.request_id] = _PendingFetch(node, node.generation, worker)
        _LOGGER.debug(
            "Fetching %s from %s (request %d, generation %d)",
            object_id,
            expanded.display_label,
            request.request_id,
            node.generation,
        )
        self._pool.start(worker)

    def _take_current(self, request_id: int) -> Optional[BrowseNode]:
        self._abandoned.pop(request_id, None)
        pending = self._inflight.pop(request_id, None)
        if pending is None:
            return None
        node = pending.node
        if pending.generation != node.generation or not self._tree.contains(node):
            _LOGGER.debug(
                "Discarding stale result for %r (generation %d, current %d)",
                node.title,
                pending.generation,
                node.generation,
            )
            return None
        return node

    def _clear_children(self, node: BrowseNode, *, notify: bool = True) -> None:
        count = node.child_count()
        if count and notify:
            self.childrenAboutToBeRemoved.emit(node, 0, count - 1)
        node.drop_children()
        if count and notify:
            self.childrenRemoved.emit(node)

    def _collapse(self, device_node: BrowseNode, *, notify: bool = True) -> None:
        self._clear_children(device_node, notify=notify)
        device_node.generation += 1
        device_node.state = NodeState.IDLE
        device_node.error = None
        if self._tree.expanded is device_node:
            self._tree.expanded = None
            self._sort_spec = None
        if notify:
            self.nodeStateChanged.emit(device_node)
            self.levelInvalidated.emit(device_node)

    @Slot(int, object)
    def _on_fetch_finished(self, request_id: int, result: FetchResult) -> None:
        node = self._take_current(request_id)
        if node is None:
            return
        if node.kind is NodeKind.DEVICE:
            self._sort_spec = result.sort_spec

        children = [BrowseNode.from_descriptor(descriptor, node) for descriptor in result.descriptors]
        if children:
            self.childrenAboutToBeInserted.emit(node, 0, len(children) - 1)
        node.install_children(children)
        if children:
            self.childrenInserted.emit(node)
        _LOGGER.debug("Installed %d children under %r", len(children), node.title)
        self.nodeStateChanged.emit(node)
        self.levelInvalidated.emit(node)
        self.fetchFinished.emit(node)

    @Slot(int, str)
    def _on_fetch_failed(self, request_id: int, message: str) -> None:
        node = self._take_current(request_id)
        if node is None:
            return
        _LOGGER.warning("Listing %r failed: %s", node.display_label, message)
        node.state = NodeState.ERROR
        node.error = message
        self.nodeStateChanged.emit(node)
        self.levelInvalidated.emit(node)
        self.fetchFailed.emit(node, message)


__all__ = ["FetchOrchestrator"]
