"""Track which selected browse entries can be played."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from PySide6.QtCore import QObject, Signal

from ...network.tree import BrowseNode


class SelectionTracker(QObject):
    """Reduce the view's selection to the playable leaves it contains."""

    playableChanged = Signal(bool)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._leaves: List[BrowseNode] = []

    def update(self, nodes: Iterable[Optional[BrowseNode]]) -> None:
        """Recompute the playable selection from *nodes*, kept in selection order.

        Containers, device roots and leaves without a locator are skipped.
        """

        self._leaves = [
            node
            for node in nodes
            if node is not None and node.is_leaf and node.locator
        ]
        self.playableChanged.emit(bool(self._leaves))

    def clear(self) -> None:
        self.update(())

    def retain(self, predicate: Callable[[BrowseNode], bool]) -> None:
        """Drop tracked leaves rejected by *predicate* and report the result."""

        kept = [node for node in self._leaves if predicate(node)]
        if len(kept) == len(self._leaves):
            return
        self._leaves = kept
        self.playableChanged.emit(bool(kept))

    def has_playable_selection(self) -> bool:
        return bool(self._leaves)

    def playable_locators(self) -> List[str]:
        return [node.locator for node in self._leaves if node.locator]

    def selected_leaves(self) -> List[BrowseNode]:
        return list(self._leaves)


__all__ = ["SelectionTracker"]
