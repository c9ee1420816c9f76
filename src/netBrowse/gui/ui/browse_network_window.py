"""Column browser window listing media servers and their contents."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QItemSelection, QModelIndex, Qt, Signal, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QAbstractItemView,
    QColumnView,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...config import WINDOW_DEFAULT_SIZE
from ...errors import NoPlayableSelectionError
from .controllers.browse_controller import BrowseController


class BrowseNetworkWindow(QWidget):
    """Let the user walk media servers column by column and play items."""

    closed = Signal()

    def __init__(self, controller: BrowseController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self.setWindowTitle("Browse Network")
        self.resize(*WINDOW_DEFAULT_SIZE)

        self._view = QColumnView(self)
        self._view.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self._view.setModel(controller.model)

        self._status = QLabel(self)
        self._status.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self._play_button = QPushButton("Play Selection", self)
        self._play_button.setEnabled(False)

        footer = QHBoxLayout()
        footer.addWidget(self._status, 1)
        footer.addWidget(self._play_button)

        layout = QVBoxLayout(self)
        layout.addWidget(self._view, 1)
        layout.addLayout(footer)

        selection_model = self._view.selectionModel()
        selection_model.currentChanged.connect(self._on_current_changed)
        selection_model.selectionChanged.connect(self._on_selection_changed)
        self._view.activated.connect(self._on_activated)
        self._play_button.clicked.connect(self.play_selection)
        controller.selection.playableChanged.connect(self._play_button.setEnabled)
        controller.errorRaised.connect(self._status.setText)

    @property
    def view(self) -> QColumnView:
        return self._view

    @Slot()
    def play_selection(self) -> None:
        try:
            self._controller.open_selection()
        except NoPlayableSelectionError as exc:
            self._status.setText(str(exc))
            return
        self.close()

    @Slot(QModelIndex, QModelIndex)
    def _on_current_changed(self, current: QModelIndex, _previous: QModelIndex) -> None:
        self._status.clear()
        self._controller.on_user_navigate(current)

    @Slot(QItemSelection, QItemSelection)
    def _on_selection_changed(self, _selected: QItemSelection, _deselected: QItemSelection) -> None:
        self._controller.on_selection_changed(self._view.selectionModel().selectedIndexes())

    @Slot(QModelIndex)
    def _on_activated(self, index: QModelIndex) -> None:
        node = self._controller.model.node_from_index(index)
        if node is not None and node.is_leaf and self._controller.selection.has_playable_selection():
            self.play_selection()

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        self._controller.close()
        self.closed.emit()
        super().closeEvent(event)


__all__ = ["BrowseNetworkWindow"]
