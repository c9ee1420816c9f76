"""Background worker that loads UPnP device descriptions."""

from __future__ import annotations

from typing import Iterable, List

from PySide6.QtCore import QObject, QRunnable, Signal

from ....errors import DeviceDescriptionError
from ....upnp.description import load_device


class DescriptionSignals(QObject):
    """Signals emitted by :class:`DescriptionWorker`."""

    loaded = Signal(object)
    """Emitted with each :class:`~netBrowse.models.types.Device` that loaded."""

    error = Signal(str, str)
    """Emitted with the description URL and the failure reason."""

    finished = Signal()


class DescriptionWorker(QRunnable):
    """Fetch the device description behind every location URL."""

    def __init__(self, locations: Iterable[str], signals: DescriptionSignals) -> None:
        super().__init__()
        self.setAutoDelete(False)
        self._locations: List[str] = list(locations)
        self.signals = signals

    def run(self) -> None:  # pragma: no cover - executed on worker thread
        try:
            for location in self._locations:
                try:
                    device = load_device(location)
                except DeviceDescriptionError as exc:
                    self.signals.error.emit(location, str(exc))
                    continue
                self.signals.loaded.emit(device)
        finally:
            self.signals.finished.emit()


__all__ = ["DescriptionSignals", "DescriptionWorker"]
