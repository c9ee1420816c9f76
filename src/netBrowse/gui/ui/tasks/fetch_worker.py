"""Background worker that lists one directory level of a media server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Optional, Tuple

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from ....config import FETCH_POOL_MAX_THREADS, TITLE_SORT_TOKEN, UNSORTED
from ....errors import NetBrowseError
from ....models.types import Descriptor, Device
from ....upnp.content_directory import DirectoryFetchClient

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FetchRequest:
    """Everything a worker needs to issue one browse call."""

    request_id: int
    device: Device
    object_id: str
    sort_spec: Optional[str] = None
    """Sort criteria to send, or ``None`` to ask the device first."""


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Immutable outcome of a successful browse call."""

    descriptors: Tuple[Descriptor, ...]
    sort_spec: str


class FetchSignals(QObject):
    """Signals emitted by :class:`FetchWorker`."""

    finished = Signal(int, object)
    """Emitted with the request id and a :class:`FetchResult`."""

    error = Signal(int, str)
    """Emitted with the request id and a readable failure reason."""


class FetchWorker(QRunnable):
    """Run a :class:`FetchRequest` against a directory fetch client."""

    def __init__(
        self,
        client: DirectoryFetchClient,
        request: FetchRequest,
        signals: FetchSignals,
    ) -> None:
        super().__init__()
        self.setAutoDelete(False)
        self._client = client
        self._request = request
        self.signals = signals

    @property
    def request(self) -> FetchRequest:
        return self._request

    def run(self) -> None:  # type: ignore[override]
        request = self._request
        try:
            sort_spec = request.sort_spec
            if sort_spec is None:
                supported = self._client.supports_title_sort(request.device)
                sort_spec = TITLE_SORT_TOKEN if supported else UNSORTED
            descriptors = tuple(
                self._client.browse(request.device, request.object_id, sort_spec)
            )
        except NetBrowseError as exc:
            self._emit_error(str(exc))
            return
        except Exception as exc:  # pragma: no cover - unexpected client failure
            _LOGGER.exception("Browse of %s crashed", request.object_id)
            self._emit_error(f"Unexpected error: {exc}")
            return
        try:
            self.signals.finished.emit(request.request_id, FetchResult(descriptors, sort_spec))
        except RuntimeError:  # pragma: no cover - race with QObject deletion
            pass

    def _emit_error(self, message: str) -> None:
        try:
            self.signals.error.emit(self._request.request_id, message)
        except RuntimeError:  # pragma: no cover - race with QObject deletion
            pass


_fetch_pool: QThreadPool | None = None
_pool_lock = Lock()


def fetch_pool() -> QThreadPool:
    """Return the shared thread pool used for browse requests."""

    global _fetch_pool
    with _pool_lock:
        if _fetch_pool is None:
            pool = QThreadPool()
            pool.setMaxThreadCount(FETCH_POOL_MAX_THREADS)
            _fetch_pool = pool
    assert _fetch_pool is not None
    return _fetch_pool


__all__ = ["FetchRequest", "FetchResult", "FetchSignals", "FetchWorker", "fetch_pool"]
