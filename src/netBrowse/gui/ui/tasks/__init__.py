"""Background worker helpers for GUI tasks."""

from .description_worker import DescriptionSignals, DescriptionWorker
from .fetch_worker import FetchRequest, FetchResult, FetchSignals, FetchWorker, fetch_pool

__all__ = [
    "DescriptionSignals",
    "DescriptionWorker",
    "FetchRequest",
    "FetchResult",
    "FetchSignals",
    "FetchWorker",
    "fetch_pool",
]
