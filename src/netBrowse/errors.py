"""Custom exception hierarchy for netBrowse."""

from __future__ import annotations


class NetBrowseError(Exception):
    """Base class for all custom errors raised by netBrowse."""


class FetchFailedError(NetBrowseError):
    """Raised when a browse request fails on the wire or cannot be decoded."""


class MalformedDescriptorError(NetBrowseError):
    """Raised when a listing entry lacks required fields or has no known type."""


class DeviceDescriptionError(NetBrowseError):
    """Raised when a device description document cannot be used."""


class NoPlayableSelectionError(NetBrowseError):
    """Raised when opening a selection that contains no playable items."""
