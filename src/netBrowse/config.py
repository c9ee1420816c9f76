"""Default configuration values for netBrowse."""

from __future__ import annotations

from typing import Final

MEDIA_SERVER_DEVICE_TYPE: Final[str] = "urn:schemas-upnp-org:device:MediaServer:1"
CONTENT_DIRECTORY_SERVICE_PREFIX: Final[str] = "urn:schemas-upnp-org:service:ContentDirectory:"

# ---------------------------------------------------------------------------
# Browse request parameters
# ---------------------------------------------------------------------------

ROOT_OBJECT_ID: Final[str] = "0"
BROWSE_FLAG: Final[str] = "BrowseDirectChildren"
BROWSE_FILTER: Final[str] = "*"
# ``0`` asks the server for every child in a single response.
BROWSE_REQUESTED_COUNT: Final[int] = 0

TITLE_SORT_CAPABILITY: Final[str] = "dc:title"
TITLE_SORT_TOKEN: Final[str] = "+dc:title"
UNSORTED: Final[str] = ""

# ---------------------------------------------------------------------------
# Network behaviour
# ---------------------------------------------------------------------------

SOAP_TIMEOUT_SEC: Final[float] = 10.0
DESCRIPTION_TIMEOUT_SEC: Final[float] = 5.0
USER_AGENT: Final[str] = "netBrowse/0.1 UPnP/1.0"

FETCH_POOL_MAX_THREADS: Final[int] = 4

# ---------------------------------------------------------------------------
# UI constants
# ---------------------------------------------------------------------------

WINDOW_DEFAULT_SIZE: Final[tuple[int, int]] = (760, 420)
LOADING_PLACEHOLDER: Final[str] = "Loading…"
