"""UPnP protocol helpers: device descriptions and ContentDirectory browsing."""

from .content_directory import ContentDirectoryClient, DirectoryFetchClient
from .description import load_device, parse_device_description
from .didl import parse_didl

__all__ = [
    "ContentDirectoryClient",
    "DirectoryFetchClient",
    "load_device",
    "parse_device_description",
    "parse_didl",
]
