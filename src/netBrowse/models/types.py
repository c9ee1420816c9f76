"""Typed value objects describing media servers and their listings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import MEDIA_SERVER_DEVICE_TYPE


@dataclass(slots=True, frozen=True)
class ServiceEndpoint:
    """Control endpoint of a UPnP service advertised by a device."""

    service_type: str
    control_url: str


@dataclass(slots=True, frozen=True)
class Device:
    """A discovered UPnP root device."""

    udn: str
    """Unique device name, used as the identity key."""

    friendly_name: str
    device_type: str
    location: str = ""
    content_directory: Optional[ServiceEndpoint] = None

    @property
    def supports_browse(self) -> bool:
        """Return ``True`` when the device advertises a ContentDirectory service."""

        return self.content_directory is not None

    def is_media_server(self) -> bool:
        return self.device_type == MEDIA_SERVER_DEVICE_TYPE


@dataclass(slots=True, frozen=True)
class Descriptor:
    """One entry of a directory listing before it becomes a tree node."""

    id: str
    title: str
    is_container: bool
    locator: Optional[str] = None
    """Playable URI of an item; always ``None`` for containers."""

    parent_id: str = ""
    upnp_class: str = ""


__all__ = ["Descriptor", "Device", "ServiceEndpoint"]
