"""Load UPnP device description documents into :class:`Device` objects."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urljoin
import xml.etree.ElementTree as ET

import requests

from ..config import CONTENT_DIRECTORY_SERVICE_PREFIX, DESCRIPTION_TIMEOUT_SEC, USER_AGENT
from ..errors import DeviceDescriptionError
from ..models.types import Device, ServiceEndpoint

_LOGGER = logging.getLogger(__name__)

DEVICE_NS = "urn:schemas-upnp-org:device-1-0"


def _tag(name: str) -> str:
    return f"{{{DEVICE_NS}}}{name}"


def _text(element: ET.Element, name: str) -> str:
    return (element.findtext(_tag(name)) or "").strip()


def _find_content_directory(device: ET.Element, base_url: str) -> Optional[ServiceEndpoint]:
    for service in device.iter(_tag("service")):
        service_type = _text(service, "serviceType")
        if not service_type.startswith(CONTENT_DIRECTORY_SERVICE_PREFIX):
            continue
        control = _text(service, "controlURL")
        if not control:
            continue
        return ServiceEndpoint(service_type=service_type, control_url=urljoin(base_url, control))
    return None


def parse_device_description(document: bytes | str, location: str) -> Device:
    """Build a :class:`Device` from the description XML found at *location*."""

    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise DeviceDescriptionError(f"Invalid device description at {location}: {exc}") from exc

    device = root.find(_tag("device"))
    if device is None:
        raise DeviceDescriptionError(f"No <device> element in description at {location}")
    udn = _text(device, "UDN")
    if not udn:
        raise DeviceDescriptionError(f"Device description at {location} has no UDN")

    base_url = _text(root, "URLBase") or location
    return Device(
        udn=udn,
        friendly_name=_text(device, "friendlyName") or udn,
        device_type=_text(device, "deviceType"),
        location=location,
        content_directory=_find_content_directory(device, base_url),
    )


def load_device(
    location: str,
    session: Optional[requests.Session] = None,
    *,
    timeout: float = DESCRIPTION_TIMEOUT_SEC,
) -> Device:
    """Fetch and parse the device description served at *location*."""

    http = session if session is not None else requests.Session()
    try:
        reply = http.get(location, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        reply.raise_for_status()
    except requests.RequestException as exc:
        raise DeviceDescriptionError(f"Could not load device description {location}: {exc}") from exc
    device = parse_device_description(reply.content, location)
    _LOGGER.info("Loaded device %s (%s)", device.friendly_name, device.device_type)
    return device


__all__ = ["DEVICE_NS", "load_device", "parse_device_description"]
