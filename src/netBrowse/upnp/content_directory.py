"""SOAP client for the UPnP ContentDirectory service."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, Tuple
from xml.sax.saxutils import escape
import xml.etree.ElementTree as ET

import requests

from ..config import (
    BROWSE_FILTER,
    BROWSE_FLAG,
    BROWSE_REQUESTED_COUNT,
    SOAP_TIMEOUT_SEC,
    TITLE_SORT_CAPABILITY,
    USER_AGENT,
)
from ..errors import FetchFailedError
from ..models.types import Descriptor, Device, ServiceEndpoint
from .didl import parse_didl

_LOGGER = logging.getLogger(__name__)

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_ENCODING = "http://schemas.xmlsoap.org/soap/encoding/"
UPNP_CONTROL_NS = "urn:schemas-upnp-org:control-1-0"


class DirectoryFetchClient(Protocol):
    """Operations the browser needs from a directory-listing backend."""

    def browse(self, device: Device, container_id: str, sort_spec: str) -> List[Descriptor]: ...

    def supports_title_sort(self, device: Device) -> bool: ...


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _build_envelope(service_type: str, action: str, arguments: Sequence[Tuple[str, str]]) -> str:
    args = "".join(f"<{name}>{escape(value)}</{name}>" for name, value in arguments)
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<s:Envelope xmlns:s="{SOAP_ENV_NS}" s:encodingStyle="{SOAP_ENCODING}">'
        "<s:Body>"
        f'<u:{action} xmlns:u="{escape(service_type)}">{args}</u:{action}>'
        "</s:Body>"
        "</s:Envelope>"
    )


def _fault_message(root: ET.Element) -> Optional[str]:
    """Return a readable description of a SOAP fault carried by *root*."""

    fault = root.find(f".//{{{SOAP_ENV_NS}}}Fault")
    if fault is None:
        return None
    code = fault.findtext(f".//{{{UPNP_CONTROL_NS}}}errorCode")
    description = fault.findtext(f".//{{{UPNP_CONTROL_NS}}}errorDescription")
    if code or description:
        return f"UPnP error {(code or '?').strip()}: {(description or '').strip()}".rstrip(": ")
    return (fault.findtext("faultstring") or "SOAP fault").strip()


class ContentDirectoryClient:
    """Issue ``Browse`` and ``GetSortCapabilities`` requests over HTTP."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = SOAP_TIMEOUT_SEC,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    # ------------------------------------------------------------------
    # DirectoryFetchClient API
    # ------------------------------------------------------------------
    def browse(self, device: Device, container_id: str, sort_spec: str) -> List[Descriptor]:
        """Return the direct children of *container_id* on *device*.

        Servers may cap the number of entries per response even when every
        child was requested, so the listing is continued from the last
        returned index until ``TotalMatches`` entries have been collected.
        """

        descriptors: List[Descriptor] = []
        start = 0
        while True:
            response = self._invoke(
                device,
                "Browse",
                [
                    ("ObjectID", container_id),
                    ("BrowseFlag", BROWSE_FLAG),
                    ("Filter", BROWSE_FILTER),
                    ("StartingIndex", str(start)),
                    ("RequestedCount", str(BROWSE_REQUESTED_COUNT)),
                    ("SortCriteria", sort_spec),
                ],
            )
            page = parse_didl(response.findtext("Result"))
            descriptors.extend(page)
            returned = _as_int(response.findtext("NumberReturned"), len(page))
            total = _as_int(response.findtext("TotalMatches"), 0)
            if returned <= 0 or not page or len(descriptors) >= total:
                break
            start += returned
        _LOGGER.debug(
            "Browse %s on %s returned %d entries",
            container_id,
            device.friendly_name,
            len(descriptors),
        )
        return descriptors

    def supports_title_sort(self, device: Device) -> bool:
        """Return ``True`` when *device* can sort listings by title."""

        try:
            capabilities = self.get_sort_capabilities(device)
        except FetchFailedError as exc:
            _LOGGER.info("Sort capability query failed for %s: %s", device.friendly_name, exc)
            return False
        tokens = {token.strip() for token in capabilities.split(",")}
        return "*" in tokens or TITLE_SORT_CAPABILITY in tokens

    # ------------------------------------------------------------------
    # Additional actions
    # ------------------------------------------------------------------
    def get_sort_capabilities(self, device: Device) -> str:
        response = self._invoke(device, "GetSortCapabilities", [])
        return (response.findtext("SortCaps") or "").strip()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _invoke(
        self,
        device: Device,
        action: str,
        arguments: Sequence[Tuple[str, str]],
    ) -> ET.Element:
        endpoint = self._require_endpoint(device)
        body = _build_envelope(endpoint.service_type, action, arguments)
        headers = {
            "Content-Type": 'text/xml; charset="utf-8"',
            "SOAPACTION": f'"{endpoint.service_type}#{action}"',
            "User-Agent": USER_AGENT,
        }
        try:
            reply = self._session.post(
                endpoint.control_url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise FetchFailedError(f"{action} request to {endpoint.control_url} failed: {exc}") from exc

        try:
            root = ET.fromstring(reply.content)
        except ET.ParseError as exc:
            if not reply.ok:
                raise FetchFailedError(
                    f"{action} request to {endpoint.control_url} returned HTTP {reply.status_code}"
                ) from exc
            raise FetchFailedError(f"Invalid SOAP response for {action}: {exc}") from exc

        fault = _fault_message(root)
        if fault is not None:
            raise FetchFailedError(f"{action} failed: {fault}")
        if not reply.ok:
            raise FetchFailedError(
                f"{action} request to {endpoint.control_url} returned HTTP {reply.status_code}"
            )

        body_element = root.find(f"{{{SOAP_ENV_NS}}}Body")
        if body_element is not None:
            for child in body_element:
                if _local_name(child.tag) == f"{action}Response":
                    return child
        raise FetchFailedError(f"SOAP response did not contain {action}Response")

    @staticmethod
    def _require_endpoint(device: Device) -> ServiceEndpoint:
        if device.content_directory is None:
            raise FetchFailedError(f"{device.friendly_name} does not offer a ContentDirectory service")
        return device.content_directory


def _as_int(value: Optional[str], default: int) -> int:
    try:
        return int((value or "").strip())
    except ValueError:
        return default


__all__ = ["ContentDirectoryClient", "DirectoryFetchClient"]
