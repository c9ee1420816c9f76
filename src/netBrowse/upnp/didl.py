"""Parse DIDL-Lite documents returned by ContentDirectory ``Browse`` calls."""

from __future__ import annotations

import html
import logging
from typing import List, Optional
import xml.etree.ElementTree as ET

from ..errors import FetchFailedError, MalformedDescriptorError
from ..models.types import Descriptor

_LOGGER = logging.getLogger(__name__)

DIDL_NS = "urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/"
DC_NS = "http://purl.org/dc/elements/1.1/"
UPNP_NS = "urn:schemas-upnp-org:metadata-1-0/upnp/"

_CONTAINER_TAG = "container"
_ITEM_TAG = "item"
# ``desc`` blocks carry vendor metadata next to the entries and are not listings.
_IGNORED_TAGS = frozenset({"desc"})


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, namespace: str, name: str) -> Optional[str]:
    child = element.find(f"{{{namespace}}}{name}")
    if child is None:
        return None
    return (child.text or "").strip()


def _parse_root(payload: str) -> ET.Element:
    try:
        return ET.fromstring(payload)
    except ET.ParseError as first_error:
        # Some servers escape the DIDL payload twice; undo the second layer.
        unescaped = html.unescape(payload)
        if unescaped == payload:
            raise FetchFailedError(f"Invalid DIDL-Lite payload: {first_error}") from first_error
        try:
            return ET.fromstring(unescaped)
        except ET.ParseError as exc:
            raise FetchFailedError(f"Invalid DIDL-Lite payload: {exc}") from exc


def parse_entry(element: ET.Element) -> Descriptor:
    """Convert a single ``container`` or ``item`` element into a descriptor."""

    kind = _local_name(element.tag)
    if kind not in {_CONTAINER_TAG, _ITEM_TAG}:
        raise MalformedDescriptorError(f"Unknown DIDL-Lite entry <{kind}>")
    object_id = element.get("id")
    if not object_id:
        raise MalformedDescriptorError(f"DIDL-Lite <{kind}> without an id attribute")
    title = _child_text(element, DC_NS, "title")
    if title is None:
        raise MalformedDescriptorError(f"DIDL-Lite entry {object_id!r} has no dc:title")

    locator: Optional[str] = None
    if kind == _ITEM_TAG:
        res = element.find(f"{{{DIDL_NS}}}res")
        if res is not None and res.text and res.text.strip():
            locator = res.text.strip()

    return Descriptor(
        id=object_id,
        title=title,
        is_container=kind == _CONTAINER_TAG,
        locator=locator,
        parent_id=element.get("parentID", ""),
        upnp_class=_child_text(element, UPNP_NS, "class") or "",
    )


def parse_didl(payload: str | None) -> List[Descriptor]:
    """Return the entries of *payload* in document order.

    An empty payload is an empty listing. Unparseable XML raises
    :class:`FetchFailedError`; an entry that cannot be classified or lacks a
    required field raises :class:`MalformedDescriptorError`.
    """

    if payload is None or not payload.strip():
        return []
    root = _parse_root(payload)
    if _local_name(root.tag) != "DIDL-Lite":
        raise FetchFailedError(f"Unexpected root element <{_local_name(root.tag)}> in browse result")

    descriptors: List[Descriptor] = []
    for element in root:
        if _local_name(element.tag) in _IGNORED_TAGS:
            continue
        descriptors.append(parse_entry(element))
    _LOGGER.debug("Parsed %d DIDL-Lite entries", len(descriptors))
    return descriptors


__all__ = ["DC_NS", "DIDL_NS", "UPNP_NS", "parse_didl", "parse_entry"]
