"""Tests for :mod:`netBrowse.upnp.content_directory`."""

from __future__ import annotations

from xml.sax.saxutils import escape

import pytest
import requests

from netBrowse.config import TITLE_SORT_TOKEN
from netBrowse.errors import FetchFailedError
from netBrowse.upnp.content_directory import ContentDirectoryClient

from conftest import make_device

SERVICE = "urn:schemas-upnp-org:service:ContentDirectory:1"


def _envelope(inner: str) -> bytes:
    return (
        '<?xml version="1.0"?>'
        '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">'
        f"<s:Body>{inner}</s:Body></s:Envelope>"
    ).encode("utf-8")


def _browse_response(entries: str, returned: int, total: int) -> bytes:
    didl = (
        '<DIDL-Lite xmlns="urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/">'
        f"{entries}</DIDL-Lite>"
    )
    return _envelope(
        f'<u:BrowseResponse xmlns:u="{SERVICE}">'
        f"<Result>{escape(didl)}</Result>"
        f"<NumberReturned>{returned}</NumberReturned>"
        f"<TotalMatches>{total}</TotalMatches>"
        "<UpdateID>1</UpdateID>"
        "</u:BrowseResponse>"
    )


def _reply(mocker, content: bytes, status: int = 200):
    reply = mocker.MagicMock()
    reply.content = content
    reply.status_code = status
    reply.ok = status < 400
    return reply


def test_browse_sends_soap_request_and_parses_listing(mocker) -> None:
    session = mocker.MagicMock()
    session.post.return_value = _reply(
        mocker,
        _browse_response(
            '<container id="1"><dc:title>Movies</dc:title></container>'
            '<item id="2"><dc:title>a.mp4</dc:title><res>http://x/2</res></item>',
            2,
            2,
        ),
    )
    device = make_device("ServerX")
    client = ContentDirectoryClient(session)

    descriptors = client.browse(device, "0", TITLE_SORT_TOKEN)

    assert [entry.title for entry in descriptors] == ["Movies", "a.mp4"]
    assert descriptors[1].locator == "http://x/2"
    args, kwargs = session.post.call_args
    assert args[0] == device.content_directory.control_url
    assert kwargs["headers"]["SOAPACTION"] == f'"{SERVICE}#Browse"'
    body = kwargs["data"].decode("utf-8")
    assert "<ObjectID>0</ObjectID>" in body
    assert "<BrowseFlag>BrowseDirectChildren</BrowseFlag>" in body
    assert "<SortCriteria>+dc:title</SortCriteria>" in body


def test_browse_continues_when_server_caps_the_page(mocker) -> None:
    session = mocker.MagicMock()
    session.post.side_effect = [
        _reply(mocker, _browse_response('<container id="1"><dc:title>A</dc:title></container>', 1, 2)),
        _reply(mocker, _browse_response('<container id="2"><dc:title>B</dc:title></container>', 1, 2)),
    ]
    client = ContentDirectoryClient(session)

    descriptors = client.browse(make_device("ServerX"), "7", "")

    assert [entry.id for entry in descriptors] == ["1", "2"]
    assert session.post.call_count == 2
    second_body = session.post.call_args_list[1].kwargs["data"].decode("utf-8")
    assert "<StartingIndex>1</StartingIndex>" in second_body


@pytest.mark.parametrize(
    ("caps", "expected"),
    [
        ("dc:title,upnp:class", True),
        ("dc:date, dc:title", True),
        ("*", True),
        ("upnp:class", False),
        ("", False),
    ],
)
def test_supports_title_sort_reads_sort_capabilities(mocker, caps: str, expected: bool) -> None:
    session = mocker.MagicMock()
    session.post.return_value = _reply(
        mocker,
        _envelope(
            f'<u:GetSortCapabilitiesResponse xmlns:u="{SERVICE}">'
            f"<SortCaps>{caps}</SortCaps></u:GetSortCapabilitiesResponse>"
        ),
    )
    client = ContentDirectoryClient(session)

    assert client.supports_title_sort(make_device("ServerX")) is expected


def test_supports_title_sort_is_false_when_the_query_fails(mocker) -> None:
    session = mocker.MagicMock()
    session.post.side_effect = requests.ConnectionError("refused")
    client = ContentDirectoryClient(session)

    assert client.supports_title_sort(make_device("ServerX")) is False


def test_soap_fault_raises_fetch_failed(mocker) -> None:
    fault = _envelope(
        "<s:Fault><faultcode>s:Client</faultcode><faultstring>UPnPError</faultstring>"
        '<detail><UPnPError xmlns="urn:schemas-upnp-org:control-1-0">'
        "<errorCode>701</errorCode><errorDescription>No such object</errorDescription>"
        "</UPnPError></detail></s:Fault>"
    )
    session = mocker.MagicMock()
    session.post.return_value = _reply(mocker, fault, status=500)
    client = ContentDirectoryClient(session)

    with pytest.raises(FetchFailedError, match="701"):
        client.browse(make_device("ServerX"), "missing", "")


def test_transport_errors_raise_fetch_failed(mocker) -> None:
    session = mocker.MagicMock()
    session.post.side_effect = requests.Timeout("too slow")
    client = ContentDirectoryClient(session)

    with pytest.raises(FetchFailedError, match="too slow"):
        client.browse(make_device("ServerX"), "0", "")


def test_http_error_without_soap_body_raises_fetch_failed(mocker) -> None:
    session = mocker.MagicMock()
    session.post.return_value = _reply(mocker, b"Not Found", status=404)
    client = ContentDirectoryClient(session)

    with pytest.raises(FetchFailedError, match="HTTP 404"):
        client.browse(make_device("ServerX"), "0", "")


def test_device_without_content_directory_cannot_be_browsed(mocker) -> None:
    session = mocker.MagicMock()
    client = ContentDirectoryClient(session)

    with pytest.raises(FetchFailedError):
        client.browse(make_device("Renderer", browsable=False), "0", "")
    session.post.assert_not_called()
