import sys
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Allow running the suite from a checkout without installing the package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from netBrowse.config import MEDIA_SERVER_DEVICE_TYPE  # noqa: E402
from netBrowse.models.types import Descriptor, Device, ServiceEndpoint  # noqa: E402


class FakeDirectoryClient:
    """Directory fetch client answering from an in-memory listing table.

    ``listings`` maps ``(udn, object_id)`` to a list of descriptors or to an
    exception instance that ``browse`` raises.
    """

    def __init__(self) -> None:
        self.listings: Dict[Tuple[str, str], object] = {}
        self.title_sort = True
        self.browse_calls: List[Tuple[str, str, str]] = []
        self.sort_queries: List[str] = []

    def supports_title_sort(self, device: Device) -> bool:
        self.sort_queries.append(device.udn)
        return self.title_sort

    def browse(self, device: Device, container_id: str, sort_spec: str) -> List[Descriptor]:
        self.browse_calls.append((device.udn, container_id, sort_spec))
        entry = self.listings.get((device.udn, container_id), [])
        if isinstance(entry, Exception):
            raise entry
        return list(entry)  # type: ignore[arg-type]


class ManualPool:
    """Stand-in for ``QThreadPool`` that runs workers only when asked to."""

    def __init__(self) -> None:
        self.workers: list = []

    def start(self, worker) -> None:
        self.workers.append(worker)

    def run(self, position: int = -1) -> None:
        self.workers[position].run()

    def run_all(self) -> None:
        pending, self.workers = self.workers, []
        for worker in pending:
            worker.run()


def make_device(
    name: str,
    udn: str | None = None,
    *,
    browsable: bool = True,
    device_type: str = MEDIA_SERVER_DEVICE_TYPE,
) -> Device:
    endpoint = None
    if browsable:
        endpoint = ServiceEndpoint(
            service_type="urn:schemas-upnp-org:service:ContentDirectory:1",
            control_url=f"http://{name.lower()}.local:8200/ctl/ContentDir",
        )
    return Device(
        udn=udn or f"uuid:{name.lower()}",
        friendly_name=name,
        device_type=device_type,
        location=f"http://{name.lower()}.local:8200/rootDesc.xml",
        content_directory=endpoint,
    )


@pytest.fixture()
def fake_client() -> FakeDirectoryClient:
    return FakeDirectoryClient()


@pytest.fixture()
def manual_pool() -> ManualPool:
    return ManualPool()


@pytest.fixture()
def device_factory() -> Callable[..., Device]:
    return make_device
