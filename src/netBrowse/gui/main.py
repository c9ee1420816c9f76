"""GUI entry point for the netBrowse media server browser."""

from __future__ import annotations

import argparse
import sys
from typing import List, Sequence

from PySide6.QtCore import QThreadPool, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QApplication

if __package__ is None or __package__ == "":  # pragma: no cover - script mode
    from pathlib import Path

    package_root = Path(__file__).resolve().parents[2]
    if str(package_root) not in sys.path:
        sys.path.insert(0, str(package_root))
    from netBrowse.gui.ui.browse_network_window import BrowseNetworkWindow
    from netBrowse.gui.ui.controllers.browse_controller import BrowseController
    from netBrowse.gui.ui.tasks.description_worker import DescriptionSignals, DescriptionWorker
    from netBrowse.network.registry import DeviceRegistry
    from netBrowse.upnp.content_directory import ContentDirectoryClient
    from netBrowse.utils.logging import get_logger
else:  # pragma: no cover - normal package execution
    from ..network.registry import DeviceRegistry
    from ..upnp.content_directory import ContentDirectoryClient
    from ..utils.logging import get_logger
    from .ui.browse_network_window import BrowseNetworkWindow
    from .ui.controllers.browse_controller import BrowseController
    from .ui.tasks.description_worker import DescriptionSignals, DescriptionWorker

LOGGER = get_logger()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="netbrowse", description="Browse UPnP media servers.")
    parser.add_argument(
        "locations",
        nargs="*",
        metavar="URL",
        help="device description URL of a media server (the SSDP LOCATION header)",
    )
    return parser.parse_args(list(argv))


def open_locators(locators: List[str]) -> None:
    """Hand the selected item URIs to the desktop's default player."""

    for locator in locators:
        LOGGER.info("Opening %s", locator)
        QDesktopServices.openUrl(QUrl(locator))


def main(argv: list[str] | None = None) -> int:
    """Launch the browser window and return the exit code."""

    arguments = list(sys.argv if argv is None else argv)
    options = _parse_args(arguments[1:])
    app = QApplication(arguments[:1])

    registry = DeviceRegistry()
    controller = BrowseController(registry, ContentDirectoryClient())
    controller.selectionOpened.connect(open_locators)
    window = BrowseNetworkWindow(controller)

    signals = DescriptionSignals()
    signals.loaded.connect(registry.add_device)
    signals.error.connect(lambda location, message: LOGGER.warning("%s: %s", location, message))
    worker = DescriptionWorker(options.locations, signals)

    controller.start()
    window.show()
    if options.locations:
        QThreadPool.globalInstance().start(worker)
    return app.exec()


if __name__ == "__main__":  # pragma: no cover - manual launch
    raise SystemExit(main())
