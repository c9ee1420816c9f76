"""Registry of discovered UPnP devices shared with the browser."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from PySide6.QtCore import QObject, Signal

from ..models.types import Device

_LOGGER = logging.getLogger(__name__)


class DeviceRegistry(QObject):
    """Hold the live device list and announce every change.

    The registry is the discovery collaborator of the browser: whatever finds
    devices (description URLs on the command line, a discovery service, a
    test) feeds them in here and consumers re-read :meth:`devices` whenever
    :attr:`devicesUpdated` fires.
    """

    devicesUpdated = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._devices: Dict[str, Device] = {}

    def devices(self) -> List[Device]:
        """Return the known devices in registration order."""

        return list(self._devices.values())

    def add_device(self, device: Device) -> None:
        """Register *device*, replacing an earlier entry with the same UDN."""

        if self._devices.get(device.udn) == device:
            return
        self._devices[device.udn] = device
        _LOGGER.info("Registered %s (%s)", device.friendly_name, device.udn)
        self.devicesUpdated.emit()

    def remove_device(self, udn: str) -> bool:
        device = self._devices.pop(udn, None)
        if device is None:
            return False
        _LOGGER.info("Removed %s (%s)", device.friendly_name, udn)
        self.devicesUpdated.emit()
        return True

    def replace_devices(self, devices: Iterable[Device]) -> None:
        self._devices = {device.udn: device for device in devices}
        self.devicesUpdated.emit()

    def clear(self) -> None:
        if not self._devices:
            return
        self._devices.clear()
        self.devicesUpdated.emit()


__all__ = ["DeviceRegistry"]
