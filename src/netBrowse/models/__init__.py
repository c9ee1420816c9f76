"""Value types shared by the network layer and the GUI."""

from .types import Descriptor, Device, ServiceEndpoint

__all__ = ["Descriptor", "Device", "ServiceEndpoint"]
