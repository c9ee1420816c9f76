"""netBrowse: browse UPnP media servers and pick playable items."""

__version__ = "0.1.0"
