"""Utility helpers shared across netBrowse."""
