"""Widgets, models and controllers of the browse window."""
