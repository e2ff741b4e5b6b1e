"""Recycling pickup request tracker."""

__version__ = "1.0.0"
