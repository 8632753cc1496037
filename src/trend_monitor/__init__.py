"""Political trends timeline tracker."""

__version__ = "1.0.0"
