"""FitBot AI - personal fitness coaching client."""

__version__ = "1.0.0"
