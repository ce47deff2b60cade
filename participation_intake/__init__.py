"""Heuristic intake of store participation CSV exports."""

__version__ = "0.1.0"
