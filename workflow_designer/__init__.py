"""Workflow designer engine: graph validation and mock simulation."""

__version__ = "1.0.0"
