"""Potting machine batch coordination service."""

__version__ = "0.1.0"
