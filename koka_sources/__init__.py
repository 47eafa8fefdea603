"""Koka release metadata tooling."""

__version__ = "0.1.0"
