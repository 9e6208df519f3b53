"""Orchestrator package - coordinates catalog synchronization."""
from .core import CatalogSynchronizer

__all__ = ["CatalogSynchronizer"]
