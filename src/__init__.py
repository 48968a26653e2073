# src/__init__.py — v1
"""quoterec — quote recommendation core (similarity ranking + weighted selection)."""

from quoterec.version import __version__

__all__ = ["__version__"]
