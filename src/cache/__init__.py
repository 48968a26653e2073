# src/cache/__init__.py — v1
"""Two-tier similarity cache: ephemeral stores, codec and the tier policy."""
