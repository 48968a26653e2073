# src/service/__init__.py — v1
"""Recommendation service and its configuration-driven factory."""
