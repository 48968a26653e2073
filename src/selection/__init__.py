# src/selection/__init__.py — v1
"""Popularity-weighted and uniform random quote selection."""
