# src/storage/__init__.py — v1
"""Quote persistence: pool source and durable similarity tier."""
