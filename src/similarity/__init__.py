# src/similarity/__init__.py — v1
"""Lexical similarity scoring: tokenizer, edit distance, blended scorer."""
