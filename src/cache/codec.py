# src/cache/codec.py — v2
"""Serialization of cache entries for the ephemeral tier.

JSON via pydantic: timestamps travel as ISO-8601 strings and come back as
datetimes, tags as ordered arrays, and scores use the shortest repr that
round-trips the same IEEE-754 double.
"""

from __future__ import annotations

from quoterec.cache.models import SimilarityCacheEntry
from quoterec.core.models import Quote


def encode_entry(entry: SimilarityCacheEntry) -> bytes:
    return entry.model_dump_json().encode("utf-8")


def decode_entry(payload: bytes | str) -> SimilarityCacheEntry:
    """Parse a stored entry.

    Raises:
        pydantic.ValidationError: If the payload is malformed.
    """
    return SimilarityCacheEntry.model_validate_json(payload)


def encode_quote(quote: Quote) -> bytes:
    return quote.model_dump_json().encode("utf-8")


def decode_quote(payload: bytes | str) -> Quote:
    return Quote.model_validate_json(payload)
