# src/service/service_factory.py — v1
"""Factory: build a RecommendationService and its collaborators from settings."""

from __future__ import annotations

import logging

from quoterec.cache.cache_factory import create_ephemeral_cache
from quoterec.config.settings import Settings
from quoterec.service.recommendation_service import RecommendationService
from quoterec.storage.store_factory import create_quote_store

logger = logging.getLogger(__name__)


def create_recommendation_service(
    settings: Settings | None = None,
) -> RecommendationService:
    """Instantiate the configured store, ephemeral cache and service.

    The quote store is used both as pool source and persistent tier.

    Args:
        settings: Application settings. Loaded from .env if None.

    Returns:
        Ready-to-use RecommendationService.
    """
    settings = settings or Settings()
    store = create_quote_store(settings)
    ephemeral = create_ephemeral_cache(settings)
    logger.info(
        "Recommendation service: store=%s, ephemeral_cache=%s, ttl=%ds",
        settings.quote_store_backend,
        settings.ephemeral_cache_backend,
        settings.similarity_cache_ttl,
    )
    return RecommendationService(
        pool_source=store,
        ephemeral_cache=ephemeral,
        persistent_cache=store,
        settings=settings,
    )
