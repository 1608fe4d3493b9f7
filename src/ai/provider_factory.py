"""
Factory for creating backends and graders from settings.

The owning process builds these once and passes them to request-scoped
callers; nothing here is cached at module level.
"""

import json
from typing import Optional

from ai.backend import GeminiBackend
from ai.multipass_grader import MultipassGrader
from ai.pool import BackendFactory, BackendPool
from config.constants import GATEWAY_METADATA_HEADER, SERVICE_NAME
from config.logging_config import get_logger
from config.settings import Settings, get_settings
from core.exceptions import MissingAPIKeyError
from core.models import BackendConfig
from utils.retry import RetryConfig

logger = get_logger(__name__)


def retry_config_from_settings(settings: Settings) -> RetryConfig:
    return RetryConfig(
        retries=settings.retries,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay
    )


def create_backend_pool(
    settings: Optional[Settings] = None,
    backend_factory: BackendFactory = GeminiBackend
) -> BackendPool:
    """
    Build a pool with one handle per configured API key.

    Args:
        settings: Settings (default: from environment)
        backend_factory: Builds a handle from a BackendConfig

    Returns:
        BackendPool (possibly empty)
    """
    settings = settings or get_settings()
    pool = BackendPool(backend_factory)

    for api_key in settings.api_keys:
        pool.add(BackendConfig(api_key=api_key, base_url=settings.gemini_api_base_url))

    logger.info(f"Backend pool ready with {pool.size} key(s)")
    return pool


def create_byok_backend(
    api_key: str,
    settings: Optional[Settings] = None,
    backend_factory: BackendFactory = GeminiBackend
):
    """
    Build a single handle for a caller-supplied API key.

    Args:
        api_key: The caller's own API key
        settings: Settings (default: from environment)
        backend_factory: Builds a handle from a BackendConfig

    Returns:
        Backend handle
    """
    settings = settings or get_settings()
    metadata = json.dumps({"service": SERVICE_NAME, "byok": True})
    return backend_factory(BackendConfig(
        api_key=api_key,
        base_url=settings.gemini_api_base_url,
        headers={GATEWAY_METADATA_HEADER: metadata}
    ))


def create_grader(
    api_key: Optional[str] = None,
    settings: Optional[Settings] = None,
    pool: Optional[BackendPool] = None,
    backend_factory: BackendFactory = GeminiBackend
) -> MultipassGrader:
    """
    Create a grader for one caller.

    Uses the caller's own key when given, else the server pool.

    Args:
        api_key: Caller-supplied API key (BYOK mode)
        settings: Settings (default: from environment)
        pool: Server pool (default: built from settings)
        backend_factory: Builds a handle from a BackendConfig

    Returns:
        MultipassGrader

    Raises:
        MissingAPIKeyError: If no key is supplied and the pool is empty
    """
    settings = settings or get_settings()

    if api_key:
        backend = create_byok_backend(api_key, settings, backend_factory)
    else:
        backend = pool if pool is not None else create_backend_pool(settings, backend_factory)
        if backend.size == 0:
            raise MissingAPIKeyError(
                "No API key configured on server. "
                "Set AI_GRADER_GEMINI_API_KEY or supply your own API key."
            )

    return MultipassGrader(
        backend,
        retry_config=retry_config_from_settings(settings),
        warmup_delay=settings.warmup_delay
    )
