"""
FastAPI dependency injection for the rate-limit fallback service.

Provides singleton instances of the resources that must outlive a request:
the host session client and the event dispatcher (which owns the per-session
retry state).
"""

from functools import lru_cache
from typing import Optional

from rate_limit_fallback.client.base_client import BaseSessionClient
from rate_limit_fallback.client.http_client import HostSessionClient
from rate_limit_fallback.config import FallbackConfig, Settings, load_config, settings
from rate_limit_fallback.fallback.dispatcher import EventDispatcher
from rate_limit_fallback.plugin import create_plugin


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def get_fallback_config() -> FallbackConfig:
    """
    Get the plugin config, loaded once per process.

    Returns:
        FallbackConfig (defaults when the file is missing or invalid)
    """
    return load_config(get_settings().FALLBACK_CONFIG_PATH)


@lru_cache()
def get_session_client() -> BaseSessionClient:
    """
    Get singleton host session client with connection pooling.

    Returns:
        HostSessionClient instance
    """
    current = get_settings()
    return HostSessionClient(
        base_url=current.HOST_BASE_URL,
        timeout=current.HOST_TIMEOUT,
        max_retries=current.HOST_MAX_RETRIES,
        directory=current.HOST_DIRECTORY,
    )


@lru_cache()
def get_event_dispatcher() -> Optional[EventDispatcher]:
    """
    Get the singleton event dispatcher.

    Cached because it owns the session state store; a new dispatcher per
    request would forget every cooldown.

    Returns:
        EventDispatcher, or None when the plugin is disabled
    """
    return create_plugin(
        client=get_session_client(),
        config=get_fallback_config(),
        settings=get_settings(),
    )
