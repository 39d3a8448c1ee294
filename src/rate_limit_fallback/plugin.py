"""
Plugin entry point: wires config, event log, state and recovery for the host.
"""

from typing import Callable, Optional

import structlog

from rate_limit_fallback.client.base_client import BaseSessionClient
from rate_limit_fallback.config import FallbackConfig, Settings, load_config
from rate_limit_fallback.config import settings as default_settings
from rate_limit_fallback.fallback.dispatcher import EventDispatcher
from rate_limit_fallback.fallback.orchestrator import RecoveryOrchestrator
from rate_limit_fallback.fallback.state import SessionStateStore
from rate_limit_fallback.logging_config import create_event_logger

logger = structlog.get_logger(__name__)


def create_plugin(
    client: BaseSessionClient,
    config: Optional[FallbackConfig] = None,
    settings: Optional[Settings] = None,
    store: Optional[SessionStateStore] = None,
    clock: Optional[Callable[[], float]] = None,
) -> Optional[EventDispatcher]:
    """
    Build the event handler the host calls for every lifecycle event.

    Args:
        client: Host session client used for recovery
        config: Plugin config (loaded from rate-limit-fallback.json when omitted)
        settings: Service settings (module defaults when omitted)
        store: Session state store (a fresh one when omitted)
        clock: Current time in epoch milliseconds (wall clock when omitted)

    Returns:
        EventDispatcher, or None when the config disables the plugin
    """
    settings = settings or default_settings
    if config is None:
        config = load_config(settings.FALLBACK_CONFIG_PATH)

    event_logger = create_event_logger(config.logging_enabled, settings.LOG_FILE_PATH)
    event_logger.info(
        "Plugin initialized",
        enabled=config.enabled,
        fallbackModel=[str(model) for model in config.fallback_models],
        patterns=config.patterns,
        cooldownMs=config.cooldown_ms,
    )

    if not config.enabled:
        event_logger.info("Plugin disabled via config")
        logger.info("Rate limit fallback disabled via config")
        return None

    orchestrator = RecoveryOrchestrator(
        client=client,
        config=config,
        store=store,
        event_logger=event_logger,
        abort_grace_ms=settings.ABORT_GRACE_MS,
        revert_grace_ms=settings.REVERT_GRACE_MS,
        clock=clock,
    )

    logger.info(
        "Rate limit fallback enabled",
        fallback_models=[str(model) for model in orchestrator.fallback_models],
        cooldown_ms=config.cooldown_ms,
        patterns=len(orchestrator.matcher.patterns),
    )
    return EventDispatcher(orchestrator, event_logger)
