"""PostHog configuration helpers shared by the analysis and assistant flows."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Optional

from django.conf import settings
from posthog import Posthog
from posthog.ai.langchain import CallbackHandler

logger = logging.getLogger(__name__)

_client: Optional[Posthog] = None
_configured = False
_lock = Lock()


def configure_posthog(*, force: bool = False) -> Optional[Posthog]:
    """Initialise the shared PostHog client with error autocapture."""

    global _client, _configured

    with _lock:
        if _configured and not force:
            return _client

        api_key = getattr(settings, "POSTHOG_PROJECT_API_KEY", None)
        if not api_key:
            _client = None
            _configured = True
            return None

        client = Posthog(
            api_key,
            host=getattr(settings, "POSTHOG_HOST", "https://us.i.posthog.com"),
            enable_exception_autocapture=True,
        )
        if getattr(settings, "POSTHOG_DEBUG", False):
            client.debug = True
        if getattr(settings, "POSTHOG_DISABLED", False):
            client.disabled = True

        logger.info("PostHog client configured for %s", client.host)
        _client = client
        _configured = True
        return _client


def get_posthog_client() -> Optional[Posthog]:
    """Return the shared PostHog client if configured."""

    return configure_posthog()


def capture_exception(
    exc: BaseException,
    *,
    distinct_id: str | None,
    properties: dict[str, Any] | None = None,
) -> None:
    client = get_posthog_client()
    if client is None:
        return
    client.capture_exception(exc, distinct_id=distinct_id, properties=properties)


def build_langchain_callbacks(
    *,
    distinct_id: str,
    trace_id: str,
    properties: dict[str, Any] | None = None,
) -> list[CallbackHandler]:
    """LLM tracing callbacks for a single pipeline run; empty when PostHog is off."""

    client = get_posthog_client()
    if client is None:
        return []

    return [
        CallbackHandler(
            client=client,
            distinct_id=distinct_id,
            trace_id=trace_id,
            properties=dict(properties or {}),
        )
    ]


__all__ = [
    "build_langchain_callbacks",
    "capture_exception",
    "configure_posthog",
    "get_posthog_client",
]
