"""Tests for the PostHog helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from apps.core import posthog as posthog_module


def test_helpers_are_noops_without_project_key(settings):
    settings.POSTHOG_PROJECT_API_KEY = None
    posthog_module.configure_posthog(force=True)

    assert posthog_module.get_posthog_client() is None
    assert posthog_module.build_langchain_callbacks(distinct_id="u", trace_id="t") == []
    posthog_module.capture_exception(RuntimeError("ignored"), distinct_id="u")


def test_configured_client_builds_callbacks_and_captures(settings):
    settings.POSTHOG_PROJECT_API_KEY = "phc_test"
    settings.POSTHOG_HOST = "https://eu.i.posthog.com"
    client = MagicMock()

    with (
        patch("apps.core.posthog.Posthog", return_value=client) as mock_posthog,
        patch("apps.core.posthog.CallbackHandler") as mock_handler,
    ):
        posthog_module.configure_posthog(force=True)
        callbacks = posthog_module.build_langchain_callbacks(
            distinct_id="owner",
            trace_id="trace-1",
            properties={"image_count": 2},
        )
        error = RuntimeError("boom")
        posthog_module.capture_exception(error, distinct_id="owner", properties={"a": 1})

    try:
        assert mock_posthog.call_args.kwargs["host"] == "https://eu.i.posthog.com"
        assert mock_posthog.call_args.kwargs["enable_exception_autocapture"] is True
        assert callbacks == [mock_handler.return_value]
        assert mock_handler.call_args.kwargs["trace_id"] == "trace-1"
        assert mock_handler.call_args.kwargs["properties"] == {"image_count": 2}
        client.capture_exception.assert_called_once_with(
            error,
            distinct_id="owner",
            properties={"a": 1},
        )
    finally:
        settings.POSTHOG_PROJECT_API_KEY = None
        posthog_module.configure_posthog(force=True)
