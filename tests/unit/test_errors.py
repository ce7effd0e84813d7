"""Unit tests for the shared error taxonomy and degradation helper."""

import pytest

from src.utils import errors
from src.utils.errors import (
    DenylistError,
    RateLimitExceeded,
    UpstreamError,
    UpstreamPermanentError,
    UpstreamTransientError,
    is_retryable_status,
    safe_execute_sync,
)


class TestIsRetryableStatus:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 599])
    def test_transient_statuses(self, status):
        assert is_retryable_status(status) is True

    @pytest.mark.parametrize("status", [None, 400, 401, 402, 404, 600])
    def test_other_statuses(self, status):
        assert is_retryable_status(status) is False


class TestExceptionTypes:
    def test_upstream_errors_carry_status_and_source(self):
        error = UpstreamTransientError("busy", status=503, source="spoonacular")

        assert isinstance(error, UpstreamError)
        assert not isinstance(error, UpstreamPermanentError)
        assert error.status == 503
        assert error.source == "spoonacular"

    def test_denylist_error_names_field(self):
        error = DenylistError("vibe")

        assert isinstance(error, ValueError)
        assert error.field == "vibe"

    def test_rate_limit_carries_hint(self):
        assert RateLimitExceeded("Limited to 1 requests every minute per IP.").hint.startswith("Limited")


class TestSafeExecuteSync:
    """Test the log-and-return-default helper."""

    def test_returns_result(self):
        assert safe_execute_sync(lambda: 42, "Answer") == 42

    def test_failure_returns_default(self):
        def broken():
            raise ValueError("bad json")

        assert safe_execute_sync(broken, "Parse", default_return="fallback") == "fallback"

    def test_reraise(self):
        def broken():
            raise KeyError("starters")

        with pytest.raises(KeyError):
            safe_execute_sync(broken, "Parse", reraise=True)

    @pytest.mark.parametrize("level", ["debug", "warning", "error"])
    def test_logs_at_requested_level(self, level, monkeypatch):
        calls = []
        monkeypatch.setattr(errors.logger, level, lambda msg: calls.append(msg))

        def broken():
            raise RuntimeError("boom")

        safe_execute_sync(broken, "Optional step", log_level=level)
        assert calls == ["Optional step: boom"]

    def test_async_variant_not_exported(self):
        assert not hasattr(errors, "safe_execute_async")
