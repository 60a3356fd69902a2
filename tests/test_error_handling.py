"""
Tests for the error handling utilities.
"""

import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snowdrift.exceptions import ConfigError, WindowDirectoryUnavailable
from snowdrift.utils.error_handling import (
    ErrorAggregator,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    determine_severity,
    get_error_aggregator,
    handle_error,
    safe_execute,
    with_error_handling,
)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def make_context(error=None, operation="op", category=ErrorCategory.WINDOWING):
    return ErrorContext(
        error=error or WindowDirectoryUnavailable("no display"),
        category=category,
        severity=ErrorSeverity.WARNING,
        operation=operation,
    )


@pytest.fixture(autouse=True)
def clean_global_aggregator():
    get_error_aggregator().clear()
    yield
    get_error_aggregator().clear()


# ===========================================================================
# Aggregator Tests
# ===========================================================================

class TestErrorAggregator:
    def test_deduplicates_within_window(self):
        clock = FakeClock()
        aggregator = ErrorAggregator(dedup_window_seconds=60, clock=clock)
        assert aggregator.add_error(make_context())
        clock.now += 30
        assert not aggregator.add_error(make_context())
        clock.now += 31
        assert aggregator.add_error(make_context())

        summary = aggregator.get_error_summary()
        assert summary['total_errors'] == 2
        assert summary['by_category'] == {'windowing': 2}

    def test_different_operations_not_deduplicated(self):
        aggregator = ErrorAggregator(clock=FakeClock())
        assert aggregator.add_error(make_context(operation="a"))
        assert aggregator.add_error(make_context(operation="b"))

    def test_bounded(self):
        aggregator = ErrorAggregator(max_errors=3, dedup_window_seconds=0, clock=FakeClock())
        for i in range(10):
            aggregator.add_error(make_context(operation=f"op{i}"))
        recent = aggregator.get_recent_errors(10)
        assert [e['operation'] for e in recent] == ["op7", "op8", "op9"]

    def test_clear(self):
        aggregator = ErrorAggregator(clock=FakeClock())
        aggregator.add_error(make_context())
        aggregator.clear()
        assert aggregator.get_error_summary()['total_errors'] == 0


class TestErrorContext:
    def test_to_dict(self):
        data = make_context().to_dict()
        assert data['error_type'] == 'WindowDirectoryUnavailable'
        assert data['category'] == 'windowing'
        assert data['severity'] == 'warning'

    def test_format_log_message(self):
        ctx = make_context()
        ctx.additional_context = {'backend': 'x11'}
        message = ctx.format_log_message()
        assert "WARNING" in message
        assert "backend: x11" in message


# ===========================================================================
# Severity Tests
# ===========================================================================

class TestDetermineSeverity:
    @pytest.mark.parametrize("error,category,expected", [
        (WindowDirectoryUnavailable("x"), ErrorCategory.UNKNOWN, ErrorSeverity.WARNING),
        (RuntimeError("x"), ErrorCategory.WINDOWING, ErrorSeverity.WARNING),
        (OSError("x"), ErrorCategory.ASSET, ErrorSeverity.WARNING),
        (ConfigError("x"), ErrorCategory.CONFIG, ErrorSeverity.ERROR),
        (FileNotFoundError("x"), ErrorCategory.UNKNOWN, ErrorSeverity.WARNING),
        (MemoryError(), ErrorCategory.SIMULATION, ErrorSeverity.CRITICAL),
        (ValueError("x"), ErrorCategory.SIMULATION, ErrorSeverity.ERROR),
    ])
    def test_severity(self, error, category, expected):
        assert determine_severity(error, category) is expected


# ===========================================================================
# handle_error / safe_execute / decorator Tests
# ===========================================================================

class TestHandleError:
    def test_logs_and_records(self, caplog):
        aggregator = ErrorAggregator(clock=FakeClock())
        with caplog.at_level(logging.WARNING):
            ctx = handle_error(WindowDirectoryUnavailable("gone"), "refresh",
                               ErrorCategory.WINDOWING, aggregator=aggregator)
        assert ctx.severity is ErrorSeverity.WARNING
        assert "refresh" in caplog.text
        assert aggregator.get_error_summary()['total_errors'] == 1

    def test_duplicate_logged_at_debug(self, caplog):
        aggregator = ErrorAggregator(clock=FakeClock())
        handle_error(ValueError("a"), "op", aggregator=aggregator)
        caplog.clear()
        with caplog.at_level(logging.WARNING):
            handle_error(ValueError("a"), "op", aggregator=aggregator)
        assert caplog.text == ""

    def test_reraise(self):
        with pytest.raises(ValueError):
            handle_error(ValueError("boom"), "op", reraise=True,
                         aggregator=ErrorAggregator(clock=FakeClock()))


class TestSafeExecute:
    def test_success(self):
        with safe_execute("ok") as result:
            result.value = 5
        assert result.success
        assert result.value == 5

    def test_failure_uses_default(self):
        with safe_execute("loading", ErrorCategory.ASSET, default_return=[]) as result:
            raise OSError("disk")
        assert not result.success
        assert result.value == []
        assert result.error.category is ErrorCategory.ASSET


class TestWithErrorHandling:
    def test_default_return(self):
        @with_error_handling(category=ErrorCategory.RENDER, default_return="fallback")
        def draw():
            raise RuntimeError("terminal too small")
        assert draw() == "fallback"
        assert get_error_aggregator().get_error_summary()['by_category'] == {'render': 1}

    def test_passthrough(self):
        @with_error_handling()
        def add(a, b):
            return a + b
        assert add(2, 3) == 5
        assert add.__name__ == "add"

    def test_reraise(self):
        @with_error_handling(reraise=True)
        def fail():
            raise KeyError("k")
        with pytest.raises(KeyError):
            fail()
