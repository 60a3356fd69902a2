"""
Error Handling Utilities for snowdrift

Provides consistent error reporting for the parts of the program that talk
to the outside world (window directory backends, configuration files,
sprite assets, the terminal renderer):
1. Detailed error logging with context
2. Error categorization and severity levels
3. Deduplication so a failing backend polled at 2 Hz does not flood the log
4. Error aggregation and reporting

The simulation core itself never raises for in-domain input; these helpers
exist so collaborator failures degrade visuals instead of crashing.

USAGE:
    from snowdrift.utils.error_handling import (
        handle_error,
        ErrorCategory,
        safe_execute,
        with_error_handling,
    )

    @with_error_handling(category=ErrorCategory.ASSET, default_return=None)
    def load_frames():
        ...

    with safe_execute("reading settings", ErrorCategory.CONFIG) as result:
        result.value = load_settings(path)
"""

import functools
import logging
import threading
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..exceptions import ConfigError, WindowDirectoryUnavailable

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ErrorCategory(Enum):
    """Categories of errors for proper handling and reporting."""
    # Window directory backend could not supply geometry
    WINDOWING = "windowing"

    # Settings file problems
    CONFIG = "configuration"

    # Terminal/screen drawing problems
    RENDER = "render"

    # Sprite files missing or malformed
    ASSET = "asset"

    # Unexpected failure inside a simulation tick
    SIMULATION = "simulation"

    # Unknown/uncategorized
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    # Informational - operation can continue
    INFO = "info"

    # Warning - degraded but fully functional
    WARNING = "warning"

    # Error - operation failed but program stable
    ERROR = "error"

    # Critical - program cannot continue meaningfully
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Detailed context information for an error."""
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)
    stack_trace: str = ""
    additional_context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.stack_trace:
            self.stack_trace = traceback.format_exc()

    @property
    def key(self) -> str:
        """Deduplication key."""
        return f"{self.category.value}:{type(self.error).__name__}:{self.operation}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'error_type': type(self.error).__name__,
            'error_message': str(self.error),
            'category': self.category.value,
            'severity': self.severity.value,
            'operation': self.operation,
            'timestamp': self.timestamp,
            'thread_name': self.thread_name,
            'stack_trace': self.stack_trace,
            'additional_context': self.additional_context,
        }

    def format_log_message(self) -> str:
        """Format a detailed log message."""
        lines = [
            f"ERROR [{self.severity.value.upper()}] in {self.operation}",
            f"  Category: {self.category.value}",
            f"  Type: {type(self.error).__name__}",
            f"  Message: {self.error}",
            f"  Thread: {self.thread_name}",
        ]

        if self.additional_context:
            lines.append("  Context:")
            for key, value in self.additional_context.items():
                lines.append(f"    {key}: {value}")

        trace = self.stack_trace.strip()
        if trace and trace != 'NoneType: None':
            lines.append("  Stack Trace:")
            for line in trace.split('\n'):
                if line.strip():
                    lines.append(f"    {line}")

        return '\n'.join(lines)


class ErrorAggregator:
    """
    Aggregates and tracks errors for reporting.

    Thread-safe error collection with deduplication: the same error from
    the same operation is recorded once per dedup window and counted
    afterwards.
    """

    def __init__(self, max_errors: int = 200, dedup_window_seconds: float = 60.0,
                 clock: Callable[[], float] = time.monotonic):
        self._errors: List[ErrorContext] = []
        self._lock = threading.Lock()
        self._max_errors = max_errors
        self._dedup_window = dedup_window_seconds
        self._clock = clock
        self._error_counts: Dict[str, int] = {}
        self._last_error_times: Dict[str, float] = {}

    def add_error(self, context: ErrorContext) -> bool:
        """
        Add an error to the aggregator.

        Returns True if error was added, False if deduplicated.
        """
        error_key = context.key
        current_time = self._clock()

        with self._lock:
            last_time = self._last_error_times.get(error_key)
            if last_time is not None and current_time - last_time < self._dedup_window:
                self._error_counts[error_key] = self._error_counts.get(error_key, 0) + 1
                return False

            self._errors.append(context)
            self._last_error_times[error_key] = current_time
            self._error_counts[error_key] = 1

            if len(self._errors) > self._max_errors:
                self._errors = self._errors[-self._max_errors:]

            return True

    def get_error_summary(self) -> Dict[str, Any]:
        """Get a summary of aggregated errors."""
        with self._lock:
            by_category: Dict[str, int] = {}
            by_severity: Dict[str, int] = {}

            for ctx in self._errors:
                cat = ctx.category.value
                sev = ctx.severity.value
                by_category[cat] = by_category.get(cat, 0) + 1
                by_severity[sev] = by_severity.get(sev, 0) + 1

            return {
                'total_errors': len(self._errors),
                'by_category': by_category,
                'by_severity': by_severity,
                'deduplicated_counts': dict(self._error_counts),
            }

    def get_recent_errors(self, count: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent errors."""
        with self._lock:
            return [e.to_dict() for e in self._errors[-count:]]

    def clear(self):
        """Clear all aggregated errors."""
        with self._lock:
            self._errors.clear()
            self._error_counts.clear()
            self._last_error_times.clear()


# Global error aggregator
_global_aggregator = ErrorAggregator()


def get_error_aggregator() -> ErrorAggregator:
    """Get the global error aggregator instance."""
    return _global_aggregator


def determine_severity(error: Exception, category: ErrorCategory) -> ErrorSeverity:
    """
    Determine the severity level for an error based on type and category.
    """
    # A missing window directory only disables settling
    if isinstance(error, WindowDirectoryUnavailable) or category == ErrorCategory.WINDOWING:
        return ErrorSeverity.WARNING

    # Missing sprites only disable the sleigh
    if category == ErrorCategory.ASSET:
        return ErrorSeverity.WARNING

    if isinstance(error, ConfigError):
        return ErrorSeverity.ERROR

    if isinstance(error, FileNotFoundError):
        return ErrorSeverity.WARNING

    if isinstance(error, MemoryError):
        return ErrorSeverity.CRITICAL

    return ErrorSeverity.ERROR


def handle_error(
    error: Exception,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    severity: Optional[ErrorSeverity] = None,
    additional_context: Optional[Dict[str, Any]] = None,
    reraise: bool = False,
    aggregator: Optional[ErrorAggregator] = None,
) -> ErrorContext:
    """
    Handle an error with logging and tracking.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error
        severity: Severity level (auto-determined if not provided)
        additional_context: Additional context information
        reraise: Whether to re-raise the exception after handling
        aggregator: Aggregator to record into (defaults to the global one)

    Returns:
        ErrorContext with full error details
    """
    if severity is None:
        severity = determine_severity(error, category)

    context = ErrorContext(
        error=error,
        category=category,
        severity=severity,
        operation=operation,
        additional_context=additional_context or {},
    )

    was_added = (aggregator or _global_aggregator).add_error(context)

    log_level = {
        ErrorSeverity.INFO: logging.INFO,
        ErrorSeverity.WARNING: logging.WARNING,
        ErrorSeverity.ERROR: logging.ERROR,
        ErrorSeverity.CRITICAL: logging.CRITICAL,
    }.get(severity, logging.ERROR)

    if was_added:
        logger.log(log_level, context.format_log_message())
    else:
        logger.debug(f"[DEDUPLICATED] {operation}: {type(error).__name__}: {error}")

    if reraise:
        raise error

    return context


@contextmanager
def safe_execute(
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    default_return: Any = None,
    reraise: bool = False,
    additional_context: Optional[Dict[str, Any]] = None,
):
    """
    Context manager for safe execution with error handling.

    Usage:
        with safe_execute("loading settings", ErrorCategory.CONFIG) as result:
            result.value = load_settings(path)
    """
    class Result:
        def __init__(self):
            self.value = default_return
            self.error: Optional[ErrorContext] = None
            self.success = True

    result = Result()

    try:
        yield result
    except Exception as e:
        result.success = False
        result.error = handle_error(
            e,
            operation,
            category=category,
            additional_context=additional_context,
            reraise=reraise,
        )
        result.value = default_return


def with_error_handling(
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    operation: Optional[str] = None,
    default_return: Any = None,
    reraise: bool = False,
    log_args: bool = False,
):
    """
    Decorator for functions with automatic error handling.

    Args:
        category: Error category for this function
        operation: Operation name (defaults to function name)
        default_return: Value to return on error
        reraise: Whether to re-raise exceptions
        log_args: Whether to log function arguments on error
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                additional_context = {}
                if log_args:
                    additional_context['args'] = repr(args)[:500]
                    additional_context['kwargs'] = repr(kwargs)[:500]
                handle_error(
                    e,
                    operation or func.__name__,
                    category=category,
                    additional_context=additional_context,
                    reraise=reraise,
                )
                return default_return

        return wrapper
    return decorator
