"""Retrying execution of caller-supplied traversals.

A query function receives the current traversal source ``g`` and returns a
result. Failures of a recognized transient kind are retried on a fixed
interval; a closed socket also rebuilds the session first. Anything else
fails fast.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from gremlink.core.errors import (
    GremlinkError,
    NonRetryableQueryError,
    PrematureCloseError,
    RetryExhausted,
    TransientQueryError,
)
from gremlink.graph.driver import QueryErrorKind, classify_error

if TYPE_CHECKING:
    from gremlink.core.config import GremlinkConfig
    from gremlink.graph.connection import ConnectionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryFn = Callable[[Any], T]

_TRANSIENT_KINDS = frozenset({
    QueryErrorKind.SOCKET_CLOSED,
    QueryErrorKind.CONCURRENT_MODIFICATION,
    QueryErrorKind.READ_ONLY_VIOLATION,
})


def default_is_retryable(kind: QueryErrorKind) -> bool:
    """Retry the three known transient kinds only."""
    return kind in _TRANSIENT_KINDS


@dataclass(frozen=True)
class QueryRetryPolicy:
    """How often and how patiently a query is retried."""

    max_attempts: int = 5
    interval_ms: int = 1000
    is_retryable: Callable[[QueryErrorKind], bool] = field(default=default_is_retryable)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_ms < 0:
            raise ValueError("interval_ms must not be negative")

    @classmethod
    def from_config(cls, config: GremlinkConfig) -> QueryRetryPolicy:
        return cls(
            max_attempts=config.retry_max_attempts,
            interval_ms=config.retry_interval_ms,
        )


class RetryingQueryExecutor:
    """Runs query functions against the managed session with retries."""

    def __init__(
        self,
        manager: ConnectionManager,
        policy: QueryRetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize executor.

        Args:
            manager: Connection manager that owns the session.
            policy: Retry policy. Defaults to 5 attempts, 1000 ms apart.
            sleep: Wait function, seconds.
        """
        self._manager = manager
        self._policy = policy or QueryRetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> QueryRetryPolicy:
        return self._policy

    def execute(self, query_fn: QueryFn[T]) -> T:
        """Execute a query function with automatic retry on transient failures.

        Args:
            query_fn: Callable taking the traversal source ``g``.

        Returns:
            Whatever ``query_fn`` returns.

        Raises:
            PrematureCloseError: If the session closed abnormally mid-query.
            NonRetryableQueryError: On the first unrecognized failure.
            RetryExhausted: If every attempt failed transiently.
            GremlinkError: Library errors raised inside ``query_fn`` as is.
        """
        handle = self._manager.ensure_open()
        attempt = 0

        while True:
            attempt += 1
            try:
                return query_fn(handle.traversal)
            except GremlinkError:
                raise
            except Exception as e:
                kind = classify_error(e)
                if kind is QueryErrorKind.SOCKET_CLOSED:
                    self._manager.poll_closed(handle.generation)
                failure = handle.failure()
                if failure is not None:
                    raise PrematureCloseError(failure.code, failure.reason) from e

                logger.warning(f"Attempt {attempt} failed ({kind.value}): {e}")
                if not self._policy.is_retryable(kind):
                    raise NonRetryableQueryError(str(e), kind=kind) from e

                last_error = TransientQueryError(str(e), kind=kind)
                last_error.__cause__ = e

                if kind is QueryErrorKind.SOCKET_CLOSED:
                    logger.warning("Reopening connection")
                    handle = self._manager.reopen(stale_generation=handle.generation)

                if attempt >= self._policy.max_attempts:
                    raise RetryExhausted(self._policy.max_attempts, last_error) from last_error

                self._sleep(self._policy.interval_ms / 1000)

                # the session may have closed abnormally during the wait
                failure = handle.failure()
                if failure is not None:
                    raise PrematureCloseError(failure.code, failure.reason) from last_error
                handle = self._manager.current_handle()
