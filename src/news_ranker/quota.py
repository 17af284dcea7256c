"""Daily request-quota tracking for the upstream news API."""

import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from .logger import get_logger


@dataclass
class RequestRecord:
    """A single upstream request."""
    timestamp: datetime
    endpoint: str
    query: Optional[str] = None
    strategy: Optional[str] = None


@dataclass
class QuotaUsage:
    """Snapshot of the day's usage."""
    day: date
    count: int
    remaining: int
    percentage: float
    limit: int
    warning: bool = False


@dataclass
class CapacityEstimate:
    """Suggested split of the remaining requests between fetch strategies."""
    remaining: int
    suggestions: Dict[str, int] = field(default_factory=dict)


class QuotaTracker:
    """
    Counts upstream API requests against a daily limit.

    The tracker is an explicit object handed to the fetcher rather than
    module state; all mutation happens under a lock so several request
    handlers can share one instance. The counter resets when the date
    changes.
    """

    CHECKPOINT_INTERVAL = 50
    SEARCH_RESERVE = 100
    SAFETY_RESERVE = 50

    def __init__(
        self,
        daily_limit: int = 500,
        warning_threshold: int = 450,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize quota tracker.

        Args:
            daily_limit: Maximum requests per day
            warning_threshold: Request count at which warnings start
            clock: Returns the current local time; injectable for tests
        """
        self.daily_limit = daily_limit
        self.warning_threshold = warning_threshold
        self.clock = clock or datetime.now
        self.logger = get_logger()

        self._lock = threading.Lock()
        self._day = self.clock().date()
        self._requests: List[RequestRecord] = []

    def _roll_over(self) -> None:
        # caller holds the lock
        today = self.clock().date()
        if today != self._day:
            self._day = today
            self._requests = []

    def _usage(self) -> QuotaUsage:
        count = len(self._requests)
        percentage = count / self.daily_limit * 100 if self.daily_limit else 100.0
        return QuotaUsage(
            day=self._day,
            count=count,
            remaining=self.daily_limit - count,
            percentage=round(percentage, 1),
            limit=self.daily_limit,
            warning=count >= self.warning_threshold
        )

    def _record(self, endpoint: str, query: Optional[str], strategy: Optional[str]) -> QuotaUsage:
        # caller holds the lock
        self._requests.append(RequestRecord(
            timestamp=self.clock(),
            endpoint=endpoint,
            query=query,
            strategy=strategy
        ))
        return self._usage()

    def _log_usage(self, usage: QuotaUsage) -> None:
        if usage.warning:
            self.logger.warning(
                f"API limit warning: {usage.count}/{usage.limit} requests used "
                f"({usage.remaining} remaining)"
            )
        if usage.count % self.CHECKPOINT_INTERVAL == 0:
            self.logger.info(f"API usage checkpoint: {usage.count}/{usage.limit} ({usage.percentage}%)")

    def track_request(
        self,
        endpoint: str = "everything",
        query: Optional[str] = None,
        strategy: Optional[str] = None
    ) -> QuotaUsage:
        """
        Record one upstream request.

        Returns:
            Usage after recording the request
        """
        with self._lock:
            self._roll_over()
            usage = self._record(endpoint, query, strategy)

        self._log_usage(usage)
        return usage

    def try_acquire(
        self,
        endpoint: str = "everything",
        query: Optional[str] = None,
        strategy: Optional[str] = None
    ) -> Optional[QuotaUsage]:
        """
        Record one upstream request if today's limit allows it.

        The check and the count happen under one lock, so concurrent
        callers can never push the count past ``daily_limit``.

        Returns:
            Usage after recording the request, or None if the limit is reached
        """
        with self._lock:
            self._roll_over()
            if len(self._requests) >= self.daily_limit:
                return None
            usage = self._record(endpoint, query, strategy)

        self._log_usage(usage)
        return usage

    def current_usage(self) -> QuotaUsage:
        with self._lock:
            self._roll_over()
            return self._usage()

    def can_make_request(self) -> bool:
        return self.current_usage().remaining > 0

    def request_history(self) -> List[RequestRecord]:
        with self._lock:
            self._roll_over()
            return list(self._requests)

    def usage_by_strategy(self) -> Dict[str, int]:
        return dict(Counter(r.strategy or "unknown" for r in self.request_history()))

    def usage_by_hour(self) -> Dict[int, int]:
        return dict(Counter(r.timestamp.hour for r in self.request_history()))

    def estimate_remaining_capacity(self) -> CapacityEstimate:
        """
        Split what is left of today's quota between strategies.

        A fixed reserve is kept for user searches plus a safety buffer;
        the rest goes 30/70 to homepage and category fetches.
        """
        remaining = self.current_usage().remaining
        usable = max(0, remaining - self.SEARCH_RESERVE - self.SAFETY_RESERVE)
        return CapacityEstimate(
            remaining=remaining,
            suggestions={
                'homepage': usable * 30 // 100,
                'categories': usable * 70 // 100,
                'search': self.SEARCH_RESERVE
            }
        )

    def reset(self) -> None:
        with self._lock:
            previous = len(self._requests)
            self._day = self.clock().date()
            self._requests = []
        self.logger.info(f"API usage counter reset (previous count: {previous})")

    def usage_report(self) -> str:
        """Human-readable usage summary."""
        usage = self.current_usage()
        lines = [
            f"API Usage Report - {usage.day.isoformat()}",
            f"Total: {usage.count}/{usage.limit} ({usage.percentage}%)",
            f"Remaining: {usage.remaining}",
        ]

        by_strategy = self.usage_by_strategy()
        if by_strategy:
            lines.append("By Strategy:")
            for strategy, count in sorted(by_strategy.items(), key=lambda item: item[1], reverse=True):
                lines.append(f"  {strategy}: {count}")

        return "\n".join(lines)
