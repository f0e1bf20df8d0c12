"""
Metrics collection for the polling loop.

This module tracks fetch outcomes and delivered messages so hosts can report
the health of a live chat connection.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class PollingMetrics:
    """Counters accumulated across polling loop runs."""

    loop_starts: int = 0
    total_fetches: int = 0
    successful_fetches: int = 0
    transient_failures: int = 0
    fatal_failures: int = 0
    batches_delivered: int = 0
    messages_received: int = 0
    last_poll_time: datetime | None = None
    last_error: str | None = None

    def record_loop_start(self) -> None:
        self.loop_starts += 1

    def record_success(self, delivered: bool, message_count: int) -> None:
        """Update metrics after a successful fetch."""
        self.total_fetches += 1
        self.successful_fetches += 1
        self.last_poll_time = datetime.now()
        if delivered:
            self.batches_delivered += 1
            self.messages_received += message_count

    def record_transient_failure(self, error: str) -> None:
        self.total_fetches += 1
        self.transient_failures += 1
        self.last_error = error

    def record_fatal_failure(self, error: str) -> None:
        self.fatal_failures += 1
        self.last_error = error

    @property
    def success_rate(self) -> float:
        """Get successful fetches as a percentage of all fetches."""
        if self.total_fetches == 0:
            return 0.0
        return self.successful_fetches / self.total_fetches * 100

    def get_summary(self) -> dict[str, Any]:
        """Get a JSON friendly summary for health reporting."""
        return {
            "loop_starts": self.loop_starts,
            "total_fetches": self.total_fetches,
            "successful_fetches": self.successful_fetches,
            "transient_failures": self.transient_failures,
            "fatal_failures": self.fatal_failures,
            "batches_delivered": self.batches_delivered,
            "messages_received": self.messages_received,
            "success_rate": round(self.success_rate, 2),
            "last_poll": (
                self.last_poll_time.isoformat() if self.last_poll_time else None
            ),
            "last_error": self.last_error,
        }
