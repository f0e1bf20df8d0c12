"""
Retry policy for transient fetch failures.
"""

from dataclasses import dataclass


@dataclass
class RetryState:
    """
    Consecutive transient failure tracking with linear backoff.

    The n-th consecutive failure waits ``n * backoff_ms`` before the next
    attempt. Once ``max_attempts`` failures have been absorbed, the next one
    is not retryable.
    """

    max_attempts: int = 5
    backoff_ms: int = 1000
    consecutive_failures: int = 0

    @property
    def exhausted(self) -> bool:
        """Whether another failure must be escalated instead of retried."""
        return self.consecutive_failures >= self.max_attempts

    def record_failure(self) -> int:
        """
        Count one more transient failure.

        Returns:
            Backoff in milliseconds to wait before retrying
        """
        if self.exhausted:
            raise ValueError("Retry budget exhausted")
        self.consecutive_failures += 1
        return self.consecutive_failures * self.backoff_ms

    def reset(self) -> None:
        self.consecutive_failures = 0
