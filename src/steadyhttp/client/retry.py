"""Retry policy: exponential backoff without jitter.

:class:`RetryController` only *decides*; it never sleeps.  The caller waits
for the reported delay, which keeps the policy free of timing side effects.

Every failure kind is retried the same way, for every HTTP verb, including
POST/PUT/DELETE.
"""

from __future__ import annotations

from steadyhttp.models import AttemptOutcome, Failure, RetryDecision

_NO_RETRY = RetryDecision(retry=False, delay=0.0)


class RetryController:
    """Decides whether a failed attempt is followed by another one.

    Args:
        max_retries: Retries allowed after the first attempt.  A call makes
            at most ``max_retries + 1`` attempts.
        base_delay: Delay in seconds before the first retry.  Doubles for
            each subsequent retry: ``base_delay * 2 ** attempt_index``.
    """

    def __init__(self, max_retries: int, base_delay: float) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        self.max_retries = max_retries
        self.base_delay = base_delay

    def delay_for(self, attempt_index: int) -> float:
        """Backoff delay before the attempt following *attempt_index* (0-based)."""
        return self.base_delay * (2 ** attempt_index)

    def decide(self, outcome: AttemptOutcome, attempt_index: int) -> RetryDecision:
        """Return the retry verdict for *outcome* of attempt *attempt_index*.

        Successes never retry.  Failures retry while
        ``attempt_index < max_retries``.
        """
        if not isinstance(outcome, Failure):
            return _NO_RETRY
        if attempt_index >= self.max_retries:
            return _NO_RETRY
        return RetryDecision(retry=True, delay=self.delay_for(attempt_index))
