"""
Tests for the retrying call wrapper.
"""

import asyncio

import pytest

from core.exceptions import EmptyPoolError, ProviderError
from utils.retry import (
    RetryConfig,
    calculate_backoff_ceiling,
    call_with_config,
    call_with_retry,
)


class FlakyOperation:
    """Fails ``failures`` times, then returns ``result``."""

    def __init__(self, failures, result="ok", error_factory=None):
        self.failures = failures
        self.result = result
        self.error_factory = error_factory or (lambda n: ProviderError(f"failure {n}"))
        self.calls = 0
        self.raised = []

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            error = self.error_factory(self.calls)
            self.raised.append(error)
            raise error
        return self.result


def test_success_on_first_attempt_does_not_sleep(sleeper):
    operation = FlakyOperation(failures=0)

    result = asyncio.run(call_with_retry(operation, sleep=sleeper.sleep))

    assert result == "ok"
    assert operation.calls == 1
    assert sleeper.delays == []


def test_always_failing_operation_is_called_retries_plus_one_times(sleeper):
    operation = FlakyOperation(failures=100)

    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(call_with_retry(operation, retries=2, sleep=sleeper.sleep))

    assert operation.calls == 3
    # No wait after the last failed attempt
    assert len(sleeper.delays) == 2
    # The last error is re-raised unchanged
    assert exc_info.value is operation.raised[-1]


def test_recovers_after_transient_failures(sleeper):
    operation = FlakyOperation(failures=2, result={"text": "graded"})

    result = asyncio.run(call_with_retry(operation, retries=3, sleep=sleeper.sleep))

    assert result == {"text": "graded"}
    assert operation.calls == 3
    assert len(sleeper.delays) == 2


def test_zero_retries_means_single_attempt(sleeper):
    operation = FlakyOperation(failures=1)

    with pytest.raises(ProviderError):
        asyncio.run(call_with_retry(operation, retries=0, sleep=sleeper.sleep))

    assert operation.calls == 1
    assert sleeper.delays == []


def test_negative_retries_rejected():
    with pytest.raises(ValueError):
        asyncio.run(call_with_retry(FlakyOperation(failures=0), retries=-1))


def test_delays_stay_within_full_jitter_range(sleeper):
    operation = FlakyOperation(failures=100)

    with pytest.raises(ProviderError):
        asyncio.run(call_with_retry(
            operation, retries=6, base_delay=1.0, max_delay=20.0, sleep=sleeper.sleep
        ))

    assert len(sleeper.delays) == 6
    for attempt, delay in enumerate(sleeper.delays, start=1):
        assert 0 <= delay <= calculate_backoff_ceiling(attempt, 1.0, 20.0)


def test_ceiling_doubles_per_failure_and_is_capped(sleeper, monkeypatch):
    # Always draw the top of the range
    monkeypatch.setattr("random.uniform", lambda low, high: high)
    operation = FlakyOperation(failures=100)

    with pytest.raises(ProviderError):
        asyncio.run(call_with_retry(
            operation, retries=5, base_delay=2.0, max_delay=20.0, sleep=sleeper.sleep
        ))

    assert sleeper.delays == pytest.approx([4.0, 8.0, 16.0, 20.0, 20.0])


def test_fatal_exceptions_are_not_retried(sleeper):
    operation = FlakyOperation(failures=5, error_factory=lambda n: EmptyPoolError("empty"))

    with pytest.raises(EmptyPoolError):
        asyncio.run(call_with_retry(
            operation, retries=3, fatal_exceptions=(EmptyPoolError,), sleep=sleeper.sleep
        ))

    assert operation.calls == 1
    assert sleeper.delays == []


def test_any_exception_type_is_retried_by_default(sleeper):
    operation = FlakyOperation(failures=1, error_factory=lambda n: ValueError("boom"))

    assert asyncio.run(call_with_retry(operation, sleep=sleeper.sleep)) == "ok"
    assert operation.calls == 2


def test_call_with_config_uses_config_values(sleeper):
    operation = FlakyOperation(failures=100)
    config = RetryConfig(retries=1, base_delay=0.5, max_delay=1.0)

    with pytest.raises(ProviderError):
        asyncio.run(call_with_config(operation, config, sleep=sleeper.sleep))

    assert operation.calls == 2
    assert len(sleeper.delays) == 1
    assert 0 <= sleeper.delays[0] <= 1.0


def test_calculate_backoff_ceiling():
    assert calculate_backoff_ceiling(1, 2.0, 600.0) == 4.0
    assert calculate_backoff_ceiling(3, 2.0, 600.0) == 16.0
    assert calculate_backoff_ceiling(10, 2.0, 600.0) == 600.0


class FlakyCoroutineFunction:
    """Plain ``async def`` that fails ``failures`` times, called through a lambda."""

    def __init__(self, failures, result="ok"):
        self.failures = failures
        self.result = result
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ProviderError(f"failure {self.calls}")
        return self.result


def test_lambda_returning_coroutine_is_awaited(sleeper):
    flaky = FlakyCoroutineFunction(failures=2)

    result = asyncio.run(call_with_retry(lambda: flaky.fetch(), retries=3, sleep=sleeper.sleep))

    assert result == "ok"
    assert flaky.calls == 3
    assert len(sleeper.delays) == 2


def test_lambda_operation_stops_after_retries_plus_one(sleeper, monkeypatch):
    monkeypatch.setattr("random.uniform", lambda low, high: high)
    flaky = FlakyCoroutineFunction(failures=100)

    with pytest.raises(ProviderError):
        asyncio.run(call_with_retry(
            lambda: flaky.fetch(), retries=3, base_delay=2.0, max_delay=10.0, sleep=sleeper.sleep
        ))

    assert flaky.calls == 4
    assert sleeper.delays == pytest.approx([4.0, 8.0, 10.0])


def test_lambda_operation_fatal_error_is_not_retried(sleeper):
    async def fetch():
        raise EmptyPoolError("empty")

    with pytest.raises(EmptyPoolError):
        asyncio.run(call_with_retry(
            lambda: fetch(), retries=3, fatal_exceptions=(EmptyPoolError,), sleep=sleeper.sleep
        ))

    assert sleeper.delays == []
