"""Тесты для RetryPolicy и backoff_delay."""

from __future__ import annotations

import random

import pytest

from request_sequencer.cancellation import CancellationToken
from request_sequencer.config import SequencerConfig
from request_sequencer.exceptions import Cancelled, RetryExhaustedError, TransientError
from request_sequencer.models import Outcome
from request_sequencer.retry import RetryPolicy, backoff_delay


class FixedRandom(random.Random):
    """Источник случайности с фиксированным значением."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


class TestBackoffDelay:
    """Тесты для вычисления паузы backoff."""

    def test_exponential_base_without_jitter(self) -> None:
        """Тест: база удваивается с каждой попыткой."""
        delays = [backoff_delay(n, max_jitter=0) for n in (1, 2, 3)]
        assert delays == [0.5, 1.0, 2.0]

    def test_jitter_is_added_from_rng(self) -> None:
        """Тест: jitter берется из переданного источника случайности."""
        assert backoff_delay(1, rng=FixedRandom(0.5)) == pytest.approx(0.625)
        assert backoff_delay(2, rng=FixedRandom(0.0)) == pytest.approx(1.0)

    def test_jitter_stays_below_upper_bound(self) -> None:
        rng = random.Random(1234)
        for _ in range(100):
            delay = backoff_delay(1, rng=rng)
            assert 0.5 <= delay < 0.75

    def test_invalid_attempt(self) -> None:
        with pytest.raises(ValueError, match="attempt must be at least 1"):
            backoff_delay(0)


class TestRetryPolicy:
    """Тесты для политики повторов."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, scripted, ok_outcome) -> None:
        """Тест: успешный ответ возвращается сразу."""
        transport = scripted(ok_outcome)
        policy = RetryPolicy(transport)

        attempt = await policy.send_with_retry("client-0042", CancellationToken())

        assert attempt.attempt_number == 1
        assert attempt.outcome == ok_outcome
        assert attempt.succeeded is True
        assert transport.calls == ["client-0042"]

    @pytest.mark.asyncio
    async def test_failure_status_is_not_retried(self, scripted, recorded_sleeps) -> None:
        """Тест: неуспешный HTTP-статус - завершенная попытка, без повторов."""
        transport = scripted(Outcome(ok=False, status=500, body="oops"))
        policy = RetryPolicy(transport)

        attempt = await policy.send_with_retry("client-0042", CancellationToken())

        assert attempt.attempt_number == 1
        assert attempt.succeeded is False
        assert attempt.outcome.status == 500
        assert len(transport.calls) == 1
        assert recorded_sleeps == []

    @pytest.mark.asyncio
    async def test_transient_then_success(self, scripted, ok_outcome, recorded_sleeps) -> None:
        """Тест: после временной ошибки следует повтор с backoff."""
        transport = scripted(TransientError("Network error: reset"), ok_outcome)
        policy = RetryPolicy(transport, rng=FixedRandom(0.0))

        attempt = await policy.send_with_retry("client-0042", CancellationToken())

        assert attempt.attempt_number == 2
        assert len(transport.calls) == 2
        assert recorded_sleeps == [(0.5, None)]

    @pytest.mark.asyncio
    async def test_exhaustion_makes_exactly_max_attempts(
        self, always_transient, recorded_sleeps
    ) -> None:
        """Тест: ровно max_attempts вызовов с растущими паузами, затем исчерпание."""
        policy = RetryPolicy(always_transient, rng=FixedRandom(0.4))

        with pytest.raises(RetryExhaustedError) as exc_info:
            await policy.send_with_retry("client-0042", CancellationToken())

        assert exc_info.value.attempts == 3
        assert "connection reset" in exc_info.value.message
        assert len(always_transient.calls) == 3

        delays = [seconds for seconds, _ in recorded_sleeps]
        assert delays == [pytest.approx(0.6), pytest.approx(1.1)]
        assert delays[0] < delays[1]

    @pytest.mark.asyncio
    async def test_exhausted_error_is_transient(self, always_transient, recorded_sleeps) -> None:
        policy = RetryPolicy(always_transient, max_attempts=1)

        with pytest.raises(TransientError):
            await policy.send_with_retry("client-0042", CancellationToken())

        assert len(always_transient.calls) == 1
        assert recorded_sleeps == []

    @pytest.mark.asyncio
    async def test_max_attempts_override(self, always_transient, recorded_sleeps) -> None:
        """Тест: число попыток можно передать в вызов."""
        policy = RetryPolicy(always_transient)

        with pytest.raises(RetryExhaustedError) as exc_info:
            await policy.send_with_retry("client-0042", CancellationToken(), max_attempts=2)

        assert exc_info.value.attempts == 2
        assert len(always_transient.calls) == 2

    @pytest.mark.asyncio
    async def test_cancelled_propagates_without_retry(self, scripted, recorded_sleeps) -> None:
        """Тест: Cancelled пробрасывается сразу, без повторов и без паузы."""
        transport = scripted(Cancelled())
        policy = RetryPolicy(transport)

        with pytest.raises(Cancelled):
            await policy.send_with_retry("client-0042", CancellationToken())

        assert len(transport.calls) == 1
        assert recorded_sleeps == []

    @pytest.mark.asyncio
    async def test_cancel_during_backoff_stops_retries(self, scripted) -> None:
        """Тест: отмена во время паузы backoff прерывает повторы."""

        def fail_and_cancel(token: CancellationToken) -> TransientError:
            token.cancel()
            return TransientError("Network error: reset")

        transport = scripted(fail_and_cancel)
        policy = RetryPolicy(transport, backoff_base=10.0)

        with pytest.raises(Cancelled):
            await policy.send_with_retry("client-0042", CancellationToken())

        assert len(transport.calls) == 1

    def test_invalid_max_attempts(self, always_transient) -> None:
        with pytest.raises(ValueError, match="max_attempts must be at least 1"):
            RetryPolicy(always_transient, max_attempts=0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [0, -1])
    async def test_invalid_max_attempts_override(self, always_transient, max_attempts) -> None:
        """Тест: ноль попыток в вызове - ошибка, а не значение по умолчанию."""
        policy = RetryPolicy(always_transient)

        with pytest.raises(ValueError, match="max_attempts must be at least 1"):
            await policy.send_with_retry(
                "client-0042", CancellationToken(), max_attempts=max_attempts
            )

        assert always_transient.calls == []

    def test_from_config(self, always_transient) -> None:
        config = SequencerConfig(max_attempts=5, backoff_base=0.1, backoff_jitter=0.0)
        policy = RetryPolicy.from_config(always_transient, config)

        assert policy.max_attempts == 5
        assert policy.delay_for(2) == pytest.approx(0.2)
