"""Политика повторов с экспоненциальным backoff и jitter."""

from __future__ import annotations

import random

from request_sequencer.cancellation import CancellationToken
from request_sequencer.config import SequencerConfig
from request_sequencer.exceptions import RetryExhaustedError, TransientError
from request_sequencer.interfaces import Transport
from request_sequencer.logging import get_logger
from request_sequencer.models import Attempt


def backoff_delay(
    attempt: int,
    base: float = 0.5,
    max_jitter: float = 0.25,
    rng: random.Random | None = None,
) -> float:
    """Вычисляет паузу перед следующей попыткой.

    Пауза равна base * 2^(attempt-1) плюс равномерная добавка из [0, max_jitter).

    Args:
        attempt: Номер только что завершившейся попытки (начиная с 1)
        base: База backoff в секундах
        max_jitter: Верхняя граница случайной добавки в секундах
        rng: Источник случайности (по умолчанию модуль random)

    Returns:
        Пауза в секундах

    Raises:
        ValueError: Если attempt < 1

    Пример:
        >>> backoff_delay(1, max_jitter=0)
        0.5
        >>> backoff_delay(3, max_jitter=0)
        2.0
    """
    if attempt < 1:
        raise ValueError("attempt must be at least 1")
    jitter = (rng or random).random() * max_jitter
    return base * 2 ** (attempt - 1) + jitter


class RetryPolicy:
    """Обертка над транспортом с ограниченным числом попыток.

    Повторяются только TransientError. Ответ с неуспешным HTTP-статусом
    считается завершенной попыткой и возвращается сразу. Cancelled
    пробрасывается без новых попыток и без ожидания.

    Attributes:
        transport: Транспорт для выполнения вызовов
        max_attempts: Число попыток по умолчанию
        backoff_base: База backoff в секундах
        backoff_jitter: Верхняя граница jitter в секундах
    """

    def __init__(
        self,
        transport: Transport,
        max_attempts: int = 3,
        backoff_base: float = 0.5,
        backoff_jitter: float = 0.25,
        rng: random.Random | None = None,
    ) -> None:
        """Инициализирует политику повторов.

        Args:
            transport: Транспорт
            max_attempts: Число попыток по умолчанию
            backoff_base: База backoff в секундах
            backoff_jitter: Верхняя граница jitter в секундах
            rng: Источник случайности для jitter

        Raises:
            ValueError: Если max_attempts < 1
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.transport = transport
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.backoff_jitter = backoff_jitter
        self._rng = rng or random.Random()
        self._logger = get_logger("retry")

    @classmethod
    def from_config(
        cls,
        transport: Transport,
        config: SequencerConfig,
        rng: random.Random | None = None,
    ) -> RetryPolicy:
        return cls(
            transport,
            max_attempts=config.max_attempts,
            backoff_base=config.backoff_base,
            backoff_jitter=config.backoff_jitter,
            rng=rng,
        )

    def delay_for(self, attempt: int) -> float:
        """Пауза после неудачной попытки с номером attempt."""
        return backoff_delay(
            attempt, self.backoff_base, self.backoff_jitter, self._rng
        )

    async def send_with_retry(
        self,
        target: str,
        token: CancellationToken,
        max_attempts: int | None = None,
    ) -> Attempt:
        """Выполняет вызов с повторами при временных ошибках.

        Args:
            target: Идентификатор адресата
            token: Токен отмены прогона
            max_attempts: Число попыток (по умолчанию из политики)

        Returns:
            Attempt с полученным ответом и номером попытки

        Raises:
            Cancelled: Если прогон отменен до, во время вызова или во время паузы
            RetryExhaustedError: Если все попытки завершились TransientError
            ValueError: Если max_attempts < 1
        """
        limit = self.max_attempts if max_attempts is None else max_attempts
        if limit < 1:
            raise ValueError("max_attempts must be at least 1")
        for attempt in range(1, limit + 1):
            try:
                outcome = await self.transport.send(target, token)
            except TransientError as e:
                if attempt == limit:
                    self._logger.warning(
                        f"Giving up after {attempt} attempts: {e.message}",
                        extra={"attempts": attempt},
                    )
                    raise RetryExhaustedError(e.message, attempts=attempt) from e
                delay = self.delay_for(attempt)
                self._logger.info(
                    f"Attempt {attempt} failed, retrying in {delay:.2f}s: {e.message}",
                    extra={"attempt": attempt, "delay": delay},
                )
                await token.sleep(delay)
                continue
            return Attempt(attempt_number=attempt, outcome=outcome)

        # Сюда не доходим: цикл либо возвращает результат, либо выбрасывает
        raise RetryExhaustedError("No attempts were made", attempts=0)
