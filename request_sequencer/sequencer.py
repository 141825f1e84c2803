"""Секвенсор: упорядоченный прерываемый цикл по элементам прогона."""

from __future__ import annotations

from collections.abc import AsyncIterator

from request_sequencer.cancellation import CancellationToken
from request_sequencer.exceptions import Cancelled, RetryExhaustedError, TransientError
from request_sequencer.interfaces import LogSink
from request_sequencer.logging import get_logger
from request_sequencer.models import Attempt, ItemResult, ItemStatus, RunRequest
from request_sequencer.retry import RetryPolicy


class Sequencer:
    """Выполняет элементы прогона строго по порядку, по одному.

    Для каждого элемента вызывает политику повторов, пишет строки статуса
    в LogSink и выдает ItemResult. Между элементами выдерживается пауза,
    прерываемая отменой. Исчерпание попыток фиксируется как результат
    элемента и не останавливает прогон; отмена останавливает весь прогон.

    Предел безопасности здесь не проверяется: count уже ограничен
    вызывающей стороной.

    Пример использования:
        >>> sequencer = Sequencer(policy, sink)
        >>> async for item in sequencer.run(request, token):
        ...     print(item.index, item.status)

    Attributes:
        retry_policy: Политика повторов
        sink: Приемник строк статуса
        poll_interval: Шаг проверки токена во время паузы (секунды)
        body_preview: Сколько символов тела ответа выводить
    """

    def __init__(
        self,
        retry_policy: RetryPolicy,
        sink: LogSink,
        poll_interval: float = 0.2,
        body_preview: int = 200,
    ) -> None:
        self.retry_policy = retry_policy
        self.sink = sink
        self.poll_interval = poll_interval
        self.body_preview = body_preview
        self._logger = get_logger("sequencer")

    async def run(
        self, request: RunRequest, token: CancellationToken
    ) -> AsyncIterator[ItemResult]:
        """Ленивая упорядоченная последовательность результатов элементов.

        Последовательность конечна (не длиннее request.count) и не
        перезапускается. При отмене она завершается досрочно; элементы
        после текущего не начинаются.

        Args:
            request: Параметры прогона
            token: Токен отмены прогона

        Yields:
            ItemResult для каждого начатого элемента, в порядке индексов

        Raises:
            ValueError: Если request.count <= 0
        """
        if request.count <= 0:
            raise ValueError("count must be greater than 0")

        total = request.count
        max_attempts = self.retry_policy.max_attempts

        for index in range(1, total + 1):
            if token.cancelled:
                self._logger.info(
                    f"Sequence stopped before item {index}",
                    extra={"index": index, "total": total},
                )
                return

            prefix = f"[{index}/{total}]"
            self.sink.emit(f"\n{prefix} Sending (up to {max_attempts} attempts)...")

            try:
                attempt = await self.retry_policy.send_with_retry(
                    request.target, token
                )
            except Cancelled as e:
                self.sink.emit(f"{prefix} ERROR: {e.message}")
                yield ItemResult.from_error(
                    index, e.message, attempts_used=0, status=ItemStatus.CANCELLED
                )
                return
            except TransientError as e:
                attempts = e.attempts if isinstance(e, RetryExhaustedError) else 1
                self.sink.emit(f"{prefix} ERROR: {e.message}")
                self._logger.warning(
                    f"Item {index} failed after {attempts} attempts",
                    extra={"index": index, "attempts": attempts},
                )
                yield ItemResult.from_error(
                    index, e.message, attempts_used=attempts, status=ItemStatus.ERROR
                )
            else:
                self._report(prefix, attempt)
                yield ItemResult.from_attempt(index, attempt)

            if index != total:
                try:
                    await token.sleep(request.inter_item_delay, self.poll_interval)
                except Cancelled:
                    self._logger.info(
                        f"Sequence stopped during delay after item {index}",
                        extra={"index": index, "total": total},
                    )
                    return

    def _report(self, prefix: str, attempt: Attempt) -> None:
        """Пишет строки статуса для элемента, получившего ответ."""
        outcome = attempt.outcome
        if outcome is None:
            raise ValueError(f"attempt {attempt.attempt_number} has no outcome")
        verdict = "Success" if outcome.ok else "Failed"
        self.sink.emit(
            f"{prefix} {verdict} ({outcome.status}) on attempt {attempt.attempt_number}"
        )
        self.sink.emit(f"Response: {outcome.body[: self.body_preview]}...")
