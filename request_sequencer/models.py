"""Модели данных прогона: запрос, попытки, результаты элементов и состояние."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RunState(Enum):
    """Состояние контроллера прогона.

    Attributes:
        IDLE: Прогон не выполняется
        RUNNING: Прогон выполняется
        CANCEL_REQUESTED: Запрошена остановка, прогон сворачивается
    """

    IDLE = "idle"
    RUNNING = "running"
    CANCEL_REQUESTED = "cancel_requested"


def controls_locked(state: RunState) -> bool:
    """Должны ли поля ввода быть заблокированы в данном состоянии.

    Args:
        state: Текущее состояние контроллера

    Returns:
        True для любого состояния, кроме IDLE
    """
    return state is not RunState.IDLE


class ItemStatus(Enum):
    """Итог обработки одного элемента последовательности.

    Attributes:
        SUCCESS: Ответ получен, HTTP-статус успешный
        FAILED: Ответ получен, HTTP-статус неуспешный
        ERROR: Все попытки завершились сетевой ошибкой
        CANCELLED: Элемент прерван отменой прогона
    """

    SUCCESS = "success"
    FAILED = "failed"
    ERROR = "error"
    CANCELLED = "cancelled"


class RunStatus(Enum):
    """Итоговый статус прогона."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class RunRequest:
    """Параметры прогона, неизменяемые после старта.

    Attributes:
        target: Нормализованный идентификатор адресата
        count: Количество элементов (запросов) в прогоне
        inter_item_delay: Пауза между элементами в секундах
    """

    target: str
    count: int
    inter_item_delay: float


@dataclass(frozen=True)
class Outcome:
    """Нормализованный результат одного сетевого вызова.

    Неуспешный HTTP-статус - это тоже Outcome, а не ошибка.

    Attributes:
        ok: True для статусов 2xx
        status: HTTP-статус ответа
        body: Тело ответа в виде текста
    """

    ok: bool
    status: int
    body: str = ""


@dataclass(frozen=True)
class Attempt:
    """Последняя попытка, выполненная политикой повторов.

    Содержит либо outcome (ответ получен), либо error (причина отказа).

    Attributes:
        attempt_number: Номер попытки, начиная с 1
        outcome: Результат вызова, если ответ получен
        error: Текст ошибки, если ответа нет
    """

    attempt_number: int
    outcome: Outcome | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Получен ли ответ с успешным HTTP-статусом."""
        return self.outcome is not None and self.outcome.ok


@dataclass(frozen=True)
class ItemResult:
    """Результат одной итерации секвенсора.

    Attributes:
        index: Номер элемента, начиная с 1
        final_attempt: Последняя выполненная попытка
        attempts_used: Сколько попыток потрачено на элемент
        status: Итог обработки элемента
    """

    index: int
    final_attempt: Attempt
    attempts_used: int
    status: ItemStatus

    @classmethod
    def from_attempt(cls, index: int, attempt: Attempt) -> ItemResult:
        """Создает результат элемента по полученному ответу.

        Args:
            index: Номер элемента
            attempt: Попытка, завершившаяся ответом

        Returns:
            ItemResult со статусом SUCCESS или FAILED
        """
        return cls(
            index=index,
            final_attempt=attempt,
            attempts_used=attempt.attempt_number,
            status=ItemStatus.SUCCESS if attempt.succeeded else ItemStatus.FAILED,
        )

    @classmethod
    def from_error(
        cls, index: int, error: str, attempts_used: int, status: ItemStatus
    ) -> ItemResult:
        """Создает результат элемента, завершившегося ошибкой или отменой.

        Args:
            index: Номер элемента
            error: Текст ошибки
            attempts_used: Количество выполненных попыток
            status: ERROR или CANCELLED

        Returns:
            ItemResult без outcome
        """
        return cls(
            index=index,
            final_attempt=Attempt(attempt_number=max(attempts_used, 1), error=error),
            attempts_used=attempts_used,
            status=status,
        )


@dataclass
class RunSummary:
    """Сводка по завершенному прогону.

    Attributes:
        status: Итоговый статус прогона
        request: Запрос с уже ограниченным количеством элементов
        requested_count: Количество, запрошенное пользователем
        items: Результаты элементов в порядке выполнения
        started_at: Время старта
        finished_at: Время завершения
        error: Сообщение о непредвиденной ошибке (если была)
    """

    status: RunStatus
    request: RunRequest
    requested_count: int
    items: list[ItemResult] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None

    @property
    def effective_count(self) -> int:
        return self.request.count

    @property
    def clipped(self) -> bool:
        """Было ли количество урезано до предела безопасности."""
        return self.requested_count != self.request.count

    @property
    def dispatched_indices(self) -> list[int]:
        return [item.index for item in self.items]
