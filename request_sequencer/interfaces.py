"""Интерфейсы внешних участников: транспорт и приемник строк статуса."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from request_sequencer.cancellation import CancellationToken
    from request_sequencer.models import Outcome


class Transport(ABC):
    """Абстрактный транспорт: ровно один сетевой вызов на send().

    Повторы - забота политики повторов, а не транспорта.

    Пример использования:
        >>> class StaticTransport(Transport):
        ...     async def send(self, target, token):
        ...         token.raise_if_cancelled()
        ...         return Outcome(ok=True, status=200, body="{}")
    """

    @abstractmethod
    async def send(self, target: str, token: CancellationToken) -> Outcome:
        """Выполняет один вызов для адресата.

        Args:
            target: Идентификатор адресата
            token: Токен отмены текущего прогона

        Returns:
            Outcome с HTTP-статусом и телом ответа

        Raises:
            Cancelled: Если токен взведен до или во время вызова
            TransientError: При сетевой ошибке или истечении таймаута
        """
        ...

    @property
    def route(self) -> str:
        """Короткое описание маршрута для баннера прогона."""
        return "direct"


class LogSink(ABC):
    """Приемник строк статуса для отображения пользователю.

    Поток строк только дописывается; reset() начинает новый вывод
    (используется в начале прогона и при ошибках валидации).
    """

    @abstractmethod
    def emit(self, line: str) -> None:
        """Дописывает строку статуса.

        Args:
            line: Строка для вывода
        """
        ...

    @abstractmethod
    def reset(self, line: str) -> None:
        """Очищает вывод и начинает его с указанной строки.

        Args:
            line: Первая строка нового вывода
        """
        ...

    def flush(self) -> None:
        """Передает отображению накопленные строки, если приемник их копит."""
