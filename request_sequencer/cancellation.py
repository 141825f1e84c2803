"""Токен кооперативной отмены прогона."""

from __future__ import annotations

import asyncio

from request_sequencer.exceptions import Cancelled


class CancellationToken:
    """Односторонний сигнал отмены, общий для всех операций одного прогона.

    После cancel() токен остается взведенным до конца прогона; сбросить его
    нельзя, новый прогон получает новый токен. Владелец токена (контроллер)
    единственный, кто его взводит; остальные компоненты только проверяют.

    Пример использования:
        >>> token = CancellationToken()
        >>> token.cancelled
        False
        >>> token.cancel()
        True
        >>> token.cancel()
        False
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Был ли токен взведен."""
        return self._event.is_set()

    def cancel(self) -> bool:
        """Взводит токен.

        Returns:
            True, если этот вызов взвел токен; False, если он уже был взведен
        """
        if self._event.is_set():
            return False
        self._event.set()
        return True

    def raise_if_cancelled(self) -> None:
        """Выбрасывает Cancelled, если токен взведен.

        Raises:
            Cancelled: Если токен взведен
        """
        if self._event.is_set():
            raise Cancelled()

    async def sleep(self, seconds: float, poll_interval: float | None = None) -> None:
        """Прерываемое ожидание.

        Ожидание идет отрезками не длиннее poll_interval, и токен проверяется
        на каждом отрезке; взведение токена будит ожидание сразу.

        Args:
            seconds: Длительность ожидания в секундах
            poll_interval: Максимальная длина одного отрезка (None - без нарезки)

        Raises:
            Cancelled: Если токен взведен до или во время ожидания
            ValueError: Если poll_interval <= 0
        """
        if poll_interval is not None and poll_interval <= 0:
            raise ValueError("poll_interval must be greater than 0")

        self.raise_if_cancelled()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(seconds, 0.0)

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            if poll_interval is not None:
                remaining = min(remaining, poll_interval)
            try:
                await asyncio.wait_for(self._event.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                self.raise_if_cancelled()
                continue
            raise Cancelled()
