"""Приемники строк статуса, хранящие вывод в памяти."""

from __future__ import annotations

from collections.abc import Callable

from request_sequencer.interfaces import LogSink


class MemoryLogSink(LogSink):
    """Приемник, накапливающий строки статуса в списке.

    Используется для тестирования и для интерфейсов, которые сами
    перерисовывают весь вывод.

    Attributes:
        _lines: Накопленные строки
    """

    def __init__(self) -> None:
        """Инициализирует пустой приемник."""
        self._lines: list[str] = []

    def emit(self, line: str) -> None:
        self._lines.append(line)

    def reset(self, line: str) -> None:
        self._lines = [line]

    @property
    def lines(self) -> list[str]:
        """Копия накопленных строк."""
        return list(self._lines)

    @property
    def text(self) -> str:
        """Весь вывод одной строкой, как его показал бы консольный виджет."""
        return "\n".join(self._lines)


class BufferedLogSink(LogSink):
    """Приемник, отдающий строки пачками.

    Строки копятся в очереди и передаются в flush_callback одной пачкой
    каждые flush_every строк или при явном flush(). reset() сбрасывает
    очередь и передает новую первую строку сразу, с флагом очистки.

    Attributes:
        flush_callback: Получатель пачек (строки, флаг очистки вывода)
        flush_every: Размер пачки
    """

    def __init__(
        self,
        flush_callback: Callable[[list[str], bool], None],
        flush_every: int = 10,
    ) -> None:
        """Инициализирует приемник.

        Args:
            flush_callback: Получатель пачек строк
            flush_every: Размер пачки (по умолчанию 10)

        Raises:
            ValueError: Если flush_every <= 0
        """
        if flush_every <= 0:
            raise ValueError("flush_every must be greater than 0")
        self.flush_callback = flush_callback
        self.flush_every = flush_every
        self._queue: list[str] = []

    def emit(self, line: str) -> None:
        self._queue.append(line)
        if len(self._queue) >= self.flush_every:
            self.flush()

    def reset(self, line: str) -> None:
        self._queue.clear()
        self.flush_callback([line], True)

    def flush(self) -> None:
        """Передает накопленные строки получателю."""
        if not self._queue:
            return
        chunk, self._queue = self._queue, []
        self.flush_callback(chunk, False)

    @property
    def pending(self) -> int:
        """Количество строк, ожидающих отправки."""
        return len(self._queue)
