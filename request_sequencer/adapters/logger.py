"""Приемник строк статуса, пишущий в диагностический логгер."""

from __future__ import annotations

import logging

from request_sequencer.interfaces import LogSink
from request_sequencer.logging import get_logger


class LoggerLogSink(LogSink):
    """Пересылает строки статуса в логгер request_sequencer.

    Пустые строки-разделители пропускаются, ведущие переводы строк срезаются.
    """

    def __init__(self, level: int = logging.INFO, component: str = "status") -> None:
        self.level = level
        self._logger = get_logger(component)

    def emit(self, line: str) -> None:
        text = line.strip("\n")
        if text:
            self._logger.log(self.level, text)

    def reset(self, line: str) -> None:
        self.emit(line)
