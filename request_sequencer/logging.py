"""Диагностическое логирование для request-sequencer.

Не путать с потоком строк статуса для пользователя (см. LogSink):
здесь пишется служебная диагностика через стандартный logging.
"""

from __future__ import annotations

import logging
from logging import LoggerAdapter

_logger = logging.getLogger("request_sequencer")

# Атрибут, по которому узнаем "свой" обработчик
_HANDLER_MARK = "_request_sequencer_handler"


def get_logger(component: str | None = None) -> LoggerAdapter:
    """Создает логгер для компонента request-sequencer.

    Args:
        component: Имя компонента (transport, retry, sequencer, controller)

    Returns:
        LoggerAdapter с полем component в extra

    Пример использования:
        >>> logger = get_logger("transport")
        >>> logger.info("Request sent")
        # Выведет: [request-sequencer] transport: Request sent
    """
    return logging.LoggerAdapter(_logger, {"component": component or "core"})


def setup_logging(level: int = logging.INFO) -> logging.Handler:
    """Настраивает вывод диагностики request-sequencer в stderr.

    Повторный вызов не добавляет второй обработчик, а только меняет уровень.

    Args:
        level: Уровень логирования (по умолчанию INFO)

    Returns:
        Установленный обработчик
    """
    for existing in _logger.handlers:
        if getattr(existing, _HANDLER_MARK, False):
            _logger.setLevel(level)
            return existing

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[request-sequencer] %(component)s: %(message)s", style="%"
        )
    )
    setattr(handler, _HANDLER_MARK, True)
    _logger.addHandler(handler)
    _logger.setLevel(level)
    _logger.propagate = False
    return handler


def teardown_logging() -> None:
    """Снимает обработчики, установленные setup_logging."""
    for existing in list(_logger.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            _logger.removeHandler(existing)
    _logger.propagate = True
