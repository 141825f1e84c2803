"""Исключения для request-sequencer."""

from __future__ import annotations


class SequencerError(Exception):
    """Базовое исключение для всех ошибок request-sequencer.

    Все исключения компонента наследуются от этого класса.
    """

    def __init__(self, message: str) -> None:
        """Инициализирует исключение.

        Args:
            message: Сообщение об ошибке
        """
        super().__init__(message)
        self.message = message


class Cancelled(SequencerError):
    """Исключение, означающее отмену прогона пользователем.

    Действует на весь прогон: пробрасывается через политику повторов
    и секвенсор без новых попыток и без ожидания backoff.
    """

    def __init__(self, message: str = "Cancelled by user.") -> None:
        """Инициализирует исключение.

        Args:
            message: Сообщение об отмене
        """
        super().__init__(message)


class TransientError(SequencerError):
    """Временная ошибка одной попытки (сеть, таймаут, разбор ответа).

    Только такие ошибки приводят к повторной попытке.
    """

    def __init__(self, message: str) -> None:
        """Инициализирует исключение.

        Args:
            message: Описание сетевой ошибки
        """
        super().__init__(message)


class RetryExhaustedError(TransientError):
    """Исключение, выбрасываемое после исчерпания всех попыток.

    Attributes:
        attempts: Количество выполненных попыток
    """

    def __init__(self, message: str, attempts: int) -> None:
        """Инициализирует исключение.

        Args:
            message: Описание последней ошибки
            attempts: Количество выполненных попыток
        """
        super().__init__(message)
        self.attempts = attempts


class ValidationError(SequencerError):
    """Ошибка валидации входных данных формы.

    Выбрасывается до старта прогона и никогда не доходит до секвенсора.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Инициализирует исключение.

        Args:
            message: Описание ошибки валидации
            field: Имя поля, не прошедшего валидацию
        """
        super().__init__(message)
        self.field = field


class ConfigurationError(SequencerError):
    """Исключение для некорректной или неполной конфигурации."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
