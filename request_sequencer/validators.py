"""Валидация ввода формы перед стартом прогона."""

from __future__ import annotations

import re
from collections.abc import Callable

from request_sequencer.exceptions import ValidationError
from request_sequencer.models import RunRequest

_NON_DIGIT = re.compile(r"\D")


def digits_normalizer(
    prefix: str = "", drop_leading_zero: bool = False
) -> Callable[[str], str]:
    """Строит нормализатор, оставляющий в адресате только цифры.

    Args:
        prefix: Строка, добавляемая перед цифрами
        drop_leading_zero: Убирать ли один ведущий ноль

    Returns:
        Функция для RequestValidator(normalizer=...)
    """

    def normalize(raw: str) -> str:
        digits = _NON_DIGIT.sub("", raw)
        if drop_leading_zero and digits.startswith("0"):
            digits = digits[1:]
        return f"{prefix}{digits}" if digits else ""

    return normalize


class RequestValidator:
    """Превращает сырые строки формы в RunRequest.

    Проверяет:
    - Идентификатор адресата непуст и содержит не меньше min_target_length
      цифр
    - Количество - целое положительное число (пустое значение - 1)
    - Пауза - целое положительное число секунд (пустое значение - 3)

    Ограничение количества пределом безопасности здесь не делается:
    это задача контроллера.

    Пример использования:
        >>> validator = RequestValidator()
        >>> request = validator.parse("  client-0042-117  ", "2", "3")
        >>> request.target, request.count, request.inter_item_delay
        ('client-0042-117', 2, 3.0)
        >>> validator.parse("x", "1", "1")  # Raises ValidationError
    """

    def __init__(
        self,
        normalizer: Callable[[str], str] | None = None,
        min_target_length: int = 7,
        default_count: int = 1,
        default_delay: int = 3,
    ) -> None:
        """Инициализирует валидатор.

        Args:
            normalizer: Функция нормализации адресата (по умолчанию strip)
            min_target_length: Минимум цифр в адресате
            default_count: Количество при пустом поле
            default_delay: Пауза в секундах при пустом поле
        """
        self.normalizer = normalizer or str.strip
        self.min_target_length = min_target_length
        self.default_count = default_count
        self.default_delay = default_delay

    def parse(
        self, target: str | None, count: str | None, delay: str | None
    ) -> RunRequest:
        """Валидирует ввод и строит RunRequest.

        Args:
            target: Сырой идентификатор адресата
            count: Сырое количество
            delay: Сырая пауза в секундах

        Returns:
            RunRequest с нормализованным адресатом

        Raises:
            ValidationError: Если какое-либо поле некорректно
        """
        return RunRequest(
            target=self._check_target(target),
            count=self._parse_positive(count, self.default_count, "count", "Amount invalid."),
            inter_item_delay=float(
                self._parse_positive(delay, self.default_delay, "delay", "Delay invalid.")
            ),
        )

    def _check_target(self, raw: str | None) -> str:
        """Проверяет и нормализует адресата.

        Raises:
            ValidationError: Если цифр меньше минимума
        """
        raw = (raw or "").strip()
        if len(_NON_DIGIT.sub("", raw)) < self.min_target_length:
            raise ValidationError("Target invalid.", field="target")
        normalized = self.normalizer(raw)
        if not normalized:
            raise ValidationError("Target invalid.", field="target")
        return normalized

    @staticmethod
    def _parse_positive(
        raw: str | None, default: int, field: str, message: str
    ) -> int:
        """Разбирает целое положительное число с значением по умолчанию."""
        text = (raw or "").strip()
        if not text:
            return default
        try:
            value = int(text)
        except ValueError as e:
            raise ValidationError(message, field=field) from e
        if value < 1:
            raise ValidationError(message, field=field)
        return value
