"""Конфигурация request-sequencer."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields

from request_sequencer.exceptions import ConfigurationError

# Жесткий верхний предел числа запросов за прогон
MAX_SAFETY_CAP = 2

DEFAULT_TIMEOUT = 15.0


@dataclass(frozen=True)
class SequencerConfig:
    """Параметры транспорта, повторов и секвенсора.

    Attributes:
        endpoint: URL конечной точки (обязателен для HTTP-транспорта)
        api_key: Статический ключ API, передается в каждом запросе
        target_field: Имя поля тела запроса с идентификатором адресата
        timeout: Жесткий таймаут одного вызова в секундах
        max_attempts: Максимум попыток на элемент
        safety_cap: Предел числа элементов за прогон (1..MAX_SAFETY_CAP)
        backoff_base: База экспоненциального backoff в секундах
        backoff_jitter: Верхняя граница случайной добавки к backoff в секундах
        poll_interval: Шаг проверки токена при паузе между элементами
        relay_url: Префикс relay-обертки (реальный URL дописывается в конец)
        headers: Дополнительные статические заголовки
        body_preview: Сколько символов тела ответа выводить в лог
    """

    endpoint: str | None = None
    api_key: str | None = None
    target_field: str = "target"
    timeout: float = DEFAULT_TIMEOUT
    max_attempts: int = 3
    safety_cap: int = MAX_SAFETY_CAP
    backoff_base: float = 0.5
    backoff_jitter: float = 0.25
    poll_interval: float = 0.2
    relay_url: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    body_preview: int = 200

    def __post_init__(self) -> None:
        """Валидация параметров после инициализации."""
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be greater than 0")
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if not 1 <= self.safety_cap <= MAX_SAFETY_CAP:
            raise ConfigurationError(
                f"safety_cap must be between 1 and {MAX_SAFETY_CAP}"
            )
        if self.backoff_base < 0 or self.backoff_jitter < 0:
            raise ConfigurationError("backoff values cannot be negative")
        if self.poll_interval <= 0:
            raise ConfigurationError("poll_interval must be greater than 0")
        if not self.target_field:
            raise ConfigurationError("target_field cannot be empty")
        if self.body_preview < 0:
            raise ConfigurationError("body_preview cannot be negative")

    def require_endpoint(self) -> str:
        """Возвращает endpoint или сообщает, что он не настроен.

        Raises:
            ConfigurationError: Если endpoint не задан
        """
        if not self.endpoint:
            raise ConfigurationError("endpoint is not configured")
        return self.endpoint

    @classmethod
    def from_env(
        cls,
        prefix: str = "REQUEST_SEQUENCER_",
        environ: Mapping[str, str] | None = None,
    ) -> SequencerConfig:
        """Собирает конфигурацию из переменных окружения.

        Имя переменной - префикс плюс имя поля в верхнем регистре, например
        REQUEST_SEQUENCER_ENDPOINT. Поле headers из окружения не читается.

        Args:
            prefix: Префикс переменных окружения
            environ: Источник переменных (по умолчанию os.environ)

        Returns:
            SequencerConfig с переопределенными значениями

        Raises:
            ConfigurationError: Если значение не приводится к типу поля
        """
        source = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for config_field in fields(cls):
            if config_field.name == "headers":
                continue
            raw = source.get(f"{prefix}{config_field.name.upper()}")
            if raw is None or raw == "":
                continue
            values[config_field.name] = _coerce(config_field.name, raw, config_field.default)
        return cls(**values)


def _coerce(name: str, raw: str, default: object) -> object:
    """Приводит строку из окружения к типу значения по умолчанию."""
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from e
    return raw
