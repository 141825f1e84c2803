"""
Request Sequencer - sequential, cancellable request dispatcher with retry and backoff.

Выполняет ограниченное число запросов к удаленной конечной точке строго
по очереди, с паузой между ними, повторами при сетевых ошибках и
кооперативной отменой по запросу пользователя.

Основные компоненты:
    - RunController: Конечный автомат прогона (start/stop)
    - Sequencer: Упорядоченный прерываемый цикл по элементам
    - RetryPolicy: Повторы с экспоненциальным backoff и jitter
    - HttpTransport: Один POST с жестким таймаутом (httpx)
    - CancellationToken: Односторонний сигнал отмены прогона
    - RequestValidator: Валидация ввода формы

Пример использования:
    >>> import asyncio
    >>> from request_sequencer import RunController, SequencerConfig, RequestValidator
    >>> from request_sequencer.adapters import MemoryLogSink
    >>>
    >>> config = SequencerConfig(endpoint="https://api.example.com/otp/request")
    >>> sink = MemoryLogSink()
    >>> request = RequestValidator().parse("client-0042-117", "2", "3")
    >>>
    >>> async def main():
    ...     async with RunController.from_config(config, sink) as controller:
    ...         return await controller.start(request)
    >>> summary = asyncio.run(main())
"""

__version__ = "0.1.0"
from request_sequencer.cancellation import CancellationToken
from request_sequencer.config import MAX_SAFETY_CAP, SequencerConfig
from request_sequencer.controller import RunController
from request_sequencer.exceptions import (
    Cancelled,
    ConfigurationError,
    RetryExhaustedError,
    SequencerError,
    TransientError,
    ValidationError,
)
from request_sequencer.interfaces import LogSink, Transport
from request_sequencer.models import (
    Attempt,
    ItemResult,
    ItemStatus,
    Outcome,
    RunRequest,
    RunState,
    RunStatus,
    RunSummary,
    controls_locked,
)
from request_sequencer.retry import RetryPolicy, backoff_delay
from request_sequencer.sequencer import Sequencer
from request_sequencer.transport import HttpTransport
from request_sequencer.validators import RequestValidator, digits_normalizer

__all__ = [
    "MAX_SAFETY_CAP",
    "Attempt",
    "CancellationToken",
    "Cancelled",
    "ConfigurationError",
    "HttpTransport",
    "ItemResult",
    "ItemStatus",
    "LogSink",
    "Outcome",
    "RequestValidator",
    "RetryExhaustedError",
    "RetryPolicy",
    "RunController",
    "RunRequest",
    "RunState",
    "RunStatus",
    "RunSummary",
    "Sequencer",
    "SequencerConfig",
    "SequencerError",
    "Transport",
    "TransientError",
    "ValidationError",
    "__version__",
    "backoff_delay",
    "controls_locked",
    "digits_normalizer",
]
