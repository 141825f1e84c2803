"""Контроллер прогона: конечный автомат Idle/Running/CancelRequested."""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from request_sequencer.cancellation import CancellationToken
from request_sequencer.config import MAX_SAFETY_CAP, SequencerConfig
from request_sequencer.interfaces import LogSink, Transport
from request_sequencer.logging import get_logger
from request_sequencer.models import (
    ItemResult,
    ItemStatus,
    RunRequest,
    RunState,
    RunStatus,
    RunSummary,
)
from request_sequencer.retry import RetryPolicy
from request_sequencer.sequencer import Sequencer
from request_sequencer.transport import HttpTransport

StateListener = Callable[[RunState], None]


class RunController:
    """Владелец состояния прогона и токена отмены.

    Единственный, кто меняет RunState и взводит токен; секвенсор, политика
    повторов и транспорт только наблюдают за токеном. Одновременно
    выполняется не больше одного прогона.

    Переходы:
        IDLE -> RUNNING -> IDLE (завершение или ошибка)
        RUNNING -> CANCEL_REQUESTED -> IDLE (остановка пользователем)

    Пример использования:
        >>> controller = RunController(sequencer, sink, safety_cap=2)
        >>> summary = await controller.start(request)
        >>> # из другой задачи того же цикла событий:
        >>> controller.stop()

    Attributes:
        sequencer: Секвенсор элементов
        sink: Приемник строк статуса
        safety_cap: Предел числа элементов за прогон
    """

    def __init__(
        self,
        sequencer: Sequencer,
        sink: LogSink,
        safety_cap: int = MAX_SAFETY_CAP,
        route: str = "direct",
    ) -> None:
        """Инициализирует контроллер.

        Args:
            sequencer: Секвенсор элементов
            sink: Приемник строк статуса
            safety_cap: Предел числа элементов за прогон
            route: Описание маршрута для баннера

        Raises:
            ValueError: Если safety_cap вне диапазона 1..MAX_SAFETY_CAP
        """
        if not 1 <= safety_cap <= MAX_SAFETY_CAP:
            raise ValueError(f"safety_cap must be between 1 and {MAX_SAFETY_CAP}")
        self.sequencer = sequencer
        self.sink = sink
        self.safety_cap = safety_cap
        self.route = route
        self._state = RunState.IDLE
        self._token: CancellationToken | None = None
        self._results: list[ItemResult] = []
        self._listeners: list[StateListener] = []
        self._owned_transport: HttpTransport | None = None
        self._logger = get_logger("controller")

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def results(self) -> list[ItemResult]:
        """Результаты текущего (или последнего) прогона, копия."""
        return list(self._results)

    def add_listener(self, listener: StateListener) -> None:
        """Подписывает обработчик на смену состояния.

        Обработчик вызывается синхронно при каждом переходе; через него
        интерфейс блокирует и разблокирует поля ввода.

        Args:
            listener: Функция, принимающая новое состояние
        """
        self._listeners.append(listener)

    def clamp(self, request: RunRequest) -> RunRequest:
        """Ограничивает количество элементов сверху пределом безопасности.

        Неположительное количество не исправляется: его отвергает секвенсор.
        """
        if request.count <= self.safety_cap:
            return request
        return replace(request, count=self.safety_cap)

    @classmethod
    def from_config(
        cls,
        config: SequencerConfig,
        sink: LogSink,
        transport: Transport | None = None,
        rng: random.Random | None = None,
    ) -> RunController:
        """Собирает контроллер со всей цепочкой компонентов по конфигурации.

        Args:
            config: Конфигурация
            sink: Приемник строк статуса
            transport: Транспорт (по умолчанию HttpTransport по config)
            rng: Источник случайности для jitter

        Returns:
            Готовый к запуску RunController

        Если транспорт создан здесь, контроллер владеет им и закрывает его
        в aclose().

        Raises:
            ConfigurationError: Если транспорт не передан, а endpoint не задан
        """
        owned = None
        if transport is None:
            transport = owned = HttpTransport(config)
        policy = RetryPolicy.from_config(transport, config, rng=rng)
        sequencer = Sequencer(
            policy,
            sink,
            poll_interval=config.poll_interval,
            body_preview=config.body_preview,
        )
        controller = cls(
            sequencer, sink, safety_cap=config.safety_cap, route=transport.route
        )
        controller._owned_transport = owned
        return controller

    async def aclose(self) -> None:
        """Закрывает транспорт, созданный в from_config()."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()
            self._owned_transport = None

    async def __aenter__(self) -> RunController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def start(self, request: RunRequest) -> RunSummary | None:
        """Запускает прогон и дожидается его завершения.

        Допустим только из IDLE; при повторном вызове во время прогона
        запрос отклоняется. Исключения наружу не выходят: по завершению
        прогона (успешному, частичному, отмененному или аварийному)
        состояние всегда возвращается в IDLE.

        Args:
            request: Провалидированный запрос

        Returns:
            RunSummary по завершении или None, если запуск отклонен
        """
        if self._state is not RunState.IDLE:
            self._logger.warning(
                "Start rejected: a run is already in progress",
                extra={"state": self._state.value},
            )
            return None

        effective = self.clamp(request)
        token = CancellationToken()
        self._token = token
        self._results = []
        summary = RunSummary(
            status=RunStatus.COMPLETED,
            request=effective,
            requested_count=request.count,
            started_at=datetime.now(),
        )
        try:
            self._set_state(RunState.RUNNING)
            self._announce(effective, clipped=summary.clipped)
            self._logger.info(
                f"Starting run of {effective.count} items",
                extra={"requested": request.count, "effective": effective.count},
            )
            async for item in self.sequencer.run(effective, token):
                self._results.append(item)
            if token.cancelled or any(
                item.status is ItemStatus.CANCELLED for item in self._results
            ):
                summary.status = RunStatus.CANCELLED
                self.sink.emit("Run stopped: Cancelled by user.")
        except Exception as e:
            summary.status = RunStatus.FAILED
            summary.error = str(e)
            self._logger.error(f"Run failed: {e}", exc_info=True)
            self.sink.emit(f"Run stopped: {e}")
        finally:
            summary.items = list(self._results)
            summary.finished_at = datetime.now()
            self._token = None
            self._set_state(RunState.IDLE)
            self.sink.emit("STATUS: Ready.")
            self.sink.flush()

        self._logger.info(
            f"Run finished: {summary.status.value}",
            extra={"items": summary.dispatched_indices},
        )
        return summary

    def stop(self) -> bool:
        """Запрашивает остановку текущего прогона.

        Имеет эффект только в RUNNING; в остальных состояниях ничего
        не делает, поэтому повторный вызов безопасен.

        Returns:
            True, если остановка была запрошена этим вызовом
        """
        if self._state is not RunState.RUNNING or self._token is None:
            return False
        self._token.cancel()
        self._set_state(RunState.CANCEL_REQUESTED)
        self.sink.emit("STATUS: Cancelled by user.")
        self.sink.flush()
        self._logger.info("Stop requested")
        return True

    def _announce(self, request: RunRequest, clipped: bool) -> None:
        """Пишет баннер начала прогона."""
        self.sink.reset("SEQUENCE INITIATED.")
        if clipped:
            self.sink.emit(
                f"NOTE: amount clipped to safe maximum of {self.safety_cap}."
            )
        self.sink.emit(f"TARGET: {request.target}")
        self.sink.emit(f"A: {request.count} | D: {request.inter_item_delay:g}s")
        self.sink.emit(f"ROUTE: {self.route}")
        self.sink.emit("STATUS: RUNNING...")

    def _set_state(self, state: RunState) -> None:
        """Меняет состояние и оповещает подписчиков.

        Ошибка подписчика логируется и не мешает переходу.
        """
        self._state = state
        for listener in self._listeners:
            try:
                listener(state)
            except Exception as e:
                self._logger.error(
                    f"State listener failed on {state.value}: {e}", exc_info=True
                )
