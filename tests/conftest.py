"""Фикстуры pytest для тестирования request-sequencer."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from request_sequencer.adapters.memory import MemoryLogSink
from request_sequencer.cancellation import CancellationToken
from request_sequencer.exceptions import TransientError
from request_sequencer.interfaces import Transport
from request_sequencer.models import Outcome, RunRequest


class ScriptedTransport(Transport):
    """Транспорт-заглушка, отвечающий по заранее заданному сценарию.

    Элемент сценария - Outcome, исключение или функция от токена.
    Когда сценарий исчерпан, повторяется последний элемент.
    """

    def __init__(self, script: list[Any]) -> None:
        self.script = list(script)
        self.calls: list[str] = []

    async def send(self, target: str, token: CancellationToken) -> Outcome:
        token.raise_if_cancelled()
        self.calls.append(target)
        step = self.script[min(len(self.calls), len(self.script)) - 1]
        if callable(step) and not isinstance(step, type):
            step = step(token)
        if isinstance(step, BaseException):
            raise step
        token.raise_if_cancelled()
        return step


@pytest.fixture
def sink() -> MemoryLogSink:
    """Создает приемник строк статуса в памяти."""
    return MemoryLogSink()


@pytest.fixture
def ok_outcome() -> Outcome:
    return Outcome(ok=True, status=200, body='{"status":"sent"}')


@pytest.fixture
def scripted() -> Callable[..., ScriptedTransport]:
    """Фабрика транспортов-заглушек."""

    def factory(*script: Any) -> ScriptedTransport:
        return ScriptedTransport(list(script))

    return factory


@pytest.fixture
def always_transient(scripted: Callable[..., ScriptedTransport]) -> ScriptedTransport:
    """Транспорт, который всегда завершается сетевой ошибкой."""
    return scripted(TransientError("Network error: connection reset"))


@pytest.fixture
def run_request() -> RunRequest:
    return RunRequest(target="client-0042", count=2, inter_item_delay=0.01)


@pytest.fixture
def recorded_sleeps(monkeypatch: pytest.MonkeyPatch) -> list[tuple[float, float | None]]:
    """Подменяет ожидание токена мгновенным и записывает запрошенные паузы."""
    recorded: list[tuple[float, float | None]] = []

    async def fake_sleep(
        self: CancellationToken, seconds: float, poll_interval: float | None = None
    ) -> None:
        recorded.append((seconds, poll_interval))
        self.raise_if_cancelled()

    monkeypatch.setattr(CancellationToken, "sleep", fake_sleep)
    return recorded
