"""
Базовый пример использования request-sequencer.

Демонстрирует прогон с ограничением количества, паузой между элементами
и остановкой пользователем. Вместо сети используется локальный транспорт,
поэтому пример запускается без настроенного endpoint.
"""

from __future__ import annotations

import asyncio
import random

from request_sequencer import (
    CancellationToken,
    Outcome,
    RequestValidator,
    RunController,
    SequencerConfig,
    Transport,
    TransientError,
    controls_locked,
)
from request_sequencer.adapters import MemoryLogSink


class FlakyLocalTransport(Transport):
    """Локальный транспорт, иногда имитирующий сетевую ошибку."""

    def __init__(self, failure_rate: float = 0.3) -> None:
        self.failure_rate = failure_rate

    async def send(self, target: str, token: CancellationToken) -> Outcome:
        token.raise_if_cancelled()
        await asyncio.sleep(0.1)
        if random.random() < self.failure_rate:
            raise TransientError("Network error: simulated reset")
        token.raise_if_cancelled()
        return Outcome(ok=True, status=200, body='{"status":"accepted"}')


async def main() -> None:
    """Основная функция для запуска примера."""
    print("=== Базовый пример использования request-sequencer ===\n")

    config = SequencerConfig(poll_interval=0.1)
    sink = MemoryLogSink()
    controller = RunController.from_config(config, sink, transport=FlakyLocalTransport())
    controller.add_listener(
        lambda state: print(f"state={state.value} locked={controls_locked(state)}")
    )

    # Количество 5 будет урезано до предела безопасности
    request = RequestValidator().parse("client-0042-117", "5", "1")
    summary = await controller.start(request)
    print("\n".join(sink.lines))
    print(f"\nСтатус: {summary.status.value}, элементов: {len(summary.items)}\n")

    # Остановка во время паузы между элементами
    task = asyncio.create_task(controller.start(RequestValidator().parse("client-0042-117", "2", "5")))
    await asyncio.sleep(0.5)
    controller.stop()
    summary = await task
    print("\n".join(sink.lines))
    print(f"\nСтатус: {summary.status.value}, элементов: {len(summary.items)}")


if __name__ == "__main__":
    asyncio.run(main())
