"""Адаптеры приемников строк статуса."""

from __future__ import annotations

from request_sequencer.adapters.logger import LoggerLogSink
from request_sequencer.adapters.memory import BufferedLogSink, MemoryLogSink

__all__ = ["BufferedLogSink", "LoggerLogSink", "MemoryLogSink"]
