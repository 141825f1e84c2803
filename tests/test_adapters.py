"""Тесты для приемников строк статуса."""

from __future__ import annotations

import logging

import pytest

from request_sequencer.adapters import BufferedLogSink, LoggerLogSink, MemoryLogSink


class TestMemoryLogSink:
    """Тесты для MemoryLogSink."""

    def test_emit_appends(self) -> None:
        sink = MemoryLogSink()
        sink.emit("one")
        sink.emit("two")
        assert sink.lines == ["one", "two"]
        assert sink.text == "one\ntwo"

    def test_reset_replaces_output(self) -> None:
        """Тест: reset начинает вывод заново."""
        sink = MemoryLogSink()
        sink.emit("old")
        sink.reset("SEQUENCE INITIATED.")
        assert sink.lines == ["SEQUENCE INITIATED."]

    def test_lines_is_a_copy(self) -> None:
        sink = MemoryLogSink()
        sink.lines.append("x")
        assert sink.lines == []

    def test_flush_is_noop(self) -> None:
        sink = MemoryLogSink()
        sink.emit("one")
        sink.flush()
        assert sink.lines == ["one"]


class TestBufferedLogSink:
    """Тесты для BufferedLogSink."""

    def test_flushes_in_batches(self) -> None:
        """Тест: строки уходят пачками по flush_every."""
        batches: list[tuple[list[str], bool]] = []
        sink = BufferedLogSink(lambda lines, clear: batches.append((lines, clear)), flush_every=2)

        sink.emit("a")
        assert batches == []
        assert sink.pending == 1
        sink.emit("b")
        sink.emit("c")

        assert batches == [(["a", "b"], False)]
        sink.flush()
        assert batches[-1] == (["c"], False)
        assert sink.pending == 0

    def test_flush_empty_is_noop(self) -> None:
        batches: list = []
        sink = BufferedLogSink(lambda lines, clear: batches.append(lines))
        sink.flush()
        assert batches == []

    def test_reset_drops_queue_and_clears(self) -> None:
        batches: list[tuple[list[str], bool]] = []
        sink = BufferedLogSink(lambda lines, clear: batches.append((lines, clear)))

        sink.emit("stale")
        sink.reset("SEQUENCE INITIATED.")

        assert batches == [(["SEQUENCE INITIATED."], True)]
        assert sink.pending == 0

    def test_invalid_flush_every(self) -> None:
        with pytest.raises(ValueError, match="flush_every must be greater than 0"):
            BufferedLogSink(lambda lines, clear: None, flush_every=0)


class TestLoggerLogSink:
    """Тесты для LoggerLogSink."""

    def test_forwards_lines(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = LoggerLogSink()
        with caplog.at_level(logging.INFO, logger="request_sequencer"):
            sink.reset("SEQUENCE INITIATED.")
            sink.emit("\n[1/1] Sending (up to 3 attempts)...")
            sink.emit("\n")

        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["SEQUENCE INITIATED.", "[1/1] Sending (up to 3 attempts)..."]
        assert all(record.component == "status" for record in caplog.records)
