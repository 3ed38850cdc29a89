from __future__ import annotations

import json
import logging
import random
from pathlib import Path

import pytest
import structlog
from structlog.testing import capture_logs

from esi_processor import ESIProcessor, logging_conf
from esi_processor.logging_conf import SinkLogger


class _ClosedSink:
    def write(self, message: str) -> None:
        raise ValueError("I/O operation on closed file.")


def test_custom_log_output(sink) -> None:
    processor = ESIProcessor(log_to=sink)
    processor.logger.write("test")
    assert sink.messages == ["test"]


def test_log_output_to_file(tmp_path: Path) -> None:
    path = tmp_path / "logger-test-output.txt"
    text = str(random.random())
    with path.open("w", encoding="utf-8") as stream:
        processor = ESIProcessor(log_to=stream)
        processor.logger.write(text)
        # flushed on write, readable before the stream is closed
        assert path.read_text(encoding="utf-8") == text


def test_without_sink_messages_become_structlog_events() -> None:
    with capture_logs() as logs:
        SinkLogger().write("hello")
    assert logs == [{"event": "esi_log", "message": "hello", "log_level": "info"}]


@pytest.mark.asyncio
async def test_failed_includes_are_reported_to_the_sink(server, make_processor, sink, base_url) -> None:
    server.route("/error", (503, ""))
    processor = make_processor(server, log_to=sink)
    assert await processor.process('<esi:include src="/error"/>') == ""
    assert sink.messages == [
        f"ESI include failed: {base_url}/error: HTTP error: status code 503\n"
    ]


@pytest.mark.asyncio
async def test_depth_limit_drops_are_reported_to_the_sink(server, make_processor, sink) -> None:
    server.route("/loop", '<esi:include src="/loop"/>')
    processor = make_processor(server, log_to=sink, max_depth=0)
    assert await processor.process('<esi:include src="/loop"/>') == ""
    assert sink.messages == ["ESI max depth exceeded, dropping include: /loop\n"]


def test_sink_failures_are_reported_not_raised() -> None:
    with capture_logs() as logs:
        SinkLogger(_ClosedSink()).write("lost")
    assert logs[0]["event"] == "log_sink_failed"
    assert logs[0]["log_level"] == "warning"
    assert logs[0]["message"] == "lost"


@pytest.mark.asyncio
async def test_broken_sink_does_not_fail_processing(server, make_processor) -> None:
    server.route("/ok", "fine")
    server.route("/error", (500, ""))
    server.route("/loop", '<esi:include src="/loop"/>')
    processor = make_processor(server, log_to=_ClosedSink(), max_depth=0)
    html = '<a><esi:include src="/ok"/></a><esi:include src="/error"/><esi:include src="/loop"/>'
    assert await processor.process(html) == "<a>fine</a>"


def test_configure_logging_writes_json_to_log_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(logging_conf, "_LOGGING_INITIALISED", False)
    log_file = tmp_path / "logs" / "esi.log"
    package_logger = logging.getLogger("esi_processor")
    try:
        logger = logging_conf.configure_logging(log_file=log_file)
        logger.info("file_event", url="http://fragments.test/x")
        for handler in package_logger.handlers:
            handler.flush()
        record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    finally:
        structlog.reset_defaults()
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()
    assert record["event"] == "file_event"
    assert record["url"] == "http://fragments.test/x"
    assert record["levelname"] == "INFO"
    assert record["name"] == "esi_processor"
