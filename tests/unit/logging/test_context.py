"""Tests for request context logging."""

import asyncio
import json
import logging

import pytest

from minfo.config.models import LoggingConfig
from minfo.logging import (
    JSONFormatter,
    RequestContextFilter,
    configure_logging,
    get_request_context,
    request_context,
)


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="minfo.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestContext:
    """Tests for request_context."""

    def test_sets_and_restores(self):
        """Values are visible inside the block and reset afterwards."""
        assert get_request_context() == (None, None)
        with request_context("abc123", "/api/mediainfo") as rid:
            assert rid == "abc123"
            assert get_request_context() == ("abc123", "/api/mediainfo")
        assert get_request_context() == (None, None)

    def test_generates_id(self):
        """A short random id is generated when none is given."""
        with request_context() as rid:
            assert len(rid) == 8
            assert get_request_context()[0] == rid

    def test_nested_contexts_restore_outer(self):
        """Leaving an inner context restores the outer one."""
        with request_context("outer"):
            with request_context("inner"):
                assert get_request_context()[0] == "inner"
            assert get_request_context()[0] == "outer"

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self):
        """Concurrent tasks each see only their own request id."""
        seen: dict[str, str | None] = {}

        async def _handle(rid: str) -> None:
            with request_context(rid):
                await asyncio.sleep(0.01)
                seen[rid] = get_request_context()[0]

        await asyncio.gather(_handle("one"), _handle("two"))

        assert seen == {"one": "one", "two": "two"}


class TestRequestContextFilter:
    """Tests for RequestContextFilter."""

    def test_adds_tag_inside_request(self):
        """Records inside a request get the id, path and tag."""
        record = _record()
        with request_context("3f2a9c1e", "/api/bdinfo"):
            assert RequestContextFilter().filter(record)

        assert record.request_id == "3f2a9c1e"
        assert record.request_path == "/api/bdinfo"
        assert record.request_tag == "[3f2a9c1e] "

    def test_empty_tag_outside_request(self):
        """Records outside a request have an empty tag."""
        record = _record()
        RequestContextFilter().filter(record)
        assert record.request_id is None
        assert record.request_tag == ""


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        """Output carries timestamp, level, logger and message."""
        entry = json.loads(JSONFormatter().format(_record("resolved source")))

        assert entry["level"] == "info"
        assert entry["message"] == "resolved source"
        assert entry["logger"] == "minfo.test"
        assert "timestamp" in entry
        assert "context" not in entry

    def test_extra_and_request_fields_in_context(self):
        """Request fields are top level; extra attributes go under context."""
        record = _record(command="ffprobe", request_id="abcd", request_tag="[abcd] ")
        entry = json.loads(JSONFormatter().format(record))

        assert entry["request_id"] == "abcd"
        assert entry["context"] == {"command": "ffprobe"}


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers = root.handlers[:]
        level = root.level
        yield root
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_file_handler_writes_json(self, temp_dir, restore_root_logger):
        """A JSON file handler receives tagged records."""
        log_file = temp_dir / "logs" / "minfo.log"
        configure_logging(LoggingConfig(level="debug", file=log_file, format="json"))

        with request_context("feedbeef"):
            logging.getLogger("minfo.test").info("mounted")
        for handler in restore_root_logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "mounted"
        assert entry["request_id"] == "feedbeef"
        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
