# Idemark v1.0.0 - Logging Tests
"""
Unit tests for the JSON formatter and import context filter.
"""
import json
import logging

from idemark_backend.core.logging import (
    CustomJsonFormatter,
    ImportContextFilter,
    truncate,
)
from idemark_backend.models import ImportStrategy


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="idemark_backend.services.import_orchestrator",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Import failed for %s",
        args=("https://idestrim.site/idea/1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def format_json(record: logging.LogRecord) -> dict:
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", timestamp=True)
    return json.loads(formatter.format(record))


class TestCustomJsonFormatter:
    """Tests for CustomJsonFormatter."""

    def test_service_metadata(self):
        payload = format_json(make_record())

        assert payload["service"] == "idemark"
        assert payload["level"] == "WARNING"
        assert payload["message"] == "Import failed for https://idestrim.site/idea/1"

    def test_import_context_written(self):
        payload = format_json(make_record(
            import_url="https://idestrim.site/idea/1",
            strategy=ImportStrategy.AUTO,
            stage="failed",
            error_code="IMPORT_FAILED",
        ))

        assert payload["import_url"] == "https://idestrim.site/idea/1"
        assert payload["strategy"] == "auto"
        assert payload["stage"] == "failed"
        assert payload["error_code"] == "IMPORT_FAILED"

    def test_placeholders_left_out(self):
        """Test filter defaults do not show up as JSON keys."""
        record = make_record(stage="resolving")
        ImportContextFilter().filter(record)

        payload = format_json(record)
        assert payload["stage"] == "resolving"
        assert "import_url" not in payload
        assert "error_code" not in payload


class TestImportContextFilter:
    """Tests for ImportContextFilter."""

    def test_defaults_missing_keys(self):
        record = make_record(strategy="api")

        assert ImportContextFilter().filter(record) is True
        assert record.strategy == "api"
        assert record.stage == "-"
        assert record.import_url == "-"

    def test_text_format_renders_context(self):
        formatter = logging.Formatter("[%(strategy)s %(stage)s] %(message)s")
        record = make_record(stage="validating")
        ImportContextFilter().filter(record)

        assert formatter.format(record) == (
            "[- validating] Import failed for https://idestrim.site/idea/1"
        )


class TestTruncate:

    def test_short_text_collapsed(self):
        assert truncate("a\n  b") == "a b"

    def test_long_text_cut(self):
        assert truncate("x" * 10, limit=4) == "xxxx..."
