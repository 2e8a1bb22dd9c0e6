"""
Structured logging tests.
"""

import json
import logging

from vitalscribe.core.structured_logger import JSONFormatter, configure_logging, get_logger

from conftest import OWNER


def test_structured_logger_emits_json_payload(caplog):
    caplog.set_level(logging.INFO, logger="vitalscribe")

    get_logger("vitalscribe.test").info("import_started", owner_id="doc", rows=3)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload == {"event": "import_started", "owner_id": "doc", "rows": 3}


def test_json_formatter_fields():
    record = logging.LogRecord("vitalscribe", logging.WARNING, __file__, 10, "hello", None, None)
    line = json.loads(JSONFormatter().format(record))

    assert line["level"] == "WARNING"
    assert line["logger"] == "vitalscribe"
    assert line["message"] == "hello"


def test_configure_logging_is_idempotent():
    logger = configure_logging("INFO", "text")
    configure_logging("DEBUG", "json")

    ours = [h for h in logger.handlers if getattr(h, "_vitalscribe_handler", False)]
    assert len(ours) == 1
    assert isinstance(ours[0].formatter, JSONFormatter)
    assert logger.level == logging.DEBUG


async def test_import_logs_counts_without_patient_values(caplog, import_use_case):
    caplog.set_level(logging.DEBUG, logger="vitalscribe")

    await import_use_case.execute_rows(
        [{"Nombre": "Ana Ruiz", "Teléfono": "0991234567"}, {"Nombre": "J"}], OWNER
    )

    events = [json.loads(r.getMessage())["event"] for r in caplog.records if r.getMessage().startswith("{")]
    assert "import_started" in events
    assert "import_finished" in events
    assert "row_rejected" in events
    assert "Ana Ruiz" not in caplog.text
    assert "0991234567" not in caplog.text
