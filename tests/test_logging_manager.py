from __future__ import annotations

import json
import logging

import pytest

from content_reactor import logging_manager as log_mgr

pytestmark = pytest.mark.config


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "content_reactor.services.translation",
        logging.INFO,
        __file__,
        10,
        "hello %s",
        ("zh",),
        None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_promotes_reaction_fields_and_nests_the_rest() -> None:
    payload = json.loads(
        log_mgr.ReactionLogFormatter().format(
            _record(event="translation.created", record_id=7, locale="zh-Hant", skipped=None)
        )
    )

    assert payload["message"] == "hello zh"
    assert payload["level"] == "INFO"
    assert payload["event"] == "translation.created"
    assert payload["record_id"] == 7
    assert payload["details"] == {"locale": "zh-Hant"}


def test_context_injector_fills_missing_keys_only() -> None:
    injector = log_mgr.ContextInjector()
    with log_mgr.log_context(reaction="cover", record_id=3, document_id=None):
        record = _record(record_id=99)
        assert injector.filter(record)

    assert record.reaction == "cover"
    assert record.record_id == 99
    assert not hasattr(record, "document_id")


def test_log_context_restores_previous_values() -> None:
    log_mgr.clear_log_context()
    with log_mgr.log_context(reaction="citations"):
        with log_mgr.log_context(guard_key="citations:doc-1"):
            assert log_mgr.get_log_context() == {
                "reaction": "citations",
                "guard_key": "citations:doc-1",
            }
        assert log_mgr.get_log_context() == {"reaction": "citations"}
    assert log_mgr.get_log_context() == {}


def test_configure_logging_level_prefers_explicit_level() -> None:
    try:
        assert log_mgr.configure_logging_level(debug_enabled=True) == logging.DEBUG
        assert (
            log_mgr.configure_logging_level(debug_enabled=True, log_level=logging.WARNING)
            == logging.WARNING
        )
        assert log_mgr.get_logger().level == logging.WARNING
    finally:
        log_mgr.configure_logging_level()
