import io
import json
import logging
import sys
import unittest

from rbmerge.core.models import Signature
from rbmerge.logging.factory import DefaultLoggerFactory
from rbmerge.logging.helpers import JsonLogFormatter, get_logger, setup_base_logger, trace_merge
from rbmerge.merging.strategies import Strategy


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


# ───────────────────────── namespacing ─────────────────────────
class LoggerNamespaceTests(unittest.TestCase):
    def test_names_are_prefixed(self):
        self.assertEqual(get_logger("engine").name, "rbmerge.engine")
        self.assertEqual(get_logger("rbmerge.cli").name, "rbmerge.cli")
        self.assertEqual(get_logger().name, "rbmerge")

    def test_factory_caches_loggers(self):
        factory = DefaultLoggerFactory(stream=io.StringIO())
        self.assertIs(factory.get_logger("cli"), factory.get_logger("cli"))

    def test_from_flags_verbose_sets_debug(self):
        factory = DefaultLoggerFactory.from_flags(json_logs=True, verbose=True)
        self.assertTrue(factory.json_logs)
        self.assertEqual(factory.level, logging.DEBUG)


# ───────────────────────── JSON formatter ─────────────────────────
class JsonFormatterTests(unittest.TestCase):
    def test_context_with_signature_serializes(self):
        record = logging.LogRecord("rbmerge.engine", logging.DEBUG, __file__, 1, "dropped duplicate", None, None)
        record.context = {"signature": Signature("call", "gem", "rake")}
        payload = json.loads(JsonLogFormatter().format(record))
        self.assertEqual(payload["msg"], "dropped duplicate")
        self.assertEqual(payload["level"], "DEBUG")
        self.assertEqual(payload["ctx"]["signature"], {"family": "call", "name": "gem", "key": "rake"})

    def test_enum_context_and_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "rbmerge.source_merger", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )
        record.context = {"strategy": Strategy.MERGE}
        payload = json.loads(JsonLogFormatter().format(record))
        self.assertEqual(payload["ctx"], {"strategy": "merge"})
        self.assertIn("ValueError: boom", payload["exc"])


# ───────────────────────── base logger setup ─────────────────────────
class BaseLoggerTests(unittest.TestCase):
    def test_reconfiguring_swaps_formatter_on_one_handler(self):
        first, second = io.StringIO(), io.StringIO()
        base = setup_base_logger(json_logs=False, stream=first)
        base = setup_base_logger(json_logs=True, stream=second)
        handlers = [h for h in base.handlers if h.get_name() == "rbmerge-stream"]
        self.assertEqual(len(handlers), 1)
        self.assertIsInstance(handlers[0].formatter, JsonLogFormatter)
        get_logger("cli").warning("merged %s", "Gemfile")
        self.assertEqual(first.getvalue(), "")
        self.assertEqual(json.loads(second.getvalue())["msg"], "merged Gemfile")
        setup_base_logger(json_logs=False, stream=sys.stderr)


# ───────────────────────── tracing ─────────────────────────
def test_trace_merge_is_silent_without_env(monkeypatch):
    monkeypatch.delenv("RBMERGE_TRACE", raising=False)
    log = logging.getLogger("rbmerge.test.trace_off")
    handler = _ListHandler()
    log.addHandler(handler)
    log.setLevel(logging.DEBUG)
    try:
        trace_merge(log, "kept template block", kind="block")
    finally:
        log.removeHandler(handler)
    assert handler.records == []


def test_trace_merge_attaches_context(monkeypatch):
    monkeypatch.setenv("RBMERGE_TRACE", "1")
    log = logging.getLogger("rbmerge.test.trace_on")
    handler = _ListHandler()
    log.addHandler(handler)
    log.setLevel(logging.DEBUG)
    try:
        trace_merge(log, "kept template block", kind="block")
    finally:
        log.removeHandler(handler)
    assert len(handler.records) == 1
    assert handler.records[0].context == {"kind": "block"}
