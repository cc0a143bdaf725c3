"""
Tests for formatters.

Covers:
- Text (logfmt-style) rendering, quoting, colours
- JSON rendering and payloads
- Reserved-key clash prefixing and FieldMap renames
- Formatters never mutate the entry
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel

from fieldlog.core import Logger
from fieldlog.formatters import (
    FieldMap,
    JsonFormatter,
    TextFormatter,
    prefix_field_clashes,
)
from fieldlog.records import Level


TS = datetime(2026, 2, 12, 14, 32, 5, tzinfo=timezone.utc)


class CaptureSink:
    def __init__(self):
        self.writes: list[bytes] = []

    def write(self, data):
        self.writes.append(bytes(data))


def render(formatter, build=lambda log: log.with_time(TS), message="hello",
           level=Level.INFO, report_caller=False, payload=None):
    sink = CaptureSink()
    log = Logger(out=sink, formatter=formatter, level=Level.TRACE, report_caller=report_caller)
    build(log).log(level, message, payload=payload)
    assert len(sink.writes) == 1
    return sink.writes[0].decode("utf-8")


# ═══════════════════════════════════════════════════════════════════
#  Text
# ═══════════════════════════════════════════════════════════════════

class TestTextFormatter:
    def test_basic_line(self):
        out = render(TextFormatter(), lambda log: log.with_time(TS).with_field("user", "a"))
        assert out == '@timestamp=2026-02-12T14:32:05+00:00 level=info message=hello user=a\n'

    def test_quotes_values_with_spaces(self):
        out = render(TextFormatter(disable_timestamp=True), message="hello world")
        assert 'message="hello world"' in out

    def test_empty_message_quoted(self):
        out = render(TextFormatter(disable_timestamp=True), message="")
        assert 'message=""' in out

    def test_custom_timestamp_format(self):
        out = render(TextFormatter(timestamp_format="%H:%M:%S"))
        assert out.startswith("@timestamp=14:32:05 ")

    def test_keys_sorted(self):
        out = render(
            TextFormatter(disable_timestamp=True),
            lambda log: log.with_fields({"zeta": 1, "alpha": 2}),
        )
        assert out.index("alpha=2") < out.index("zeta=1")

    def test_error_value_rendered_as_message(self):
        out = render(
            TextFormatter(disable_timestamp=True),
            lambda log: log.with_error(ValueError("bad input")),
        )
        assert 'fields.error="bad input"' in out

    def test_payload_field_not_renamed(self):
        out = render(
            TextFormatter(disable_timestamp=True),
            lambda log: log.with_field("payload", "user"),
            payload=Order("o-1", 5),
        )
        assert " payload=user" in out
        assert "fields.payload" not in out

    def test_forced_colors(self):
        out = render(TextFormatter(colors=True, disable_timestamp=True), level=Level.WARN)
        assert "\033[33mwarning\033[0m" in out

    def test_no_colors_for_non_terminal(self):
        out = render(TextFormatter(disable_timestamp=True))
        assert "\033[" not in out

    def test_caller_rendered(self):
        out = render(TextFormatter(disable_timestamp=True), report_caller=True)
        assert "func=" in out
        assert "test_formatters.py:" in out


# ═══════════════════════════════════════════════════════════════════
#  JSON
# ═══════════════════════════════════════════════════════════════════

@dataclass
class Order:
    order_id: str
    qty: int


class Account(BaseModel):
    account_id: str
    balance: float


class TestJsonFormatter:
    def test_valid_json(self):
        out = render(JsonFormatter(), lambda log: log.with_time(TS).with_field("user", "a"))
        parsed = json.loads(out)
        assert parsed == {
            "user": "a",
            "@timestamp": "2026-02-12T14:32:05+00:00",
            "level": "info",
            "message": "hello",
        }

    def test_one_object_per_line(self):
        out = render(JsonFormatter())
        assert out.endswith("\n")
        assert out.count("\n") == 1

    def test_complex_values(self):
        out = render(
            JsonFormatter(),
            lambda log: log.with_fields({"data": (1, 2), "nested": {"a": {"b": 1}}, "when": TS}),
        )
        parsed = json.loads(out)
        assert parsed["data"] == [1, 2]
        assert parsed["nested"] == {"a": {"b": 1}}
        assert parsed["when"] == "2026-02-12T14:32:05+00:00"

    def test_dataclass_payload(self):
        out = render(JsonFormatter(), payload=Order("o-1", 5))
        assert json.loads(out)["payload"] == {"order_id": "o-1", "qty": 5}

    def test_pydantic_payload(self):
        out = render(JsonFormatter(), payload=Account(account_id="acc", balance=1.5))
        assert json.loads(out)["payload"] == {"account_id": "acc", "balance": 1.5}

    def test_caller_keys(self):
        parsed = json.loads(render(JsonFormatter(), report_caller=True))
        assert parsed["func"].endswith(".render")
        assert "test_formatters.py:" in parsed["file"]

    def test_pretty_print(self):
        out = render(JsonFormatter(pretty_print=True))
        assert '\n  "level": "info"' in out


# ═══════════════════════════════════════════════════════════════════
#  Clash prefixing
# ═══════════════════════════════════════════════════════════════════

class TestFieldClashes:
    def test_reserved_keys_prefixed(self):
        out = render(
            JsonFormatter(),
            lambda log: log.with_fields({"message": "user msg", "level": "x", "@timestamp": "t"}),
        )
        parsed = json.loads(out)
        assert parsed["message"] == "hello"
        assert parsed["fields.message"] == "user msg"
        assert parsed["fields.level"] == "x"
        assert parsed["fields.@timestamp"] == "t"

    def test_error_key_always_prefixed(self):
        parsed = json.loads(render(JsonFormatter(), lambda log: log.with_error(ValueError("v"))))
        assert parsed["fields.error"] == "v"
        assert "error" not in parsed

    def test_user_error_field_prefixed(self):
        parsed = json.loads(render(JsonFormatter(), lambda log: log.with_field("error", "user-value")))
        assert parsed["fields.error"] == "user-value"
        assert "error" not in parsed

    def test_payload_field_prefixed_when_payload_rendered(self):
        parsed = json.loads(render(
            JsonFormatter(),
            lambda log: log.with_field("payload", "user"),
            payload=Order("o-1", 5),
        ))
        assert parsed["payload"] == {"order_id": "o-1", "qty": 5}
        assert parsed["fields.payload"] == "user"

    def test_error_key_prefixed_when_note_present(self):
        parsed = json.loads(render(
            JsonFormatter(),
            lambda log: log.with_error(ValueError("v")).with_field("cb", len),
        ))
        assert parsed["error"] == 'can not add field "cb"'
        assert parsed["fields.error"] == "v"
        assert "cb" not in parsed

    def test_func_file_prefixed_only_with_caller(self):
        build = lambda log: log.with_fields({"func": "mine", "file": "f.txt"})
        plain = json.loads(render(JsonFormatter(), build))
        assert plain["func"] == "mine"

        with_caller = json.loads(render(JsonFormatter(), build, report_caller=True))
        assert with_caller["fields.func"] == "mine"
        assert with_caller["fields.file"] == "f.txt"
        assert with_caller["func"] != "mine"

    def test_field_map_renames_reserved_keys(self):
        out = render(
            JsonFormatter(field_map={"message": "msg"}),
            lambda log: log.with_field("msg", "user msg"),
        )
        parsed = json.loads(out)
        assert parsed["msg"] == "hello"
        assert parsed["fields.msg"] == "user msg"
        assert "message" not in parsed

    def test_entry_not_mutated(self):
        sink = CaptureSink()
        log = Logger(out=sink, formatter=JsonFormatter())
        entry = log.with_fields({"message": "user msg"})
        log.formatter.format(entry)
        assert entry.data == {"message": "user msg"}

    def test_prefix_field_clashes_in_place(self):
        log = Logger(out=CaptureSink())
        entry = log.with_field("level", "x")
        data = dict(entry.data)
        prefix_field_clashes(data, FieldMap(), entry)
        assert data == {"fields.level": "x"}

    def test_field_map_resolve(self):
        field_map = FieldMap({"message": "msg"})
        assert field_map.resolve("message") == "msg"
        assert field_map.resolve("level") == "level"
