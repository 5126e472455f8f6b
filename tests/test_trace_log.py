"""
Tests for trace log writing, verification, redaction and rotation.
"""

import json
from pathlib import Path

from packages.core.trace import NullTraceWriter, TraceWriter, redact_text, verify_trace_log


def _events(path: Path):
    return [json.loads(ln) for ln in path.read_text(encoding="utf-8").splitlines() if ln.strip()]


def test_trace_appends_and_verifies(tmp_path: Path):
    log = tmp_path / "logs" / "trace.jsonl"
    w = TraceWriter(log)
    w.append(0, "TransformerStarted", {"x": "y"})
    w.append(1, "RequestReceived", {"model": "glm-4.6"})
    ok, err = verify_trace_log(log)
    assert ok is True
    assert err is None

    evs = _events(log)
    assert evs[0]["prev_hash"] is None
    assert evs[1]["prev_hash"] == evs[0]["hash"]


def test_trace_tamper_detected(tmp_path: Path):
    log = tmp_path / "logs" / "trace.jsonl"
    w = TraceWriter(log)
    w.append(0, "TransformerStarted", {"x": "y"})
    w.append(1, "RequestReceived", {"ok": True})

    # Tamper with first line
    lines = log.read_text(encoding="utf-8").splitlines()
    lines[0] = lines[0].replace('"y"', '"z"')
    log.write_text("\n".join(lines) + "\n", encoding="utf-8")

    ok, err = verify_trace_log(log)
    assert ok is False
    assert err is not None


def test_new_writer_resumes_existing_chain(tmp_path: Path):
    log = tmp_path / "trace.jsonl"
    TraceWriter(log).append(0, "TransformerStarted", {})
    TraceWriter(log).append(1, "RequestReceived", {})
    ok, err = verify_trace_log(log)
    assert ok is True, err


def test_missing_log_does_not_verify(tmp_path: Path):
    ok, err = verify_trace_log(tmp_path / "nope.jsonl")
    assert ok is False
    assert err == "trace log does not exist"


def test_payload_strings_are_redacted(tmp_path: Path):
    log = tmp_path / "trace.jsonl"
    w = TraceWriter(log)
    secret = "sk-" + "a" * 32
    ev = w.append(1, "RequestReceived", {"headers": {"authorization": f"Bearer {'b' * 24}"}, "notes": [secret]})

    assert secret not in log.read_text(encoding="utf-8")
    assert ev.payload["notes"] == ["[REDACTED]"]
    assert "b" * 24 not in ev.payload["headers"]["authorization"]


def test_redact_text_keeps_ordinary_text():
    assert redact_text("how many letters in strawberry") == "how many letters in strawberry"
    assert redact_text('api_key = "abc123"') == "[REDACTED]"


def test_rotation_starts_new_part_and_chain(tmp_path: Path):
    log = tmp_path / "zai-transformer-x.jsonl"
    w = TraceWriter(log, max_bytes=200)
    w.append(0, "TransformerStarted", {"pad": "x" * 250})
    w.append(1, "RequestReceived", {"model": "glm-4.6"})

    part = tmp_path / "zai-transformer-x-part1.jsonl"
    assert part.exists()
    assert [e["type"] for e in _events(part)] == ["TransformerStarted"]

    evs = _events(log)
    assert [e["type"] for e in evs] == ["TraceRotated", "RequestReceived"]
    assert evs[0]["payload"] == {"part": 1, "previous": part.name}
    assert evs[0]["prev_hash"] is None

    assert verify_trace_log(part) == (True, None)
    assert verify_trace_log(log) == (True, None)


def test_rotation_numbers_parts_in_order(tmp_path: Path):
    log = tmp_path / "t.jsonl"
    w = TraceWriter(log, max_bytes=1)
    for rid in range(3):
        w.append(rid, "RequestReceived", {})
    assert (tmp_path / "t-part1.jsonl").exists()
    assert (tmp_path / "t-part2.jsonl").exists()
    assert not (tmp_path / "t-part3.jsonl").exists()


def test_null_writer_writes_nothing(tmp_path: Path):
    w = NullTraceWriter()
    assert w.append(1, "RequestReceived", {"x": 1}) is None
    assert list(tmp_path.iterdir()) == []
