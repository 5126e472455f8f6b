"""
Tests for stable_sha256 hashing function in core.codec module.
Required to ensure consistent hashing of data structures regardless
of order. Used for trace hash chaining and message fingerprints.
"""

from packages.core.codec import canonical_json_bytes, fingerprint, stable_sha256
from packages.core.types import Effort, RequestedReasoning, TraceEvent

def test_hash_stable_for_equivalent_dict_order():
    a = {"b": 2, "a": 1}
    b = {"a": 1, "b": 2}
    assert stable_sha256(a) == stable_sha256(b)

def test_hash_stable_for_dataclass():
    e1 = TraceEvent(request_id=1, type="RequestReceived", ts_utc="t", payload={"b": 2, "a": 1})
    e2 = TraceEvent(request_id=1, type="RequestReceived", ts_utc="t", payload={"a": 1, "b": 2})
    assert stable_sha256(e1) == stable_sha256(e2)

def test_enums_encode_as_their_value():
    r = RequestedReasoning(enabled=True, effort=Effort.high)
    assert canonical_json_bytes(r) == b'{"effort":"high","enabled":true}'

def test_fingerprint_is_short_prefix():
    h = stable_sha256("strawberry")
    assert isinstance(h, str) and len(h) == 64
    assert fingerprint("strawberry") == h[:16]
    assert fingerprint("strawberry", length=8) == h[:8]
