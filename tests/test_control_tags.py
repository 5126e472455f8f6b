"""
Tests for inline <Thinking:...> / <Effort:...> tag scanning and stripping.
"""

from packages.core.types import Effort
from packages.messages.tags import TagScan, scan_all, scan_tags, strip_tags


def test_scan_both_tags():
    t = scan_tags("<Thinking:On><Effort:High> explain this")
    assert t.thinking is True
    assert t.effort is Effort.high
    assert t.count == 2
    assert t.found


def test_scan_is_case_insensitive():
    t = scan_tags("<thinking:OFF> hi <EFFORT:low>")
    assert t.thinking is False
    assert t.effort is Effort.low


def test_last_tag_of_a_kind_wins():
    t = scan_tags("<Thinking:On> a <Thinking:Off> b <Effort:Low><Effort:Medium>")
    assert t.thinking is False
    assert t.effort is Effort.medium
    assert t.count == 4


def test_no_tags():
    t = scan_tags("just a question")
    assert t.found is False
    assert t.thinking is None
    assert t.effort is None
    assert scan_tags("").found is False


def test_malformed_tags_are_plain_text():
    for text in ["<Thinking:On explain", "<Thinking:Maybe>", "<Effort:Max> go", "Thinking:On", "< Thinking : On >", "<Thinking: On>"]:
        assert scan_tags(text).found is False
        assert strip_tags(text) == text


def test_strip_removes_tags_and_following_spaces():
    assert strip_tags("<Thinking:On><Effort:High> explain this") == "explain this"
    assert strip_tags("explain <Effort:Low> this") == "explain this"
    assert strip_tags("explain this <Thinking:Off>") == "explain this "


def test_strip_leaves_untagged_text_alone():
    text = "  keep my   spacing  "
    assert strip_tags(text) == text


def test_strip_keeps_surrounding_whitespace():
    code = "    def f():\n        return 1\n\n<Effort:Low>"
    assert strip_tags(code) == "    def f():\n        return 1\n\n"
    assert strip_tags("  <Thinking:On>\tindented\n") == "  indented\n"


def test_scan_all_merges_in_order():
    t = scan_all(["<Thinking:On> a", "b", "<Thinking:Off><Effort:High>"])
    assert t == TagScan(thinking=False, effort=Effort.high, count=3)
    assert scan_all([]) == TagScan()


def test_tag_split_across_texts_is_not_a_tag():
    assert scan_all(["hi <Thinking:", "On>"]).found is False
