"""Tests for key and LIKE-pattern helpers."""

import pytest

from keyv_hana._internal.patterns import (
    build_composite_id,
    build_prefix_pattern,
    escape_like,
    like_to_regex,
    quote_identifier,
)


@pytest.mark.parametrize(
    ("raw", "escaped"),
    [
        ("plain", "plain"),
        ("100%", "100\\%"),
        ("a_b", "a\\_b"),
        ("back\\slash", "back\\\\slash"),
        ("%_\\", "\\%\\_\\\\"),
        ("", ""),
    ],
)
def test_escape_like(raw, escaped):
    assert escape_like(raw) == escaped


def test_prefix_pattern_with_namespace():
    assert build_prefix_pattern("ns") == "ns:%"
    assert build_prefix_pattern("a_b") == "a\\_b:%"


def test_prefix_pattern_without_namespace():
    assert build_prefix_pattern(None) == "%"
    assert build_prefix_pattern("") == "%"


def test_composite_id():
    assert build_composite_id("ns", "key") == "ns:key"
    assert build_composite_id(None, "key") == "key"
    assert build_composite_id("ns", "a:b") == "ns:a:b"


def test_quote_identifier():
    assert quote_identifier("KEYV") == '"KEYV"'
    assert quote_identifier('we"ird') == '"we""ird"'


class TestLikeToRegex:
    def test_prefix_pattern(self):
        regex = like_to_regex(build_prefix_pattern("a_b"))
        assert regex.fullmatch("a_b:1")
        assert not regex.fullmatch("axb:1")
        assert not regex.fullmatch("a_b")

    def test_wildcards(self):
        regex = like_to_regex("k_y%")
        assert regex.fullmatch("key")
        assert regex.fullmatch("kay-long")
        assert not regex.fullmatch("ky")

    def test_escaped_backslash(self):
        regex = like_to_regex(build_prefix_pattern("a\\b"))
        assert regex.fullmatch("a\\b:x")
        assert not regex.fullmatch("ab:x")

    def test_match_everything(self):
        assert like_to_regex("%").fullmatch("anything:at\nall")
