import pytest

from navindexer.entity import make_slug


def test_make_slug_lowercases_and_joins_with_dash():
    assert make_slug("address-ABC") == "address-abc"


def test_make_slug_replaces_punctuation_and_spaces():
    assert make_slug("Block Hash!") == "block-hash"


@pytest.mark.parametrize("text", ["blocktx-ABC123", "signal-Foo Bar-42", "consensus-7"])
def test_make_slug_is_idempotent(text):
    once = make_slug(text)
    assert make_slug(once) == once


@pytest.mark.parametrize("text", ["blocktx-ABC123", "Signal Foo", "proposal-XYZ"])
def test_make_slug_has_no_upper_case_or_spaces(text):
    result = make_slug(text)
    assert result == result.lower()
    assert " " not in result