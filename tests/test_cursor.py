"""Tests for the cursor and result model."""

from __future__ import annotations

import pytest

from inkcomb import FAILURE, Failure, SequenceCursor, Success


class TestSequenceCursor:
    """Immutable positions into a sequence of tokens."""

    def test_current_and_advance(self) -> None:
        c = SequenceCursor("abc")
        assert c.current() == "a"
        assert c.advance().current() == "b"
        assert c.advance().pos == 1

    def test_advance_does_not_mutate(self) -> None:
        c = SequenceCursor("abc")
        c.advance()
        assert c.pos == 0
        assert c.current() == "a"

    def test_at_end(self) -> None:
        c = SequenceCursor("ab", 2)
        assert c.at_end()
        assert not SequenceCursor("ab", 1).at_end()
        assert SequenceCursor("").at_end()

    def test_end_of_input_access_raises(self) -> None:
        c = SequenceCursor([1, 2], 2)
        with pytest.raises(IndexError):
            c.current()
        with pytest.raises(IndexError):
            c.advance()

    def test_position_outside_of_stream(self) -> None:
        with pytest.raises(IndexError):
            SequenceCursor("ab", 3)
        with pytest.raises(IndexError):
            SequenceCursor("ab", -1)

    def test_equality_same_stream(self) -> None:
        tokens = [1, 2, 3]
        assert SequenceCursor(tokens).advance() == SequenceCursor(tokens, 1)
        assert hash(SequenceCursor(tokens).advance()) == hash(SequenceCursor(tokens, 1))
        assert SequenceCursor(tokens) != SequenceCursor(tokens, 1)

    def test_equality_different_streams(self) -> None:
        """Equal contents are still different streams."""
        assert SequenceCursor([1, 2]) != SequenceCursor([1, 2])

    def test_any_token_type(self) -> None:
        tokens = [("num", 1), ("op", "+")]
        c = SequenceCursor(tokens)
        assert c.current() == ("num", 1)
        assert c.advance().current() == ("op", "+")

    def test_repr(self) -> None:
        assert repr(SequenceCursor("abc", 1)) == "<SequenceCursor 1/3>"


class TestResults:
    """Success is truthy, failure is falsy."""

    def test_success(self) -> None:
        c = SequenceCursor("a")
        r = Success("a", c.advance())
        assert r
        assert r.value == "a"
        assert r.next == c.advance()
        assert r == Success("a", c.advance())
        assert r != Success("b", c.advance())

    def test_failure(self) -> None:
        assert not FAILURE
        assert Failure() == FAILURE
        assert FAILURE != Success(None, SequenceCursor(""))
        assert repr(FAILURE) == "<Failure>"
