"""Tests for the debug-level parsing log."""

from __future__ import annotations

import pytest

import inkcomb
from inkcomb import SequenceCursor, token


def test_off_by_default(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("DEBUG", logger="inkcomb")
    assert not inkcomb.is_debug()
    token("a").parse("a")
    assert caplog.records == []


def test_logs_matches(debug_log: pytest.LogCaptureFixture) -> None:
    token("a").parse("a")
    assert "trying 'a' at <SequenceCursor 0/1>" in debug_log.text
    assert "trying one at <SequenceCursor 0/1>" in debug_log.text
    assert "matched 'a' -> 'a'" in debug_log.text


def test_logs_failures(debug_log: pytest.LogCaptureFixture) -> None:
    token("a")(SequenceCursor("b"))
    assert "failed 'a'" in debug_log.text


def test_parsers_built_before_enabling(caplog: pytest.LogCaptureFixture) -> None:
    p = token("x").named("x-token")
    caplog.set_level("DEBUG", logger="inkcomb")
    inkcomb.set_debug()
    try:
        p(SequenceCursor("x"))
    finally:
        inkcomb.set_debug(False)
    assert "matched x-token -> 'x'" in caplog.text
