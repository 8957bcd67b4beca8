from __future__ import annotations

from collections.abc import Iterator

import pytest

import inkcomb


@pytest.fixture
def debug_log(caplog: pytest.LogCaptureFixture) -> Iterator[pytest.LogCaptureFixture]:
    """Turns the parsing log on for one test."""
    caplog.set_level("DEBUG", logger="inkcomb")
    inkcomb.set_debug(True)
    try:
        yield caplog
    finally:
        inkcomb.set_debug(False)
