from __future__ import annotations

import io
import logging

import pytest


@pytest.fixture(autouse=True)
def empty_stdin(monkeypatch: pytest.MonkeyPatch) -> None:
    """Redirected, empty stdin: commands fall back to their positional values."""

    monkeypatch.setattr("sys.stdin", io.StringIO(""))


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("ardis_utils")
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.propagate = True
