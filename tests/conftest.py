"""Pytest configuration helpers and shared audio fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


def _ensure_repo_on_path() -> None:
    """Allow tests to import the package without installing it."""
    repo_root = Path(__file__).resolve().parents[1]
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()


@pytest.fixture()
def speech_chunk():
    """One second of a 440 Hz tone at 16 kHz, well above the default silence gate."""
    t = np.arange(16_000)
    return (np.sin(2 * np.pi * 440 * t / 16_000) * 0.5).astype(np.float32)


@pytest.fixture()
def silent_chunk():
    return np.zeros(16_000, dtype=np.float32)
