"""RMS/peak gate used to skip near-silent chunks."""

from __future__ import annotations

import numpy as np


def measure(samples: np.ndarray) -> tuple[float, float]:
    """Return ``(rms, peak)`` with NaN samples treated as zero."""
    data = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    if data.size == 0:
        return 0.0, 0.0
    rms = float(np.sqrt(np.mean(np.square(data))))
    peak = float(np.max(np.abs(data)))
    return rms, peak


def is_silence(samples: np.ndarray, threshold: float) -> bool:
    """True when both RMS and peak stay under the gate.

    The peak bound is ``4 * threshold`` so a short loud transient in an
    otherwise quiet chunk still counts as speech.
    """
    if np.asarray(samples).size == 0:
        return True
    rms, peak = measure(samples)
    return rms < threshold and peak < threshold * 4


__all__ = ["is_silence", "measure"]
