"""Types shared across audio helpers."""

from __future__ import annotations

from typing import Callable, Protocol

import numpy as np

# One audio-callback delivery: read-only, 1-D float32, values in [-1.0, 1.0].
SampleBlock = np.ndarray

BlockCallback = Callable[[np.ndarray], None]


class AudioSource(Protocol):
    sample_rate: int

    def start(self, callback: BlockCallback) -> None: ...

    def stop(self) -> None: ...


def as_sample_block(data) -> np.ndarray:
    """Copy ``data`` into a frozen mono float32 block (channel 0 for 2-D input)."""
    block = np.array(data, dtype=np.float32, copy=True)
    if block.ndim > 1:
        block = np.ascontiguousarray(block[:, 0])
    block = block.reshape(-1)
    block.flags.writeable = False
    return block
