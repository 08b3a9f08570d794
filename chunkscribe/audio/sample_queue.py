"""FIFO accumulator for audio callback blocks."""

from __future__ import annotations

from collections import deque

import numpy as np

from ..errors import InsufficientData
from .types import as_sample_block


class SampleQueue:
    """Ordered sample blocks plus a running sample count.

    Blocks are split in place when a ``take`` or ``trim_to`` boundary falls
    inside one; the remainder stays at the head. Not thread safe.
    """

    def __init__(self) -> None:
        self._blocks: deque[np.ndarray] = deque()
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    def push(self, block) -> None:
        frozen = as_sample_block(block)
        if frozen.size == 0:
            return
        self._blocks.append(frozen)
        self._count += frozen.size

    def take(self, count: int) -> np.ndarray:
        if count <= 0:
            return np.zeros(0, dtype=np.float32)
        if count > self._count:
            raise InsufficientData(f"requested {count} samples, only {self._count} queued")
        out = np.empty(count, dtype=np.float32)
        offset = 0
        while offset < count:
            head = self._blocks[0]
            needed = count - offset
            if head.size <= needed:
                out[offset : offset + head.size] = head
                offset += head.size
                self._blocks.popleft()
            else:
                out[offset:] = head[:needed]
                self._blocks[0] = head[needed:]
                offset = count
        self._count -= count
        return out

    def trim_to(self, max_samples: int) -> int:
        """Drop the oldest samples beyond ``max_samples``; returns how many were dropped."""
        max_samples = max(0, int(max_samples))
        if self._count <= max_samples:
            return 0
        overflow = self._count - max_samples
        remaining = overflow
        while remaining > 0:
            head = self._blocks[0]
            if head.size <= remaining:
                remaining -= head.size
                self._blocks.popleft()
            else:
                self._blocks[0] = head[remaining:]
                remaining = 0
        self._count -= overflow
        return overflow

    def clear(self) -> None:
        self._blocks.clear()
        self._count = 0


__all__ = ["SampleQueue"]
