import numpy as np
import pytest

from chunkscribe.audio.sample_queue import SampleQueue
from chunkscribe.errors import InsufficientData


def _push_split(queue: SampleQueue, data: np.ndarray, sizes: list[int]) -> None:
    offset = 0
    for size in sizes:
        queue.push(data[offset : offset + size])
        offset += size
    assert offset == len(data)


def test_take_preserves_order_across_block_splits():
    data = np.arange(17, dtype=np.float32)
    queue = SampleQueue()
    _push_split(queue, data, [3, 5, 2, 7])
    assert queue.count == 17

    parts = [queue.take(4), queue.take(6), queue.take(7)]
    assert [len(p) for p in parts] == [4, 6, 7]
    np.testing.assert_array_equal(np.concatenate(parts), data)
    assert queue.count == 0
    assert not queue


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_random_pushes_and_takes_round_trip(seed):
    rng = np.random.default_rng(seed)
    data = rng.uniform(-1, 1, size=5000).astype(np.float32)
    sizes = []
    remaining = len(data)
    while remaining:
        size = int(min(remaining, rng.integers(1, 700)))
        sizes.append(size)
        remaining -= size
    queue = SampleQueue()
    _push_split(queue, data, sizes)

    out = []
    while queue.count:
        out.append(queue.take(int(min(queue.count, rng.integers(1, 900)))))
    np.testing.assert_array_equal(np.concatenate(out), data)


def test_take_more_than_queued_raises():
    queue = SampleQueue()
    queue.push(np.ones(10, dtype=np.float32))
    with pytest.raises(InsufficientData):
        queue.take(11)
    assert queue.count == 10


def test_take_zero_returns_empty():
    queue = SampleQueue()
    assert queue.take(0).size == 0


def test_trim_discards_oldest_first():
    data = np.arange(10, dtype=np.float32)
    queue = SampleQueue()
    _push_split(queue, data, [4, 6])

    dropped = queue.trim_to(7)
    assert dropped == 3
    assert queue.count == 7
    np.testing.assert_array_equal(queue.take(7), data[3:])


def test_trim_under_bound_is_noop():
    queue = SampleQueue()
    queue.push(np.ones(5, dtype=np.float32))
    assert queue.trim_to(5) == 0
    assert queue.trim_to(100) == 0
    assert queue.count == 5


def test_trim_never_exceeds_bound():
    rng = np.random.default_rng(7)
    queue = SampleQueue()
    for _ in range(50):
        queue.push(rng.uniform(-1, 1, size=int(rng.integers(1, 300))))
        queue.trim_to(512)
        assert queue.count <= 512
    before = queue.count
    assert queue.trim_to(-5) == before
    assert queue.count == 0


def test_push_copies_and_freezes_block():
    source = np.zeros(4, dtype=np.float32)
    queue = SampleQueue()
    queue.push(source)
    source[:] = 1.0
    np.testing.assert_array_equal(queue.take(4), np.zeros(4, dtype=np.float32))


def test_empty_blocks_are_ignored_and_clear_resets():
    queue = SampleQueue()
    queue.push(np.zeros(0, dtype=np.float32))
    assert queue.count == 0
    queue.push([0.1, 0.2])
    queue.clear()
    assert len(queue) == 0
