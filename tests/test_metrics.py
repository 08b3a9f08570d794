import numpy as np
from prometheus_client import REGISTRY

from chunkscribe.audio.sources import ArraySource
from chunkscribe.config import ChunkConfig
from chunkscribe.metrics import render_metrics
from chunkscribe.services.pipeline import ChunkPipeline
from chunkscribe.store.document import TextDocument


class NeverCalled:
    def transcribe(self, wav_bytes):  # pragma: no cover - silent chunks skip the transport
        raise AssertionError("silent chunk reached the transport")

    def cancel(self):
        pass


def test_silent_chunks_are_counted():
    pipeline = ChunkPipeline(ChunkConfig(sample_rate=8000, chunk_ms=500), NeverCalled(), TextDocument(), threaded=False)
    pipeline.start(ArraySource(np.zeros(8000, dtype=np.float32), 8000))
    pipeline.drain()
    pipeline.stop()

    body, content_type = render_metrics()
    assert content_type.startswith("text/plain")
    assert b'chunkscribe_chunks_total{outcome="silent"}' in body


class StopsMidCall:
    def __init__(self):
        self.pipeline = None

    def transcribe(self, wav_bytes):
        self.pipeline.stop()
        return "too late"

    def cancel(self):
        pass


def _discarded():
    return REGISTRY.get_sample_value("chunkscribe_chunks_total", {"outcome": "discarded"}) or 0.0


def test_results_from_stopped_session_are_counted_as_discarded():
    transcriber = StopsMidCall()
    document = TextDocument()
    pipeline = ChunkPipeline(ChunkConfig(sample_rate=8000, chunk_ms=500), transcriber, document, threaded=False)
    transcriber.pipeline = pipeline
    tone = (np.sin(2 * np.pi * 440 * np.arange(4000) / 8000) * 0.5).astype(np.float32)
    before = _discarded()
    pipeline.start(ArraySource(tone, 8000))

    assert pipeline.drain() == 0
    assert document.text == ""
    assert _discarded() == before + 1
