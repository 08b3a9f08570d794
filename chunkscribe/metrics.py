"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Summary, generate_latest, start_http_server

CHUNK_COUNTER = Counter(
    "chunkscribe_chunks_total",
    "Chunks extracted from the sample queue",
    labelnames=("outcome",),
)

DROPPED_SAMPLES = Counter(
    "chunkscribe_dropped_samples_total",
    "Samples discarded by the buffered-chunk bound",
)

TRANSCRIBE_LATENCY = Summary(
    "chunkscribe_transcription_seconds",
    "Time spent waiting on the transcription backend",
)

TRANSCRIBE_FAILURES = Counter(
    "chunkscribe_transcription_failures_total",
    "Transcription calls that ended the session",
    labelnames=("kind",),
)

INSERTED_CHARACTERS = Counter(
    "chunkscribe_inserted_characters_total",
    "Characters inserted into the target document",
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


def serve_metrics(port: int, addr: str = "127.0.0.1") -> None:
    start_http_server(port, addr=addr)
