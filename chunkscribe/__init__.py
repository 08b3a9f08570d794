"""Streaming audio chunking and transcript stitching."""

from .config import ChunkConfig, ScribeSettings, TransportConfig, get_settings
from .errors import (
    AlreadyRunning,
    ChunkscribeError,
    EndpointNotConfigured,
    HttpStatusError,
    InsufficientData,
    NetworkError,
    NoAudioTrack,
    TranscriptionError,
)
from .services.pipeline import ChunkOutcome, ChunkPipeline, Insertion, PipelineState
from .services.transport import HttpTranscriber
from .store.document import FileDocument, TextDocument
from .text.stitcher import TranscriptStitcher, dedupe_consecutive_words

__version__ = "0.1.0"

__all__ = [
    "AlreadyRunning",
    "ChunkConfig",
    "ChunkOutcome",
    "ChunkPipeline",
    "ChunkscribeError",
    "EndpointNotConfigured",
    "FileDocument",
    "HttpStatusError",
    "HttpTranscriber",
    "Insertion",
    "InsufficientData",
    "NetworkError",
    "NoAudioTrack",
    "PipelineState",
    "ScribeSettings",
    "TextDocument",
    "TranscriptStitcher",
    "TranscriptionError",
    "TransportConfig",
    "dedupe_consecutive_words",
    "get_settings",
]
