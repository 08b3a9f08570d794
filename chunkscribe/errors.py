"""Exception taxonomy shared across the chunking pipeline."""

from __future__ import annotations


class ChunkscribeError(Exception):
    pass


class InsufficientData(ChunkscribeError):
    """Raised when more samples are requested than are queued."""


class AlreadyRunning(ChunkscribeError):
    pass


class NoAudioTrack(ChunkscribeError):
    """The audio source could not provide a usable stream."""


class TranscriptionError(ChunkscribeError):
    """Failure at the transcription boundary; fatal for the session."""


class NetworkError(TranscriptionError):
    pass


class HttpStatusError(TranscriptionError):
    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}")


class EndpointNotConfigured(TranscriptionError):
    pass


__all__ = [
    "AlreadyRunning",
    "ChunkscribeError",
    "EndpointNotConfigured",
    "HttpStatusError",
    "InsufficientData",
    "NetworkError",
    "NoAudioTrack",
    "TranscriptionError",
]
