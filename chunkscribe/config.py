"""Runtime configuration resolved from the environment."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from functools import lru_cache

from pydantic import BaseModel, Field

DEFAULT_SAMPLE_RATE = 16000
DEFAULT_CHUNK_MS = 4000
DEFAULT_MAX_BUFFERED_CHUNKS = 12
DEFAULT_SILENCE_THRESHOLD = 0.0015
DEFAULT_MAX_WORD_REPEATS = 2


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True, slots=True)
class ChunkConfig:
    """Per-session chunking parameters. Restart the session to change them."""

    sample_rate: int = DEFAULT_SAMPLE_RATE
    chunk_ms: int = DEFAULT_CHUNK_MS
    max_buffered_chunks: int = DEFAULT_MAX_BUFFERED_CHUNKS
    silence_threshold: float = DEFAULT_SILENCE_THRESHOLD
    max_word_repeats: int = DEFAULT_MAX_WORD_REPEATS

    @property
    def chunk_samples(self) -> int:
        return max(1, round(self.sample_rate * self.chunk_ms / 1000))

    @property
    def max_buffered_samples(self) -> int:
        return self.chunk_samples * self.max_buffered_chunks

    @classmethod
    def sanitized(
        cls,
        *,
        sample_rate: float = DEFAULT_SAMPLE_RATE,
        chunk_ms: float = DEFAULT_CHUNK_MS,
        max_buffered_chunks: float = DEFAULT_MAX_BUFFERED_CHUNKS,
        silence_threshold: float = DEFAULT_SILENCE_THRESHOLD,
        max_word_repeats: float = DEFAULT_MAX_WORD_REPEATS,
    ) -> "ChunkConfig":
        """Build a config from loosely typed user values, falling back to defaults."""
        rate = int(sample_rate) if _finite(sample_rate) and sample_rate > 0 else DEFAULT_SAMPLE_RATE
        duration = int(round(chunk_ms)) if _finite(chunk_ms) and chunk_ms > 0 else DEFAULT_CHUNK_MS
        threshold = max(0.0, float(silence_threshold)) if _finite(silence_threshold) else DEFAULT_SILENCE_THRESHOLD
        if _finite(max_buffered_chunks) and max_buffered_chunks > 0:
            buffered = max(1, int(round(max_buffered_chunks)))
        else:
            buffered = DEFAULT_MAX_BUFFERED_CHUNKS
        if _finite(max_word_repeats):
            repeats = max(1, int(round(max_word_repeats)))
        else:
            repeats = DEFAULT_MAX_WORD_REPEATS
        return cls(
            sample_rate=rate,
            chunk_ms=duration,
            max_buffered_chunks=buffered,
            silence_threshold=threshold,
            max_word_repeats=repeats,
        )


@dataclass(frozen=True, slots=True)
class TransportConfig:
    endpoint_url: str = ""
    api_key: str = ""
    use_form_data: bool = True
    file_field: str = "file"
    model: str = ""
    language: str = ""
    text_field: str = "text"
    timeout: float = 30.0


class ScribeSettings(BaseModel):
    endpoint_url: str = Field(default_factory=lambda: os.getenv("CHUNKSCRIBE_ENDPOINT", ""))
    api_key: str = Field(default_factory=lambda: os.getenv("CHUNKSCRIBE_API_KEY", ""))
    use_form_data: bool = Field(default_factory=lambda: _env_flag("CHUNKSCRIBE_USE_FORM_DATA", "true"))
    file_field: str = Field(default_factory=lambda: os.getenv("CHUNKSCRIBE_FILE_FIELD", "file"))
    model: str = Field(default_factory=lambda: os.getenv("CHUNKSCRIBE_MODEL", ""))
    language: str = Field(default_factory=lambda: os.getenv("CHUNKSCRIBE_LANGUAGE", ""))
    text_field: str = Field(default_factory=lambda: os.getenv("CHUNKSCRIBE_TEXT_FIELD", "text"))
    timeout: float = Field(default_factory=lambda: float(os.getenv("CHUNKSCRIBE_TIMEOUT", "30")))
    sample_rate: int = Field(
        default_factory=lambda: int(os.getenv("CHUNKSCRIBE_SAMPLE_RATE", str(DEFAULT_SAMPLE_RATE)))
    )
    chunk_ms: int = Field(default_factory=lambda: int(os.getenv("CHUNKSCRIBE_CHUNK_MS", str(DEFAULT_CHUNK_MS))))
    silence_threshold: float = Field(
        default_factory=lambda: float(os.getenv("CHUNKSCRIBE_SILENCE_THRESHOLD", str(DEFAULT_SILENCE_THRESHOLD)))
    )
    max_buffered_chunks: int = Field(
        default_factory=lambda: int(
            os.getenv("CHUNKSCRIBE_MAX_BUFFERED_CHUNKS", str(DEFAULT_MAX_BUFFERED_CHUNKS))
        )
    )
    max_word_repeats: int = Field(
        default_factory=lambda: int(os.getenv("CHUNKSCRIBE_MAX_WORD_REPEATS", str(DEFAULT_MAX_WORD_REPEATS)))
    )
    log_history: int = Field(default_factory=lambda: int(os.getenv("CHUNKSCRIBE_LOG_HISTORY", "200")))

    def chunk_config(self) -> ChunkConfig:
        return ChunkConfig.sanitized(
            sample_rate=self.sample_rate,
            chunk_ms=self.chunk_ms,
            max_buffered_chunks=self.max_buffered_chunks,
            silence_threshold=self.silence_threshold,
            max_word_repeats=self.max_word_repeats,
        )

    def transport_config(self) -> TransportConfig:
        return TransportConfig(
            endpoint_url=self.endpoint_url.strip(),
            api_key=self.api_key.strip(),
            use_form_data=self.use_form_data,
            file_field=self.file_field or "file",
            model=self.model,
            language=self.language,
            text_field=self.text_field or "text",
            timeout=self.timeout,
        )


def _finite(value: float) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


@lru_cache()
def get_settings() -> ScribeSettings:
    return ScribeSettings()
