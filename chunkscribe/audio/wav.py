"""16-bit mono PCM WAV encoding for transcription uploads."""

from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np

WAV_MIME_TYPE = "audio/wav"
HEADER_SIZE = 44

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(slots=True)
class WavInfo:
    sample_rate: int
    channels: int
    bits_per_sample: int
    frame_count: int


def to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Scale float samples to int16; negative values use 32768, positive 32767."""
    data = np.nan_to_num(np.asarray(samples, dtype=np.float64).reshape(-1), nan=0.0)
    data = np.clip(data, -1.0, 1.0)
    scaled = np.where(data < 0, data * 32768.0, data * 32767.0)
    return np.round(scaled).astype("<i2")


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    pcm = to_pcm16(samples)
    data_size = pcm.size * 2
    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size
        1,  # PCM
        1,  # mono
        int(sample_rate),
        int(sample_rate) * 2,
        2,  # block align
        16,
        b"data",
        data_size,
    )
    return header + pcm.tobytes()


def read_wav_header(data: bytes) -> WavInfo:
    if len(data) < HEADER_SIZE:
        raise ValueError("WAV data shorter than header")
    (
        riff,
        _riff_size,
        wave,
        fmt,
        fmt_size,
        audio_format,
        channels,
        sample_rate,
        _byte_rate,
        block_align,
        bits,
        data_tag,
        data_size,
    ) = _HEADER.unpack_from(data)
    if riff != b"RIFF" or wave != b"WAVE" or fmt != b"fmt " or data_tag != b"data":
        raise ValueError("Not a canonical RIFF/WAVE container")
    if fmt_size != 16 or audio_format != 1:
        raise ValueError(f"Unsupported WAV format (tag {audio_format})")
    if block_align <= 0:
        raise ValueError("Invalid block align")
    return WavInfo(
        sample_rate=sample_rate,
        channels=channels,
        bits_per_sample=bits,
        frame_count=data_size // block_align,
    )


def decode_wav(data: bytes) -> tuple[np.ndarray, int]:
    """Inverse of :func:`encode_wav` for mono 16-bit containers."""
    info = read_wav_header(data)
    if info.channels != 1 or info.bits_per_sample != 16:
        raise ValueError("Only mono 16-bit PCM is supported")
    pcm = np.frombuffer(data, dtype="<i2", count=info.frame_count, offset=HEADER_SIZE)
    values = pcm.astype(np.float32)
    samples = np.where(values < 0, values / 32768.0, values / 32767.0).astype(np.float32)
    return samples, info.sample_rate


__all__ = ["HEADER_SIZE", "WAV_MIME_TYPE", "WavInfo", "decode_wav", "encode_wav", "read_wav_header", "to_pcm16"]
