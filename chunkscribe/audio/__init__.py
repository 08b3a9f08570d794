"""Sample buffering, silence gating and WAV encoding."""

from .sample_queue import SampleQueue
from .silence import is_silence
from .wav import encode_wav

__all__ = ["SampleQueue", "encode_wav", "is_silence"]
