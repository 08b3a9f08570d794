"""Audio sources that deliver mono float32 blocks to a callback."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable

import numpy as np
import soundfile as sf

from ..errors import NoAudioTrack
from .types import BlockCallback

# Called with the next block size before it is delivered; False ends replay.
ReplayGate = Callable[[int], bool]

LOGGER = logging.getLogger("chunkscribe.audio")

DEFAULT_BLOCK_SIZE = 4096


class MicrophoneSource:
    """Live capture through sounddevice's callback stream."""

    def __init__(self, sample_rate: int, *, device: int | str | None = None, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        self.sample_rate = sample_rate
        self.device = device
        self.block_size = block_size
        self._stream = None

    def _try_import_sounddevice(self):
        try:
            import sounddevice as sd  # type: ignore

            return sd
        except Exception:
            return None

    def start(self, callback: BlockCallback) -> None:
        if self._stream is not None:
            return
        sd = self._try_import_sounddevice()
        if sd is None:
            raise NoAudioTrack("sounddevice is not available; cannot open an input stream")

        def _on_audio(indata, frames, time_info, status) -> None:  # noqa: ARG001
            if status:
                LOGGER.debug("Input stream status: %s", status)
            callback(indata[:, 0])

        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                blocksize=self.block_size,
                device=self.device,
                callback=_on_audio,
            )
            stream.start()
        except Exception as exc:
            raise NoAudioTrack(f"No audio track available: {exc}") from exc
        self._stream = stream
        LOGGER.info("Microphone capture started at %s Hz", self.sample_rate)

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        stream.stop()
        stream.close()


class FileSource:
    """Replays an audio file in fixed-size blocks on a background thread.

    Without ``realtime`` the file is pushed as fast as ``gate`` allows; pass a
    gate such as ``ChunkPipeline.wait_for_room`` so no audio is trimmed.
    """

    def __init__(
        self,
        path: Path | str,
        sample_rate: int,
        *,
        block_size: int = DEFAULT_BLOCK_SIZE,
        realtime: bool = False,
        gate: ReplayGate | None = None,
    ) -> None:
        self.path = Path(path)
        self.sample_rate = sample_rate
        self.block_size = max(1, int(block_size))
        self.realtime = realtime
        self.gate = gate
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()

    def _load(self) -> np.ndarray:
        try:
            audio, file_rate = sf.read(str(self.path), dtype="float32")
        except (RuntimeError, OSError) as exc:
            raise NoAudioTrack(f"Cannot read {self.path}: {exc}") from exc
        if audio.ndim > 1:
            audio = audio[:, 0]
        if audio.size == 0:
            raise NoAudioTrack(f"{self.path} contains no audio frames")
        if file_rate != self.sample_rate:
            raise NoAudioTrack(f"{self.path} is {file_rate} Hz, session expects {self.sample_rate} Hz")
        return audio

    def start(self, callback: BlockCallback) -> None:
        if self._thread and self._thread.is_alive():
            return
        audio = self._load()
        self._stop.clear()
        self._thread = threading.Thread(target=self._replay, args=(audio, callback), daemon=True)
        self._thread.start()

    def _replay(self, audio: np.ndarray, callback: BlockCallback) -> None:
        pause = self.block_size / float(self.sample_rate)
        for offset in range(0, len(audio), self.block_size):
            if self._stop.is_set():
                return
            block = audio[offset : offset + self.block_size]
            if self.gate is not None and not self.gate(len(block)):
                LOGGER.debug("Replay of %s ended early at sample %d", self.path, offset)
                return
            callback(block)
            if self.realtime:
                time.sleep(pause)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until replay finishes; returns False on timeout."""
        if self._thread is None:
            return True
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def stop(self) -> None:
        self._stop.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=2)


class ArraySource:
    """Delivers an in-memory signal synchronously from ``start``."""

    def __init__(self, samples: np.ndarray, sample_rate: int, *, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        self.samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        self.sample_rate = sample_rate
        self.block_size = max(1, int(block_size))
        self.stopped = False

    def start(self, callback: BlockCallback) -> None:
        if self.samples.size == 0:
            raise NoAudioTrack("Empty signal")
        self.stopped = False
        for offset in range(0, self.samples.size, self.block_size):
            if self.stopped:
                return
            callback(self.samples[offset : offset + self.block_size])

    def stop(self) -> None:
        self.stopped = True


__all__ = ["ArraySource", "FileSource", "MicrophoneSource"]
