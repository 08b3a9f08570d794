"""Session orchestrator: samples -> chunks -> transcription -> document insertions."""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..audio.sample_queue import SampleQueue
from ..audio.silence import is_silence, measure
from ..audio.types import AudioSource
from ..audio.wav import encode_wav
from ..config import ChunkConfig
from ..errors import AlreadyRunning, NoAudioTrack, TranscriptionError
from ..metrics import CHUNK_COUNTER, DROPPED_SAMPLES, INSERTED_CHARACTERS, TRANSCRIBE_FAILURES, TRANSCRIBE_LATENCY
from ..store.document import DocumentSink
from ..text.stitcher import TranscriptStitcher
from .logger import LogBuffer
from .transport import Transcriber

LOGGER = logging.getLogger("chunkscribe.pipeline")


class PipelineState(str, enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"


class ChunkOutcome(str, enum.Enum):
    SILENT = "silent"
    EMPTY = "empty"
    INSERTED = "inserted"
    DISCARDED = "discarded"


@dataclass(frozen=True, slots=True)
class Insertion:
    offset: int
    text: str


class _Session:
    """Mutable state for one start/stop cycle."""

    def __init__(self, config: ChunkConfig, source: AudioSource) -> None:
        self.queue = SampleQueue()
        self.stitcher = TranscriptStitcher(max_repeats=config.max_word_repeats)
        self.cursor: Optional[int] = None
        self.source = source
        self.alive = True
        self.wake = threading.Event()
        self.thread: threading.Thread | None = None
        self.chunk_index = 0
        self.in_flight = False
        # Sessions never share it, so a restart is not held up by a stale worker.
        self.drain_lock = threading.Lock()


class ChunkPipeline:
    """Drives one recording session at a time.

    ``feed`` is the audio callback and only touches the sample queue.
    Transcription runs on a per-session worker thread (or on the caller's
    thread through ``drain`` when ``threaded=False``), one chunk at a time,
    so insertions land in the order their chunks were captured.
    """

    def __init__(
        self,
        config: ChunkConfig,
        transcriber: Transcriber,
        document: DocumentSink,
        *,
        logger: LogBuffer | None = None,
        on_insert: Callable[[Insertion], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        threaded: bool = True,
    ) -> None:
        self.config = config
        self.transcriber = transcriber
        self.document = document
        self.logger = logger or LogBuffer()
        self.on_insert = on_insert
        self.on_error = on_error
        self.threaded = threaded
        self.last_error: Exception | None = None
        self._session: _Session | None = None
        # Guards the session slot and its sample queue; held only briefly.
        self._lock = threading.Lock()
        # Signalled whenever buffered audio shrinks.
        self._room = threading.Condition(self._lock)
        # Serializes stitching/insertion against teardown.
        self._apply_lock = threading.Lock()

    @property
    def chunk_samples(self) -> int:
        return self.config.chunk_samples

    @property
    def state(self) -> PipelineState:
        return PipelineState.RECORDING if self._session is not None else PipelineState.IDLE

    @property
    def is_recording(self) -> bool:
        return self._session is not None

    @property
    def cursor(self) -> Optional[int]:
        session = self._session
        return session.cursor if session else None

    @property
    def tail(self) -> str:
        session = self._session
        return session.stitcher.tail if session else ""

    @property
    def buffered_samples(self) -> int:
        with self._lock:
            session = self._session
            return session.queue.count if session else 0

    def start(self, source: AudioSource) -> None:
        rate = getattr(source, "sample_rate", self.config.sample_rate)
        with self._lock:
            if self._session is not None:
                raise AlreadyRunning("Transcription is already running.")
            if rate != self.config.sample_rate:
                raise NoAudioTrack(f"Source delivers {rate} Hz, session expects {self.config.sample_rate} Hz")
            session = _Session(self.config, source)
            self._session = session
        self.last_error = None
        self.logger.add(
            f"Recording started ({self.config.sample_rate} Hz, {self.config.chunk_ms} ms chunks)"
        )
        if self.threaded:
            session.thread = threading.Thread(target=self._run, args=(session,), daemon=True)
            session.thread.start()
        try:
            source.start(self.feed)
        except Exception as exc:
            self.logger.add(f"Error accessing the audio source: {exc}", logging.ERROR)
            self.last_error = exc
            self._stop_session(session)
            raise

    def feed(self, block: np.ndarray) -> None:
        with self._lock:
            session = self._session
            if session is None:
                return
            session.queue.push(block)
            dropped = session.queue.trim_to(self.config.max_buffered_samples)
        if dropped:
            DROPPED_SAMPLES.inc(dropped)
            self.logger.add(f"Buffer overflow, discarded {dropped} oldest samples", logging.WARNING)
        session.wake.set()

    def wait_for_room(self, samples: int, timeout: float | None = None) -> bool:
        """Block until ``samples`` more fit in the buffer without dropping audio.

        Returns False when the session ends or the timeout expires first.
        Producers that can pause (file replay) use this; live capture cannot.
        Only the worker thread frees space while this waits.
        """
        limit = self.config.max_buffered_samples
        with self._room:
            session = self._session
            if session is None:
                return False

            def has_room() -> bool:
                count = session.queue.count
                return not session.alive or count == 0 or count + samples <= limit

            return self._room.wait_for(has_room, timeout=timeout) and session.alive

    def drain(self) -> int:
        """Process every complete chunk currently queued; returns insertions made.

        Any failure tears the session down before it is re-raised.
        """
        session = self._session
        if session is None:
            return 0
        return self._drain_session(session)

    def flush(self) -> int:
        """Like :meth:`drain`, then also transcribes a trailing partial chunk.

        Meant for the end of a finite source such as a replayed file.
        """
        session = self._session
        if session is None:
            return 0
        return self._drain_session(session, final=True)

    def stop(self) -> None:
        self._stop_session(self._session)

    def _stop_session(self, session: _Session | None) -> None:
        with self._room:
            if session is None or self._session is not session:
                return
            session.alive = False
            self._session = None
            session.queue.clear()
            self._room.notify_all()
        self.transcriber.cancel()
        try:
            session.source.stop()
        except Exception as exc:
            self.logger.add(f"Audio source did not stop cleanly: {exc}", logging.WARNING)
        with self._apply_lock:
            session.stitcher.reset()
            session.cursor = None
        session.wake.set()
        # A worker blocked on the transport finishes on its own; its result is discarded.
        worker = session.thread
        if worker and worker is not threading.current_thread() and not session.in_flight:
            worker.join(timeout=2)
        self.logger.add("Transcription stopped.")

    def _run(self, session: _Session) -> None:
        while session.alive:
            session.wake.wait(timeout=0.5)
            session.wake.clear()
            if not session.alive:
                break
            try:
                self._drain_session(session)
            except Exception as exc:
                self._report(exc)
                break

    def _report(self, exc: Exception) -> None:
        if self.on_error:
            self.on_error(exc)

    def _drain_session(self, session: _Session, final: bool = False) -> int:
        inserted = 0
        with session.drain_lock:
            while session.alive:
                chunk = self._next_chunk(session, final)
                if chunk is None:
                    break
                try:
                    outcome = self._process_chunk(session, chunk)
                except TranscriptionError:
                    raise
                except Exception as exc:
                    LOGGER.exception("Chunk %d processing crashed", session.chunk_index)
                    if self._session is session:
                        self.last_error = exc
                    self._stop_session(session)
                    raise
                if outcome is ChunkOutcome.INSERTED:
                    inserted += 1
        return inserted

    def _next_chunk(self, session: _Session, final: bool = False) -> np.ndarray | None:
        with self._room:
            count = session.queue.count
            if not session.alive or count == 0:
                return None
            if count < self.chunk_samples and not final:
                return None
            session.chunk_index += 1
            chunk = session.queue.take(min(count, self.chunk_samples))
            self._room.notify_all()
            return chunk

    def _process_chunk(self, session: _Session, chunk: np.ndarray) -> ChunkOutcome:
        if is_silence(chunk, self.config.silence_threshold):
            rms, peak = measure(chunk)
            LOGGER.debug("Chunk %d below gate (rms=%.5f peak=%.5f)", session.chunk_index, rms, peak)
            CHUNK_COUNTER.labels(outcome=ChunkOutcome.SILENT.value).inc()
            return ChunkOutcome.SILENT
        payload = encode_wav(chunk, self.config.sample_rate)
        if not session.alive:
            return self._discard(session)
        started = time.perf_counter()
        session.in_flight = True
        try:
            transcript = self.transcriber.transcribe(payload)
        except TranscriptionError as exc:
            if not session.alive:
                return self._discard(session)
            TRANSCRIBE_FAILURES.labels(kind=type(exc).__name__).inc()
            self.last_error = exc
            self.logger.add(f"Error transcribing chunk: {exc}", logging.ERROR)
            self._stop_session(session)
            raise
        finally:
            session.in_flight = False
            TRANSCRIBE_LATENCY.observe(time.perf_counter() - started)
        return self._apply(session, transcript)

    def _discard(self, session: _Session) -> ChunkOutcome:
        LOGGER.debug("Dropping result of chunk %d from a stopped session", session.chunk_index)
        CHUNK_COUNTER.labels(outcome=ChunkOutcome.DISCARDED.value).inc()
        return ChunkOutcome.DISCARDED

    def _apply(self, session: _Session, transcript: str) -> ChunkOutcome:
        with self._apply_lock:
            if not session.alive:
                return self._discard(session)
            text = session.stitcher.merge_with_tail(transcript or "")
            if not text:
                CHUNK_COUNTER.labels(outcome=ChunkOutcome.EMPTY.value).inc()
                return ChunkOutcome.EMPTY
            if session.cursor is None:
                session.cursor = self.document.current_offset()
            if not text[0].isspace() and session.cursor > 0:
                previous = self.document.character_before(session.cursor)
                if previous and not previous.isspace():
                    text = " " + text
            self.document.insert(session.cursor, text)
            insertion = Insertion(offset=session.cursor, text=text)
            session.cursor += len(text)
            session.stitcher.advance_tail(text)
        CHUNK_COUNTER.labels(outcome=ChunkOutcome.INSERTED.value).inc()
        INSERTED_CHARACTERS.inc(len(text))
        if self.on_insert:
            self.on_insert(insertion)
        return ChunkOutcome.INSERTED


__all__ = ["ChunkOutcome", "ChunkPipeline", "Insertion", "PipelineState"]
