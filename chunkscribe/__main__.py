"""Command-line entry point: capture audio and stream the transcript to a file or stdout."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path

from .audio.sources import FileSource, MicrophoneSource
from .config import ChunkConfig, get_settings
from .errors import NoAudioTrack, TranscriptionError
from .metrics import serve_metrics
from .services.logger import LogBuffer, configure_logging
from .services.pipeline import ChunkPipeline, Insertion
from .services.transport import HttpTranscriber
from .store.document import FileDocument, TextDocument


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chunkscribe",
        description="Chunk live audio, send it to a transcription endpoint and stitch the results.",
    )
    parser.add_argument("--input", type=Path, help="Replay this audio file instead of the microphone.")
    parser.add_argument("--realtime", action="store_true", help="Pace file replay at the audio's real speed.")
    parser.add_argument("--device", default=None, help="sounddevice input device name or index.")
    parser.add_argument("--output", type=Path, help="Append the transcript to this text file.")
    parser.add_argument("--endpoint", help="Transcription endpoint URL (env CHUNKSCRIBE_ENDPOINT).")
    parser.add_argument("--api-key", help="Bearer token for the endpoint.")
    parser.add_argument("--raw", action="store_true", help="Send the WAV as the raw request body.")
    parser.add_argument("--file-field", help="Multipart field name for the audio file.")
    parser.add_argument("--model", help="Optional model form field.")
    parser.add_argument("--language", help="Optional language form field.")
    parser.add_argument("--text-field", help="JSON response field holding the transcript.")
    parser.add_argument("--sample-rate", type=int)
    parser.add_argument("--chunk-ms", type=int)
    parser.add_argument("--silence-threshold", type=float)
    parser.add_argument("--max-buffered-chunks", type=int)
    parser.add_argument("--max-word-repeats", type=int)
    parser.add_argument("--metrics-port", type=int, help="Expose Prometheus metrics on this port.")
    parser.add_argument("--log-level", default="INFO")
    return parser


def _apply_overrides(args: argparse.Namespace):
    settings = get_settings()
    overrides = {
        "endpoint_url": args.endpoint,
        "api_key": args.api_key,
        "file_field": args.file_field,
        "model": args.model,
        "language": args.language,
        "text_field": args.text_field,
        "sample_rate": args.sample_rate,
        "chunk_ms": args.chunk_ms,
        "silence_threshold": args.silence_threshold,
        "max_buffered_chunks": args.max_buffered_chunks,
        "max_word_repeats": args.max_word_repeats,
    }
    update = {key: value for key, value in overrides.items() if value is not None}
    if args.raw:
        update["use_form_data"] = False
    return settings.model_copy(update=update)


def _make_source(args: argparse.Namespace, config: ChunkConfig, pipeline: ChunkPipeline):
    if args.input:
        # Replay waits for the worker instead of overflowing the buffer.
        return FileSource(args.input, config.sample_rate, realtime=args.realtime, gate=pipeline.wait_for_room)
    device = args.device
    if isinstance(device, str) and device.isdigit():
        device = int(device)
    return MicrophoneSource(config.sample_rate, device=device)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    settings = _apply_overrides(args)
    config = settings.chunk_config()
    if args.metrics_port:
        serve_metrics(args.metrics_port)

    document = FileDocument(args.output) if args.output else TextDocument()
    transcriber = HttpTranscriber(settings.transport_config())
    failed = threading.Event()

    def _echo(insertion: Insertion) -> None:
        if not args.output:
            sys.stdout.write(insertion.text)
            sys.stdout.flush()

    def _failed(exc: Exception) -> None:
        failed.set()

    pipeline = ChunkPipeline(
        config,
        transcriber,
        document,
        logger=LogBuffer(settings.log_history),
        on_insert=_echo,
        on_error=_failed,
    )
    source = _make_source(args, config, pipeline)
    try:
        pipeline.start(source)
    except NoAudioTrack as exc:
        logging.getLogger("chunkscribe").error("%s", exc)
        transcriber.close()
        return 2

    try:
        if isinstance(source, FileSource):
            source.wait()
            # Waits for the worker's current chunk, then transcribes the tail of the file.
            pipeline.flush()
        else:
            while pipeline.is_recording:
                failed.wait(timeout=0.5)
    except TranscriptionError:
        pass
    except KeyboardInterrupt:
        pass
    finally:
        pipeline.stop()
        transcriber.close()
    if not args.output:
        sys.stdout.write("\n")
    if isinstance(pipeline.last_error, TranscriptionError):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
