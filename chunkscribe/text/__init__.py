from .stitcher import TranscriptStitcher, dedupe_consecutive_words

__all__ = ["TranscriptStitcher", "dedupe_consecutive_words"]
