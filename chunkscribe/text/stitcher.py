"""Merge consecutive transcript fragments without repeating words."""

from __future__ import annotations

import re

TAIL_LIMIT = 200
DEFAULT_OVERLAP_WORDS = 6

_SPLIT_KEEP_SPACE = re.compile(r"(\s+)")
_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^a-z0-9À-ſ]+")


def _normalize(token: str) -> str:
    return _NON_WORD.sub("", token.lower())


def dedupe_consecutive_words(text: str, max_repeats: int = 2) -> str:
    """Drop immediate repeats of a word once it has been seen ``max_repeats`` times in a row.

    Words compare by their lowercased alphanumeric form (accented Latin letters
    included); the original spelling is what gets emitted. Tokens with no
    comparable characters, such as bare punctuation, break a run.
    """
    if not text:
        return text
    max_repeats = max(1, int(max_repeats))
    output: list[str] = []
    last_word = ""
    repeat_count = 0
    for token in _SPLIT_KEEP_SPACE.split(text):
        if token and token.isspace():
            output.append(token)
            continue
        normalized = _normalize(token)
        if normalized and normalized == last_word:
            repeat_count += 1
            if repeat_count >= max_repeats:
                continue
        else:
            last_word = normalized
            repeat_count = 0
        output.append(token)
    return _WHITESPACE.sub(" ", "".join(output)).strip()


class TranscriptStitcher:
    """Holds the trailing text of a session and trims overlap from new fragments."""

    def __init__(self, max_repeats: int = 2, max_overlap_words: int = DEFAULT_OVERLAP_WORDS) -> None:
        self.max_repeats = max(1, int(max_repeats))
        self.max_overlap_words = max(0, int(max_overlap_words))
        self.tail = ""

    def dedupe(self, text: str) -> str:
        return dedupe_consecutive_words(text, self.max_repeats)

    def merge_with_tail(self, incoming: str, max_overlap_words: int | None = None) -> str:
        """Return the part of ``incoming`` that is new relative to the tail.

        The largest run of up to ``max_overlap_words`` words that ends the tail
        and starts the fragment (case-insensitive) is removed.
        """
        if not incoming:
            return ""
        fragment = incoming.lstrip()
        if not self.tail:
            return self.dedupe(fragment)
        window = self.max_overlap_words if max_overlap_words is None else max_overlap_words
        tail_words = _WHITESPACE.split(self.tail.strip())
        next_words = _WHITESPACE.split(fragment)
        for overlap in range(min(window, len(tail_words), len(next_words)), 0, -1):
            tail_phrase = " ".join(tail_words[-overlap:]).lower()
            head_phrase = " ".join(next_words[:overlap]).lower()
            if tail_phrase == head_phrase:
                return self.dedupe(" ".join(next_words[overlap:]))
        return self.dedupe(fragment)

    def advance_tail(self, appended: str) -> str:
        self.tail = (self.tail + appended)[-TAIL_LIMIT:]
        return self.tail

    def reset(self) -> None:
        self.tail = ""


__all__ = ["DEFAULT_OVERLAP_WORDS", "TAIL_LIMIT", "TranscriptStitcher", "dedupe_consecutive_words"]
