"""Document sinks that receive transcript insertions."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol


class DocumentSink(Protocol):
    def current_offset(self) -> int: ...

    def character_before(self, offset: int) -> Optional[str]: ...

    def insert(self, offset: int, text: str) -> None: ...


class TextDocument:
    """In-memory text buffer with a caret."""

    def __init__(self, text: str = "", cursor: int | None = None) -> None:
        self.text = text
        self.cursor = len(text) if cursor is None else cursor
        self._check(self.cursor)

    def current_offset(self) -> int:
        return self.cursor

    def character_before(self, offset: int) -> Optional[str]:
        if offset <= 0 or offset > len(self.text):
            return None
        return self.text[offset - 1]

    def insert(self, offset: int, text: str) -> None:
        self._check(offset)
        self.text = self.text[:offset] + text + self.text[offset:]
        if self.cursor >= offset:
            self.cursor += len(text)

    def _check(self, offset: int) -> None:
        if offset < 0 or offset > len(self.text):
            raise ValueError(f"Offset {offset} outside document of length {len(self.text)}")

    def __str__(self) -> str:
        return self.text


class FileDocument:
    """Append-only UTF-8 text file; insertions are only accepted at the end."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._last_char: str | None = None
        self._length = 0
        if self.path.exists():
            existing = self.path.read_text(encoding="utf-8")
            self._length = len(existing)
            self._last_char = existing[-1] if existing else None

    def current_offset(self) -> int:
        return self._length

    def character_before(self, offset: int) -> Optional[str]:
        if offset != self._length:
            raise ValueError("FileDocument only tracks the end of the file")
        return self._last_char

    def insert(self, offset: int, text: str) -> None:
        if offset != self._length:
            raise ValueError(f"FileDocument appends only (offset {offset}, length {self._length})")
        if not text:
            return
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(text)
        self._length += len(text)
        self._last_char = text[-1]


__all__ = ["DocumentSink", "FileDocument", "TextDocument"]
