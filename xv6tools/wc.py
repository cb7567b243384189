"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import BinaryIO

_SEPARATORS = frozenset(b" \r\t\n\v\0")
_CHUNK = 512


@dataclass(frozen=True)
class WordCount:
    """Line, word and byte totals of a stream."""

    lines: int = 0
    words: int = 0
    chars: int = 0


def count(stream: BinaryIO) -> WordCount:
    """Count lines, words and bytes read from a binary stream."""
    lines = words = chars = 0
    inword = False
    while chunk := stream.read(_CHUNK):
        for byte in chunk:
            chars += 1
            if byte == 0x0A:
                lines += 1
            if byte in _SEPARATORS:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return WordCount(lines, words, chars)


def _report(stream: BinaryIO, name: str) -> bool:
    try:
        result = count(stream)
    except OSError:
        sys.stdout.write("wc: read error\n")
        return False
    sys.stdout.write(f"{result.lines} {result.words} {result.chars} {name}\n")
    return True


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        _report(sys.stdin.buffer, "")
        return 0
    for name in args:
        try:
            stream = open(name, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {name}\n")
            return 0
        with stream:
            if not _report(stream, name):
                return 0
    return 0