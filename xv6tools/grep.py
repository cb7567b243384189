"""A small grep supporting the ^ . * $ operators."""

from __future__ import annotations

import sys
from typing import TextIO

_BUFSIZE = 1024


def _matchhere(re: str, i: int, text: str, j: int) -> bool:
    while True:
        if i == len(re):
            return True
        if i + 1 < len(re) and re[i + 1] == "*":
            return _matchstar(re[i], re, i + 2, text, j)
        if re[i] == "$" and i + 1 == len(re):
            return j == len(text)
        if j < len(text) and (re[i] == "." or re[i] == text[j]):
            i += 1
            j += 1
            continue
        return False


def _matchstar(c: str, re: str, i: int, text: str, j: int) -> bool:
    while True:
        if _matchhere(re, i, text, j):
            return True
        if j < len(text) and (text[j] == c or c == "."):
            j += 1
        else:
            return False


def match(re: str, text: str) -> bool:
    """Return True if the pattern matches anywhere in the text."""
    if re.startswith("^"):
        return _matchhere(re, 1, text, 0)
    return any(_matchhere(re, 0, text, j) for j in range(len(text) + 1))


def grep(pattern: str, stream: TextIO, out: TextIO) -> None:
    """Write each newline-terminated line of stream that matches pattern."""
    buf = ""
    while True:
        chunk = stream.read(_BUFSIZE - 1 - len(buf))
        if not chunk:
            break
        buf += chunk
        *lines, rest = buf.split("\n")
        for line in lines:
            if match(pattern, line):
                out.write(line + "\n")
        # A buffer holding no complete line is discarded.
        buf = rest if lines else ""


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 0
    pattern, files = args[0], args[1:]
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for name in files:
        try:
            stream = open(name, encoding="utf-8", errors="replace")
        except OSError:
            sys.stdout.write(f"grep: cannot open {name}\n")
            return 0
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0