"""Small C-style helpers: number parsing, string comparison, formatting and line input."""

from __future__ import annotations

from typing import Any, TextIO

_DIGITS = "0123456789ABCDEF"


def _cstr(s: str | bytes) -> bytes:
    data = s.encode() if isinstance(s, str) else bytes(s)
    return data.split(b"\0", 1)[0]


def atoi(s: str | bytes) -> int:
    """Parse leading decimal digits; anything else stops the scan."""
    n = 0
    for ch in _cstr(s):
        if not 0x30 <= ch <= 0x39:
            break
        n = n * 10 + ch - 0x30
    return n


def strcmp(p: str | bytes, q: str | bytes) -> int:
    """Compare as unsigned bytes; return the difference at the first mismatch."""
    a = _cstr(p) + b"\0"
    b = _cstr(q) + b"\0"
    for x, y in zip(a, b):
        if x != y or x == 0:
            return x - y
    return 0


def _format_int(value: int, base: int, signed: bool) -> str:
    x = value & 0xFFFFFFFF
    negative = signed and x >= 0x80000000
    if negative:
        x = 0x100000000 - x
    digits = []
    while True:
        x, r = divmod(x, base)
        digits.append(_DIGITS[r])
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def sprintf(fmt: str, *args: Any) -> str:
    """Format with %d, %x, %p, %s, %c and %%; unknown sequences are kept."""
    values = iter(args)

    def take() -> Any:
        try:
            return next(values)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    out: list[str] = []
    pending = False
    for c in fmt:
        if not pending:
            if c == "%":
                pending = True
            else:
                out.append(c)
            continue
        pending = False
        if c == "d":
            out.append(_format_int(take(), 10, True))
        elif c in "xp":
            out.append(_format_int(take(), 16, False))
        elif c == "s":
            s = take()
            out.append("(null)" if s is None else s)
        elif c == "c":
            ch = take()
            out.append(ch[0] if isinstance(ch, str) else chr(ch & 0xFF))
        elif c == "%":
            out.append("%")
        else:
            out.append("%" + c)
    return "".join(out)


def printf(stream: TextIO, fmt: str, *args: Any) -> None:
    """Write formatted text to a stream."""
    stream.write(sprintf(fmt, *args))


def gets(stream: TextIO, limit: int) -> str:
    """Read one line of at most limit-1 characters, keeping the terminator."""
    chars: list[str] = []
    while len(chars) + 1 < limit:
        c = stream.read(1)
        if not c:
            break
        chars.append(c)
        if c in ("\n", "\r"):
            break
    return "".join(chars)