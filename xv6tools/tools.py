"""Small user programs: cat, echo, ls name formatting and date."""

from __future__ import annotations

from dataclasses import dataclass
from typing import IO, AnyStr, Iterable

DIRSIZ = 14
_CHUNK = 512


@dataclass(frozen=True)
class RtcDate:
    """A calendar date and time as read from the real-time clock."""

    second: int = 0
    minute: int = 0
    hour: int = 0
    day: int = 0
    month: int = 0
    year: int = 0


def cat(streams: Iterable[IO[AnyStr]], out: IO[AnyStr]) -> None:
    """Copy each stream, in order, to out."""
    for stream in streams:
        while chunk := stream.read(_CHUNK):
            out.write(chunk)


def echo(args: list[str]) -> str:
    """Return the arguments joined by spaces and ended by a newline."""
    if not args:
        return ""
    return " ".join(args) + "\n"


def fmtname(path: str) -> str:
    """Last path component, blank-padded to the directory name width."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def format_date(date: RtcDate) -> str:
    """Format a date as day/month/year."""
    return f"{date.day}/{date.month}/{date.year}"