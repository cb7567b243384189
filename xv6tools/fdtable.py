"""Per-process file descriptor tables over reference-counted open files."""

from __future__ import annotations

import errno
from dataclasses import dataclass, field
from typing import Any, Callable

from xv6tools.layout import O_RDWR, O_WRONLY
from xv6tools.memory import KernelPanic

NOFILE = 16


def access_mode(omode: int) -> tuple[bool, bool]:
    """Return (readable, writable) for an open mode."""
    readable = not omode & O_WRONLY
    writable = bool(omode & O_WRONLY or omode & O_RDWR)
    return readable, writable


def _bad_fd(fd: int) -> OSError:
    return OSError(errno.EBADF, f"bad file descriptor {fd}")


@dataclass(eq=False)
class OpenFile:
    """An open file shared by every descriptor that refers to it."""

    target: Any = None
    readable: bool = True
    writable: bool = True
    offset: int = 0
    on_release: Callable[["OpenFile"], None] | None = None
    ref: int = field(default=1, init=False)

    @classmethod
    def opened(cls, target: Any, omode: int, **kwargs: Any) -> "OpenFile":
        """An open file whose permissions follow an open mode."""
        readable, writable = access_mode(omode)
        return cls(target, readable, writable, **kwargs)

    @property
    def closed(self) -> bool:
        """True once the last reference has been dropped."""
        return self.ref == 0

    def dup(self) -> "OpenFile":
        """Take another reference to this file."""
        if self.ref < 1:
            raise KernelPanic("filedup")
        self.ref += 1
        return self

    def close(self) -> None:
        """Drop one reference; the last one releases the file."""
        if self.ref < 1:
            raise KernelPanic("fileclose")
        self.ref -= 1
        if self.ref == 0 and self.on_release is not None:
            self.on_release(self)


class FileDescriptorTable:
    """A fixed-size table mapping small integers to open files."""

    def __init__(self, size: int = NOFILE) -> None:
        if size <= 0:
            raise ValueError("table size must be positive")
        self._slots: list[OpenFile | None] = [None] * size

    @property
    def size(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return sum(1 for f in self._slots if f is not None)

    def __contains__(self, fd: object) -> bool:
        return isinstance(fd, int) and 0 <= fd < len(self._slots) and self._slots[fd] is not None

    def allocate(self, f: OpenFile) -> int:
        """Put f in the lowest free slot, taking over the caller's reference."""
        for fd, slot in enumerate(self._slots):
            if slot is None:
                self._slots[fd] = f
                return fd
        raise OSError(errno.EMFILE, "too many open files")

    def get(self, fd: int) -> OpenFile:
        """The open file behind fd."""
        if not 0 <= fd < len(self._slots):
            raise _bad_fd(fd)
        f = self._slots[fd]
        if f is None:
            raise _bad_fd(fd)
        return f

    def dup(self, fd: int) -> int:
        """A new descriptor, the lowest free one, for the file behind fd."""
        f = self.get(fd)
        newfd = self.allocate(f)
        f.dup()
        return newfd

    def dup2(self, oldfd: int, newfd: int) -> int:
        """Make newfd refer to the file behind oldfd, closing what it held."""
        f = self.get(oldfd)
        if not 0 <= newfd < len(self._slots):
            raise _bad_fd(newfd)
        if oldfd == newfd:
            return newfd
        previous = self._slots[newfd]
        if previous is not None:
            self._slots[newfd] = None
            previous.close()
        self._slots[newfd] = f
        f.dup()
        return newfd

    def close(self, fd: int) -> None:
        """Release descriptor fd."""
        f = self.get(fd)
        self._slots[fd] = None
        f.close()