"""A first-fit free-list allocator over a growable heap."""

from __future__ import annotations

from dataclasses import dataclass

HEADER_SIZE = 8
MIN_UNITS = 4096

# The sentinel block sits below every heap address, as a static would.
_BASE = -HEADER_SIZE


class Heap:
    """A contiguous region whose end (the break) can be moved."""

    def __init__(self, start: int = 0, limit: int | None = None) -> None:
        if start < 0:
            raise ValueError("heap start must not be negative")
        self.start = start
        self.brk = start
        self.limit = limit

    def sbrk(self, n: int) -> int:
        """Move the break by n bytes and return its old value."""
        old = self.brk
        new = old + n
        if new < self.start or (self.limit is not None and new > self.limit):
            raise MemoryError("heap exhausted")
        self.brk = new
        return old


@dataclass
class _Header:
    ptr: int
    size: int


class Allocator:
    """Allocate blocks from a heap, keeping freed blocks on a circular list."""

    def __init__(self, heap: Heap) -> None:
        self.heap = heap
        self._headers: dict[int, _Header] = {}
        self._allocated: set[int] = set()
        self._freep: int | None = None

    def malloc(self, nbytes: int) -> int:
        """Return the address of a block of at least nbytes bytes."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        h = self._headers
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            h[_BASE] = _Header(_BASE, 0)
            self._freep = _BASE
        prevp = self._freep
        p = h[prevp].ptr
        while True:
            block = h[p]
            if block.size >= nunits:
                if block.size == nunits:
                    h[prevp].ptr = block.ptr
                else:
                    block.size -= nunits
                    p += block.size * HEADER_SIZE
                    h[p] = _Header(0, nunits)
                self._freep = prevp
                self._allocated.add(p)
                return p + HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, h[p].ptr

    def free(self, address: int) -> None:
        """Return a block obtained from malloc to the free list."""
        bp = address - HEADER_SIZE
        if bp not in self._allocated:
            raise ValueError(f"address {address:#x} is not an allocated block")
        self._allocated.remove(bp)
        self._release(bp)

    def _morecore(self, nunits: int) -> int:
        nunits = max(nunits, MIN_UNITS)
        p = self.heap.sbrk(nunits * HEADER_SIZE)
        self._headers[p] = _Header(0, nunits)
        self._release(p)
        assert self._freep is not None
        return self._freep

    def _release(self, bp: int) -> None:
        h = self._headers
        assert self._freep is not None
        p = self._freep
        while not (p < bp < h[p].ptr):
            if p >= h[p].ptr and (bp > p or bp < h[p].ptr):
                break
            p = h[p].ptr
        block = h[bp]
        prev = h[p]
        nxt = prev.ptr
        if bp + block.size * HEADER_SIZE == nxt:
            block.size += h[nxt].size
            block.ptr = h[nxt].ptr
            del h[nxt]
        else:
            block.ptr = nxt
        if p + prev.size * HEADER_SIZE == bp:
            prev.size += block.size
            prev.ptr = block.ptr
            del h[bp]
        else:
            prev.ptr = bp
        self._freep = p