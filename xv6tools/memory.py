"""Two-level x86 page tables, user address spaces and lazy heap growth."""

from __future__ import annotations

import sys
from typing import Iterator, TextIO

from xv6tools.layout import (
    KERNBASE,
    NPDENTRIES,
    PDXSHIFT,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    pdx,
    pgrounddown,
    pgroundup,
    ptx,
    pte_addr,
    pte_flags,
)

_MASK32 = 0xFFFFFFFF


class KernelPanic(RuntimeError):
    """An invariant of the kernel was violated; the system cannot go on."""


class PhysicalMemory:
    """A pool of page-sized physical frames handed out one at a time."""

    def __init__(self, pages: int = 1024, base: int = 0x400000) -> None:
        if pages < 0:
            raise ValueError("page count must not be negative")
        if base % PGSIZE:
            raise ValueError("base must be page aligned")
        self.base = base
        self.end = base + pages * PGSIZE
        # Popping from the end hands out the highest free frame first.
        self._free: list[int] = list(range(base, self.end, PGSIZE))
        self._frames: dict[int, bytearray] = {}

    @property
    def free_pages(self) -> int:
        """Number of frames not currently allocated."""
        return len(self._free)

    @property
    def used_pages(self) -> int:
        """Number of frames currently allocated."""
        return len(self._frames)

    def alloc(self) -> int:
        """Allocate one frame and return its physical address."""
        if not self._free:
            raise MemoryError("out of physical memory")
        pa = self._free.pop()
        self._frames[pa] = bytearray(PGSIZE)
        return pa

    def free(self, pa: int) -> None:
        """Return a frame to the pool."""
        if pa % PGSIZE or not self.base <= pa < self.end or pa not in self._frames:
            raise KernelPanic("kfree")
        del self._frames[pa]
        self._free.append(pa)

    def frame(self, pa: int) -> bytearray:
        """The contents of the allocated frame at pa."""
        try:
            return self._frames[pa]
        except KeyError:
            raise KernelPanic(f"no frame at {pa:#x}") from None

    def zero(self, pa: int) -> None:
        """Fill a frame with zero bytes."""
        self.frame(pa)[:] = bytes(PGSIZE)


class PageDirectory:
    """The user half of a two-level page table.

    The kernel half is present in every directory and never changes, so it is
    not materialised; any attempt to map into it is a remap.
    """

    def __init__(self, memory: PhysicalMemory) -> None:
        self.memory = memory
        self.pa: int | None = memory.alloc()
        memory.zero(self.pa)

    def _entries(self, pa: int) -> memoryview:
        return memoryview(self.memory.frame(pa)).cast("I")

    def _directory(self) -> memoryview:
        if self.pa is None:
            raise KernelPanic("page directory already freed")
        return self._entries(self.pa)

    def _slot(self, va: int, alloc: bool) -> tuple[memoryview, int] | None:
        directory = self._directory()
        index = pdx(va)
        pde = directory[index]
        if pde & PTE_P:
            table_pa = pte_addr(pde)
        else:
            if not alloc:
                return None
            table_pa = self.memory.alloc()
            self.memory.zero(table_pa)
            # Generous permissions here; the PTEs restrict further.
            directory[index] = table_pa | PTE_P | PTE_W | PTE_U
        return self._entries(table_pa), ptx(va)

    def walk(self, va: int, alloc: bool = False) -> int | None:
        """The page table entry for va, or None when its table is missing."""
        slot = self._slot(va, alloc)
        if slot is None:
            return None
        table, index = slot
        return table[index]

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map the pages covering [va, va+size) to frames starting at pa."""
        if size <= 0:
            raise ValueError("size must be positive")
        a = pgrounddown(va)
        last = pgrounddown(va + size - 1)
        while True:
            if a >= KERNBASE:
                raise KernelPanic("remap")
            table, index = self._slot(a, True)  # type: ignore[misc]
            if table[index] & PTE_P:
                raise KernelPanic("remap")
            table[index] = (pa | perm | PTE_P) & _MASK32
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def init_user(self, code: bytes) -> None:
        """Load code, smaller than a page, at address 0."""
        if len(code) >= PGSIZE:
            raise KernelPanic("inituvm: more than a page")
        mem = self.memory.alloc()
        self.memory.zero(mem)
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_U)
        self.memory.frame(mem)[: len(code)] = code

    def alloc_user(self, oldsz: int, newsz: int) -> int:
        """Grow user memory from oldsz to newsz and return the new size."""
        if newsz >= KERNBASE:
            raise MemoryError("allocuvm: size reaches kernel space")
        if newsz < oldsz:
            return oldsz
        a = pgroundup(oldsz)
        while a < newsz:
            try:
                mem = self.memory.alloc()
            except MemoryError:
                self.dealloc_user(newsz, oldsz)
                raise MemoryError("allocuvm out of memory") from None
            self.memory.zero(mem)
            try:
                self.map_pages(a, PGSIZE, mem, PTE_W | PTE_U)
            except MemoryError:
                self.dealloc_user(newsz, oldsz)
                self.memory.free(mem)
                raise MemoryError("allocuvm out of memory (2)") from None
            a += PGSIZE
        return newsz

    def dealloc_user(self, oldsz: int, newsz: int) -> int:
        """Shrink user memory from oldsz to newsz and return the new size."""
        if newsz >= oldsz:
            return oldsz
        a = pgroundup(newsz)
        while a < oldsz:
            slot = self._slot(a, False)
            if slot is None:
                # Skip to the last page covered by the missing table.
                a = ((pdx(a) + 1) << PDXSHIFT) - PGSIZE
            else:
                table, index = slot
                pte = table[index]
                if pte & PTE_P:
                    pa = pte_addr(pte)
                    if pa == 0:
                        raise KernelPanic("kfree")
                    self.memory.free(pa)
                    table[index] = 0
            a += PGSIZE
        return newsz

    def copy(self, sz: int) -> "PageDirectory":
        """A new directory holding copies of the present pages below sz."""
        child = PageDirectory(self.memory)
        try:
            for va in range(0, sz, PGSIZE):
                slot = self._slot(va, False)
                if slot is None:
                    continue
                table, index = slot
                pte = table[index]
                if not pte & PTE_P:
                    continue
                mem = self.memory.alloc()
                self.memory.frame(mem)[:] = self.memory.frame(pte_addr(pte))
                try:
                    child.map_pages(va, PGSIZE, mem, pte_flags(pte))
                except MemoryError:
                    self.memory.free(mem)
                    raise
        except MemoryError:
            child.free(True)
            raise
        return child

    def translate(self, uva: int) -> int | None:
        """Physical address of the user page at uva, or None if not accessible."""
        pte = self.walk(uva)
        if pte is None or not pte & PTE_P or not pte & PTE_U:
            return None
        return pte_addr(pte)

    def copy_out(self, va: int, data: bytes) -> None:
        """Copy data to user address va."""
        view = memoryview(bytes(data))
        pos = 0
        while pos < len(view):
            va0 = pgrounddown(va)
            pa0 = self.translate(va0)
            if pa0 is None:
                raise ValueError(f"copy_out: address {va:#x} is not user memory")
            offset = va - va0
            n = min(PGSIZE - offset, len(view) - pos)
            self.memory.frame(pa0)[offset : offset + n] = view[pos : pos + n]
            pos += n
            va = va0 + PGSIZE

    def clear_user(self, uva: int) -> None:
        """Make the page at uva inaccessible to user code."""
        slot = self._slot(uva, False)
        if slot is None:
            raise KernelPanic("clearpteu")
        table, index = slot
        table[index] &= ~PTE_U & _MASK32

    def free(self, dealloc: bool = True) -> None:
        """Release the page tables, and the user pages too when dealloc is true."""
        if self.pa is None:
            raise KernelPanic("freevm: no pgdir")
        if dealloc:
            self.dealloc_user(KERNBASE, 0)
        directory = self._directory()
        tables = [pte_addr(directory[i]) for i in range(NPDENTRIES) if directory[i] & PTE_P]
        del directory
        for table_pa in tables:
            self.memory.free(table_pa)
        self.memory.free(self.pa)
        self.pa = None


class AddressSpace:
    """A process's user memory, laid out as code, guard page and stack.

    The heap grows lazily: sbrk only moves the size, and pages are
    allocated when first touched.
    """

    def __init__(
        self, memory: PhysicalMemory, code: bytes = b"", *, console: TextIO | None = None
    ) -> None:
        self.memory = memory
        self.console = console
        self.killed = False
        self.pgdir = PageDirectory(memory)
        try:
            self.pgdir.init_user(code)
            sz = PGSIZE
            sz = self.pgdir.alloc_user(sz, sz + 2 * PGSIZE)
            self.pgdir.clear_user(sz - 2 * PGSIZE)
        except BaseException:
            self.pgdir.free(True)
            raise
        self.ustack = sz - PGSIZE
        self.sz = sz

    def _log(self, message: str) -> None:
        print(message, file=self.console if self.console is not None else sys.stderr)

    def sbrk(self, n: int) -> int:
        """Move the end of the heap by n bytes and return the old end."""
        old = self.sz
        new = old + n
        if new < 0:
            raise ValueError("sbrk: size would become negative")
        if n < 0 and self.pgdir.dealloc_user(self.sz, new) == 0:
            raise MemoryError("sbrk: cannot release memory")
        self.sz = new
        return old

    def handle_page_fault(self, addr: int) -> None:
        """Allocate a page for a faulting access, marking bad accesses killed."""
        addr &= _MASK32
        if self.sz < addr:
            self._log("T_PGFLT attempted access to a non-reserved memory area")
            self.killed = True
        if pgrounddown(addr) < self.ustack:
            self._log("T_PGFLT attempted access to guard page")
            self.killed = True
        try:
            mem = self.memory.alloc()
        except MemoryError:
            self._log("T_PGFLT out of memory")
            self.killed = True
            return
        self.memory.zero(mem)
        try:
            self.pgdir.map_pages(pgrounddown(addr), PGSIZE, mem, PTE_W | PTE_U)
        except MemoryError:
            self._log("T PGFLT mapping fail")
            self.memory.free(mem)
            self.killed = True

    def _resolve(self, va: int) -> int:
        pa = self.pgdir.translate(va)
        if pa is None:
            self.handle_page_fault(va)
            if self.killed:
                raise PermissionError(f"process killed: bad access at {va:#x}")
            pa = self.pgdir.translate(va)
            if pa is None:
                raise PermissionError(f"process killed: bad access at {va:#x}")
        return pa

    def _chunks(self, va: int, n: int) -> Iterator[tuple[bytearray, int, int, int]]:
        pos = 0
        while pos < n:
            va0 = pgrounddown(va)
            offset = va - va0
            length = min(PGSIZE - offset, n - pos)
            frame = self.memory.frame(self._resolve(va))
            yield frame, offset, length, pos
            pos += length
            va = va0 + PGSIZE

    def read(self, va: int, n: int) -> bytes:
        """Read n bytes of user memory, faulting pages in as needed."""
        out = bytearray(n)
        for frame, offset, length, pos in self._chunks(va, n):
            out[pos : pos + length] = frame[offset : offset + length]
        return bytes(out)

    def write(self, va: int, data: bytes) -> None:
        """Write data to user memory, faulting pages in as needed."""
        view = memoryview(bytes(data))
        for frame, offset, length, pos in self._chunks(va, len(view)):
            frame[offset : offset + length] = view[pos : pos + length]

    def fork(self) -> "AddressSpace":
        """A copy of this address space with its own pages."""
        child = AddressSpace.__new__(AddressSpace)
        child.memory = self.memory
        child.console = self.console
        child.killed = False
        child.pgdir = self.pgdir.copy(self.sz)
        child.ustack = self.ustack
        child.sz = self.sz
        return child