"""Memory layout, MMU encodings, ELF headers and open-mode constants."""

from __future__ import annotations

import struct
from dataclasses import dataclass

# Memory layout
EXTMEM = 0x100000
PHYSTOP = 0xE000000
DEVSPACE = 0xFE000000
KERNBASE = 0x80000000
KERNLINK = KERNBASE + EXTMEM

# Eflags and control registers
FL_IF = 0x00000200
CR0_PE = 0x00000001
CR0_WP = 0x00010000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment selectors
SEG_KCODE = 1
SEG_KDATA = 2
SEG_UCODE = 3
SEG_UDATA = 4
SEG_TSS = 5
NSEGS = 6

DPL_USER = 0x3

# Application segment type bits
STA_X = 0x8
STA_W = 0x2
STA_R = 0x2

# System segment type bits
STS_T32A = 0x9
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PTXSHIFT = 12
PDXSHIFT = 22

PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PS = 0x080

# ELF
ELF_MAGIC = 0x464C457F
ELF_PROG_LOAD = 1
ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4

# Open modes
O_RDONLY = 0x000
O_WRONLY = 0x001
O_RDWR = 0x002
O_CREATE = 0x200

# Scheduling priorities
LOWEST_PRIO = 9
NORM_PRIO = 5
HIGHEST_PRIO = 0

_MASK32 = 0xFFFFFFFF


def _u32(value: int) -> int:
    return value & _MASK32


def pdx(va: int) -> int:
    """Page directory index of a virtual address."""
    return (_u32(va) >> PDXSHIFT) & 0x3FF


def ptx(va: int) -> int:
    """Page table index of a virtual address."""
    return (_u32(va) >> PTXSHIFT) & 0x3FF


def pgaddr(d: int, t: int, o: int) -> int:
    """Build a virtual address from directory index, table index and offset."""
    return _u32(d << PDXSHIFT | t << PTXSHIFT | o)


def pgroundup(sz: int) -> int:
    """Round a size up to a page boundary."""
    return _u32((sz + PGSIZE - 1) & ~(PGSIZE - 1))


def pgrounddown(a: int) -> int:
    """Round an address down to a page boundary."""
    return _u32(a & ~(PGSIZE - 1))


def pte_addr(pte: int) -> int:
    """Physical address held in a page table entry."""
    return _u32(pte) & ~0xFFF & _MASK32


def pte_flags(pte: int) -> int:
    """Flag bits of a page table entry."""
    return _u32(pte) & 0xFFF


def v2p(a: int) -> int:
    """Kernel virtual address to physical address."""
    return _u32(a - KERNBASE)


def p2v(a: int) -> int:
    """Physical address to kernel virtual address."""
    return _u32(a + KERNBASE)


def _segdesc(lim_lo: int, base: int, type: int, dpl: int, lim_hi: int, g: int) -> bytes:
    base = _u32(base)
    value = (
        (lim_lo & 0xFFFF)
        | (base & 0xFFFF) << 16
        | ((base >> 16) & 0xFF) << 32
        | (type & 0xF) << 40
        | 1 << 44
        | (dpl & 0x3) << 45
        | 1 << 47
        | (lim_hi & 0xF) << 48
        | 1 << 54
        | (g & 0x1) << 55
        | ((base >> 24) & 0xFF) << 56
    )
    return value.to_bytes(8, "little")


def segment_descriptor(type: int, base: int, limit: int, dpl: int) -> bytes:
    """Encode a normal 32-bit segment descriptor with 4K granularity."""
    limit = _u32(limit)
    return _segdesc((limit >> 12) & 0xFFFF, base, type, dpl, limit >> 28, 1)


def segment16_descriptor(type: int, base: int, limit: int, dpl: int) -> bytes:
    """Encode a byte-granular segment descriptor (as used for the TSS)."""
    limit = _u32(limit)
    return _segdesc(limit & 0xFFFF, base, type, dpl, limit >> 16, 0)


def gate_descriptor(istrap: bool, sel: int, off: int, dpl: int) -> bytes:
    """Encode an interrupt or trap gate descriptor."""
    off = _u32(off)
    gate_type = STS_TG32 if istrap else STS_IG32
    value = (
        (off & 0xFFFF)
        | (sel & 0xFFFF) << 16
        | gate_type << 40
        | (dpl & 0x3) << 45
        | 1 << 47
        | (off >> 16) << 48
    )
    return value.to_bytes(8, "little")


def wifexited(status: int) -> bool:
    """True when a wait status reports a normal exit."""
    return (status & 0x7F) == 0


def wexitstatus(status: int) -> int:
    """Exit code carried by a wait status."""
    return (status & 0xFF00) >> 8


def wifsignaled(status: int) -> bool:
    """True when a wait status reports death by trap."""
    return (status & 0x7F) != 0


def wexittrap(status: int) -> int:
    """Trap number carried by a wait status."""
    return (status & 0x7F) - 1


_ELF = struct.Struct("<I12sHHIIIIIHHHHHH")
_PROG = struct.Struct("<8I")


@dataclass
class ElfHeader:
    """ELF executable file header."""

    magic: int = ELF_MAGIC
    elf: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    @classmethod
    def parse(cls, data: bytes) -> "ElfHeader":
        if len(data) < _ELF.size:
            raise ValueError("truncated ELF header")
        header = cls(*_ELF.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ValueError("not an ELF file")
        return header

    def pack(self) -> bytes:
        return _ELF.pack(
            self.magic, self.elf, self.type, self.machine, self.version,
            self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
            self.phentsize, self.phnum, self.shentsize, self.shnum, self.shstrndx,
        )


@dataclass
class ProgramHeader:
    """ELF program section header."""

    type: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    flags: int = 0
    align: int = 0

    @classmethod
    def parse(cls, data: bytes) -> "ProgramHeader":
        if len(data) < _PROG.size:
            raise ValueError("truncated program header")
        return cls(*_PROG.unpack_from(data))

    def pack(self) -> bytes:
        return _PROG.pack(
            self.type, self.off, self.vaddr, self.paddr,
            self.filesz, self.memsz, self.flags, self.align,
        )