# xv6tools

Pure-Python models of pieces of a small teaching kernel and its user-space
programs: paging arithmetic and page tables, file descriptor tables, a
free-list allocator, a shell command parser, and a few text tools.

## Modules

- `xv6tools.layout` – constants for the memory layout, page-table entry
  flags, segment selectors, ELF and open modes (`O_RDONLY`, `O_WRONLY`,
  `O_RDWR`, `O_CREATE`); paging arithmetic (`pdx`, `ptx`, `pgaddr`,
  `pgroundup`, `pgrounddown`, `pte_addr`, `pte_flags`, `v2p`, `p2v`);
  8-byte encodings of segment and gate descriptors
  (`segment_descriptor`, `segment16_descriptor`, `gate_descriptor`);
  wait-status helpers (`wifexited`, `wexitstatus`, `wifsignaled`,
  `wexittrap`); and the `ElfHeader` / `ProgramHeader` dataclasses with
  `parse` and `pack`. `ElfHeader.parse` raises `ValueError` on short data
  or a wrong magic number.
- `xv6tools.ulib` – `atoi` (leading decimal digits), `strcmp` (unsigned
  byte difference), `sprintf` / `printf` understanding `%d %x %p %s %c %%`
  (other `%` sequences are printed as they are), and `gets`, which reads
  one line of at most `limit - 1` characters from a stream.
- `xv6tools.grep` – `match(re, text)` for patterns using `^ . * $`, and
  `grep(pattern, stream, out)` which writes matching lines.
- `xv6tools.wc` – `count(stream)` returns a `WordCount` of lines, words
  and bytes for a binary stream.
- `xv6tools.shell` – `parse_command(line)` builds a tree of
  `ExecCommand`, `RedirCommand`, `PipeCommand`, `ListCommand` and
  `BackCommand`, raising `ShellSyntaxError` on bad input (at most 9
  words per command; `>` and `>>` both open with `O_WRONLY | O_CREATE`).
- `xv6tools.umalloc` – `Heap` with a movable break (`sbrk`, raising
  `MemoryError` when it would pass `limit` or go below `start`) and a
  first-fit `Allocator` with `malloc` and `free`, returning integer
  addresses.
- `xv6tools.tools` – `cat(streams, out)`, `echo(args)`, `fmtname(path)`
  (last path component padded to 14 characters) and `format_date` for an
  `RtcDate` (`day/month/year`).
- `xv6tools.memory` – `PhysicalMemory` (a pool of 4096-byte frames),
  `PageDirectory` (two-level page tables: `walk`, `map_pages`,
  `init_user`, `alloc_user`, `dealloc_user`, `copy`, `translate`,
  `copy_out`, `clear_user`, `free`) and `AddressSpace`, a process image of
  code page, guard page and stack whose heap grows lazily: `sbrk` only
  moves the size, and `read` / `write` fault pages in on first touch via
  `handle_page_fault`. Accesses beyond the size or into the guard page
  mark the space `killed` and raise `PermissionError`. `fork` copies the
  present pages. Broken invariants raise `KernelPanic`.
- `xv6tools.fdtable` – `OpenFile` (reference counted, `dup` / `close`,
  optional `on_release` callback, `OpenFile.opened(target, omode)`),
  `access_mode(omode)`, and `FileDescriptorTable` with `allocate`, `get`,
  `dup`, `dup2` and `close`. Bad descriptors raise `OSError` with
  `EBADF`; a full table raises `OSError` with `EMFILE`.

## Install

```
pip install .
```

## Command line

```
xv6-grep PATTERN [FILE ...]
xv6-wc [FILE ...]
```

Both read standard input when no file is given.

## Example

```python
from xv6tools.grep import match
from xv6tools.shell import parse_command, PipeCommand
from xv6tools.memory import PhysicalMemory, AddressSpace

assert match("^ab*c$", "abbbc")

tree = parse_command("ls | wc > out")
assert isinstance(tree, PipeCommand)

space = AddressSpace(PhysicalMemory(pages=64))
base = space.sbrk(8192)
space.write(base + 100, b"hi")   # faults the page in on first touch
assert space.read(base + 100, 2) == b"hi"
```

## What it does not do

There is no kernel to boot and no process scheduler. There is no file
system: open files in `fdtable` carry whatever target you give them, and
nothing reads or writes disk blocks. The shell module only parses command
lines; it does not run them. Of the user programs, only `grep` and `wc`
are installed as commands.

## Tests

```
pip install .[test]
pytest
```