import pytest

from xv6tools.umalloc import HEADER_SIZE, MIN_UNITS, Allocator, Heap


def test_sbrk_returns_old_break():
    heap = Heap(start=100)
    assert heap.sbrk(50) == 100
    assert heap.sbrk(-20) == 150
    assert heap.brk == 130


def test_sbrk_beyond_limit_raises():
    heap = Heap(limit=64)
    with pytest.raises(MemoryError):
        heap.sbrk(65)
    assert heap.brk == 0


def test_first_allocation_grows_heap_by_minimum():
    heap = Heap()
    alloc = Allocator(heap)
    alloc.malloc(1)
    assert heap.brk == MIN_UNITS * HEADER_SIZE


def test_allocation_is_carved_from_end_of_block():
    heap = Heap()
    alloc = Allocator(heap)
    addr = alloc.malloc(1)
    assert addr == heap.brk - HEADER_SIZE


def test_allocations_do_not_overlap():
    heap = Heap()
    alloc = Allocator(heap)
    sizes = [1, 7, 8, 9, 100, 500, 3]
    spans = sorted((alloc.malloc(n), n) for n in sizes)
    for (a, n), (b, _) in zip(spans, spans[1:]):
        assert a + n <= b - HEADER_SIZE
    for a, n in spans:
        assert a % HEADER_SIZE == 0
        assert heap.start < a and a + n <= heap.brk


def test_freed_block_is_reused():
    heap = Heap()
    alloc = Allocator(heap)
    a = alloc.malloc(40)
    alloc.free(a)
    assert alloc.malloc(40) == a


def test_freeing_everything_coalesces():
    heap = Heap()
    alloc = Allocator(heap)
    addrs = [alloc.malloc(n) for n in (10, 200, 33, 64, 1000)]
    brk = heap.brk
    for a in reversed(addrs[::2]):
        alloc.free(a)
    for a in addrs[1::2]:
        alloc.free(a)
    whole = alloc.malloc((MIN_UNITS - 1) * HEADER_SIZE)
    assert heap.brk == brk
    assert whole == heap.start + HEADER_SIZE


def test_large_request_grows_heap_again():
    heap = Heap()
    alloc = Allocator(heap)
    alloc.malloc(1)
    first = heap.brk
    alloc.malloc(MIN_UNITS * HEADER_SIZE)
    assert heap.brk > first


def test_out_of_memory():
    alloc = Allocator(Heap(limit=1024))
    with pytest.raises(MemoryError):
        alloc.malloc(1)


def test_free_unknown_or_twice():
    alloc = Allocator(Heap())
    with pytest.raises(ValueError):
        alloc.free(64)
    a = alloc.malloc(16)
    alloc.free(a)
    with pytest.raises(ValueError):
        alloc.free(a)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Allocator(Heap()).malloc(-1)