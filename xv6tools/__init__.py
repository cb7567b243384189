"""Models of a teaching kernel's paging, file descriptors, allocator, shell parser and text tools."""

__version__ = "0.1.0"
__all__ = ["layout", "ulib", "grep", "wc", "shell", "umalloc", "tools", "memory", "fdtable"]