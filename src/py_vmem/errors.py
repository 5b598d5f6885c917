"""Error hierarchy for the memory simulator.

Every failure a ``load`` or ``store`` can hit is a subclass of
``MemoryAccessError`` so callers that only want to know "did the access
work?" can catch one type, while tests and tools can still tell the
conditions apart:

- **OutOfBoundsError** — the address does not name a legal page.
- **ReadOnlyViolationError** — a write aimed at the text segment.
- **UninitializedHeapStackReadError** — a read of a heap/stack page
  that no write has ever created.
- **SwapExhaustedError** — a dirty victim needed a swap slot and none
  was free.
- **BackingStoreIOError** / **SwapStoreIOError** — the underlying byte
  store failed.
- **InternalInconsistencyError** — the page table and frame table
  disagree.  This is a bookkeeping bug and is never swallowed.

Two errors sit outside that family because they happen before a
manager exists: ``ConfigurationError`` for a bad layout and
``StoreUnavailableError`` when a file store cannot be opened.
"""


class MemoryAccessError(Exception):
    """Base class for failures of a single memory access."""

    kind = "memory_access"


class OutOfBoundsError(MemoryAccessError):
    """Raise when an address falls outside every configured page."""

    kind = "out_of_bounds"


class ReadOnlyViolationError(MemoryAccessError):
    """Raise on a write to the read-only text segment."""

    kind = "read_only_violation"


class UninitializedHeapStackReadError(MemoryAccessError):
    """Raise when reading a heap/stack page that was never written."""

    kind = "uninitialized_heap_stack_read"


class SwapExhaustedError(MemoryAccessError):
    """Raise when eviction needs a swap slot and the swap store is full."""

    kind = "resource_exhausted"


class BackingStoreIOError(MemoryAccessError):
    """Raise when the backing store cannot be read."""

    kind = "backing_store_io"


class SwapStoreIOError(MemoryAccessError):
    """Raise when the swap store cannot be read or written."""

    kind = "swap_store_io"


class InternalInconsistencyError(MemoryAccessError):
    """Raise when no page table entry owns the frame chosen for eviction."""

    kind = "internal_inconsistency"


class ConfigurationError(ValueError):
    """Raise when a memory layout is not self-consistent."""


class StoreUnavailableError(OSError):
    """Raise when a byte store cannot be opened at construction time."""
