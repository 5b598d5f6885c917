"""Swap store — page-sized slots on a byte store.

When a dirty page is evicted its bytes must survive somewhere; that
somewhere is swap.  Swap is sized to hold every writable page at once
(data + bss + heap/stack), split into page-sized **slots**::

    slot 0          slot 1          slot 2          ...
    [page_size B]   [page_size B]   [page_size B]

Occupancy is tracked per slot, never per byte: a slot is either free
or holds exactly one page.  Allocation is first fit, so the lowest
free slot is always reused first.

Freed slots are rewritten with the fill byte so a dump of the swap
file only ever shows live pages.
"""

from py_vmem.errors import SwapStoreIOError
from py_vmem.memory.stores import ByteStore


class SwapStore:
    """Slot allocator and page I/O on top of a byte store."""

    def __init__(self, store: ByteStore, *, slot_count: int, page_size: int, fill_byte: int) -> None:
        """Create swap space over ``store``.

        Args:
            store: The read/write byte store holding the slots.
            slot_count: Number of page-sized slots.
            page_size: Size of each slot in bytes.
            fill_byte: Value written to free slots.

        """
        self._store = store
        self._page_size = page_size
        self._fill = fill_byte
        self._used: list[bool] = [False] * slot_count

    @property
    def capacity(self) -> int:
        """Return the total number of slots."""
        return len(self._used)

    @property
    def used(self) -> int:
        """Return the number of occupied slots."""
        return sum(self._used)

    def is_used(self, slot: int) -> bool:
        """Return True if the slot holds a page."""
        return self._used[slot]

    def format(self) -> None:
        """Fill every slot with the fill byte and mark all slots free.

        Raises:
            SwapStoreIOError: If the store cannot be written.

        """
        self._write(0, bytes([self._fill]) * (self.capacity * self._page_size))
        self._used = [False] * self.capacity

    def allocate_slot(self) -> int | None:
        """Claim the first free slot.

        Returns:
            The slot number, or None if swap is full.

        """
        for slot, used in enumerate(self._used):
            if not used:
                self._used[slot] = True
                return slot
        return None

    def free_slot(self, slot: int) -> None:
        """Release a slot and blank its bytes.

        Raises:
            SwapStoreIOError: If the slot cannot be blanked.

        """
        self._used[slot] = False
        self._write(slot * self._page_size, bytes([self._fill]) * self._page_size)

    def release_slot(self, slot: int) -> None:
        """Mark a slot free without touching its bytes.

        Used to give back a slot whose page write failed, when the
        store may not accept a blanking write either.
        """
        self._used[slot] = False

    def read_page(self, slot: int) -> bytes:
        """Return the page stored in a slot.

        Raises:
            SwapStoreIOError: If the store cannot be read.

        """
        try:
            return self._store.read(slot * self._page_size, self._page_size)
        except OSError as e:
            msg = f"Cannot read swap slot {slot}: {e}"
            raise SwapStoreIOError(msg) from e

    def write_page(self, slot: int, data: bytes) -> None:
        """Write one page into a slot.

        Raises:
            ValueError: If ``data`` is not exactly one page long.
            SwapStoreIOError: If the store cannot be written.

        """
        if len(data) != self._page_size:
            msg = f"Swap pages must be {self._page_size} bytes, got {len(data)}"
            raise ValueError(msg)
        self._write(slot * self._page_size, data)

    def snapshot(self) -> bytes:
        """Return the raw content of every slot.

        Raises:
            SwapStoreIOError: If the store cannot be read.

        """
        try:
            return self._store.read(0, self.capacity * self._page_size)
        except OSError as e:
            msg = f"Cannot read swap store: {e}"
            raise SwapStoreIOError(msg) from e

    def _write(self, offset: int, data: bytes) -> None:
        try:
            self._store.write(offset, data)
        except OSError as e:
            msg = f"Cannot write swap store at offset {offset}: {e}"
            raise SwapStoreIOError(msg) from e
