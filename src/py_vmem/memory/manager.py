"""Memory manager — demand paging over a segmented address space.

The manager owns every moving part of the simulation and is the only
thing allowed to change them:

    AddressTranslator  → which segment/page/offset an address names
    PageTable          → where each page currently lives
    FrameAllocator     → which frames are used, and how recently
    PhysicalMemory     → the RAM bytes
    SwapStore          → the slots dirty evicted pages are parked in
    EvictionPolicy     → which frame to give up when RAM is full

A ``load`` or ``store`` translates the address and looks the page up.
On a **hit** the frame's recency is refreshed and the byte is read or
written.  On a **page fault** the page is fetched from wherever its
content lives, which depends on the segment:

    segment      first fault              after a dirty eviction
    ──────────   ──────────────────────   ──────────────────────
    text         backing store            (never dirty)
    data         backing store            swap
    bss          backing store            swap
    heap/stack   created by a write only  swap

If no frame is free the eviction policy makes room first.  Every
successful access ticks the logical clock exactly once; the clock is
what LRU compares.

Failures raise a ``MemoryAccessError`` subclass.  Bounds and permission
checks happen before any state changes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from py_vmem.errors import (
    BackingStoreIOError,
    ConfigurationError,
    InternalInconsistencyError,
    MemoryAccessError,
    ReadOnlyViolationError,
    StoreUnavailableError,
    SwapExhaustedError,
    SwapStoreIOError,
    UninitializedHeapStackReadError,
)
from py_vmem.logging import Logger, LogLevel
from py_vmem.memory.address import AddressTranslator, LogicalAddress, Segment
from py_vmem.memory.eviction import LRUEvictionPolicy
from py_vmem.memory.frames import FrameAllocator, PhysicalMemory
from py_vmem.memory.page_table import PageDescriptor, PageTable
from py_vmem.memory.swap import SwapStore

if TYPE_CHECKING:
    from types import TracebackType

    from py_vmem.config import MemoryLayout
    from py_vmem.memory.eviction import EvictionPolicy
    from py_vmem.memory.stores import ByteStore

_SOURCE = "pager"
_BYTE_MAX = 255


@dataclass(frozen=True)
class PagingStats:
    """Counters describing how accesses were served.

    Attributes:
        hits: Accesses that found their page resident.
        faults: Accesses that had to bring their page in.
        evictions: Pages pushed out to make room.
        swap_outs: Evictions that wrote a dirty page to swap.
        swap_ins: Faults served from swap.

    """

    hits: int = 0
    faults: int = 0
    evictions: int = 0
    swap_outs: int = 0
    swap_ins: int = 0


@dataclass(frozen=True)
class _PageSource:
    """Where a faulting page's bytes come from."""

    fetch: Callable[[], bytes]
    swap_slot: int | None
    description: str


def _coerce_byte(value: int | bytes | str) -> int:
    """Normalise a stored value to an int in 0..255."""
    if isinstance(value, bool):
        msg = f"Cannot store {value!r} as a byte"
        raise ValueError(msg)
    if isinstance(value, int):
        if not 0 <= value <= _BYTE_MAX:
            msg = f"Byte value {value} is outside 0..255"
            raise ValueError(msg)
        return value
    if isinstance(value, str):
        value = value.encode("latin-1")
    if not isinstance(value, bytes | bytearray) or len(value) != 1:
        msg = f"Expected a single byte, got {value!r}"
        raise ValueError(msg)
    return value[0]


class MemoryManager:
    """Simulate demand-paged virtual memory for one address space.

    Args:
        layout: The machine geometry.
        backing_store: Read-only program image (text, data, bss back to back).
        swap_store: Read/write store of at least ``layout.swap_size`` bytes.
        policy: Eviction policy; LRU by default.
        logger: Optional event log.

    """

    def __init__(
        self,
        *,
        layout: MemoryLayout,
        backing_store: ByteStore,
        swap_store: ByteStore,
        policy: EvictionPolicy | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Build every table and format swap.

        Raises:
            ConfigurationError: If the swap store is smaller than
                ``layout.swap_size``.
            StoreUnavailableError: If the swap store cannot be formatted.

        """
        if swap_store.size < layout.swap_size:
            msg = f"Swap store holds {swap_store.size} bytes but the layout needs {layout.swap_size}"
            raise ConfigurationError(msg)
        self._layout = layout
        self._backing = backing_store
        self._translator = AddressTranslator(layout)
        self._page_table = PageTable(tuple(self._translator.page_count(s) for s in Segment))
        self._frames = FrameAllocator(layout.frame_count)
        self._memory = PhysicalMemory(
            frame_count=layout.frame_count,
            page_size=layout.page_size,
            fill_byte=layout.fill_byte,
        )
        self._swap = SwapStore(
            swap_store,
            slot_count=layout.swap_slots,
            page_size=layout.page_size,
            fill_byte=layout.fill_byte,
        )
        self._swap_backend = swap_store
        self._policy: EvictionPolicy = policy if policy is not None else LRUEvictionPolicy()
        self._logger = logger
        self._clock = 0
        self._stats = PagingStats()
        try:
            self._swap.format()
        except SwapStoreIOError as e:
            msg = f"Cannot format swap store: {e}"
            raise StoreUnavailableError(msg) from e

    # -- Inspection (read-only) ------------------------------------------------

    @property
    def layout(self) -> MemoryLayout:
        """Return the machine geometry."""
        return self._layout

    @property
    def translator(self) -> AddressTranslator:
        """Return the address translator."""
        return self._translator

    @property
    def clock(self) -> int:
        """Return the logical clock (number of successful accesses)."""
        return self._clock

    @property
    def stats(self) -> PagingStats:
        """Return the paging counters."""
        return self._stats

    @property
    def logger(self) -> Logger | None:
        """Return the event log, if one was supplied."""
        return self._logger

    def physical_memory(self) -> bytes:
        """Return a copy of all physical memory."""
        return self._memory.snapshot()

    def page_table(self) -> tuple[tuple[PageDescriptor, ...], ...]:
        """Return copies of every page descriptor, grouped by segment."""
        return self._page_table.snapshot()

    def descriptor(self, address: int) -> PageDescriptor:
        """Return a copy of the descriptor for the page holding ``address``.

        Raises:
            OutOfBoundsError: If the address is illegal.

        """
        loc = self._translator.translate(address)
        return self._page_table.snapshot()[loc.segment][loc.page]

    def swap(self) -> bytes:
        """Return the raw content of the swap store."""
        return self._swap.snapshot()

    def frames(self) -> tuple[tuple[bool, int | None], ...]:
        """Return ``(occupied, last_access)`` for every frame."""
        return self._frames.snapshot()

    @property
    def swap_slots_used(self) -> int:
        """Return the number of occupied swap slots."""
        return self._swap.used

    # -- Accesses --------------------------------------------------------------

    def load(self, address: int) -> int:
        """Read one byte.

        Args:
            address: The logical address to read.

        Returns:
            The byte value at that address.

        Raises:
            OutOfBoundsError: If the address is illegal.
            UninitializedHeapStackReadError: If the address is in a
                heap/stack page no write has created.
            SwapExhaustedError: If making room needed swap and none was free.
            BackingStoreIOError: If the program image cannot be read.
            SwapStoreIOError: If swap cannot be read or written.
            InternalInconsistencyError: If eviction found no owner for its frame.

        """
        loc = self._checked_translate(address, "load")
        pd = self._page_table.lookup(loc.segment, loc.page)
        if pd.resident:
            frame = self._hit(pd)
            return self._memory.read_byte(frame, loc.offset)

        source = self._fault_source(loc, pd, writing=False)
        frame = self._fault_in(loc, source)
        return self._memory.read_byte(frame, loc.offset)

    def store(self, address: int, value: int | bytes | str) -> None:
        """Write one byte.

        Args:
            address: The logical address to write.
            value: An int in 0..255, or a single byte / character.

        Raises:
            ValueError: If ``value`` is not a single byte.
            OutOfBoundsError: If the address is illegal.
            ReadOnlyViolationError: If the address is in the text segment.
            SwapExhaustedError: If making room needed swap and none was free.
            BackingStoreIOError: If the program image cannot be read.
            SwapStoreIOError: If swap cannot be read or written.
            InternalInconsistencyError: If eviction found no owner for its frame.

        """
        byte = _coerce_byte(value)
        loc = self._checked_translate(address, "store")
        if loc.segment is Segment.TEXT:
            msg = f"Cannot write address {address}: text pages are read-only"
            self._reject(msg)
            raise ReadOnlyViolationError(msg)

        pd = self._page_table.lookup(loc.segment, loc.page)
        if pd.resident:
            frame = self._hit(pd)
        else:
            source = self._fault_source(loc, pd, writing=True)
            frame = self._fault_in(loc, source)
        self._memory.write_byte(frame, loc.offset, byte)
        self._page_table.mark_dirty(loc.segment, loc.page)

    # -- Lifecycle -------------------------------------------------------------

    def close(self) -> None:
        """Close both byte stores."""
        self._backing.close()
        self._swap_backend.close()

    def __enter__(self) -> MemoryManager:
        """Use the manager as a context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the stores on exit."""
        self.close()

    # -- Internals -------------------------------------------------------------

    def _log(self, level: LogLevel, message: str) -> None:
        if self._logger is not None:
            self._logger.log(level, message, source=_SOURCE, clock=self._clock)

    def _reject(self, message: str) -> None:
        self._log(LogLevel.WARNING, message)

    def _checked_translate(self, address: int, op: str) -> LogicalAddress:
        try:
            return self._translator.translate(address)
        except MemoryAccessError as e:
            self._reject(f"{op} rejected: {e}")
            raise

    def _tick(self, frame: int) -> None:
        self._frames.touch(frame, self._clock)
        self._clock += 1

    def _bump(self, **deltas: int) -> None:
        current = self._stats
        self._stats = replace(current, **{name: getattr(current, name) + n for name, n in deltas.items()})

    def _hit(self, pd: PageDescriptor) -> int:
        frame = pd.frame
        if frame is None:
            msg = "Resident page has no frame"
            raise InternalInconsistencyError(msg)
        self._tick(frame)
        self._bump(hits=1)
        return frame

    def _fault_source(
        self, loc: LogicalAddress, pd: PageDescriptor, *, writing: bool
    ) -> _PageSource:
        """Decide where a faulting page comes from.

        Nothing is read here; the returned source fetches on demand.

        Raises:
            UninitializedHeapStackReadError: On a read of a heap/stack
                page that was never written.

        """
        if pd.swap_slot is not None:
            slot = pd.swap_slot
            return _PageSource(
                fetch=lambda: self._swap.read_page(slot),
                swap_slot=slot,
                description=f"swap slot {slot}",
            )
        if loc.segment is Segment.HEAP_STACK:
            if not writing:
                msg = f"May not load heap/stack page {loc.page} before it is written"
                self._reject(msg)
                raise UninitializedHeapStackReadError(msg)
            blank = bytes([self._layout.fill_byte]) * self._layout.page_size
            return _PageSource(fetch=lambda: blank, swap_slot=None, description="zero-fill")
        offset = self._layout.backing_offset(loc.segment, loc.page)
        return _PageSource(
            fetch=lambda: self._read_backing(offset),
            swap_slot=None,
            description=f"backing store offset {offset}",
        )

    def _read_backing(self, offset: int) -> bytes:
        try:
            return self._backing.read(offset, self._layout.page_size)
        except OSError as e:
            msg = f"Cannot read backing store at offset {offset}: {e}"
            self._log(LogLevel.ERROR, msg)
            raise BackingStoreIOError(msg) from e

    def _obtain_frame(self) -> int:
        frame = self._frames.allocate()
        if frame is not None:
            return frame
        try:
            ev = self._policy.evict(
                frames=self._frames,
                memory=self._memory,
                page_table=self._page_table,
                swap=self._swap,
            )
        except (SwapExhaustedError, SwapStoreIOError, InternalInconsistencyError) as e:
            self._log(LogLevel.ERROR, str(e))
            raise
        self._log(LogLevel.INFO, f"evicted {ev.segment.label} page {ev.page} from frame {ev.frame}")
        if ev.swap_slot is None:
            self._bump(evictions=1)
        else:
            self._bump(evictions=1, swap_outs=1)
            self._log(LogLevel.DEBUG, f"swap out: {ev.segment.label} page {ev.page} -> slot {ev.swap_slot}")
        frame = self._frames.allocate()
        if frame is None:
            msg = "No frame is free even after eviction"
            self._log(LogLevel.ERROR, msg)
            raise InternalInconsistencyError(msg)
        return frame

    def _fault_in(self, loc: LogicalAddress, source: _PageSource) -> int:
        self._log(LogLevel.INFO, f"page fault: {loc.segment.label} page {loc.page} <- {source.description}")
        data = source.fetch()
        frame = self._obtain_frame()
        self._memory.write_frame(frame, data)
        slot = source.swap_slot
        # Memory holds the only copy once the slot is released.
        self._page_table.mark_resident(loc.segment, loc.page, frame=frame, dirty=slot is not None)
        if slot is not None:
            self._swap.free_slot(slot)
            self._log(LogLevel.DEBUG, f"swap in: {loc.segment.label} page {loc.page} <- slot {slot}")
            self._bump(swap_ins=1)
        self._tick(frame)
        self._bump(faults=1)
        return frame
