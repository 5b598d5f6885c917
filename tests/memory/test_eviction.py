"""Tests for LRU victim selection and page-out.

These drive ``LRUEvictionPolicy`` against hand-built tables so the
failure modes that a well-formed manager never reaches (swap full, a
frame with no owner) can be checked directly.
"""

import pytest

from py_vmem.errors import InternalInconsistencyError, SwapExhaustedError, SwapStoreIOError
from py_vmem.memory.address import Segment
from py_vmem.memory.eviction import Eviction, LRUEvictionPolicy
from py_vmem.memory.frames import FrameAllocator, PhysicalMemory
from py_vmem.memory.page_table import PageTable
from py_vmem.memory.stores import BytesStore
from py_vmem.memory.swap import SwapStore

PAGE_SIZE = 4
FILL = ord("0")


class _FlakyStore(BytesStore):
    """An in-memory store whose writes fail while ``failing`` is set."""

    failing = False

    def write(self, offset: int, data: bytes) -> None:
        if self.failing:
            msg = "write error"
            raise OSError(msg)
        super().write(offset, data)


class _Rig:
    """Two frames, a small page table, and swap with a chosen slot count."""

    def __init__(self, *, swap_slots: int = 4) -> None:
        self.frames = FrameAllocator(2)
        self.memory = PhysicalMemory(frame_count=2, page_size=PAGE_SIZE, fill_byte=FILL)
        self.page_table = PageTable((2, 2, 2, 2))
        self.store = _FlakyStore(bytes([FILL]) * (swap_slots * PAGE_SIZE))
        self.swap = SwapStore(
            self.store,
            slot_count=swap_slots,
            page_size=PAGE_SIZE,
            fill_byte=FILL,
        )
        self.swap.format()

    def place(self, segment: Segment, page: int, data: bytes, *, clock: int, dirty: bool = False) -> int:
        """Put a page in the next free frame, as the manager would."""
        frame = self.frames.allocate()
        assert frame is not None
        self.memory.write_frame(frame, data)
        self.page_table.mark_resident(segment, page, frame=frame)
        if dirty:
            self.page_table.mark_dirty(segment, page)
        self.frames.touch(frame, clock)
        return frame

    def evict(self) -> Eviction:
        return LRUEvictionPolicy().evict(
            frames=self.frames,
            memory=self.memory,
            page_table=self.page_table,
            swap=self.swap,
        )


class TestVictimSelection:
    """Verify which page is chosen."""

    def test_least_recent_frame_is_evicted(self) -> None:
        """The frame with the smallest clock value goes first."""
        rig = _Rig()
        rig.place(Segment.TEXT, 0, b"text", clock=5)
        rig.place(Segment.DATA, 1, b"data", clock=2)
        ev = rig.evict()
        assert (ev.segment, ev.page, ev.frame) == (Segment.DATA, 1, 1)

    def test_evicted_frame_is_free(self) -> None:
        """After eviction the frame can be allocated again."""
        rig = _Rig()
        rig.place(Segment.TEXT, 0, b"text", clock=0)
        rig.place(Segment.TEXT, 1, b"more", clock=1)
        rig.evict()
        assert rig.frames.allocate() == 0


class TestPageOut:
    """Verify what happens to the victim's content."""

    def test_clean_page_is_discarded(self) -> None:
        """A clean victim is not written to swap."""
        rig = _Rig()
        rig.place(Segment.TEXT, 0, b"text", clock=0)
        ev = rig.evict()
        assert ev.swap_slot is None
        assert rig.swap.used == 0
        assert not rig.page_table.lookup(Segment.TEXT, 0).resident
        assert rig.memory.read_frame(0) == b"0000"

    def test_dirty_page_goes_to_swap(self) -> None:
        """A dirty victim is copied into a swap slot and bound to it."""
        rig = _Rig()
        rig.place(Segment.DATA, 0, b"A$CD", clock=0, dirty=True)
        ev = rig.evict()
        assert ev.swap_slot == 0
        assert rig.swap.read_page(0) == b"A$CD"
        pd = rig.page_table.lookup(Segment.DATA, 0)
        assert not pd.resident
        assert pd.frame is None
        assert pd.swap_slot == 0
        assert rig.memory.read_frame(0) == b"0000"

    def test_swap_full_is_fatal(self) -> None:
        """A dirty victim with no free slot fails the eviction."""
        rig = _Rig(swap_slots=0)
        rig.place(Segment.HEAP_STACK, 1, b"heap", clock=0, dirty=True)
        with pytest.raises(SwapExhaustedError, match="was lost"):
            rig.evict()
        # The victim is already unbound: its content is gone.
        pd = rig.page_table.lookup(Segment.HEAP_STACK, 1)
        assert not pd.resident
        assert pd.swap_slot is None


    def test_swap_write_failure_keeps_victim(self) -> None:
        """A failed page-out leaves the victim resident and the slot free."""
        rig = _Rig()
        frame = rig.place(Segment.DATA, 0, b"A$CD", clock=0, dirty=True)
        rig.store.failing = True
        with pytest.raises(SwapStoreIOError, match="write error"):
            rig.evict()
        pd = rig.page_table.lookup(Segment.DATA, 0)
        assert pd.resident
        assert pd.dirty
        assert pd.frame == frame
        assert pd.swap_slot is None
        assert rig.frames.is_occupied(frame)
        assert rig.memory.read_frame(frame) == b"A$CD"
        assert rig.swap.used == 0

    def test_eviction_after_swap_recovers(self) -> None:
        """Once the store works again the same victim pages out normally."""
        rig = _Rig()
        rig.place(Segment.DATA, 0, b"A$CD", clock=0, dirty=True)
        rig.store.failing = True
        with pytest.raises(SwapStoreIOError):
            rig.evict()
        rig.store.failing = False
        ev = rig.evict()
        assert ev.swap_slot == 0
        assert rig.swap.used == 1
        assert rig.swap.read_page(0) == b"A$CD"


class TestInconsistency:
    """Verify bookkeeping errors are never swallowed."""

    def test_frame_without_owner(self) -> None:
        """An occupied frame no page claims is an internal error."""
        rig = _Rig()
        rig.frames.allocate()
        rig.frames.touch(0, 0)
        with pytest.raises(InternalInconsistencyError, match="no page table entry"):
            rig.evict()

    def test_nothing_to_evict(self) -> None:
        """Evicting with every frame free is an internal error."""
        rig = _Rig()
        with pytest.raises(InternalInconsistencyError, match="no frame is occupied"):
            rig.evict()
