"""Eviction — making room when every frame is occupied.

When a page fault finds no free frame, one resident page has to go.
The policy picks the victim frame, finds the page that owns it, and
undoes the binding:

    1. victim frame   ← least recently used occupied frame
    2. victim page    ← scan the page table for the page in that frame
    3. clean page     → nothing to save (backing store or zero-fill
                        can reproduce it)
       dirty page     → claim a swap slot, copy the frame there
    4. unbind page (binding the slot if one was written), free frame
    5. blank the frame

The caller then retries its frame allocation, which now succeeds.

Known failure mode: if a dirty victim finds swap full, the page has
already been unbound and its content is lost.  The access that needed
the frame fails with ``SwapExhaustedError``; no recovery is attempted.

If writing the page to swap fails, nothing is unbound: the slot is
released, the victim stays resident and dirty, and the
``SwapStoreIOError`` propagates.
"""

from dataclasses import dataclass
from typing import Protocol

from py_vmem.errors import InternalInconsistencyError, SwapExhaustedError, SwapStoreIOError
from py_vmem.memory.address import Segment
from py_vmem.memory.frames import FrameAllocator, PhysicalMemory
from py_vmem.memory.page_table import PageTable
from py_vmem.memory.swap import SwapStore


@dataclass(frozen=True)
class Eviction:
    """What one eviction did.

    Attributes:
        segment: Segment of the evicted page.
        page: Index of the evicted page.
        frame: The frame that was freed.
        swap_slot: Slot the page was written to, or None if it was clean.

    """

    segment: Segment
    page: int
    frame: int
    swap_slot: int | None


class EvictionPolicy(Protocol):
    """Interface for victim selection and page-out."""

    def evict(
        self,
        *,
        frames: FrameAllocator,
        memory: PhysicalMemory,
        page_table: PageTable,
        swap: SwapStore,
    ) -> Eviction:
        """Free one frame, saving its page to swap if needed."""
        ...


class LRUEvictionPolicy:
    """Least Recently Used — evict the frame touched longest ago.

    Recency lives in the frame allocator as one clock value per frame,
    so selection is a linear scan for the minimum.  Ties go to the
    lowest frame number.
    """

    def evict(
        self,
        *,
        frames: FrameAllocator,
        memory: PhysicalMemory,
        page_table: PageTable,
        swap: SwapStore,
    ) -> Eviction:
        """Evict the least recently used page.

        Returns:
            A record of the evicted page and where it went.

        Raises:
            InternalInconsistencyError: If no frame is occupied, or no
                page table entry owns the chosen frame.
            SwapExhaustedError: If the victim is dirty and swap is full.
            SwapStoreIOError: If the victim cannot be written to swap.

        """
        frame = frames.oldest_occupied_frame()
        if frame is None:
            msg = "Eviction requested but no frame is occupied"
            raise InternalInconsistencyError(msg)
        owner = page_table.owner_of(frame)
        if owner is None:
            msg = f"Frame {frame} is occupied but no page table entry owns it"
            raise InternalInconsistencyError(msg)
        segment, page = owner

        if not page_table.lookup(segment, page).dirty:
            page_table.evict(segment, page)
            frames.free(frame)
            memory.clear_frame(frame)
            return Eviction(segment=segment, page=page, frame=frame, swap_slot=None)

        slot = swap.allocate_slot()
        if slot is None:
            page_table.evict(segment, page)
            frames.free(frame)
            memory.clear_frame(frame)
            msg = (
                f"Swap is full ({swap.capacity} slots): "
                f"dirty {segment.label} page {page} was lost"
            )
            raise SwapExhaustedError(msg)
        try:
            swap.write_page(slot, memory.read_frame(frame))
        except SwapStoreIOError:
            # The victim stays resident and dirty; only the slot is given back.
            swap.release_slot(slot)
            raise
        page_table.evict(segment, page, swap_slot=slot)
        frames.free(frame)
        memory.clear_frame(frame)
        return Eviction(segment=segment, page=page, frame=frame, swap_slot=slot)
