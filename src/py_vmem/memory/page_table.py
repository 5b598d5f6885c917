"""Segmented page table.

One descriptor exists for every page of every segment, created invalid
when the manager is built and kept until the manager goes away.  The
table is four plain lists indexed by ``Segment`` — the structure never
changes shape after construction, so there is no need for anything
fancier than ``table[segment][page]``.

A descriptor is in exactly one of three places:

    resident      → bound to a physical frame
    swapped out   → bound to a swap slot (it was dirty when evicted)
    nowhere       → content is reproducible from the backing store,
                    zero-fill, or (heap/stack) does not exist yet
"""

from dataclasses import dataclass, replace

from py_vmem.config import SEGMENT_COUNT
from py_vmem.memory.address import Segment


@dataclass
class PageDescriptor:
    """State of one logical page.

    Attributes:
        resident: True while the page occupies a frame.
        frame: The frame holding the page, or None.
        dirty: True if the page was written since it was brought in.
        swap_slot: The swap slot holding the page, or None.

    """

    resident: bool = False
    frame: int | None = None
    dirty: bool = False
    swap_slot: int | None = None


class PageTable:
    """Per-segment arrays of page descriptors."""

    def __init__(self, page_counts: tuple[int, ...]) -> None:
        """Create a table with every page invalid.

        Args:
            page_counts: Number of pages in each segment, in segment order.

        """
        if len(page_counts) != SEGMENT_COUNT:
            msg = f"Expected {SEGMENT_COUNT} segment page counts, got {len(page_counts)}"
            raise ValueError(msg)
        self._tables: list[list[PageDescriptor]] = [
            [PageDescriptor() for _ in range(count)] for count in page_counts
        ]

    def lookup(self, segment: Segment, page: int) -> PageDescriptor:
        """Return the live descriptor for a page.

        The caller is expected to have bounds-checked the address.
        """
        return self._tables[segment][page]

    def mark_resident(self, segment: Segment, page: int, *, frame: int, dirty: bool = False) -> None:
        """Bind a page to a frame and release any swap binding.

        Args:
            segment: The page's segment.
            page: The page index.
            frame: The frame now holding the page.
            dirty: Whether memory now holds the only copy of the page.

        """
        pd = self._tables[segment][page]
        pd.resident = True
        pd.frame = frame
        pd.dirty = dirty
        pd.swap_slot = None

    def mark_dirty(self, segment: Segment, page: int) -> None:
        """Flag a resident page as modified.

        Raises:
            ValueError: If the page is not resident.

        """
        pd = self._tables[segment][page]
        if not pd.resident:
            msg = f"{segment.label} page {page} is not resident"
            raise ValueError(msg)
        pd.dirty = True

    def evict(self, segment: Segment, page: int, *, swap_slot: int | None = None) -> None:
        """Unbind a page from its frame.

        With a ``swap_slot`` the page is recorded as swapped out and
        stays dirty; without one its content is considered discarded
        and the dirty flag is cleared.
        """
        pd = self._tables[segment][page]
        pd.resident = False
        pd.frame = None
        pd.swap_slot = swap_slot
        pd.dirty = swap_slot is not None

    def owner_of(self, frame: int) -> tuple[Segment, int] | None:
        """Find the page bound to a frame by scanning every segment.

        Returns:
            ``(segment, page)`` or None if no resident page uses the frame.

        """
        for segment in Segment:
            for page, pd in enumerate(self._tables[segment]):
                if pd.resident and pd.frame == frame:
                    return segment, page
        return None

    def page_count(self, segment: Segment) -> int:
        """Return the number of pages in a segment."""
        return len(self._tables[segment])

    def swapped_count(self) -> int:
        """Return how many pages currently live in swap."""
        return sum(
            1 for table in self._tables for pd in table if not pd.resident and pd.swap_slot is not None
        )

    def snapshot(self) -> tuple[tuple[PageDescriptor, ...], ...]:
        """Return copies of every descriptor, grouped by segment."""
        return tuple(tuple(replace(pd) for pd in table) for table in self._tables)
