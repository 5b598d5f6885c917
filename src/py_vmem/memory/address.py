"""Address translation — logical address to (segment, page, offset).

The logical address space is cut into four partitions of equal width
(``segment_span`` bytes, 1024 by default), one per segment::

    0x000 ─ text ─ 0x400 ─ data ─ 0x800 ─ bss ─ 0xC00 ─ heap/stack ─ 0x1000

With the default span an address is a 12-bit number whose top two bits
select the segment; the low bits are split into a page number and an
offset inside the page.  Each segment only *uses* the first
``segment_size`` bytes of its partition — anything past that is out of
bounds even though it is inside the partition.

Translation is plain integer arithmetic and never mutates anything.
"""

from dataclasses import dataclass
from enum import IntEnum

from py_vmem.config import SEGMENT_COUNT, MemoryLayout
from py_vmem.errors import OutOfBoundsError


class Segment(IntEnum):
    """The four logical segments, in address-space order.

    Using IntEnum lets a segment index the page table directly.
    """

    TEXT = 0
    DATA = 1
    BSS = 2
    HEAP_STACK = 3

    @property
    def label(self) -> str:
        """Return a short display name (``heap_stack`` → ``heap/stack``)."""
        return self.name.lower().replace("_", "/")


@dataclass(frozen=True)
class LogicalAddress:
    """A translated address.

    Attributes:
        segment: The segment the address falls in.
        page: Page index inside that segment.
        offset: Byte offset inside the page.

    """

    segment: Segment
    page: int
    offset: int


class AddressTranslator:
    """Split logical addresses according to a memory layout."""

    def __init__(self, layout: MemoryLayout) -> None:
        """Create a translator for the given layout."""
        self._layout = layout
        self._page_counts = tuple(layout.page_count(s) for s in range(SEGMENT_COUNT))

    def page_count(self, segment: Segment) -> int:
        """Return the number of legal pages in a segment."""
        return self._page_counts[segment]

    def base_of(self, segment: Segment) -> int:
        """Return the first logical address of a segment."""
        return int(segment) * self._layout.segment_span

    def translate(self, address: int) -> LogicalAddress:
        """Translate a logical address.

        Args:
            address: The logical byte address.

        Returns:
            The segment, page index and offset of the address.

        Raises:
            OutOfBoundsError: If the address does not fall inside a
                configured page of one of the four segments.

        """
        span = self._layout.segment_span
        if address < 0 or address >= SEGMENT_COUNT * span:
            msg = f"Address {address} is out of bounds"
            raise OutOfBoundsError(msg)
        segment = Segment(address // span)
        relative = address % span
        page, offset = divmod(relative, self._layout.page_size)
        if page >= self._page_counts[segment]:
            msg = (
                f"Address {address} is out of bounds: {segment.label} page {page} "
                f"(segment has {self._page_counts[segment]} pages)"
            )
            raise OutOfBoundsError(msg)
        return LogicalAddress(segment=segment, page=page, offset=offset)

    def address_of(self, segment: Segment, page: int, offset: int = 0) -> int:
        """Compose a logical address from its parts (inverse of ``translate``).

        Raises:
            OutOfBoundsError: If the page or offset is outside the segment.

        """
        if not 0 <= page < self._page_counts[segment]:
            msg = f"{segment.label} has no page {page}"
            raise OutOfBoundsError(msg)
        if not 0 <= offset < self._layout.page_size:
            msg = f"Offset {offset} is outside a {self._layout.page_size}-byte page"
            raise OutOfBoundsError(msg)
        return self.base_of(segment) + page * self._layout.page_size + offset
