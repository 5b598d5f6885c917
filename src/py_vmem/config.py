"""Memory layout — the fixed geometry of one simulated machine.

Everything the manager needs to know about sizes is decided once, at
construction, and never changes afterwards:

    text | data | bss | heap/stack      (logical segments, in order)
    page_size                           (unit of paging)
    physical_size                       (RAM, split into frames)
    segment_span                        (width of each logical partition)

A layout is a frozen dataclass, like the kernel image the bootloader
reads, and can be loaded from a JSON file of the same shape::

    {"text_size": 16, "data_size": 32, "bss_size": 32,
     "heap_stack_size": 32, "page_size": 8, "physical_size": 16}

Validation happens in ``__post_init__`` so an inconsistent layout can
never reach the manager.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from py_vmem.errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

# Four logical segments; the top two bits of a 12-bit address pick one.
SEGMENT_COUNT = 4
DEFAULT_SEGMENT_SPAN = 1024
_BYTE_MAX = 255


@dataclass(frozen=True)
class MemoryLayout:
    """Sizes (in bytes) of every region the simulator manages.

    Attributes:
        text_size: Size of the read-only text segment.
        data_size: Size of the initialized data segment.
        bss_size: Size of the bss segment.
        heap_stack_size: Size of the heap/stack segment.
        page_size: Size of one page and of one physical frame.
        physical_size: Size of physical memory.
        segment_span: Width of each segment's slice of the address space.
        fill_byte: Value used for fresh memory, fresh swap and zero-fill.

    """

    text_size: int
    data_size: int
    bss_size: int
    heap_stack_size: int
    page_size: int
    physical_size: int
    segment_span: int = DEFAULT_SEGMENT_SPAN
    fill_byte: int = ord("0")

    def __post_init__(self) -> None:
        """Reject layouts the manager cannot page."""
        if self.page_size <= 0:
            msg = f"Page size must be positive, got {self.page_size}"
            raise ConfigurationError(msg)
        named = {
            "text_size": self.text_size,
            "data_size": self.data_size,
            "bss_size": self.bss_size,
            "heap_stack_size": self.heap_stack_size,
        }
        for name, size in named.items():
            if size < 0 or size % self.page_size:
                msg = f"{name}={size} is not a multiple of page size {self.page_size}"
                raise ConfigurationError(msg)
            if size > self.segment_span:
                msg = f"{name}={size} exceeds the segment span {self.segment_span}"
                raise ConfigurationError(msg)
        if self.physical_size <= 0 or self.physical_size % self.page_size:
            msg = (
                f"physical_size={self.physical_size} is not a positive multiple "
                f"of page size {self.page_size}"
            )
            raise ConfigurationError(msg)
        if self.segment_span <= 0 or self.segment_span % self.page_size:
            msg = f"segment_span={self.segment_span} is not a multiple of page size {self.page_size}"
            raise ConfigurationError(msg)
        if not 0 <= self.fill_byte <= _BYTE_MAX:
            msg = f"fill_byte={self.fill_byte} is not a byte value"
            raise ConfigurationError(msg)

    @property
    def segment_sizes(self) -> tuple[int, int, int, int]:
        """Return the segment sizes in segment order."""
        return (self.text_size, self.data_size, self.bss_size, self.heap_stack_size)

    @property
    def frame_count(self) -> int:
        """Return the number of physical frames."""
        return self.physical_size // self.page_size

    @property
    def swap_size(self) -> int:
        """Return the swap capacity in bytes (every writable segment)."""
        return self.data_size + self.bss_size + self.heap_stack_size

    @property
    def swap_slots(self) -> int:
        """Return the number of page-sized swap slots."""
        return self.swap_size // self.page_size

    @property
    def address_space_size(self) -> int:
        """Return the size of the whole logical address space."""
        return SEGMENT_COUNT * self.segment_span

    def page_count(self, segment: int) -> int:
        """Return how many pages a segment holds."""
        return self.segment_sizes[segment] // self.page_size

    def backing_offset(self, segment: int, page: int) -> int:
        """Return where a page's initial content lives in the backing store.

        The backing store lays out text, data, then bss back to back, so
        a page's offset is the sum of the preceding segments plus its
        own position.
        """
        return sum(self.segment_sizes[:segment]) + page * self.page_size

    def to_dict(self) -> dict[str, int]:
        """Serialize the layout to a JSON-friendly dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryLayout:
        """Build a layout from a dict, rejecting unknown keys.

        Raises:
            ConfigurationError: If keys are missing, unknown, or not ints.

        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            msg = f"Unknown layout keys: {', '.join(sorted(unknown))}"
            raise ConfigurationError(msg)
        for key, value in data.items():
            if not isinstance(value, int) or isinstance(value, bool):
                msg = f"Layout key {key!r} must be an integer, got {value!r}"
                raise ConfigurationError(msg)
        try:
            return cls(**data)
        except TypeError as e:
            msg = f"Incomplete layout: {e}"
            raise ConfigurationError(msg) from e


def load_layout(path: Path) -> MemoryLayout:
    """Load a memory layout from a JSON file.

    Args:
        path: The file path to read from.

    Returns:
        The validated layout.

    Raises:
        FileNotFoundError: If the path does not exist.
        ConfigurationError: If the file is not a valid layout.

    """
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        msg = f"Layout file {path} is not valid JSON: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(data, dict):
        msg = f"Layout file {path} must contain a JSON object"
        raise ConfigurationError(msg)
    return MemoryLayout.from_dict(data)


# The demonstration geometry: two 8-byte frames.
DEFAULT_LAYOUT = MemoryLayout(
    text_size=16,
    data_size=32,
    bss_size=32,
    heap_stack_size=32,
    page_size=8,
    physical_size=16,
)
