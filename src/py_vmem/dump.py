"""Text dumps of the simulator's internal tables.

These helpers render the read-only snapshots a ``MemoryManager``
exposes — physical memory, the page table, and swap — in the same
table layout the classic command-line simulator prints after every step.
They are pure functions returning strings, so the demo driver and the
web app can both use them and tests can check them without capturing
stdout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_vmem.memory.address import Segment

if TYPE_CHECKING:
    from py_vmem.memory.manager import MemoryManager
    from py_vmem.memory.page_table import PageDescriptor

_NONE = -1


def _char(byte: int) -> str:
    """Render a byte as itself when printable, else as ``.``."""
    return chr(byte) if 0x20 <= byte < 0x7F else "."  # noqa: PLR2004


def format_memory(memory: bytes) -> str:
    """Render physical memory, one byte per line."""
    lines = ["", " Physical memory"]
    lines.extend(f"[{_char(b)}]" for b in memory)
    return "\n".join(lines)


def format_page_table(table: tuple[tuple[PageDescriptor, ...], ...]) -> str:
    """Render every segment's descriptors as ``valid dirty frame swap`` rows.

    Unbound frames and swap slots are shown as ``-1``.
    """
    lines: list[str] = []
    for segment, descriptors in zip(Segment, table, strict=True):
        lines.append(f"{segment.label}")
        lines.append("Valid\t Dirty\t Frame\t Swap index")
        for pd in descriptors:
            frame = _NONE if pd.frame is None else pd.frame
            slot = _NONE if pd.swap_slot is None else pd.swap_slot
            lines.append(f"[{int(pd.resident)}]\t[{int(pd.dirty)}]\t[{frame}]\t[{slot}]")
    return "\n".join(lines)


def format_swap(swap: bytes, *, page_size: int) -> str:
    """Render swap one slot per line as ``offset - [byte]`` cells."""
    lines = ["", " Swap memory"]
    for start in range(0, len(swap), page_size):
        page = swap[start : start + page_size]
        lines.append("\t".join(f"{i} - [{_char(b)}]" for i, b in enumerate(page)))
    return "\n".join(lines)


def format_all(manager: MemoryManager) -> str:
    """Render memory, page table, and swap of a manager in one string."""
    return "\n".join(
        [
            format_memory(manager.physical_memory()),
            format_page_table(manager.page_table()),
            format_swap(manager.swap(), page_size=manager.layout.page_size),
        ]
    )
