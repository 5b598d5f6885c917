"""Scripted demonstration run.

Replays a fixed sequence of loads and stores against a generated
program image and prints the internal tables after every step.
With the default layout there are only two frames, so the run hits
backing-store faults, zero-filled heap/stack pages, dirty evictions
into swap, and swap-ins.

Failed accesses do not stop the run.  Each one is reported and the
script moves on.

This is the ``py-vmem-demo`` console entry point::

    py-vmem-demo                 # default layout
    py-vmem-demo layout.json     # layout loaded from a JSON file
"""

from __future__ import annotations

import string
import sys
from collections.abc import Callable
from pathlib import Path

from py_vmem.config import DEFAULT_LAYOUT, MemoryLayout, load_layout
from py_vmem.dump import format_all
from py_vmem.errors import MemoryAccessError
from py_vmem.logging import Logger
from py_vmem.memory.manager import MemoryManager
from py_vmem.memory.stores import BytesStore

# (operation, address, value) steps, run in order.
DEMO_SCRIPT: tuple[tuple[str, int, str | None], ...] = (
    ("store", 1025, "$"),
    ("store", 3079, "%"),
    ("store", 1048, "("),
    ("load", 3079, None),
    ("load", 1035, None),
    ("load", 15, None),
    ("load", 1025, None),
    ("load", 1031, None),
    ("load", 7, None),
    ("load", 15, None),
    ("load", 1031, None),
)


def build_program_image(layout: MemoryLayout) -> bytes:
    """Generate a recognisable program image for a layout.

    Text is filled with lowercase letters, data with uppercase letters,
    and bss with the fill byte, so a dump shows at a glance where each
    resident page came from.
    """
    text = (string.ascii_lowercase * (layout.text_size // 26 + 1))[: layout.text_size]
    data = (string.ascii_uppercase * (layout.data_size // 26 + 1))[: layout.data_size]
    bss = bytes([layout.fill_byte]) * layout.bss_size
    return text.encode("ascii") + data.encode("ascii") + bss


def create_manager(layout: MemoryLayout, *, logger: Logger | None = None) -> MemoryManager:
    """Build a manager over an in-memory program image and swap store."""
    return MemoryManager(
        layout=layout,
        backing_store=BytesStore(build_program_image(layout), read_only=True),
        swap_store=BytesStore.filled(layout.swap_size, fill_byte=layout.fill_byte),
        logger=logger,
    )


def run(
    layout: MemoryLayout = DEFAULT_LAYOUT,
    *,
    script: tuple[tuple[str, int, str | None], ...] = DEMO_SCRIPT,
    write: Callable[[str], object] = print,
) -> MemoryManager:
    """Run a script of loads and stores, dumping the tables after each.

    Args:
        layout: Machine geometry to simulate.
        script: ``(operation, address, value)`` steps.
        write: Where output lines go.

    Returns:
        The manager in its final state, for inspection.

    Raises:
        ValueError: If a step names an unknown operation or is a store
            without a value.  The script is checked before it runs.

    """
    for step in script:
        _check_step(step)
    manager = create_manager(layout, logger=Logger())
    for op, address, value in script:
        try:
            if op == "load":
                byte = manager.load(address)
                write(f"\nload {address} -> {chr(byte)!r}")
            elif value is not None:
                manager.store(address, value)
                write(f"\nstore {address} {value!r}")
        except MemoryAccessError as e:
            loc = _describe(manager, address)
            write(f"\n{op} {address}{loc}: {e}")
        write(format_all(manager))
    return manager


def _check_step(step: tuple[str, int, str | None]) -> None:
    op, address, value = step
    if op not in {"load", "store"}:
        msg = f"Unknown operation {op!r} in step {step!r}"
        raise ValueError(msg)
    if op == "store" and value is None:
        msg = f"Store step for address {address} has no value"
        raise ValueError(msg)


def _describe(manager: MemoryManager, address: int) -> str:
    try:
        loc = manager.translator.translate(address)
    except MemoryAccessError:
        return ""
    return f" ({loc.segment.label} page {loc.page} offset {loc.offset})"


def main() -> None:
    """Run the demo script, then print the pager's event log."""
    layout = load_layout(Path(sys.argv[1])) if len(sys.argv) > 1 else DEFAULT_LAYOUT
    manager = run(layout)
    if manager.logger is not None:
        print("\n".join(["", " Event log", *manager.logger.lines()]))
