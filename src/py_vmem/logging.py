"""Pager event log.

Every decision the memory manager makes is recorded here as one
structured entry, stamped with the logical clock at the moment it
happened.  Reading the log back explains a run step by step:

    [INFO] @0 pager: page fault: data page 0 <- backing store offset 16
    [INFO] @1 pager: page fault: text page 0 <- backing store offset 0
    [INFO] @2 pager: page fault: text page 1 <- backing store offset 8
    [INFO] @2 pager: evicted data page 0 from frame 0
    [DEBUG] @2 pager: swap out: data page 0 -> slot 0

Levels carry a fixed meaning in the simulator:

- **DEBUG** — swap traffic (slot written on eviction, slot released on
  swap-in).
- **INFO** — page faults and evictions.
- **WARNING** — accesses rejected before any state changed (bounds,
  read-only text, uninitialized heap/stack).
- **ERROR** — I/O failures, swap exhaustion, broken bookkeeping.

Nothing is printed.  The demo driver prints ``lines()`` at the end of a
run and the web app serves ``entries`` as JSON.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Event severities, ordered so ``min_level`` filtering is a comparison."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One pager event.

    Attributes:
        level: How significant the event is.
        message: What the pager did, e.g. ``"evicted bss page 1 from frame 0"``.
        source: The component that recorded it; the manager uses ``"pager"``.
        clock: Accesses completed before this event.  Events raised while
            serving one access share its clock value.

    """

    level: LogLevel
    message: str
    source: str
    clock: int = 0

    def __str__(self) -> str:
        """Format as ``[LEVEL] @clock source: message``."""
        return f"[{self.level.name}] @{self.clock} {self.source}: {self.message}"


class Logger:
    """Append-only buffer of pager events in the order they happened."""

    def __init__(self) -> None:
        """Create an empty log."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every recorded event, oldest first."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        clock: int = 0,
    ) -> None:
        """Record one event.

        Args:
            level: Severity of the event.
            message: What happened.
            source: Component recording the event.
            clock: The manager's logical clock when it happened.

        """
        self._entries.append(LogEntry(level=level, message=message, source=source, clock=clock))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        since: int | None = None,
    ) -> list[LogEntry]:
        """Return the events matching every given criterion.

        Args:
            min_level: Keep events at or above this level.
            source: Keep events from this component only.
            since: Keep events recorded at or after this clock value,
                e.g. everything caused by the latest access.

        Returns:
            The matching events, oldest first.

        """
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
            and (since is None or e.clock >= since)
        ]

    def lines(self) -> list[str]:
        """Return every event as a display line."""
        return [str(e) for e in self._entries]

    def clear(self) -> None:
        """Forget every recorded event."""
        self._entries.clear()
