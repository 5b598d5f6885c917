"""Physical frames — occupancy, recency, and the bytes themselves.

Physical memory is ``physical_size`` bytes split into ``frame_count``
frames of one page each.  Two objects share the job:

- **FrameAllocator** decides *which* frames are in use and remembers
  when each one was last touched (the logical clock value).  It is the
  only thing that marks a frame free or occupied.
- **PhysicalMemory** holds the bytes.  It is a single ``bytearray``
  owned by one manager, so independent simulators never share RAM.

Recency is a clock value per frame, or ``None`` for "never used".
The least recently used occupied frame is simply the one with the
smallest value; ties go to the lowest frame number.
"""


class FrameAllocator:
    """Track which frames are occupied and when each was last used."""

    def __init__(self, frame_count: int) -> None:
        """Create an allocator with every frame free.

        Args:
            frame_count: Number of physical frames.

        """
        self._occupied: list[bool] = [False] * frame_count
        self._last_access: list[int | None] = [None] * frame_count

    @property
    def frame_count(self) -> int:
        """Return the total number of frames."""
        return len(self._occupied)

    @property
    def occupied_count(self) -> int:
        """Return the number of frames in use."""
        return sum(self._occupied)

    def is_occupied(self, frame: int) -> bool:
        """Return True if the frame is in use."""
        return self._occupied[frame]

    def last_access(self, frame: int) -> int | None:
        """Return the clock value of the frame's last access."""
        return self._last_access[frame]

    def allocate(self) -> int | None:
        """Claim the first free frame.

        Returns:
            The frame number, or None if every frame is occupied.

        """
        for frame, used in enumerate(self._occupied):
            if not used:
                self._occupied[frame] = True
                return frame
        return None

    def touch(self, frame: int, clock: int) -> None:
        """Record an access to a frame at the given clock value."""
        self._last_access[frame] = clock

    def free(self, frame: int) -> None:
        """Return a frame to the pool and forget its recency."""
        self._occupied[frame] = False
        self._last_access[frame] = None

    def oldest_occupied_frame(self) -> int | None:
        """Return the least recently used occupied frame.

        An occupied frame that was never touched counts as older than
        any touched frame.

        Returns:
            The frame number, or None if no frame is occupied.

        """
        victim: int | None = None
        oldest = 0
        for frame, used in enumerate(self._occupied):
            if not used:
                continue
            stamp = self._last_access[frame]
            rank = -1 if stamp is None else stamp
            if victim is None or rank < oldest:
                victim = frame
                oldest = rank
        return victim

    def snapshot(self) -> tuple[tuple[bool, int | None], ...]:
        """Return ``(occupied, last_access)`` for every frame."""
        return tuple(zip(self._occupied, self._last_access, strict=True))


class PhysicalMemory:
    """The simulated RAM: one bytearray carved into page-sized frames."""

    def __init__(self, *, frame_count: int, page_size: int, fill_byte: int) -> None:
        """Create RAM with every byte set to the fill value."""
        self._page_size = page_size
        self._fill = fill_byte
        self._bytes = bytearray([fill_byte]) * (frame_count * page_size)

    def _base(self, frame: int) -> int:
        return frame * self._page_size

    def read_frame(self, frame: int) -> bytes:
        """Return a copy of a frame's content."""
        base = self._base(frame)
        return bytes(self._bytes[base : base + self._page_size])

    def write_frame(self, frame: int, data: bytes) -> None:
        """Overwrite a whole frame.

        Raises:
            ValueError: If ``data`` is not exactly one page long.

        """
        if len(data) != self._page_size:
            msg = f"Frame data must be {self._page_size} bytes, got {len(data)}"
            raise ValueError(msg)
        base = self._base(frame)
        self._bytes[base : base + self._page_size] = data

    def read_byte(self, frame: int, offset: int) -> int:
        """Return one byte of a frame."""
        return self._bytes[self._base(frame) + offset]

    def write_byte(self, frame: int, offset: int, value: int) -> None:
        """Overwrite one byte of a frame."""
        self._bytes[self._base(frame) + offset] = value

    def clear_frame(self, frame: int) -> None:
        """Reset a frame to the fill value."""
        self.write_frame(frame, bytes([self._fill]) * self._page_size)

    def snapshot(self) -> bytes:
        """Return an immutable copy of all of RAM."""
        return bytes(self._bytes)
