"""Random-access byte stores — the "disk" behind the simulator.

The manager reads initial text/data/bss content from a **backing
store** (the program image) and parks dirty evicted pages in a **swap
store**.  Both are just byte arrays addressed by offset; how those
bytes reach non-volatile storage is the store's business, not the
manager's.

Two implementations share the ``ByteStore`` protocol (Strategy
pattern, like the replacement policies):

- ``BytesStore`` — an in-memory ``bytearray``.  Used by tests, the
  demo, and the web app.
- ``FileStore`` — a real file opened once and accessed with seek/read/
  write.  The program image is opened read-only; the swap file is
  opened read/write and created when missing.

Both raise ``OSError`` on a failed or short transfer; the manager
translates that into the matching ``MemoryAccessError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

from py_vmem.errors import StoreUnavailableError

if TYPE_CHECKING:
    from pathlib import Path


class ByteStore(Protocol):
    """Interface for offset-addressed byte storage."""

    @property
    def size(self) -> int:
        """Return the number of addressable bytes."""
        ...

    def read(self, offset: int, size: int) -> bytes:
        """Return exactly ``size`` bytes starting at ``offset``."""
        ...

    def write(self, offset: int, data: bytes) -> None:
        """Overwrite bytes starting at ``offset``."""
        ...

    def close(self) -> None:
        """Release any underlying resource."""
        ...


class BytesStore:
    """In-memory byte store backed by a bytearray."""

    def __init__(self, data: bytes = b"", *, read_only: bool = False) -> None:
        """Create a store holding a copy of ``data``."""
        self._data = bytearray(data)
        self._read_only = read_only

    @classmethod
    def filled(cls, size: int, *, fill_byte: int = 0) -> BytesStore:
        """Create a writable store of ``size`` bytes set to ``fill_byte``."""
        return cls(bytes([fill_byte]) * size)

    @property
    def size(self) -> int:
        """Return the number of bytes held."""
        return len(self._data)

    def read(self, offset: int, size: int) -> bytes:
        """Return exactly ``size`` bytes starting at ``offset``.

        Raises:
            OSError: If the range runs past the end of the store.

        """
        if offset < 0 or offset + size > len(self._data):
            msg = f"Short read: {size} bytes at offset {offset} of a {len(self._data)}-byte store"
            raise OSError(msg)
        return bytes(self._data[offset : offset + size])

    def write(self, offset: int, data: bytes) -> None:
        """Overwrite bytes starting at ``offset``.

        Raises:
            OSError: If the store is read-only or the range runs past its end.

        """
        if self._read_only:
            msg = "Store is read-only"
            raise OSError(msg)
        if offset < 0 or offset + len(data) > len(self._data):
            msg = f"Write of {len(data)} bytes at offset {offset} overruns a {len(self._data)}-byte store"
            raise OSError(msg)
        self._data[offset : offset + len(data)] = data

    def close(self) -> None:
        """Nothing to release for an in-memory store."""


class FileStore:
    """Byte store backed by a file on the host filesystem."""

    def __init__(self, handle: BinaryIO, *, read_only: bool) -> None:
        """Wrap an already-open binary file handle."""
        self._handle = handle
        self._read_only = read_only

    @classmethod
    def open_backing(cls, path: Path) -> FileStore:
        """Open a program image read-only.

        Raises:
            StoreUnavailableError: If the file cannot be opened.

        """
        try:
            handle = path.open("rb")
        except OSError as e:
            msg = f"Cannot open backing store {path}: {e}"
            raise StoreUnavailableError(msg) from e
        return cls(handle, read_only=True)

    @classmethod
    def open_swap(cls, path: Path, *, size: int) -> FileStore:
        """Open (creating if needed) a swap file and size it.

        Raises:
            StoreUnavailableError: If the file cannot be opened or sized.

        """
        try:
            if not path.exists():
                path.touch()
            handle = path.open("r+b")
            handle.truncate(size)
        except OSError as e:
            msg = f"Cannot open swap store {path}: {e}"
            raise StoreUnavailableError(msg) from e
        return cls(handle, read_only=False)

    @property
    def size(self) -> int:
        """Return the current file size."""
        self._handle.seek(0, 2)
        return self._handle.tell()

    def read(self, offset: int, size: int) -> bytes:
        """Return exactly ``size`` bytes starting at ``offset``.

        Raises:
            OSError: On an I/O failure or a short read.

        """
        self._handle.seek(offset)
        data = self._handle.read(size)
        if len(data) != size:
            msg = f"Short read: wanted {size} bytes at offset {offset}, got {len(data)}"
            raise OSError(msg)
        return data

    def write(self, offset: int, data: bytes) -> None:
        """Overwrite bytes starting at ``offset`` and flush.

        Raises:
            OSError: If the store is read-only or the write fails.

        """
        if self._read_only:
            msg = "Store is read-only"
            raise OSError(msg)
        self._handle.seek(offset)
        self._handle.write(data)
        self._handle.flush()

    def close(self) -> None:
        """Close the underlying file."""
        self._handle.close()
