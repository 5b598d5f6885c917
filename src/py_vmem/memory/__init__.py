"""Memory subsystem — translation, page table, frames, swap, eviction.

Re-exports public symbols so callers can write::

    from py_vmem.memory import MemoryManager, Segment
"""

from py_vmem.memory.address import AddressTranslator, LogicalAddress, Segment
from py_vmem.memory.eviction import Eviction, EvictionPolicy, LRUEvictionPolicy
from py_vmem.memory.frames import FrameAllocator, PhysicalMemory
from py_vmem.memory.manager import MemoryManager, PagingStats
from py_vmem.memory.page_table import PageDescriptor, PageTable
from py_vmem.memory.stores import ByteStore, BytesStore, FileStore
from py_vmem.memory.swap import SwapStore

__all__ = [
    "AddressTranslator",
    "ByteStore",
    "BytesStore",
    "Eviction",
    "EvictionPolicy",
    "FileStore",
    "FrameAllocator",
    "LRUEvictionPolicy",
    "LogicalAddress",
    "MemoryManager",
    "PageDescriptor",
    "PageTable",
    "PagingStats",
    "PhysicalMemory",
    "Segment",
    "SwapStore",
]
