"""Tests for address translation.

With the default layout a logical address is 12 bits wide: the top two
bits pick the segment, and the rest is split into page number and
offset (8-byte pages → 3 offset bits).
"""

import pytest

from py_vmem.config import DEFAULT_LAYOUT
from py_vmem.errors import OutOfBoundsError
from py_vmem.memory.address import AddressTranslator, LogicalAddress, Segment


@pytest.fixture
def translator() -> AddressTranslator:
    """Return a translator for the default layout."""
    return AddressTranslator(DEFAULT_LAYOUT)


class TestTranslate:
    """Verify address decomposition."""

    def test_text_address(self, translator: AddressTranslator) -> None:
        """Address 15 is the last byte of text page 1."""
        assert translator.translate(15) == LogicalAddress(Segment.TEXT, 1, 7)

    def test_data_address(self, translator: AddressTranslator) -> None:
        """Address 1025 is offset 1 of data page 0."""
        assert translator.translate(1025) == LogicalAddress(Segment.DATA, 0, 1)

    def test_data_later_page(self, translator: AddressTranslator) -> None:
        """Address 1048 is the first byte of data page 3."""
        assert translator.translate(1048) == LogicalAddress(Segment.DATA, 3, 0)

    def test_bss_address(self, translator: AddressTranslator) -> None:
        """Address 2058 is offset 2 of bss page 1."""
        assert translator.translate(2058) == LogicalAddress(Segment.BSS, 1, 2)

    def test_heap_stack_address(self, translator: AddressTranslator) -> None:
        """Address 3079 is offset 7 of heap/stack page 0."""
        assert translator.translate(3079) == LogicalAddress(Segment.HEAP_STACK, 0, 7)

    def test_offset_is_below_page_size(self, translator: AddressTranslator) -> None:
        """Every legal address should produce an offset < page_size."""
        for address in range(1024, 1056):
            assert translator.translate(address).offset < DEFAULT_LAYOUT.page_size


class TestBounds:
    """Verify that illegal addresses are rejected."""

    def test_one_past_text(self, translator: AddressTranslator) -> None:
        """Text has 16 bytes, so address 16 is out of bounds."""
        with pytest.raises(OutOfBoundsError, match="out of bounds"):
            translator.translate(16)

    def test_base_plus_size_rejected(self, translator: AddressTranslator) -> None:
        """segment_base + segment_size is rejected for every segment."""
        for segment in Segment:
            size = DEFAULT_LAYOUT.segment_sizes[segment]
            with pytest.raises(OutOfBoundsError):
                translator.translate(translator.base_of(segment) + size)

    def test_negative_address(self, translator: AddressTranslator) -> None:
        """Negative addresses are never legal."""
        with pytest.raises(OutOfBoundsError):
            translator.translate(-1)

    def test_past_address_space(self, translator: AddressTranslator) -> None:
        """An address with a segment id above 3 is rejected."""
        with pytest.raises(OutOfBoundsError):
            translator.translate(4096)


class TestCompose:
    """Verify address composition helpers."""

    def test_base_of(self, translator: AddressTranslator) -> None:
        """Segment bases are multiples of the segment span."""
        expected_bss_base = 2048
        assert translator.base_of(Segment.BSS) == expected_bss_base

    def test_address_of_inverts_translate(self, translator: AddressTranslator) -> None:
        """address_of should rebuild the address translate split."""
        address = translator.address_of(Segment.DATA, 3, 5)
        assert translator.translate(address) == LogicalAddress(Segment.DATA, 3, 5)

    def test_address_of_rejects_bad_page(self, translator: AddressTranslator) -> None:
        """Composing a page past the segment end should fail."""
        with pytest.raises(OutOfBoundsError):
            translator.address_of(Segment.TEXT, 2)

    def test_address_of_rejects_bad_offset(self, translator: AddressTranslator) -> None:
        """Composing an offset past the page end should fail."""
        with pytest.raises(OutOfBoundsError):
            translator.address_of(Segment.TEXT, 0, 8)

    def test_segment_label(self) -> None:
        """Labels are lowercase with a slash for heap/stack."""
        assert Segment.HEAP_STACK.label == "heap/stack"
        assert Segment.TEXT.label == "text"
