"""Layout of the object header shared by generated code and the runtime."""

from __future__ import annotations

from enum import IntEnum

from coolmyir.klass import HEADER_ELEMENTS, HEADER_SIZE, WORD_SIZE


class HeaderLayout(IntEnum):
    """Elements of an object header, in memory order."""

    MARK = 0
    TAG = 1
    SIZE = 2
    DISPATCH_TABLE = 3

    @property
    def size(self) -> int:
        """Size of the element in bytes."""
        return _ELEMENT_SIZES[self]

    @property
    def offset(self) -> int:
        """Byte offset of the element from the start of the object."""
        return sum(_ELEMENT_SIZES[element] for element in HeaderLayout if element < self)


_ELEMENT_SIZES = {
    HeaderLayout.MARK: 4,
    HeaderLayout.TAG: 4,
    HeaderLayout.SIZE: 8,
    HeaderLayout.DISPATCH_TABLE: 8,
}

MARK_OFFSET = HeaderLayout.MARK.offset
TAG_OFFSET = HeaderLayout.TAG.offset
SIZE_OFFSET = HeaderLayout.SIZE.offset
DISPATCH_TABLE_OFFSET = HeaderLayout.DISPATCH_TABLE.offset
# the first field lies right behind the header
FIELD_OFFSET = HEADER_SIZE


def header_field_index(offset: int) -> int:
    """Index of the object element at a byte offset: header elements first, then fields."""
    for element in HeaderLayout:
        if element.offset == offset:
            return int(element)

    from_header = offset - HEADER_SIZE
    if from_header < 0 or from_header % WORD_SIZE:
        raise ValueError(f"offset {offset} does not start a header element or a field")
    return HEADER_ELEMENTS + from_header // WORD_SIZE