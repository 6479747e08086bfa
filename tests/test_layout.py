import pytest

from coolmyir.klass import HEADER_ELEMENTS, HEADER_SIZE, WORD_SIZE
from coolmyir.layout import (
    DISPATCH_TABLE_OFFSET,
    FIELD_OFFSET,
    MARK_OFFSET,
    SIZE_OFFSET,
    TAG_OFFSET,
    HeaderLayout,
    header_field_index,
)


def test_mark_is_first():
    assert header_field_index(0) == HeaderLayout.MARK
    assert header_field_index(MARK_OFFSET) == HeaderLayout.MARK


def test_offsets_are_cumulative():
    elements = list(HeaderLayout)
    for previous, current in zip(elements, elements[1:]):
        assert header_field_index(previous.offset + previous.size) == current


def test_sizes_add_up_to_header():
    assert header_field_index(HEADER_SIZE) == HEADER_ELEMENTS
    assert header_field_index(sum(element.size for element in HeaderLayout)) == len(HeaderLayout)


def test_named_offsets_match_elements():
    assert header_field_index(TAG_OFFSET) == HeaderLayout.TAG
    assert header_field_index(SIZE_OFFSET) == HeaderLayout.SIZE
    assert header_field_index(DISPATCH_TABLE_OFFSET) == HeaderLayout.DISPATCH_TABLE
    assert header_field_index(FIELD_OFFSET) == HEADER_ELEMENTS


@pytest.mark.parametrize("element", list(HeaderLayout))
def test_header_element_index(element):
    assert header_field_index(element.offset) == element


@pytest.mark.parametrize("field_num", [0, 1, 3, 10])
def test_field_index(field_num):
    assert header_field_index(FIELD_OFFSET + field_num * WORD_SIZE) == HEADER_ELEMENTS + field_num


def test_misaligned_field_offset_rejected():
    with pytest.raises(ValueError):
        header_field_index(FIELD_OFFSET + 1)


def test_offset_inside_header_element_rejected():
    with pytest.raises(ValueError):
        header_field_index(HeaderLayout.SIZE.offset + 1)