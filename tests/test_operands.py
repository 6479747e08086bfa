import copy

import pytest

from coolmyir.klass import WORD_SIZE
from coolmyir.layout import FIELD_OFFSET, HeaderLayout
from coolmyir.operands import (
    Constant,
    GlobalConstant,
    GlobalVariable,
    IdCounter,
    Operand,
    OperandType,
    StructuredOperand,
    Variable,
    operand_ids,
    type_to_string,
)


def test_type_names_follow_declaration_order():
    names = [type_to_string(t) for t in OperandType]
    assert names == [
        "int8", "uint8", "int32", "uint32", "int64", "uint64",
        "void*", "integer", "boolean", "string", "structure", "void",
    ]


def test_id_counter_counts_and_rewinds():
    counter = IdCounter()
    first = counter.next()
    second = counter.next()
    assert second == first + 1
    assert counter.max_id == second + 1
    counter.reset(7)
    assert counter.next() == 7
    counter.reset()
    assert counter.next() == first


def test_operand_ids_are_consecutive():
    a = Operand(OperandType.INT64)
    b = Operand(OperandType.INT64)
    assert b.id == a.id + 1
    assert operand_ids.max_id == b.id + 1


def test_operand_name_and_dump():
    op = Operand(OperandType.POINTER)
    assert op.name == f"tmp{op.id}"
    assert op.dump() == f"void* {op.name}"
    assert not op.has_def
    assert op.definition is None


def test_erase_use_and_def():
    op = Operand(OperandType.INT32)
    marker = object()
    op.uses.append(marker)
    op.defs.append(marker)
    op.erase_use(marker)
    op.erase_def(marker)
    assert op.uses == []
    assert op.defs == []


def test_erase_missing_raises():
    op = Operand(OperandType.INT32)
    with pytest.raises(ValueError):
        op.erase_use(object())
    with pytest.raises(ValueError):
        op.erase_def(object())


def test_constant_prints_value():
    c = Constant(42, OperandType.INT64)
    assert c.name == "42"
    assert c.dump() == "42"
    assert c.value == 42


def test_constant_is_unsigned_64_bit():
    c = Constant(-1, OperandType.INT64)
    assert c.value == 2**64 - 1


def test_variable_copy_keeps_original():
    v = Variable(OperandType.INTEGER, "x")
    assert v.name == f"x{v.id}"
    renamed = copy.copy(v)
    assert renamed.original_var is v
    assert renamed.id != v.id
    assert renamed.name == f"x{renamed.id}[{v.name}]"
    again = copy.copy(renamed)
    assert again.original_var is v


def _object_operand():
    parts = [Constant(i, OperandType.INT64) for i in range(6)]
    return parts, GlobalConstant("obj", parts, OperandType.STRUCTURE)


def test_structured_operand_has_no_id():
    _, obj = _object_operand()
    assert obj.id == -1
    assert obj.name == "obj"


@pytest.mark.parametrize("element", list(HeaderLayout))
def test_field_by_header_offset(element):
    parts, obj = _object_operand()
    assert obj.field(element.offset) is parts[element]


def test_field_after_header():
    parts, obj = _object_operand()
    assert obj.field(FIELD_OFFSET) is parts[len(HeaderLayout)]
    assert obj.field(FIELD_OFFSET + WORD_SIZE) is parts[len(HeaderLayout) + 1]


def test_field_out_of_range():
    _, obj = _object_operand()
    with pytest.raises(IndexError):
        obj.field(FIELD_OFFSET + 10 * WORD_SIZE)


def test_field_misaligned():
    _, obj = _object_operand()
    with pytest.raises(ValueError):
        obj.field(FIELD_OFFSET + 3)


def test_word_reads_table():
    parts, obj = _object_operand()
    assert obj.word(0) is parts[0]
    assert obj.word(2 * WORD_SIZE) is parts[2]
    with pytest.raises(IndexError):
        obj.word(len(parts) * WORD_SIZE)


def test_structured_dump():
    a = Constant(1, OperandType.INT8)
    b = Constant(2, OperandType.INT8)
    table = GlobalVariable("tab", [a, b], OperandType.STRUCTURE)
    assert table.dump() == "{1, 2} tab"
    empty = StructuredOperand("empty", [], OperandType.POINTER)
    assert empty.dump() == "{} empty"