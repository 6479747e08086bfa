"""Operands of the intermediate representation."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Sequence

from coolmyir.klass import WORD_SIZE
from coolmyir.layout import header_field_index

if TYPE_CHECKING:
    from coolmyir.instructions import Instruction

_UINT64_MASK = (1 << 64) - 1


class OperandType(IntEnum):
    """Types of IR values."""

    INT8 = 0
    UINT8 = 1
    INT32 = 2
    UINT32 = 3
    INT64 = 4
    UINT64 = 5
    POINTER = 6
    # language primitives
    INTEGER = 7
    BOOLEAN = 8
    STRING = 9
    STRUCTURE = 10
    VOID = 11


_TYPE_NAMES = {
    OperandType.INT8: "int8",
    OperandType.UINT8: "uint8",
    OperandType.INT32: "int32",
    OperandType.UINT32: "uint32",
    OperandType.INT64: "int64",
    OperandType.UINT64: "uint64",
    OperandType.POINTER: "void*",
    OperandType.INTEGER: "integer",
    OperandType.BOOLEAN: "boolean",
    OperandType.STRING: "string",
    OperandType.STRUCTURE: "structure",
    OperandType.VOID: "void",
}


def type_to_string(type_: OperandType) -> str:
    """Printable name of an operand type."""
    return _TYPE_NAMES[OperandType(type_)]


class IdCounter:
    """Source of consecutive ids that can be rewound."""

    def __init__(self, value: int = 0) -> None:
        self.value = value

    def next(self) -> int:
        """Return the current id and advance."""
        current = self.value
        self.value += 1
        return current

    def reset(self, value: int = 0) -> None:
        """Continue numbering from ``value``."""
        self.value = value

    @property
    def max_id(self) -> int:
        """One past the last id handed out."""
        return self.value


operand_ids = IdCounter()


class Operand:
    """A temporary value with its def-use chains."""

    PREFIX = "tmp"

    def __init__(self, type_: OperandType, name: str = PREFIX, *, id_: int | None = None) -> None:
        self.base_name = name
        self.type = type_
        self.id = operand_ids.next() if id_ is None else id_
        self.uses: list[Instruction] = []
        # before SSA construction an operand may be defined more than once
        self.defs: list[Instruction] = []

    def __copy__(self) -> Operand:
        return Operand(self.type, self.base_name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.dump()}>"

    @property
    def has_def(self) -> bool:
        return bool(self.defs)

    @property
    def definition(self) -> Instruction | None:
        """The first instruction that defines this operand."""
        return self.defs[0] if self.defs else None

    def erase_use(self, inst: Instruction) -> None:
        """Forget one use by ``inst``."""
        try:
            self.uses.remove(inst)
        except ValueError:
            raise ValueError(f"{self.name} is not used by the instruction") from None

    def erase_def(self, inst: Instruction) -> None:
        """Forget one definition by ``inst``."""
        try:
            self.defs.remove(inst)
        except ValueError:
            raise ValueError(f"{self.name} is not defined by the instruction") from None

    @property
    def name(self) -> str:
        return f"{self.base_name}{self.id}"

    def dump(self) -> str:
        return f"{type_to_string(self.type)} {self.name}"


class Constant(Operand):
    """An immediate 64-bit value."""

    def __init__(self, value: int, type_: OperandType) -> None:
        super().__init__(type_, "imm")
        self.value = value & _UINT64_MASK

    def __copy__(self) -> Constant:
        return Constant(self.value, self.type)

    @property
    def name(self) -> str:
        return str(self.value)

    def dump(self) -> str:
        return self.name


class Variable(Operand):
    """A named variable; copies remember the variable they were renamed from."""

    def __init__(self, type_: OperandType, name: str = Operand.PREFIX) -> None:
        super().__init__(type_, name)
        self.original_var: Variable = self

    def __copy__(self) -> Variable:
        renamed = Variable(self.type, self.base_name)
        renamed.original_var = self.original_var
        return renamed

    @property
    def name(self) -> str:
        own = f"{self.base_name}{self.id}"
        if self.original_var is self:
            return own
        return f"{own}[{self.original_var.name}]"


class StructuredOperand(Operand):
    """An operand made of other operands, laid out as an object or a table."""

    def __init__(self, name: str, fields: Sequence[Operand], type_: OperandType) -> None:
        super().__init__(type_, name, id_=-1)
        self.fields: tuple[Operand, ...] = tuple(fields)

    def field(self, offset: int) -> Operand:
        """Element at a byte offset, read as an object with a header."""
        index = header_field_index(offset)
        if index >= len(self.fields):
            raise IndexError(f"{self.name} has no element at offset {offset}")
        return self.fields[index]

    def word(self, offset: int) -> Operand:
        """Element at a byte offset, read as a table of words."""
        index = offset // WORD_SIZE
        if not 0 <= index < len(self.fields):
            raise IndexError(f"{self.name} has no word at offset {offset}")
        return self.fields[index]

    @property
    def name(self) -> str:
        return self.base_name

    def dump(self) -> str:
        inner = ", ".join(f.name for f in self.fields)
        return f"{{{inner}}} {self.name}"


class GlobalConstant(StructuredOperand):
    """Read-only global data with an address."""


class GlobalVariable(StructuredOperand):
    """Writable global data with an address."""