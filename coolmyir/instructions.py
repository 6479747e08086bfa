"""Instructions of the intermediate representation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from coolmyir.operands import IdCounter, Operand

instruction_ids = IdCounter()


class Instruction(ABC):
    """An instruction that defines at most one operand and uses several."""

    def __init__(self, result: Operand | None, uses: Sequence[Operand | None]) -> None:
        self.uses: list[Operand] = []
        for use in uses:
            if use is not None:
                use.uses.append(self)
                self.uses.append(use)

        self.result = result
        if result is not None:
            result.defs.append(self)

        self.id = instruction_ids.next()
        # the block holding this instruction
        self.holder: Any = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.dump()}>"

    def update_use(self, old_use: Operand, new_use: Operand) -> None:
        """Replace the first use of ``old_use`` with ``new_use``."""
        if old_use is new_use:
            return
        for position, use in enumerate(self.uses):
            if use is old_use:
                self.uses[position] = new_use
                old_use.erase_use(self)
                new_use.uses.append(self)
                return
        raise ValueError(f"{old_use.name} is not used by this instruction")

    def update_def(self, operand: Operand) -> None:
        """Make this instruction define ``operand`` instead of its current result."""
        if self.result is not None:
            self.result.erase_def(self)
        operand.defs.append(self)
        self.result = operand

    @abstractmethod
    def dump(self) -> str:
        """Printable form of the instruction."""


class Phi(Instruction):
    """Merges values that reach a block along different paths."""

    def __init__(self, result: Operand) -> None:
        super().__init__(result, [])
        self.paths: dict[Operand, Any] = {}

    def add_path(self, use: Operand, block: Any) -> None:
        """Use ``use`` when control arrives from ``block``."""
        self.uses.append(use)
        use.uses.append(self)
        self.paths[use] = block

    def update_path(self, use: Operand, block: Any) -> None:
        self.paths[use] = block

    def update_use(self, old_use: Operand, new_use: Operand) -> None:
        super().update_use(old_use, new_use)
        if old_use in self.paths:
            self.paths[new_use] = self.paths.pop(old_use)

    def oper_path(self, block: Any) -> Operand:
        """Operand that arrives from ``block``."""
        for use, source in self.paths.items():
            if source is block:
                return use
        raise KeyError(f"phi {self.result.name} has no path from the block")

    def dump(self) -> str:
        paths = ", ".join(f"({use.name}: {block.name})" for use, block in self.paths.items())
        return f"phi {self.result.name} <- [{paths}]"


class MemoryInst(Instruction):
    """An instruction that touches memory."""


class Store(MemoryInst):
    """Writes ``value`` to ``base + offset``."""

    def __init__(self, base: Operand, offset: Operand, value: Operand) -> None:
        super().__init__(None, [base, offset, value])

    def dump(self) -> str:
        base, offset, value = self.uses[:3]
        return f"store {value.name} -> [{base.name} + {offset.name}]"


class Load(MemoryInst):
    """Reads ``base + offset`` into ``result``."""

    def __init__(self, result: Operand, base: Operand, offset: Operand) -> None:
        super().__init__(result, [base, offset])

    def dump(self) -> str:
        base, offset = self.uses[:2]
        return f"load {self.result.name} <- [{base.name} + {offset.name}]"


class Branch(Instruction):
    """Unconditional jump."""

    def __init__(self, dest: Any) -> None:
        super().__init__(None, [])
        self.dest = dest

    def dump(self) -> str:
        return f"br {self.dest.name}"


class CondBranch(Instruction):
    """Jumps to ``taken`` if the condition holds, otherwise to ``not_taken``."""

    def __init__(self, cond: Operand, taken: Any, not_taken: Any) -> None:
        super().__init__(None, [cond])
        self.taken = taken
        self.not_taken = not_taken

    def dump(self) -> str:
        return f"br_cond {self.uses[0].name}? {self.taken.name} : {self.not_taken.name}"


class BinaryInst(Instruction):
    """``result <- lhs op rhs``."""

    OP = ""

    def __init__(self, result: Operand, lhs: Operand, rhs: Operand) -> None:
        super().__init__(result, [lhs, rhs])

    def dump(self) -> str:
        lhs, rhs = self.uses[:2]
        return f"{self.result.name} <- {lhs.name} {self.OP} {rhs.name}"


class Sub(BinaryInst):
    OP = "-"


class Add(BinaryInst):
    OP = "+"


class Div(BinaryInst):
    OP = "/"


class Mul(BinaryInst):
    OP = "*"


class Xor(BinaryInst):
    OP = "^"


class Or(BinaryInst):
    OP = "|"


class Shl(BinaryInst):
    OP = "<<"


class LT(BinaryInst):
    OP = "<"


class LE(BinaryInst):
    OP = "<="


class EQ(BinaryInst):
    OP = "=="


class GT(BinaryInst):
    OP = ">"


class UnaryInst(Instruction):
    """``result <- op value``."""

    OP = ""

    def __init__(self, result: Operand, value: Operand) -> None:
        super().__init__(result, [value])

    def dump(self) -> str:
        return f"{self.result.name} <- {self.OP}{self.uses[0].name}"


class Not(UnaryInst):
    OP = "!"


class Neg(UnaryInst):
    OP = "-"


class Move(UnaryInst):
    """Copies a value."""


class Call(Instruction):
    """Calls ``callee``; the first use is the call target, the rest are arguments."""

    def __init__(self, callee: Operand, result: Operand | None, args: Sequence[Operand]) -> None:
        super().__init__(result, args)
        self.callee = callee

    def dump(self) -> str:
        head = f"call {self.result.name} <- [" if self.result is not None else "call ["
        args = ", ".join(arg.name for arg in self.uses[1:])
        return f"{head}{self.uses[0].name}]({args})"


class Ret(Instruction):
    """Returns from the function, with a value or without one."""

    def __init__(self, value: Operand | None) -> None:
        super().__init__(None, [value])

    def dump(self) -> str:
        return "ret " + (self.uses[0].name if self.uses else "")