"""Blocks, functions, modules and the builder that assembles them."""

from __future__ import annotations

from typing import Sequence

from coolmyir.cfg import CFG, DFSType
from coolmyir.instructions import (
    EQ,
    GT,
    LE,
    LT,
    Add,
    Branch,
    Call,
    CondBranch,
    Div,
    Instruction,
    Load,
    Move,
    Mul,
    Neg,
    Not,
    Or,
    Phi,
    Ret,
    Shl,
    Store,
    Sub,
    Xor,
    instruction_ids,
)
from coolmyir.operands import (
    Constant,
    GlobalConstant,
    GlobalVariable,
    IdCounter,
    Operand,
    OperandType,
    Variable,
    operand_ids,
    type_to_string,
)

block_ids = IdCounter()

_UINT64_MASK = (1 << 64) - 1


class Block:
    """A basic block: a straight list of instructions with CFG edges."""

    def __init__(self, name: str, func: Function | None = None) -> None:
        self.name = name
        self.id = block_ids.next()
        self.holder = func
        # set by postorder traversals of the CFG
        self.postorder = -1
        self.preds: list[Block] = []
        self.succs: list[Block] = []
        self.insts: list[Instruction] = []

    def __repr__(self) -> str:
        return f"<Block {self.name}>"

    # ---- adding instructions ----

    def _index_of(self, inst: Instruction) -> int:
        for position, candidate in enumerate(self.insts):
            if candidate is inst:
                return position
        raise ValueError(f"instruction is not in block {self.name}")

    def _insert(self, position: int, inst: Instruction) -> None:
        self.insts.insert(position, inst)
        inst.holder = self

    def append(self, inst: Instruction) -> None:
        """Add ``inst`` at the end of the block."""
        self._insert(len(self.insts), inst)

    def append_front(self, inst: Instruction) -> None:
        """Add ``inst`` at the start of the block."""
        self._insert(0, inst)

    def append_before(self, inst: Instruction, newinst: Instruction) -> None:
        """Insert ``newinst`` right before ``inst``."""
        self._insert(self._index_of(inst), newinst)

    def append_after(self, inst: Instruction, newinst: Instruction) -> None:
        """Insert ``newinst`` right after ``inst``."""
        self._insert(self._index_of(inst) + 1, newinst)

    def append_instead(self, inst: Instruction, newinst: Instruction) -> None:
        """Replace ``inst`` with ``newinst``, dropping the def-use links of ``inst``."""
        position = self._index_of(inst)
        self._erase_at(position)
        self._insert(position, newinst)

    # ---- removing instructions ----

    def _erase_at(self, position: int) -> None:
        inst = self.insts.pop(position)
        if inst.result is not None:
            inst.result.erase_def(inst)
        for use in inst.uses:
            use.erase_use(inst)

    def erase(self, inst: Instruction) -> None:
        """Remove ``inst`` from the block and from the def-use chains."""
        self._erase_at(self._index_of(inst))

    @staticmethod
    def erase_many(insts: Sequence[Instruction]) -> None:
        """Remove every instruction from the block that holds it."""
        for inst in insts:
            inst.holder.erase(inst)

    def clear(self) -> None:
        self.insts.clear()

    # ---- CFG edges ----

    @staticmethod
    def connect(pred: Block, succ: Block) -> None:
        """Add the edge ``pred -> succ``."""
        if any(s is succ for s in pred.succs) or any(p is pred for p in succ.preds):
            raise ValueError(f"edge {pred.name} -> {succ.name} already exists")
        pred.succs.append(succ)
        succ.preds.append(pred)

    @staticmethod
    def disconnect_edge(pred: Block, succ: Block) -> None:
        """Remove the edge ``pred -> succ``."""
        try:
            position_s = next(i for i, s in enumerate(pred.succs) if s is succ)
            position_p = next(i for i, p in enumerate(succ.preds) if p is pred)
        except StopIteration:
            raise ValueError(f"no edge {pred.name} -> {succ.name}") from None
        del pred.succs[position_s]
        del succ.preds[position_p]

    def disconnect(self) -> None:
        """Cut this block out of the CFG, linking its predecessor to its successors."""
        succs = list(self.succs)
        preds = list(self.preds)
        if len(preds) > 1:
            raise ValueError(f"block {self.name} has more than one predecessor")

        for successor in succs:
            Block.disconnect_edge(self, successor)
        for predecessor in preds:
            Block.disconnect_edge(predecessor, self)

        for pred in preds:
            for succ in succs:
                Block.connect(pred, succ)
                for inst in succ.insts:
                    if not isinstance(inst, Phi):
                        break
                    inst.update_path(inst.oper_path(self), pred)

    def dump(self) -> str:
        preds = ", ".join(p.name for p in self.preds)
        succs = ", ".join(s.name for s in self.succs)
        lines = [f'  Block "{self.name}", preds = [{preds}], succs = [{succs}]:']
        lines += [f"    {inst.dump()}" for inst in self.insts]
        return "\n".join(lines)


class Function(GlobalConstant):
    """A function: parameters, return type and a CFG."""

    def __init__(self, name: str, params: Sequence[Variable], return_type: OperandType) -> None:
        super().__init__(name, [], OperandType.POINTER)
        self.params: list[Variable] = list(params)
        self.return_type = return_type
        self.cfg = CFG()
        self.is_leaf = False
        self.is_init = False
        self.is_runtime = False
        self._max_operand_id = 0
        self._max_instruction_id = 0
        self._max_block_id = 0

    @property
    def has_return(self) -> bool:
        return self.return_type != OperandType.VOID

    def set_cfg(self, block: Block) -> None:
        """Make ``block`` the entry block."""
        self.cfg.root = block

    def record_max_ids(self) -> None:
        """Remember the id counters of this function and restart them from zero."""
        self._max_block_id = block_ids.max_id
        self._max_operand_id = operand_ids.max_id
        self._max_instruction_id = instruction_ids.max_id
        operand_ids.reset()
        instruction_ids.reset()
        block_ids.reset()

    def reset_max_ids(self) -> None:
        """Continue the id counters from where this function left them."""
        operand_ids.reset(self._max_operand_id)
        instruction_ids.reset(self._max_instruction_id)
        block_ids.reset(self._max_block_id)

    @property
    def short_name(self) -> str:
        return self.base_name

    @property
    def name(self) -> str:
        params = ", ".join(p.dump() for p in self.params)
        return f"{type_to_string(self.return_type)} {self.short_name}({params})"

    def dump(self) -> str:
        if self.cfg.empty:
            return f"{self.name} {{}}"
        blocks = "\n\n".join(b.dump() for b in self.cfg.traversal(DFSType.REVERSE_POSTORDER))
        return f"{self.name} {{\n{blocks}\n}}"


class Module:
    """Functions, read-only constants and global variables of a program."""

    def __init__(self) -> None:
        self.functions: dict[str, Function] = {}
        self.constants: dict[str, GlobalConstant] = {}
        self.variables: dict[str, GlobalVariable] = {}

    def add(self, elem: Function | GlobalConstant | GlobalVariable) -> None:
        """Register a function, constant or variable under its name."""
        if isinstance(elem, Function):
            self.functions[elem.short_name] = elem
        elif isinstance(elem, GlobalVariable):
            self.variables[elem.name] = elem
        elif isinstance(elem, GlobalConstant):
            self.constants[elem.name] = elem
        else:
            raise TypeError(f"cannot add {type(elem).__name__} to a module")

    def get_function(self, name: str) -> Function | None:
        return self.functions.get(name)

    def get_constant(self, name: str) -> GlobalConstant | None:
        return self.constants.get(name)

    def get_variable(self, name: str) -> GlobalVariable | None:
        return self.variables.get(name)

    def dump(self) -> str:
        parts = [c.dump() for c in self.constants.values()]
        parts += [v.dump() for v in self.variables.values()]
        for func in self.functions.values():
            func.reset_max_ids()
            parts.append(func.dump())
        return "".join(part + "\n\n" for part in parts)


def _fold(kind: type, lhs: int, rhs: int) -> int:
    if kind is Add:
        return lhs + rhs
    if kind is Sub:
        return lhs - rhs
    if kind is Div:
        return lhs // rhs
    if kind is Mul:
        return lhs * rhs
    if kind is Shl:
        return lhs << rhs
    if kind is LT:
        return int(lhs < rhs)
    if kind is LE:
        return int(lhs <= rhs)
    if kind is EQ:
        return int(lhs == rhs)
    if kind is GT:
        return int(lhs > rhs)
    if kind is Or:
        return lhs | rhs
    if kind is Xor:
        return lhs ^ rhs
    raise TypeError(f"cannot fold {kind.__name__}")


class IRBuilder:
    """Tracks the current function and block while the IR is built."""

    def __init__(self, module: Module) -> None:
        self.module = module
        self.current_block: Block | None = None
        self.current_function: Function | None = None

    def new_block(self, name: str) -> Block:
        return Block(name, self.current_function)

    def set_current_function(self, func: Function) -> None:
        if self.current_function is not None:
            self.current_function.record_max_ids()
        func.reset_max_ids()
        self.current_function = func

    def set_current_block(self, block: Block) -> None:
        self.current_block = block

    def field_offset(self, offset: int) -> Constant:
        return Constant(offset, OperandType.UINT64)

    def _emit(self, inst: Instruction) -> None:
        if self.current_block is None:
            raise RuntimeError("no current block to emit into")
        self.current_block.append(inst)

    def _binary(self, kind: type, lhs: Operand, rhs: Operand) -> Operand:
        if isinstance(lhs, Constant) and isinstance(rhs, Constant):
            value = _fold(kind, lhs.value, rhs.value) & _UINT64_MASK
            return Constant(value, lhs.type)
        result = Operand(lhs.type)
        self._emit(kind(result, lhs, rhs))
        return result

    def _unary(self, kind: type, operand: Operand) -> Operand:
        result = Operand(operand.type)
        self._emit(kind(result, operand))
        return result

    @staticmethod
    def phi(var: Operand, block: Block) -> Phi:
        """Put an empty phi for ``var`` at the start of ``block``."""
        inst = Phi(var)
        block.append_front(inst)
        return inst

    def ret(self, value: Operand | None) -> None:
        self._emit(Ret(value))

    def st(self, base: Operand, offset: Operand, value: Operand) -> None:
        self._emit(Store(base, offset, value))

    def ld(self, type_: OperandType, base: Operand, offset: Operand) -> Operand:
        """Load a value; loads from constant objects at constant offsets are resolved at once."""
        if isinstance(base, GlobalConstant) and isinstance(offset, Constant):
            return base.field(offset.value)
        result = Operand(type_)
        self._emit(Load(result, base, offset))
        return result

    def call(self, func: Function, args: Sequence[Operand], dst: Operand | None = None) -> Operand | None:
        """Call ``func`` through ``dst`` (``func`` itself by default); None if it returns nothing."""
        target = func if dst is None else dst
        result = Operand(func.return_type) if func.has_return else None
        self._emit(Call(func, result, [target, *args]))
        return result

    def cond_br(self, pred: Operand, taken: Block, fall_through: Block) -> None:
        self._emit(CondBranch(pred, taken, fall_through))
        Block.connect(self.current_block, taken)
        Block.connect(self.current_block, fall_through)

    def br(self, taken: Block) -> None:
        self._emit(Branch(taken))
        Block.connect(self.current_block, taken)

    def add(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(Add, lhs, rhs)

    def sub(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(Sub, lhs, rhs)

    def div(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(Div, lhs, rhs)

    def mul(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(Mul, lhs, rhs)

    def shl(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(Shl, lhs, rhs)

    def lt(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(LT, lhs, rhs)

    def le(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(LE, lhs, rhs)

    def eq(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(EQ, lhs, rhs)

    def gt(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(GT, lhs, rhs)

    def or2(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(Or, lhs, rhs)

    def xor2(self, lhs: Operand, rhs: Operand) -> Operand:
        return self._binary(Xor, lhs, rhs)

    def neg(self, operand: Operand) -> Operand:
        return self._unary(Neg, operand)

    def not1(self, operand: Operand) -> Operand:
        return self._unary(Not, operand)

    def move(self, src: Operand, dst: Operand | None = None) -> Operand:
        """Copy ``src`` into ``dst``, or into a fresh temporary; returns the destination."""
        if src is None:
            raise ValueError("move needs a source operand")
        if dst is None:
            return self._unary(Move, src)
        self._emit(Move(dst, src))
        return dst