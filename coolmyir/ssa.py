"""Construction of pruned SSA form."""

from __future__ import annotations

from copy import copy

from coolmyir.cfg import DFSType, DominanceInfo
from coolmyir.instructions import Phi
from coolmyir.ir import Block, Function, IRBuilder
from coolmyir.operands import Operand, Variable


class SSAConstruction:
    """Turns a function into pruned SSA form: inserts phis, renames variables, drops dead phis."""

    def __init__(self) -> None:
        self._func: Function | None = None

    def run(self, func: Function) -> None:
        self._func = func
        cfg = func.cfg
        if cfg.empty:
            return

        info = cfg.dominance()
        self._insert_phis(info)

        # formals are the first definitions
        varstacks: dict[Operand, list[Operand]] = {}
        for position, param in enumerate(func.params):
            renamed = copy(param)
            varstacks[param] = [renamed]
            func.params[position] = renamed
        self._rename(info, cfg.root, varstacks)

        self._prune(info)

    def _defs_in_blocks(self) -> dict[Operand, set[Block]]:
        defs: dict[Operand, set[Block]] = {}
        for block in self._func.cfg.traversal(DFSType.REVERSE_POSTORDER):
            for inst in block.insts:
                if isinstance(inst.result, Variable):
                    defs.setdefault(inst.result, set()).add(block)
        return defs

    def _insert_phis(self, info: DominanceInfo) -> None:
        frontier = info.dominance_frontier
        for var, blocks in self._defs_in_blocks().items():
            with_phi: set[Block] = set()
            worklist = sorted(blocks, key=lambda b: b.id)
            while worklist:
                block = worklist.pop()
                for target in sorted(frontier.get(block, ()), key=lambda b: b.id):
                    if target in with_phi:
                        continue
                    IRBuilder.phi(var, target)
                    with_phi.add(target)
                    if target not in blocks:
                        worklist.append(target)

    def _rename(self, info: DominanceInfo, root: Block, varstacks: dict[Operand, list[Operand]]) -> None:
        work: list[tuple[Block, dict[Operand, int] | None]] = [(root, None)]
        while work:
            block, pushed = work.pop()
            if pushed is not None:
                self._pop_names(varstacks, pushed)
                continue
            pushed = self._rename_block(block, varstacks)
            work.append((block, pushed))
            for child in reversed(info.dominator_tree.get(block, ())):
                work.append((child, None))

    @staticmethod
    def _push_new_name(inst, varstacks, pushed) -> None:
        var = inst.result
        renamed = copy(var)
        inst.update_def(renamed)
        varstacks.setdefault(var, []).append(renamed)
        pushed[var] = pushed.get(var, 0) + 1

    def _rename_block(self, block: Block, varstacks: dict[Operand, list[Operand]]) -> dict[Operand, int]:
        pushed: dict[Operand, int] = {}

        for inst in list(block.insts):
            if isinstance(inst, Phi):
                self._push_new_name(inst, varstacks, pushed)
                continue

            for use in list(inst.uses):
                if isinstance(use, Variable):
                    # a use with no reaching definition is a function formal
                    stack = varstacks.get(use)
                    if stack:
                        inst.update_use(use, stack[-1])

            if isinstance(inst.result, Variable):
                self._push_new_name(inst, varstacks, pushed)

        for succ in block.succs:
            for inst in succ.insts:
                if not isinstance(inst, Phi):
                    break
                stack = varstacks.get(inst.result.original_var)
                if stack:
                    inst.add_path(stack[-1], block)

        return pushed

    @staticmethod
    def _pop_names(varstacks: dict[Operand, list[Operand]], pushed: dict[Operand, int]) -> None:
        for var, count in pushed.items():
            stack = varstacks[var]
            del stack[len(stack) - count :]
            if not stack:
                del varstacks[var]

    def _prune(self, info: DominanceInfo) -> None:
        alive: set[Operand] = set()
        worklist: list[Operand] = []

        visit = [self._func.cfg.root]
        while visit:
            block = visit.pop()
            for inst in block.insts:
                if isinstance(inst, Phi):
                    continue
                for use in inst.uses:
                    if isinstance(use, Variable) and isinstance(use.definition, Phi):
                        alive.add(use)
                        worklist.append(use)
            visit.extend(reversed(info.dominator_tree.get(block, ())))

        while worklist:
            var = worklist.pop()
            if isinstance(var.definition, Phi):
                for use in var.definition.uses:
                    if use not in alive:
                        alive.add(use)
                        worklist.append(use)

        dead = []
        for block in self._func.cfg.traversal(DFSType.PREORDER):
            for inst in block.insts:
                if not isinstance(inst, Phi):
                    break
                if inst.result not in alive:
                    dead.append(inst)
        Block.erase_many(dead)