"""Removal of obviously dead instructions."""

from __future__ import annotations

from coolmyir.cfg import DFSType
from coolmyir.instructions import Call, Store
from coolmyir.ir import Block, Function


class DIE:
    """Deletes instructions whose result is never used; stores and calls stay."""

    def run(self, func: Function) -> None:
        dead = [
            inst
            for block in func.cfg.traversal(DFSType.REVERSE_POSTORDER)
            for inst in block.insts
            if not isinstance(inst, (Store, Call)) and inst.result is not None and not inst.result.uses
        ]
        Block.erase_many(dead)