"""Control flow graph traversals and dominance information."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

Block = Any


def trim(where: str, what: str) -> str:
    """Return ``where`` without a trailing ``what``, if it ends with it."""
    if what and where.endswith(what):
        return where[: len(where) - len(what)]
    return where


class DFSType(Enum):
    """Orders in which blocks are visited."""

    PREORDER = "preorder"
    INORDER = "inorder"
    POSTORDER = "postorder"
    REVERSE_POSTORDER = "reverse_postorder"


@dataclass
class DominanceInfo:
    """Immediate dominators, the dominator tree and dominance frontiers of a CFG."""

    dominance: dict[Block, Block] = field(default_factory=dict)
    dominator_tree: dict[Block, list[Block]] = field(default_factory=dict)
    dominance_frontier: dict[Block, set[Block]] = field(default_factory=dict)

    def dominate(self, dominator: Block, dominatee: Block) -> bool:
        """True if ``dominator`` dominates ``dominatee``; a block dominates itself."""
        if dominator is dominatee:
            return True

        stack = [dominator]
        while stack:
            block = stack.pop()
            for child in self.dominator_tree.get(block, ()):
                if child is dominatee:
                    return True
                stack.append(child)
        return False

    def dump(self) -> str:
        """Printable form of the dominance information."""
        lines = ["Dominance:"]
        lines += [f"  Dom({b.name}) = {d.name}" for b, d in self.dominance.items()]
        lines.append("Dominator Tree:")
        for b, children in self.dominator_tree.items():
            inner = ", ".join(child.name for child in children)
            lines.append(f" {b.name} dominates [{inner}]")
        lines.append("Dominance frontier:")
        for b, frontier in self.dominance_frontier.items():
            inner = ", ".join(sorted(block.name for block in frontier))
            lines.append(f"  DF({b.name}) = [{inner}]")
        return "\n".join(lines) + "\n"


class CFG:
    """The control flow graph of a function, given by its entry block."""

    def __init__(self, root: Block | None = None) -> None:
        self.root = root

    @property
    def empty(self) -> bool:
        return self.root is None

    def _walk(self) -> Iterator[tuple[str, Block]]:
        """Depth-first walk yielding ("pre", block) and ("post", block) events."""
        if self.root is None:
            return
        visited = {self.root}
        yield "pre", self.root
        stack = [(self.root, iter(self.root.succs))]
        while stack:
            block, successors = stack[-1]
            for succ in successors:
                if succ not in visited:
                    visited.add(succ)
                    yield "pre", succ
                    stack.append((succ, iter(succ.succs)))
                    break
            else:
                stack.pop()
                yield "post", block

    def traversal(self, kind: DFSType) -> list[Block]:
        """Blocks reachable from the root in the requested order.

        Postorder traversals also number the blocks in postorder.
        """
        if kind in (DFSType.POSTORDER, DFSType.REVERSE_POSTORDER):
            order = [block for event, block in self._walk() if event == "post"]
            for number, block in enumerate(order):
                block.postorder = number
            if kind is DFSType.REVERSE_POSTORDER:
                order.reverse()
            return order
        return [block for event, block in self._walk() if event == "pre"]

    def dominance(self) -> DominanceInfo:
        """Compute dominance with the Cooper-Harvey-Kennedy iterative algorithm."""
        info = DominanceInfo()
        if self.root is None:
            return info

        rpo = [b for b in self.traversal(DFSType.REVERSE_POSTORDER) if b is not self.root]
        dom = info.dominance
        for block in rpo:
            dom[block] = None
        dom[self.root] = self.root

        changed = True
        while changed:
            changed = False
            for block in rpo:
                processed = [p for p in block.preds if dom.get(p) is not None]
                if not processed:
                    raise ValueError(f"block {block.name} has no processed predecessor")
                new_idom = processed[0]
                for pred in processed:
                    new_idom = self._intersect(dom, pred, new_idom)
                if dom[block] is not new_idom:
                    dom[block] = new_idom
                    changed = True

        self._dominator_tree(info)
        self._dominance_frontier(info)
        return info

    @staticmethod
    def _intersect(dom: dict[Block, Block], b1: Block, b2: Block) -> Block:
        finger1, finger2 = b1, b2
        while finger1.postorder != finger2.postorder:
            while finger1.postorder < finger2.postorder:
                finger1 = dom[finger1]
            while finger2.postorder < finger1.postorder:
                finger2 = dom[finger2]
        return finger1

    def _dominator_tree(self, info: DominanceInfo) -> None:
        for block, idom in info.dominance.items():
            info.dominator_tree.setdefault(idom, []).append(block)
        children = info.dominator_tree.get(self.root)
        if children is not None:
            children.remove(self.root)

    @staticmethod
    def _dominance_frontier(info: DominanceInfo) -> None:
        dom = info.dominance
        for block, idom in dom.items():
            if len(block.preds) < 2:
                continue
            for pred in block.preds:
                if pred not in dom:
                    continue
                runner = pred
                while runner is not idom:
                    info.dominance_frontier.setdefault(runner, set()).add(block)
                    runner = dom[runner]