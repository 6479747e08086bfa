"""Class layouts, an SSA intermediate representation, dominance analysis and IR passes for a Cool compiler."""

__version__ = "0.1.0"

__all__ = [
    "names",
    "klass",
    "layout",
    "operands",
    "instructions",
    "cfg",
    "ir",
    "runtime",
    "ssa",
    "die",
]