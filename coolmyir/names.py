"""Generators for symbol, block and constant names used during code generation."""

from __future__ import annotations

from enum import Enum


class Comment(Enum):
    """Kinds of generated names."""

    TYPE = ("_type", True)

    ENTRY_BLOCK = ("entry_block", False)
    TRUE_BRANCH = ("true_block_", False)
    FALSE_BRANCH = ("false_block_", False)
    MERGE_BLOCK = ("merge_block_", False)
    LOOP_HEADER = ("loop_header_", False)
    LOOP_BODY = ("loop_body_", False)
    LOOP_TAIL = ("loop_tail_", False)

    CONST_BOOL = ("bool_const_", False)
    CONST_INT = ("int_const_", False)
    CONST_STRING = ("str_const_", False)

    @property
    def text(self) -> str:
        return self.value[0]

    @property
    def is_suffix(self) -> bool:
        return self.value[1]


_PER_FUNCTION = frozenset(
    {
        Comment.ENTRY_BLOCK,
        Comment.TRUE_BRANCH,
        Comment.FALSE_BRANCH,
        Comment.MERGE_BLOCK,
        Comment.LOOP_HEADER,
        Comment.LOOP_BODY,
        Comment.LOOP_TAIL,
    }
)


def method_full_name(klass: str, method: str, delim: str) -> str:
    """Join a class name and a method name with a delimiter."""
    return f"{klass}{delim}{method}"


def _combine(kind: Comment, text: str) -> str:
    return text + kind.text if kind.is_suffix else kind.text + text


class NameGenerator:
    """Hands out fresh names of each kind, numbered per kind."""

    def __init__(self) -> None:
        self._counters: dict[Comment, int] = {kind: 0 for kind in Comment}

    def name(self, kind: Comment, text: str | None = None) -> str:
        """Name of the given kind for ``text``, or a fresh numbered one if no text is given."""
        if text is not None:
            return _combine(kind, text)
        number = self._counters[kind]
        self._counters[kind] = number + 1
        return _combine(kind, str(number))

    def int_constant(self) -> str:
        """Fresh integer constant name."""
        return self.name(Comment.CONST_INT)

    def bool_constant(self) -> str:
        """Boolean constant name; only two ever exist, so the numbering wraps."""
        self._counters[Comment.CONST_BOOL] %= 2
        return self.name(Comment.CONST_BOOL)

    def string_constant(self) -> str:
        """Fresh string constant name."""
        return self.name(Comment.CONST_STRING)

    def comment(self, kind: Comment) -> str:
        """Raw text of the given kind."""
        return kind.text

    def reset(self) -> None:
        """Restart numbering of the per-function block names."""
        for kind in _PER_FUNCTION:
            self._counters[kind] = 0