"""Declarations of the runtime support functions and globals used by generated code."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from coolmyir.ir import Function, Module
from coolmyir.layout import HeaderLayout
from coolmyir.operands import GlobalVariable, OperandType, Variable


class RuntimeSymbol(Enum):
    """Symbols provided by the runtime, valued by their link names."""

    EQUALS = "_equals"
    CASE_ABORT = "_case_abort"
    CASE_ABORT_2 = "_case_abort_2"
    GC_ALLOC = "_gc_alloc"
    DISPATCH_ABORT = "_dispatch_abort"

    INIT_RUNTIME = "_init_runtime"
    FINISH_RUNTIME = "_finish_runtime"

    CLASS_NAME_TAB = "class_nameTab"
    CLASS_OBJ_TAB = "class_objTab"

    INT_TAG_NAME = "_int_tag"
    BOOL_TAG_NAME = "_bool_tag"
    STRING_TAG_NAME = "_string_tag"

    STACK_POINTER = "_stack_pointer"
    FRAME_POINTER = "_frame_pointer"


@dataclass(frozen=True)
class RuntimeMethod:
    """A runtime function together with whether calling it may trigger garbage collection."""

    func: Function
    need_gc: bool


_T = OperandType

# symbol, return type, parameters, may cause gc
_METHODS = (
    (RuntimeSymbol.EQUALS, _T.INT32, (("lhs", _T.POINTER), ("rhs", _T.POINTER)), False),
    (RuntimeSymbol.CASE_ABORT, _T.VOID, (("tag", _T.INT32),), False),
    (RuntimeSymbol.CASE_ABORT_2, _T.VOID, (("filename", _T.POINTER), ("linenumber", _T.INT32)), False),
    (RuntimeSymbol.DISPATCH_ABORT, _T.VOID, (("filename", _T.POINTER), ("linenumber", _T.INT32)), False),
    (RuntimeSymbol.GC_ALLOC, _T.POINTER, (("tag", _T.INT32), ("size", _T.UINT64), ("dt", _T.POINTER)), True),
    (RuntimeSymbol.INIT_RUNTIME, _T.VOID, (("argc", _T.INT32), ("argv", _T.POINTER)), False),
    (RuntimeSymbol.FINISH_RUNTIME, _T.VOID, (), False),
)

_HEADER_TYPES = {
    HeaderLayout.MARK: _T.UINT32,
    HeaderLayout.TAG: _T.UINT32,
    HeaderLayout.SIZE: _T.UINT64,
    HeaderLayout.DISPATCH_TABLE: _T.POINTER,
}


class Runtime:
    """Declares the runtime functions and thread-local globals in a module."""

    def __init__(self, module: Module) -> None:
        self.module = module
        self._methods: dict[str, RuntimeMethod] = {}

        for symbol, return_type, params, need_gc in _METHODS:
            func = Function(symbol.value, [Variable(type_, name) for name, type_ in params], return_type)
            module.add(func)
            func.is_leaf = not need_gc
            func.is_runtime = True
            func.record_max_ids()
            self._methods[symbol.value] = RuntimeMethod(func, need_gc)

        self.stack_pointer = GlobalVariable(RuntimeSymbol.STACK_POINTER.value, [], _T.POINTER)
        self.frame_pointer = GlobalVariable(RuntimeSymbol.FRAME_POINTER.value, [], _T.POINTER)
        module.add(self.stack_pointer)
        module.add(self.frame_pointer)

    def symbol_by_id(self, symbol: RuntimeSymbol) -> RuntimeMethod:
        """The runtime method behind ``symbol``."""
        name = self.symbol_name(symbol)
        try:
            return self._methods[name]
        except KeyError:
            raise KeyError(f"{name!r} is not a runtime method") from None

    def symbol_name(self, symbol: RuntimeSymbol) -> str:
        """Link name of ``symbol``."""
        return RuntimeSymbol(symbol).value

    def header_elem_type(self, elem: HeaderLayout) -> OperandType:
        """IR type of an object header element."""
        return _HEADER_TYPES[HeaderLayout(elem)]