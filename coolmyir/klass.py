"""Class layouts: inherited fields, dispatch tables and hierarchy tags."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from coolmyir.names import method_full_name as _join_method_name

WORD_SIZE = 8
HEADER_ELEMENTS = 4
# mark (4) + tag (4) + size (8) + dispatch table pointer (8)
HEADER_SIZE = 4 + 4 + 8 + 8

FULL_METHOD_DELIM = "_"
INIT_METHOD_SUFFIX = "-init"
PROTOTYPE_NAME_SUFFIX = "-protObj"
DISP_TAB_NAME_SUFFIX = "_dispTab"


@dataclass(frozen=True)
class Formal:
    """A method parameter."""

    name: str
    type_name: str


@dataclass(frozen=True)
class Feature:
    """An attribute or a method of a class."""

    name: str
    type_name: str
    is_method: bool = False
    formals: tuple[Formal, ...] = ()
    expr: Any = None


@dataclass
class ClassDecl:
    """A class declaration; ``parent`` is None only for the root class."""

    name: str
    parent: str | None
    features: list[Feature] = field(default_factory=list)
    file_name: str = ""


@dataclass
class ClassNode:
    """A node of the inheritance tree."""

    decl: ClassDecl
    children: list[ClassNode] = field(default_factory=list)


class Klass:
    """Layout of one class: all fields and the dispatch table, inherited ones first."""

    def __init__(self, decl: ClassDecl, parent: Klass | None) -> None:
        self.decl = decl
        self.parent = parent
        self.tag = 0
        self.child_max_tag = 0
        self.is_leaf = False
        self.fields: list[Feature] = list(parent.fields) if parent else []
        self.methods: list[tuple[str, Feature]] = list(parent.methods) if parent else []
        self._divide_features(decl.features)

    def _divide_features(self, features: list[Feature]) -> None:
        for feature in features:
            if not feature.is_method:
                self.fields.append(feature)
                continue
            for position, (_, existing) in enumerate(self.methods):
                if existing.name == feature.name:
                    self.methods[position] = (self.name, feature)
                    break
            else:
                self.methods.append((self.name, feature))

    def __repr__(self) -> str:
        return f"Klass({self.name!r}, tag={self.tag}, child_max_tag={self.child_max_tag})"

    @property
    def name(self) -> str:
        return self.decl.name

    @property
    def size(self) -> int:
        """Object size in bytes, header included."""
        return len(self.fields) * WORD_SIZE + HEADER_SIZE

    @property
    def fields_num(self) -> int:
        return len(self.fields)

    def method_index(self, method_name: str) -> int:
        """Slot of the method in the dispatch table."""
        for position, (_, feature) in enumerate(self.methods):
            if feature.name == method_name:
                return position
        raise KeyError(f"class {self.name!r} has no method {method_name!r}")

    def method_full_name(self, method_name: str) -> str:
        """Symbol of the method, qualified by the class that defines it."""
        owner, feature = self.methods[self.method_index(method_name)]
        return _join_method_name(owner, feature.name, FULL_METHOD_DELIM)

    def field_offset(self, field_num: int) -> int:
        """Byte offset of the field with the given number."""
        if not 0 <= field_num < len(self.fields):
            raise IndexError(f"class {self.name!r} has no field number {field_num}")
        return field_num * WORD_SIZE + HEADER_SIZE

    def field_type(self, field_idx: int) -> str:
        """Type of the field by its index counted from the start of the header."""
        position = field_idx - HEADER_ELEMENTS
        if not 0 <= position < len(self.fields):
            raise IndexError(f"class {self.name!r} has no field at index {field_idx}")
        return self.fields[position].type_name

    def init_method(self) -> str:
        return self.name + INIT_METHOD_SUFFIX

    def prototype(self) -> str:
        return self.name + PROTOTYPE_NAME_SUFFIX

    def disp_tab(self) -> str:
        return self.name + DISP_TAB_NAME_SUFFIX


class KlassBuilder:
    """Builds a Klass for every class of the hierarchy and numbers them by tag."""

    def __init__(self, root: ClassNode) -> None:
        self.root = root
        self._klasses: dict[str, Klass] = {}
        self._by_tag: list[Klass] = []
        self.init()

    def init(self) -> None:
        """(Re)build all klasses; tag 0 is reserved, so the root gets tag 1."""
        self._klasses = {}
        self._build(self.root, 1)
        self._by_tag = sorted(self._klasses.values(), key=lambda k: k.tag)

    def _build(self, node: ClassNode, tag: int) -> int:
        decl = node.decl
        parent = self._klasses[decl.parent] if decl.parent is not None else None
        klass = Klass(decl, parent)
        self._klasses[decl.name] = klass

        child_max_tag = tag
        for child in node.children:
            child_max_tag = self._build(child, child_max_tag + 1)

        klass.tag = tag
        klass.child_max_tag = child_max_tag
        klass.is_leaf = not node.children
        return child_max_tag

    @property
    def klasses(self) -> list[Klass]:
        """Klasses sorted by tag."""
        return list(self._by_tag)

    def tag(self, class_name: str) -> int:
        return self._klasses[class_name].tag

    def klass(self, class_name: str) -> Klass:
        return self._klasses[class_name]

    def __contains__(self, class_name: object) -> bool:
        return class_name in self._klasses

    def __iter__(self) -> Iterator[Klass]:
        return iter(self._by_tag)

    def __len__(self) -> int:
        return len(self._klasses)