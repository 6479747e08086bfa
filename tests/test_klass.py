import pytest

from coolmyir.klass import (
    HEADER_SIZE,
    WORD_SIZE,
    ClassDecl,
    ClassNode,
    Feature,
    Formal,
    KlassBuilder,
)


def method(name, ret, *formals):
    return Feature(name, ret, is_method=True, formals=tuple(Formal(n, t) for n, t in formals))


def attr(name, type_name):
    return Feature(name, type_name)


@pytest.fixture
def builder():
    obj = ClassDecl("Object", None, [method("abort", "Object"), method("copy", "SELF_TYPE")])
    io = ClassDecl("IO", "Object", [method("out_string", "SELF_TYPE", ("x", "String"))])
    main = ClassDecl(
        "Main",
        "IO",
        [attr("a", "Int"), method("main", "Object"), method("copy", "SELF_TYPE"), attr("b", "Bool")],
    )
    int_ = ClassDecl("Int", "Object", [attr("val", "prim_int")])
    root = ClassNode(obj, [ClassNode(io, [ClassNode(main)]), ClassNode(int_)])
    return KlassBuilder(root)


def test_tags_follow_preorder(builder):
    names = [k.name for k in builder.klasses]
    assert names == ["Object", "IO", "Main", "Int"]
    assert [k.tag for k in builder.klasses] == list(range(1, len(builder) + 1))


def test_child_tags_lie_in_parent_range(builder):
    for klass in builder.klasses:
        assert klass.tag <= klass.child_max_tag
        if klass.parent is not None:
            assert klass.parent.tag < klass.tag <= klass.parent.child_max_tag
    assert builder.klass("Object").child_max_tag == max(k.tag for k in builder.klasses)


def test_leaves(builder):
    leaves = {k.name for k in builder.klasses if k.is_leaf}
    assert leaves == {"Main", "Int"}


def test_tag_lookup_matches_klass(builder):
    assert builder.tag("Main") == builder.klass("Main").tag
    with pytest.raises(KeyError):
        builder.tag("Missing")
    with pytest.raises(KeyError):
        builder.klass("Missing")


def test_fields_are_inherited_in_order(builder):
    main = builder.klass("Main")
    assert [f.name for f in main.fields] == ["a", "b"]
    assert main.fields_num == 2
    assert builder.klass("Object").fields == []


def test_override_keeps_slot(builder):
    obj = builder.klass("Object")
    main = builder.klass("Main")
    assert main.method_index("copy") == obj.method_index("copy")
    assert [m.name for _, m in main.methods] == ["abort", "copy", "out_string", "main"]


def test_method_full_name_uses_defining_class(builder):
    main = builder.klass("Main")
    assert main.method_full_name("abort") == "Object_abort"
    assert main.method_full_name("copy") == "Main_copy"
    assert main.method_full_name("out_string") == "IO_out_string"
    assert builder.klass("IO").method_full_name("copy") == "Object_copy"


def test_unknown_method_raises(builder):
    with pytest.raises(KeyError):
        builder.klass("Int").method_index("main")
    with pytest.raises(KeyError):
        builder.klass("Int").method_full_name("main")


def test_size_and_offsets(builder):
    main = builder.klass("Main")
    assert builder.klass("Object").size == HEADER_SIZE
    assert main.size == HEADER_SIZE + 2 * WORD_SIZE
    assert main.field_offset(0) == HEADER_SIZE
    assert main.field_offset(1) - main.field_offset(0) == WORD_SIZE
    with pytest.raises(IndexError):
        main.field_offset(2)
    with pytest.raises(IndexError):
        main.field_offset(-1)


def test_field_type_by_absolute_index(builder):
    main = builder.klass("Main")
    assert main.field_type(4) == "Int"
    assert main.field_type(5) == "Bool"
    with pytest.raises(IndexError):
        main.field_type(3)


def test_symbol_names(builder):
    klass = builder.klass("Main")
    assert klass.init_method() == "Main-init"
    assert klass.prototype() == "Main-protObj"
    assert klass.disp_tab() == "Main_dispTab"


def test_init_rebuilds_same_layout(builder):
    before = [(k.name, k.tag, k.child_max_tag) for k in builder.klasses]
    builder.init()
    after = [(k.name, k.tag, k.child_max_tag) for k in builder.klasses]
    assert before == after


def test_missing_parent_raises():
    orphan = ClassDecl("A", "Nowhere")
    with pytest.raises(KeyError):
        KlassBuilder(ClassNode(orphan))