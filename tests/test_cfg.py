import pytest

from coolmyir.cfg import CFG, DFSType, DominanceInfo, trim


class FakeBlock:
    def __init__(self, name):
        self.name = name
        self.preds = []
        self.succs = []
        self.postorder = -1

    def __repr__(self):
        return f"FakeBlock({self.name})"


def link(pred, succ):
    pred.succs.append(succ)
    succ.preds.append(pred)


@pytest.fixture
def diamond():
    entry, t, f, m = (FakeBlock(n) for n in ("entry", "t", "f", "m"))
    link(entry, t)
    link(entry, f)
    link(t, m)
    link(f, m)
    return entry, t, f, m


@pytest.fixture
def loop():
    entry, header, body, tail = (FakeBlock(n) for n in ("entry", "header", "body", "tail"))
    link(entry, header)
    link(header, body)
    link(header, tail)
    link(body, header)
    return entry, header, body, tail


def test_trim_removes_suffix():
    assert trim("a, b, ", ", ") == "a, b"


def test_trim_keeps_string_without_suffix():
    assert trim("abc", "x") == "abc"
    assert trim("", ", ") == ""
    assert trim("ab", "abc") == "ab"


def test_empty_cfg():
    cfg = CFG()
    assert cfg.empty is True
    assert cfg.traversal(DFSType.PREORDER) == []
    assert cfg.dominance().dominance == {}


def test_preorder_diamond(diamond):
    entry, t, f, m = diamond
    assert CFG(entry).traversal(DFSType.PREORDER) == [entry, t, m, f]


def test_postorder_diamond(diamond):
    entry, t, f, m = diamond
    assert CFG(entry).traversal(DFSType.POSTORDER) == [m, t, f, entry]


def test_reverse_postorder_is_reversed_postorder(diamond):
    cfg = CFG(diamond[0])
    post = cfg.traversal(DFSType.POSTORDER)
    rpo = cfg.traversal(DFSType.REVERSE_POSTORDER)
    assert rpo == list(reversed(post))
    assert rpo[0] is diamond[0]


def test_postorder_numbers_match_positions(loop):
    post = CFG(loop[0]).traversal(DFSType.POSTORDER)
    assert [b.postorder for b in post] == list(range(len(post)))


def test_traversal_visits_each_reachable_block_once(loop):
    for kind in DFSType:
        order = CFG(loop[0]).traversal(kind)
        assert len(order) == len(set(order)) == 4


def test_unreachable_blocks_are_not_visited():
    entry, a, u = FakeBlock("entry"), FakeBlock("a"), FakeBlock("u")
    link(entry, a)
    link(u, a)
    assert u not in CFG(entry).traversal(DFSType.REVERSE_POSTORDER)


def test_diamond_dominance(diamond):
    entry, t, f, m = diamond
    info = CFG(entry).dominance()
    assert info.dominance == {entry: entry, t: entry, f: entry, m: entry}
    assert set(info.dominator_tree[entry]) == {t, f, m}
    assert entry not in info.dominator_tree[entry]


def test_diamond_frontier(diamond):
    entry, t, f, m = diamond
    info = CFG(entry).dominance()
    assert info.dominance_frontier[t] == {m}
    assert info.dominance_frontier[f] == {m}
    assert entry not in info.dominance_frontier


def test_diamond_dominate(diamond):
    entry, t, f, m = diamond
    info = CFG(entry).dominance()
    assert info.dominate(entry, m) is True
    assert info.dominate(m, m) is True
    assert info.dominate(t, m) is False
    assert info.dominate(m, entry) is False


def test_loop_dominance(loop):
    entry, header, body, tail = loop
    info = CFG(entry).dominance()
    assert info.dominance[header] is entry
    assert info.dominance[body] is header
    assert info.dominance[tail] is header
    assert info.dominate(header, body) is True
    assert info.dominate(body, tail) is False


def test_loop_frontier(loop):
    entry, header, body, tail = loop
    info = CFG(entry).dominance()
    assert info.dominance_frontier[body] == {header}
    assert info.dominance_frontier[header] == {header}
    assert tail not in info.dominance_frontier


def test_dominance_ignores_unreachable_predecessor():
    entry, a, u = FakeBlock("entry"), FakeBlock("a"), FakeBlock("u")
    link(entry, a)
    link(u, a)
    info = CFG(entry).dominance()
    assert info.dominance == {entry: entry, a: entry}
    assert u not in info.dominance_frontier


def test_dominate_on_hand_built_info():
    x, y, z = FakeBlock("x"), FakeBlock("y"), FakeBlock("z")
    info = DominanceInfo(dominator_tree={x: [y], y: [z]})
    assert info.dominate(x, z) is True
    assert info.dominate(z, x) is False


def test_dump_lists_dominators(diamond):
    entry, t, f, m = diamond
    text = CFG(entry).dominance().dump()
    assert "  Dom(m) = entry" in text
    assert "  DF(t) = [m]" in text