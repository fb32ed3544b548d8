"""
Tape arena, node records and configuration.
"""

import pytest

from scalargrad import EngineConfig, Scalar, Tape, use_tape
from scalargrad.core import tape as tape_mod
from scalargrad.core.node import Node, Op, OpKind


def test_push_node_returns_stable_indices():
    t = Tape()
    i = t.push_node(data=1.0, label="a")
    j = t.push_node(data=2.0, label="b")
    k = t.push_node(data=3.0, op=Op(OpKind.ADD), children=(i, j))

    assert (i, j, k) == (0, 1, 2)
    assert t.node(k).children == (0, 1)
    assert len(t) == 3


def test_children_must_already_exist():
    t = Tape()
    t.push_node(data=1.0)
    with pytest.raises(ValueError):
        t.push_node(data=2.0, op=Op(OpKind.TANH), children=(1,))
    assert len(t) == 1


def test_arity_is_validated():
    with pytest.raises(ValueError):
        Node(data=1.0, op=Op(OpKind.ADD), children=(0,))
    with pytest.raises(ValueError):
        Node(data=1.0, op=None, children=(0,))
    Node(data=1.0, op=Op(OpKind.POWI, 2), children=(0,))


def test_powi_requires_exponent():
    with pytest.raises(ValueError):
        Op(OpKind.POWI)
    with pytest.raises(ValueError):
        Op(OpKind.ADD, 2)
    assert str(Op(OpKind.POWI, 3)) == "powi(3)"
    assert Op(OpKind.MUL).symbol == "*"


def test_use_tape_swaps_and_restores():
    outer = tape_mod.global_tape
    with use_tape() as t:
        assert tape_mod.global_tape is t
        a = Scalar(1.0)
        assert a.tape is t
    assert tape_mod.global_tape is outer


def test_use_tape_accepts_empty_tape():
    mine = Tape()
    with use_tape(mine) as t:
        assert t is mine
        Scalar(1.0)
    assert len(mine) == 1


def test_reset_drops_graph():
    t = Tape()
    a = Scalar(1.0, tape=t)
    a + a
    t.reset()
    assert len(t) == 0


def test_handles_outlive_reset_without_aliasing():
    t = Tape()
    w0 = Scalar(0.5, "w0", tape=t)
    t.reset()
    other = Scalar(123.0, "unrelated", tape=t)

    assert other.index == w0.index
    assert w0 != other
    for read in (lambda: w0.data, lambda: w0.label, lambda: w0.grad):
        with pytest.raises(ReferenceError):
            read()
    with pytest.raises(ReferenceError):
        w0.set_data(1.0)
    assert other.data == 123.0


def test_truncate_keeps_earlier_nodes():
    t = Tape()
    a = Scalar(2.0, "a", tape=t)
    mark = t.mark()
    b = a * a
    c = b + 1.0
    t.truncate(mark)

    assert len(t) == mark == 1
    assert a.data == 2.0
    for stale in (b, c):
        with pytest.raises(ReferenceError):
            stale.data
    with pytest.raises(ReferenceError):
        c.backward()
    with pytest.raises(ReferenceError):
        c.traverse()
    with pytest.raises(ReferenceError):
        c.trace()

    d = a * 3.0
    d.backward()
    assert a.grad == 3.0


@pytest.mark.parametrize("mark", [-1, 5])
def test_truncate_rejects_marks_outside_tape(mark):
    t = Tape()
    Scalar(1.0, tape=t)
    with pytest.raises(ValueError):
        t.truncate(mark)
    assert len(t) == 1


def test_scope_drops_graph_even_on_error():
    t = Tape()
    a = Scalar(1.0, tape=t)
    with t.scope() as s:
        assert s is t
        a + a
        assert len(t) == 2
    assert len(t) == 1

    with pytest.raises(RuntimeError):
        with t.scope():
            a * a
            raise RuntimeError("boom")
    assert len(t) == 1
    assert a.data == 1.0


def test_config_defaults_validate():
    cfg = EngineConfig().validate()
    assert cfg.order == "topological"
    assert cfg.display_precision == 4
    assert cfg.init_range == (-1.0, 1.0)


@pytest.mark.parametrize("kwargs", [
    {"order": "bfs"},
    {"display_precision": -1},
    {"init_low": 1.0, "init_high": 1.0},
])
def test_config_rejects_invalid(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs).validate()
