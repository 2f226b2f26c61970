import pytest

from sudoku_engine.candidates import CandidateSet


@pytest.mark.parametrize("mask", [0, 1, 0b101, 0x1FF, 0xFFFF, (1 << 32) - 1])
def test_from_bits_round_trip(mask):
    assert CandidateSet.from_bits(mask).to_bits() == mask


def test_negative_mask_rejected():
    with pytest.raises(ValueError):
        CandidateSet.from_bits(-1)


def test_union_intersect_commutative_and_associative():
    a = CandidateSet.of(0, 1, 4)
    b = CandidateSet.of(1, 2)
    c = CandidateSet.of(2, 4, 8)

    assert a.union(b) == b.union(a)
    assert a.intersect(b) == b.intersect(a)
    assert a.union(b).union(c) == a.union(b.union(c))
    assert a.intersect(b).intersect(c) == a.intersect(b.intersect(c))
    assert a | b == CandidateSet.of(0, 1, 2, 4)
    assert a & c == CandidateSet.of(4)


def test_subtract_then_contains():
    a = CandidateSet.full(9)
    removed = CandidateSet.of(2, 7)
    rest = a.subtract(removed)
    for s in removed.set_symbols():
        assert not rest.contains(s)
    assert rest.count() == 7
    assert a.count() == 9  # receiver unchanged


def test_set_symbols_is_lazy_and_ordered():
    cs = CandidateSet.of(8, 0, 3)
    it = cs.set_symbols()
    assert next(it) == 0
    assert list(it) == [3, 8]
    assert list(cs) == [0, 3, 8]


def test_contains_outside_alphabet_is_false():
    cs = CandidateSet.full(4)
    assert not cs.contains(-1)
    assert not cs.contains(4)
    assert not cs.contains(100)
    assert -1 not in cs


def test_without_returns_new_set():
    cs = CandidateSet.of(1, 2)
    smaller = cs.without(1)
    assert smaller == CandidateSet.of(2)
    assert cs == CandidateSet.of(1, 2)
    assert smaller.without(2).is_empty()
    assert len(CandidateSet()) == 0
