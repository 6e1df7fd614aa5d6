import numpy as np
import pytest

import multihist as mh
from multihist import sample, weight
from multihist.accumulators import WeightedSum


def filled(storage=None, entries=((0.5, 0.5), (1.5, 0.5), (1.5, 1.5), (-1.0, 3.0))):
    h = mh.Histogram([mh.Regular(2, 0, 2), mh.Regular(2, 0, 2)], storage)
    for e in entries:
        h(*e)
    return h


def test_iadd_requires_equal_axes():
    a = filled()
    b = mh.Histogram([mh.Regular(2, 0, 2), mh.Regular(3, 0, 2)])
    before = a.copy()
    with pytest.raises(mh.AxesMismatch):
        a += b
    with pytest.raises(mh.InvalidArgument):
        a += b
    assert a == before

    flow = mh.Histogram([mh.Regular(2, 0, 2), mh.Regular(2, 0, 2, overflow=False)])
    with pytest.raises(mh.AxesMismatch):
        a + flow


def test_iadd_is_cellwise_sum():
    a = filled()
    b = filled(entries=((0.5, 0.5), (0.5, 1.5)))
    expected = [x + y for x, y in zip(list(a), list(b))]
    a += b
    assert list(a) == expected
    assert a.at(0, 0) == 2


def test_add_returns_new_histogram():
    a = filled()
    b = filled()
    a_before = a.copy()
    c = a + b
    assert a == a_before
    assert c.at(1, 1) == 2
    assert c == a * 2


def test_add_promotes_storage():
    counts = filled(mh.storage.Int64())
    weighted = mh.Histogram([mh.Regular(2, 0, 2), mh.Regular(2, 0, 2)], mh.storage.Weight())
    weighted(0.5, 0.5, weight(2.0))

    c = counts + weighted
    assert c.storage_kind == "weight"
    assert c.at(0, 0) == WeightedSum(3.0, 5.0)
    assert c.at(1, 1) == WeightedSum(1.0, 1.0)
    assert counts.storage_kind == "int64"

    d = weighted + counts
    assert d == c


def test_iadd_promotes_in_place():
    a = filled(mh.storage.Int64())
    b = filled(mh.storage.Double())
    b[0, 0] = 0.5
    a += b
    assert a.storage_kind == "double"
    assert a.at(0, 0) == 1.5


def test_scale_round_trip():
    h = filled(mh.storage.Int64())
    for x in (2, 4.0, 0.5):
        assert (h * x) / x == h
        assert (x * h) / x == h


def test_scale_float_cells_within_tolerance():
    h = filled(entries=((0.5, 0.5, weight(0.1)), (1.5, 0.5, weight(0.7))))
    r = (h * 3.0) / 3.0
    assert np.allclose(r.values(flow=True), h.values(flow=True))


def test_scale_promotes_int_storage():
    h = filled(mh.storage.Int64())
    assert (h * 2).storage_kind == "double"
    assert (h / 2).at(0, 0) == 0.5
    h *= 3
    assert h.storage_kind == "int64"
    assert h.at(0, 0) == 3
    h /= 2
    assert h.storage_kind == "double"
    assert h.at(0, 0) == 1.5


def test_scale_weighted_cells():
    h = mh.Histogram(mh.Regular(2, 0, 2), mh.storage.Weight())
    h(0.5, weight(2.0))
    h *= 3.0
    assert h.at(0) == WeightedSum(6.0, 36.0)


def test_division_by_zero():
    h = filled()
    with pytest.raises(mh.InvalidArgument):
        h / 0
    with pytest.raises(mh.InvalidArgument):
        h /= 0.0


def test_non_scalar_operands():
    h = filled()
    with pytest.raises(TypeError):
        h * "a"
    with pytest.raises(TypeError):
        h + 1
    with pytest.raises(TypeError):
        h *= h


def test_sum_of_histograms():
    hs = [filled(), filled(entries=((0.5, 0.5),)), filled(entries=((1.5, 1.5),))]
    total = sum(hs)
    assert total == hs[0] + hs[1] + hs[2]
    assert total.at(0, 0) == 2
    assert total is not hs[0]


def test_profiles():
    a = mh.Histogram(mh.Regular(2, 0, 2), mh.storage.Mean())
    a(0.5, sample(1.0))
    a(0.5, sample(2.0))
    b = mh.Histogram(mh.Regular(2, 0, 2), mh.storage.Mean())
    b(0.5, sample(3.0))

    c = a + b
    assert c.at(0).count == 3
    assert c.at(0).value == pytest.approx(2.0)
    assert c.at(0).variance == pytest.approx(1.0)

    scaled = a * 2.0
    assert scaled.storage_kind == "mean"
    assert scaled.at(0).value == pytest.approx(3.0)

    with pytest.raises(mh.InvalidArgument):
        a + mh.Histogram(mh.Regular(2, 0, 2))
    assert a != mh.Histogram(mh.Regular(2, 0, 2))


def test_equality_across_storage_kinds():
    assert filled(mh.storage.Int64()) == filled(mh.storage.Double())
    assert filled(mh.storage.Int64()) == filled(mh.storage.Weight())
    assert filled(mh.storage.Double()) != filled(mh.storage.Weight(), entries=((0.5, 0.5, weight(2.0)),))


def test_astype_and_convert():
    h = filled(mh.storage.Int64())
    d = h.astype("double")
    assert d.storage_kind == "double"
    assert d == h
    w = mh.convert(h, mh.storage.Weight())
    assert w.storage_kind == "weight"
    assert w.at(0, 0) == WeightedSum(1.0, 1.0)
    w(0.5, 0.5)
    assert h.at(0, 0) == 1
    with pytest.raises(mh.InvalidArgument):
        w.astype("int64")
