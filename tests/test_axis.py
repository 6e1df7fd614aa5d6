import math

import numpy as np
import pytest

import multihist as mh


def test_regular_index():
    ax = mh.Regular(10, 0.0, 10.0)
    assert ax.extent == 10
    assert len(ax) == 10
    assert ax.span == 12
    assert ax.index(0.0) == 0
    assert ax.index(1.5) == 1
    assert ax.index(9.999) == 9
    assert ax.index(-0.1) == -1
    assert ax.index(10.0) == 10
    assert ax.index(math.nan) == 10
    assert ax.index(-math.inf) == -1


def test_regular_index_many_matches_scalar():
    ax = mh.Regular(10, 0.0, 10.0)
    vals = [-1.0, 0.0, 0.5, 3.2, 9.99, 10.0, 12.0, math.nan, math.inf, -math.inf]
    expected = [ax.index(v) for v in vals]
    assert ax.index_many(np.array(vals)).tolist() == expected


def test_regular_rejects_strings():
    ax = mh.Regular(10, 0.0, 10.0)
    with pytest.raises(mh.InvalidArgument):
        ax.index("1.5")
    with pytest.raises(mh.InvalidArgument):
        ax.index_many(["a", "b"])


def test_regular_bad_parameters():
    with pytest.raises(mh.InvalidArgument):
        mh.Regular(0, 0.0, 1.0)
    with pytest.raises(mh.InvalidArgument):
        mh.Regular(10, 1.0, 1.0)


def test_variable_index():
    ax = mh.Variable([0.0, 1.0, 3.0, 6.0])
    assert ax.extent == 3
    assert ax.index(0.0) == 0
    assert ax.index(1.0) == 1
    assert ax.index(2.9) == 1
    assert ax.index(5.9) == 2
    # last edge belongs to overflow
    assert ax.index(6.0) == 3
    assert ax.index(-1.0) == -1
    assert ax.index(math.nan) == 3

    vals = [-1.0, 0.0, 1.0, 2.9, 6.0, math.nan]
    assert ax.index_many(vals).tolist() == [ax.index(v) for v in vals]


def test_variable_edges_must_increase():
    with pytest.raises(mh.InvalidArgument):
        mh.Variable([0.0, 2.0, 1.0])
    with pytest.raises(mh.InvalidArgument):
        mh.Variable([1.0])


def test_integer_index():
    ax = mh.Integer(-2, 3)
    assert ax.extent == 5
    assert ax.index(-2) == 0
    assert ax.index(2) == 4
    assert ax.index(3) == 5
    assert ax.index(-3) == -1
    assert ax.index(0.7) == 2
    assert ax.index(-2.5) == -1
    assert ax.index(math.nan) == 5

    vals = [-3, -2, 0.7, 2, 3, math.nan]
    assert ax.index_many(vals).tolist() == [-1, 0, 2, 4, 5, 5]


def test_category_index():
    ax = mh.Category(["a", "b"])
    assert not ax.has_underflow
    assert ax.has_overflow
    assert ax.span == 3
    assert ax.index("b") == 1
    assert ax.index("z") == 2
    with pytest.raises(mh.InvalidArgument):
        ax.index(1)

    ints = mh.Category([1, 5])
    assert ints.index(5) == 1
    assert ints.index_many([5, 1, 7]).tolist() == [1, 0, 2]
    with pytest.raises(mh.InvalidArgument):
        ints.index("1")


def test_category_labels_unique():
    with pytest.raises(mh.InvalidArgument):
        mh.Category(["a", "a"])
    with pytest.raises(mh.InvalidArgument):
        mh.Category(["a", 1])


def test_radial_index():
    ax = mh.Radial(10, 10.0)
    assert ax.arity == 2
    assert not ax.has_underflow
    assert ax.index((3.0, 4.0)) == 5
    assert ax.index((0.5, 0.0)) == 0
    assert ax.index((6.0, 8.0)) == 10
    with pytest.raises(mh.InvalidArgument):
        ax.index(5.0)
    with pytest.raises(mh.InvalidArgument):
        ax.index((1.0, 2.0, 3.0))

    xy = np.array([[3.0, 4.0], [0.5, 0.0], [6.0, 8.0]])
    assert ax.index_many(xy).tolist() == [5, 0, 10]


def test_axis_equality_compares_configuration():
    assert mh.Regular(10, 0, 10) == mh.Regular(10, 0, 10)
    assert mh.Regular(10, 0, 10) != mh.Regular(10, 0, 10, underflow=False)
    assert mh.Regular(10, 0, 10) != mh.Regular(10, 0, 11)
    assert mh.Regular(10, 0, 10) != mh.Regular(10, 0, 10, label="x")
    assert mh.Regular(10, 0, 10) != mh.Variable(np.linspace(0, 10, 11))
    assert mh.Variable([0, 1, 2]) == mh.Variable([0.0, 1.0, 2.0])
    assert mh.Category(["a", "b"]) != mh.Category(["b", "a"])


def test_axes_list():
    axes = mh.AxesList(mh.Regular(2, 0, 2))
    assert axes.rank == 1
    assert axes.shape == (2,)
    with pytest.raises(mh.InvalidArgument):
        mh.AxesList([])
    with pytest.raises(mh.InvalidArgument):
        mh.AxesList([1, 2])


def test_axes_list_copies_axes():
    ax = mh.Regular(2, 0, 2)
    axes = mh.AxesList([ax])
    ax.label = "changed"
    assert axes[0].label == ""
