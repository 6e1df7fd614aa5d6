import numpy as np
import pytest

import multihist as mh
from multihist.linearize import bincount, linearize, linearize_many, locate, unravel


def make_axes():
    # spans 4 (both flow bins) and 3 (no flow bins)
    return mh.AxesList(
        [
            mh.Regular(2, 0, 2),
            mh.Regular(3, 0, 3, underflow=False, overflow=False),
        ]
    )


def test_bincount_includes_flow_bins():
    assert bincount(make_axes()) == 12
    assert bincount([mh.Category(["a", "b"], overflow=False)]) == 2


def test_linearize_layout():
    axes = make_axes()
    # underflow is slot 0 of the first axis
    assert linearize(axes, (-1, 0)) == 0
    assert linearize(axes, (0, 0)) == 1
    assert linearize(axes, (1, 0)) == 2
    assert linearize(axes, (2, 0)) == 3
    assert linearize(axes, (0, 1)) == 5
    assert linearize(axes, (1, 2)) == 10


def test_first_axis_varies_fastest():
    axes = make_axes()
    assert linearize(axes, (1, 1)) - linearize(axes, (0, 1)) == 1
    assert linearize(axes, (0, 2)) - linearize(axes, (0, 1)) == 4


def test_linearize_discards_missing_flow_bins():
    axes = make_axes()
    assert linearize(axes, (0, -1)) is None
    assert linearize(axes, (0, 3)) is None
    # a valid index on another axis does not rescue the entry
    assert linearize(axes, (2, 3)) is None


def test_locate_raises_out_of_range():
    axes = make_axes()
    assert locate(axes, (2, 2)) == 11
    for bad in [(0, 3), (0, -1), (3, 0), (-2, 0)]:
        with pytest.raises(mh.OutOfRange):
            locate(axes, bad)


def test_linearize_many_matches_scalar():
    axes = make_axes()
    ia = np.array([-1, 0, 1, 2, 0, 1, 2, -1])
    ib = np.array([0, 1, 2, 0, -1, 3, 2, 2])
    offsets, ok = linearize_many(axes, [ia, ib])
    for k, (a, b) in enumerate(zip(ia.tolist(), ib.tolist())):
        expected = linearize(axes, (a, b))
        if expected is None:
            assert not ok[k]
        else:
            assert ok[k]
            assert offsets[k] == expected


def test_unravel_inverts_linearize():
    axes = make_axes()
    assert unravel(axes, 10) == (1, 2)
    assert unravel(axes, 0) == (-1, 0)
    for offset in range(bincount(axes)):
        assert linearize(axes, unravel(axes, offset)) == offset
