"""
Flat-offset arithmetic shared by fill and bin access.

Every axis owns a contiguous span of ``extent + has_underflow +
has_overflow`` slots: underflow is slot 0, the in-range bins follow, and
overflow is the last slot. Offsets are composed in axis order with a running
stride that starts at 1, so the first axis varies fastest.
"""
import numpy as np

from .errors import OutOfRange


def bincount(axes):
    """Total number of cells needed for ``axes``, flow bins included."""
    n = 1
    for a in axes:
        n *= a.span
    return n


def _slot(axis, idx):
    if 0 <= idx < axis.extent:
        return idx + int(axis.has_underflow)
    if idx == -1 and axis.has_underflow:
        return 0
    if idx == axis.extent and axis.has_overflow:
        return axis.span - 1
    return None


def linearize(axes, indices):
    """
    Compose per-axis indices into one offset.

    Returns None if any index points at a flow bin that the axis does not
    have; the caller then discards the entry.
    """
    offset = 0
    stride = 1
    for a, idx in zip(axes, indices):
        slot = _slot(a, idx)
        if slot is None:
            return None
        offset += slot * stride
        stride *= a.span
    return offset


def locate(axes, indices):
    """Like ``linearize``, but raises OutOfRange instead of discarding."""
    offset = 0
    stride = 1
    for k, (a, idx) in enumerate(zip(axes, indices)):
        slot = _slot(a, idx)
        if slot is None:
            lo = -1 if a.has_underflow else 0
            hi = a.extent if a.has_overflow else a.extent - 1
            raise OutOfRange(
                f"index {idx} out of bounds for axis {k} (valid: {lo}..{hi})"
            )
        offset += slot * stride
        stride *= a.span
    return offset


def linearize_many(axes, index_arrays):
    """
    Vectorized ``linearize``.

    Returns ``(offsets, ok)``; entries where ``ok`` is False must be
    discarded and their offsets are meaningless.
    """
    arrays = [np.asarray(idx, dtype=np.int64) for idx in index_arrays]
    offsets = np.zeros_like(arrays[0])
    ok = np.ones(arrays[0].shape, dtype=bool)
    stride = 1
    for a, idx in zip(axes, arrays):
        lo = -1 if a.has_underflow else 0
        hi = a.extent + 1 if a.has_overflow else a.extent
        ok &= (idx >= lo) & (idx < hi)
        offsets += (idx + int(a.has_underflow)) * stride
        stride *= a.span
    return offsets, ok


def unravel(axes, offset):
    """Inverse of ``linearize``: per-axis indices of a valid offset."""
    out = []
    for a in axes:
        offset, slot = divmod(offset, a.span)
        out.append(slot - int(a.has_underflow))
    return tuple(out)
