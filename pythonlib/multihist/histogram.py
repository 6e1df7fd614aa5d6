import copy
import numbers
import operator

import numpy as np

from . import _access
from .axis import AxesList
from .errors import AxesMismatch, InvalidArgument
from .linearize import bincount, linearize, linearize_many, locate, unravel
from .markers import decompose
from .storage import (
    RANKED_KINDS,
    DenseStorage,
    Double,
    Storage,
    common_storage,
    convert_storage,
    make_storage,
    storage_kind,
)


def _broadcast(x, n, what):
    try:
        return np.broadcast_to(np.asarray(x), (n,))
    except ValueError:
        raise InvalidArgument(f"{what} does not match the number of entries") from None


def _scaled_kind(kind):
    # kinds outside the promotion table scale in place
    if kind in RANKED_KINDS:
        return common_storage(kind, "double")
    return kind


class Histogram:
    """
    N-D histogram: a tuple of axes and a flat storage of cells.

    Parameters
    ----------
    axes : Axis or sequence of Axis
        At least one axis. The axes are copied.
    storage : Storage or str, optional
        Only the kind of ``storage`` matters: it is copied and reset to one
        default cell per bin, flow bins included. Defaults to ``Double()``.

    Filling uses the call operator, ``h(x, y, weight(w))``. Values landing
    in a flow bin that the axis does not have are silently dropped, while a
    wrong number of values or an unconvertible value raises InvalidArgument
    and leaves the histogram untouched.
    """

    def __init__(self, axes, storage=None):
        self._axes = AxesList(axes)
        if storage is None:
            storage = Double()
        elif isinstance(storage, str):
            storage = make_storage(storage)
        if not isinstance(storage, Storage):
            raise InvalidArgument(f"not a storage: {storage!r}")
        self._storage = storage.empty_like()
        self._storage.reset(bincount(self._axes))

    # ---------- structure ----------
    @property
    def rank(self):
        """Number of axes."""
        return len(self._axes)

    @property
    def size(self):
        """Number of cells, flow bins included."""
        return self._storage.size

    def __len__(self):
        return self.size

    @property
    def axes(self):
        return self._axes

    @property
    def storage_kind(self):
        return self._storage.kind

    def axis(self, i=0):
        """Return the ``i``-th axis."""
        if (
            isinstance(i, bool)
            or not isinstance(i, numbers.Integral)
            or not 0 <= i < self.rank
        ):
            raise InvalidArgument(f"axis index {i!r} out of range for rank {self.rank}")
        return self._axes[i]

    def reset(self):
        """Set all cells back to their default value."""
        self._storage.reset(self._storage.size)

    # ---------- filling ----------
    def _axis_values(self, values):
        ax = self._axes[0]
        if self.rank == 1 and ax.arity > 1 and len(values) == ax.arity:
            return [tuple(values)]
        if len(values) != self.rank:
            raise InvalidArgument(f"expected {self.rank} values, got {len(values)}")
        return values

    def fill(self, *args):
        """
        Add one entry.

        Positional values go to the axes in order. A ``weight(w)`` and a
        ``sample(...)`` marker may be placed at the start or end of the
        argument list.
        """
        values, w, s = decompose(args)
        values = self._axis_values(values)
        self._storage.check_fill(w, s)
        indices = [ax.index(v) for ax, v in zip(self._axes, values)]
        offset = linearize(self._axes, indices)
        if offset is None:
            return
        self._storage.fill(offset, w, s)

    __call__ = fill

    def fill_many(self, *columns, weight=None, sample=None, mask=None):
        """
        Fill with one array (or scalar) per axis.

        ``weight`` and ``sample`` are arrays of the same length, or scalars
        broadcast to it. Entries where ``mask`` is False are skipped.
        """
        ax = self._axes[0]
        if self.rank == 1 and ax.arity > 1 and len(columns) == ax.arity:
            columns = (np.column_stack(columns),)
        if len(columns) != self.rank:
            raise InvalidArgument(f"expected {self.rank} arrays, got {len(columns)}")
        arrs = [np.asarray(c) for c in columns]
        arrs = [a if a.ndim > 0 else a[None] for a in arrs]
        n = len(arrs[0])
        if any(len(a) != n for a in arrs):
            raise InvalidArgument("arrays must have equal length")

        weights = None if weight is None else _broadcast(weight, n, "weight")
        samples = None if sample is None else _broadcast(sample, n, "sample")
        if mask is not None:
            m = np.broadcast_to(np.asarray(mask, dtype=bool), (n,))
            arrs = [a[m] for a in arrs]
            weights = None if weights is None else weights[m]
            samples = None if samples is None else samples[m]
        self._storage.check_fill_many(weights, samples)

        indices = [ax.index_many(a) for ax, a in zip(self._axes, arrs)]
        offsets, ok = linearize_many(self._axes, indices)
        if not np.any(ok):
            return
        self._storage.fill_many(
            offsets[ok],
            None if weights is None else weights[ok],
            None if samples is None else samples[ok],
        )

    # ---------- access ----------
    def _offset(self, indices):
        if len(indices) == 1 and not isinstance(indices[0], numbers.Integral):
            try:
                indices = tuple(indices[0])
            except TypeError:
                raise InvalidArgument(f"invalid index {indices[0]!r}") from None
        if len(indices) != self.rank:
            raise InvalidArgument(f"expected {self.rank} indices, got {len(indices)}")
        try:
            indices = [operator.index(i) for i in indices]
        except TypeError:
            raise InvalidArgument(f"indices must be integers, got {indices!r}") from None
        return locate(self._axes, indices)

    def at(self, *indices):
        """
        Cell at the given bin indices.

        Indices may be passed one by one, as a tuple or as any iterable.
        ``-1`` and ``extent`` address the flow bins of axes that have them.
        """
        return self._storage[self._offset(indices)]

    def __getitem__(self, key):
        return self.at(key)

    def __setitem__(self, key, value):
        self._storage[self._offset((key,))] = value

    def __iter__(self):
        return iter(self._storage)

    def indexed(self, flow=False):
        """Yield ``(indices, cell)`` in storage order."""
        for offset, cell in enumerate(self._storage):
            idx = unravel(self._axes, offset)
            if not flow and any(
                i < 0 or i >= a.extent for i, a in zip(idx, self._axes)
            ):
                continue
            yield idx, cell

    def values(self, flow=False):
        """
        Cell values as an array with one dimension per axis.

        For dense storages the result is a view; writing to it changes the
        histogram.
        """
        shape = tuple(a.span for a in self._axes)
        arr = self._storage.values.reshape(shape, order="F")
        if not flow:
            arr = arr[
                tuple(
                    slice(int(a.has_underflow), int(a.has_underflow) + a.extent)
                    for a in self._axes
                )
            ]
        return arr

    def sum(self, flow=False):
        """Sum of all cells."""
        if isinstance(self._storage, DenseStorage):
            return self.values(flow).sum().item()
        total = self._storage.cell_type()
        for _, cell in self.indexed(flow):
            total += cell
        return total

    def project(self, *keep):
        """
        Sum over all axes not in ``keep`` and return a new histogram.

        The kept axes appear in the order given.
        """
        if not keep:
            raise InvalidArgument("project needs at least one axis")
        for i in keep:
            self.axis(i)
        if len(set(keep)) != len(keep):
            raise InvalidArgument("project: axes must be unique")

        out = Histogram([self._axes[i] for i in keep], self._storage)
        if isinstance(self._storage, DenseStorage):
            shape = tuple(a.span for a in self._axes)
            arr = self._storage.values.reshape(shape, order="F")
            dropped = tuple(i for i in range(self.rank) if i not in keep)
            summed = arr.sum(axis=dropped)
            order = sorted(keep)
            summed = np.transpose(summed, [order.index(k) for k in keep])
            out._storage.values[:] = summed.ravel(order="F")
        else:
            for offset, cell in enumerate(self._storage):
                idx = unravel(self._axes, offset)
                out._storage[linearize(out._axes, [idx[i] for i in keep])] += cell
        return out

    # ---------- copies and conversion ----------
    def copy(self):
        """Deep copy of axes and cells."""
        return copy.deepcopy(self)

    def __copy__(self):
        return self.copy()

    def astype(self, storage):
        """Return a new histogram with cells promoted to the kind of ``storage``."""
        cells = convert_storage(self._storage, storage_kind(storage))
        return _access.from_parts(type(self), AxesList(self._axes), cells)

    # ---------- arithmetic ----------
    def __iadd__(self, other):
        """In-place cell-wise sum. May promote the storage kind."""
        if not isinstance(other, Histogram):
            return NotImplemented
        if self._axes != other._axes:
            raise AxesMismatch("axes of histograms differ")
        kind = common_storage(self._storage, other._storage)
        rhs = other._storage
        if rhs.kind != kind:
            rhs = convert_storage(rhs, kind)
        if self._storage.kind != kind:
            _access.replace_storage(self, convert_storage(self._storage, kind))
        self._storage += rhs
        return self

    def __add__(self, other):
        if not isinstance(other, Histogram):
            return NotImplemented
        out = self.astype(common_storage(self._storage, other._storage))
        out += other
        return out

    def __radd__(self, other):
        # supports sum(list_of_hists)
        if isinstance(other, numbers.Number) and other == 0:
            return self.copy()
        return NotImplemented

    def __imul__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        self._storage *= x
        return self

    def __itruediv__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        if x == 0:
            raise InvalidArgument("division by zero")
        return self.__imul__(1.0 / x)

    def __mul__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        out = self.astype(_scaled_kind(self.storage_kind))
        out *= x
        return out

    __rmul__ = __mul__

    def __truediv__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        if x == 0:
            raise InvalidArgument("division by zero")
        return self * (1.0 / x)

    def __eq__(self, other):
        if not isinstance(other, Histogram):
            return NotImplemented
        return self._axes == other._axes and self._storage == other._storage

    __hash__ = None

    def __repr__(self):
        axes = ", ".join(repr(a) for a in self._axes)
        return f"Histogram([{axes}], storage={self.storage_kind})"


def make_histogram(*axes, storage=None):
    """Factory form of ``Histogram(axes, storage)``."""
    return Histogram(axes, storage)


def convert(h, storage):
    """Converting copy of ``h`` with cells promoted to the kind of ``storage``."""
    return h.astype(storage)
