import copy
import math
import numbers

import numpy as np

from .errors import InvalidArgument


def _as_real(value, axis):
    if not isinstance(value, numbers.Real):
        raise InvalidArgument(
            f"{type(axis).__name__} axis expects a real number, got {value!r}"
        )
    return float(value)


def _as_real_array(values, axis):
    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError):
        raise InvalidArgument(
            f"{type(axis).__name__} axis expects real numbers"
        ) from None
    return arr if arr.ndim > 0 else arr[None]


class Axis:
    """
    Binning rule of one histogram dimension.

    Subclasses map a value to an integer index: ``[0, extent)`` for in-range
    values, ``-1`` for underflow and ``extent`` for overflow. The flow
    indices are only stored when ``has_underflow`` / ``has_overflow`` is set;
    otherwise a fill landing there is discarded.
    """

    arity = 1

    def __init__(self, extent, underflow=True, overflow=True, label=""):
        self._extent = int(extent)
        self._has_underflow = bool(underflow)
        self._has_overflow = bool(overflow)
        self.label = str(label)

    # read-only: the histogram's storage size is derived from these
    @property
    def extent(self):
        return self._extent

    @property
    def has_underflow(self):
        return self._has_underflow

    @property
    def has_overflow(self):
        return self._has_overflow

    @property
    def span(self):
        """Number of storage slots, flow bins included."""
        return self.extent + int(self.has_underflow) + int(self.has_overflow)

    def __len__(self):
        return self.extent

    def index(self, value):
        raise NotImplementedError

    def index_many(self, values):
        """Vectorized ``index``; subclasses override with numpy versions."""
        return np.fromiter((self.index(v) for v in values), dtype=np.int64)

    def _config(self):
        return ()

    def __eq__(self, other):
        if not isinstance(other, Axis):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.extent == other.extent
            and self.has_underflow == other.has_underflow
            and self.has_overflow == other.has_overflow
            and self.label == other.label
            and self._config() == other._config()
        )

    def __hash__(self):
        return hash(
            (type(self).__name__, self.extent, self.has_underflow,
             self.has_overflow, self.label, self._config())
        )

    def __repr__(self):
        args = ", ".join(repr(c) for c in self._config())
        flags = f"underflow={self.has_underflow}, overflow={self.has_overflow}"
        return f"{type(self).__name__}({args}, {flags})"


class Regular(Axis):
    """Equal-width bins over ``[start, stop)``."""

    def __init__(self, bins, start, stop, underflow=True, overflow=True, label=""):
        if int(bins) <= 0:
            raise InvalidArgument("bins must be positive")
        start, stop = float(start), float(stop)
        if not start < stop:
            raise InvalidArgument("start must be smaller than stop")
        super().__init__(bins, underflow, overflow, label)
        self.start = start
        self.stop = stop

    def _config(self):
        return (self.extent, self.start, self.stop)

    def index(self, value):
        x = _as_real(value, self)
        z = (x - self.start) / (self.stop - self.start)
        # NaN fails both comparisons and lands in overflow
        if z < 1:
            if z >= 0:
                return min(int(z * self.extent), self.extent - 1)
            return -1
        return self.extent

    def index_many(self, values):
        x = _as_real_array(values, self)
        z = (x - self.start) / (self.stop - self.start)
        over = ~(z < 1)
        under = z < 0
        inner = np.floor(np.clip(np.where(over, 0.0, z), 0.0, 1.0) * self.extent)
        inner = np.minimum(inner.astype(np.int64), self.extent - 1)
        return np.where(over, self.extent, np.where(under, -1, inner))


class Variable(Axis):
    """
    Bins given by explicit edges.

    Bins are left-closed and right-open, ``[e[i], e[i+1])``; the last edge
    itself belongs to the overflow bin.
    """

    def __init__(self, edges, underflow=True, overflow=True, label=""):
        try:
            edges = np.array(edges, dtype=float, copy=True)
        except (TypeError, ValueError):
            raise InvalidArgument("edges must be real numbers") from None
        if edges.ndim != 1 or len(edges) < 2:
            raise InvalidArgument("edges must have at least 2 entries")
        if np.any(np.diff(edges) <= 0):
            raise InvalidArgument("edges must be strictly increasing")
        super().__init__(len(edges) - 1, underflow, overflow, label)
        self.edges = edges

    def _config(self):
        return tuple(self.edges.tolist())

    def index(self, value):
        x = _as_real(value, self)
        if math.isnan(x):
            return self.extent
        return int(np.searchsorted(self.edges, x, side="right")) - 1

    def index_many(self, values):
        x = _as_real_array(values, self)
        # searchsorted places NaN past the last edge
        return np.searchsorted(self.edges, x, side="right").astype(np.int64) - 1


class Integer(Axis):
    """One bin per integer in ``[start, stop)``; real values are floored."""

    def __init__(self, start, stop, underflow=True, overflow=True, label=""):
        start, stop = int(start), int(stop)
        if not start < stop:
            raise InvalidArgument("start must be smaller than stop")
        super().__init__(stop - start, underflow, overflow, label)
        self.start = start
        self.stop = stop

    def _config(self):
        return (self.start, self.stop)

    def index(self, value):
        if isinstance(value, numbers.Integral):
            i = int(value) - self.start
        else:
            x = _as_real(value, self)
            if math.isnan(x) or x >= self.stop:
                return self.extent
            if x < self.start:
                return -1
            i = math.floor(x) - self.start
        if i < 0:
            return -1
        return min(i, self.extent)

    def index_many(self, values):
        x = _as_real_array(values, self)
        over = ~(x < self.stop)
        under = x < self.start
        inner = np.floor(np.where(over | under, self.start, x)).astype(np.int64)
        return np.where(over, self.extent, np.where(under, -1, inner - self.start))


class Category(Axis):
    """
    One bin per label.

    Labels are either all strings or all integers. Values that are not a
    known label map to the overflow bin. There is never an underflow bin.
    """

    def __init__(self, labels, overflow=True, label=""):
        labels = list(labels)
        if not labels:
            raise InvalidArgument("need at least one category")
        if all(isinstance(x, str) for x in labels):
            self._value_type = str
        elif all(isinstance(x, numbers.Integral) for x in labels):
            self._value_type = numbers.Integral
            labels = [int(x) for x in labels]
        else:
            raise InvalidArgument("categories must be all strings or all integers")
        if len(set(labels)) != len(labels):
            raise InvalidArgument("categories must be unique")
        super().__init__(len(labels), False, overflow, label)
        self.labels = tuple(labels)
        self._lookup = {x: i for i, x in enumerate(self.labels)}

    def _config(self):
        return self.labels

    def index(self, value):
        if not isinstance(value, self._value_type):
            raise InvalidArgument(
                f"Category axis expects {self._value_type.__name__} labels, got {value!r}"
            )
        if self._value_type is numbers.Integral:
            value = int(value)
        return self._lookup.get(value, self.extent)

    def index_many(self, values):
        values = np.asarray(values)
        values = values if values.ndim > 0 else values[None]
        return np.fromiter((self.index(v.item()) for v in values), dtype=np.int64,
                           count=len(values))


class Radial(Axis):
    """
    Regular bins over the Euclidean norm of an ``arity``-tuple.

    The axis consumes ``arity`` values per fill, passed as one tuple. The
    norm is never negative, so there is no underflow bin.
    """

    def __init__(self, bins, stop, arity=2, overflow=True, label=""):
        if int(bins) <= 0:
            raise InvalidArgument("bins must be positive")
        if float(stop) <= 0:
            raise InvalidArgument("stop must be positive")
        if int(arity) < 2:
            raise InvalidArgument("arity must be at least 2")
        super().__init__(bins, False, overflow, label)
        self.stop = float(stop)
        self.arity = int(arity)

    def _config(self):
        return (self.extent, self.stop, self.arity)

    def index(self, value):
        if isinstance(value, (str, bytes)) or not hasattr(value, "__len__"):
            raise InvalidArgument(f"Radial axis expects a tuple of {self.arity} values")
        if len(value) != self.arity:
            raise InvalidArgument(
                f"Radial axis expects {self.arity} values, got {len(value)}"
            )
        z = math.hypot(*(_as_real(v, self) for v in value)) / self.stop
        if z < 1:
            return min(int(z * self.extent), self.extent - 1)
        return self.extent

    def index_many(self, values):
        x = _as_real_array(values, self)
        if x.ndim != 2 or x.shape[1] != self.arity:
            raise InvalidArgument(f"Radial axis expects an (n, {self.arity}) array")
        z = np.linalg.norm(x, axis=1) / self.stop
        over = ~(z < 1)
        inner = np.floor(np.where(over, 0.0, z) * self.extent).astype(np.int64)
        return np.where(over, self.extent, np.minimum(inner, self.extent - 1))


class AxesList(tuple):
    """Ordered, non-empty, immutable sequence of axes."""

    def __new__(cls, axes):
        if isinstance(axes, Axis):
            axes = (axes,)
        # copy so external modifications don't affect us
        axes = tuple(copy.deepcopy(a) for a in axes)
        if len(axes) == 0:
            raise InvalidArgument("need at least one axis")
        for a in axes:
            if not isinstance(a, Axis):
                raise InvalidArgument(f"not an axis: {a!r}")
        return super().__new__(cls, axes)

    @property
    def rank(self):
        return len(self)

    @property
    def shape(self):
        return tuple(a.extent for a in self)

    def __repr__(self):
        return f"AxesList({', '.join(repr(a) for a in self)})"
