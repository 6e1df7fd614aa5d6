import copy
import numbers

import numpy as np

from . import accumulators
from .errors import InvalidArgument

# Promotion order of kinds that can be converted into each other.
# Kinds outside this list only combine with themselves.
RANKED_KINDS = ("int64", "double", "weight")


class Storage:
    """
    Flat container of histogram cells, indexed by offset.

    Subclasses provide item access, ``reset``, cell-wise ``+=``, scalar
    ``*=`` and the fill hooks. Equality is cell-wise; storages of different
    kinds are compared after promotion to their common kind.
    """

    kind = None
    accepts_weight = True
    sample_arity = 0

    @property
    def size(self):
        raise NotImplementedError

    def __len__(self):
        return self.size

    def reset(self, n):
        raise NotImplementedError

    def empty_like(self):
        """New storage of the same kind with zero cells."""
        raise NotImplementedError

    @property
    def values(self):
        """Flat numpy array with the value of each cell."""
        raise NotImplementedError

    def _equal(self, other):
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, Storage):
            return NotImplemented
        if self.size != other.size:
            return False
        try:
            kind = common_storage(self, other)
        except InvalidArgument:
            return False
        a = self if self.kind == kind else convert_storage(self, kind)
        b = other if other.kind == kind else convert_storage(other, kind)
        return a._equal(b)

    __hash__ = None

    def check_fill(self, weight, sample):
        """Raise InvalidArgument unless ``fill`` accepts this weight and sample."""
        if weight is not None:
            if not self.accepts_weight:
                raise InvalidArgument(f"{self.kind} storage does not accept weights")
            if not isinstance(weight, numbers.Real):
                raise InvalidArgument(f"weight must be a real number, got {weight!r}")
        if self.sample_arity == 0:
            if sample:
                raise InvalidArgument(f"{self.kind} storage does not accept samples")
        else:
            if len(sample) != self.sample_arity:
                raise InvalidArgument(
                    f"{self.kind} storage requires a sample of {self.sample_arity} value(s)"
                )
            for s in sample:
                if not isinstance(s, numbers.Real):
                    raise InvalidArgument(f"sample must be real numbers, got {s!r}")

    def check_fill_many(self, weights, samples):
        if weights is not None:
            if not self.accepts_weight:
                raise InvalidArgument(f"{self.kind} storage does not accept weights")
            if weights.dtype.kind not in "biuf":
                raise InvalidArgument("weights must be real numbers")
        if self.sample_arity == 0:
            if samples is not None:
                raise InvalidArgument(f"{self.kind} storage does not accept samples")
        else:
            if samples is None:
                raise InvalidArgument(f"{self.kind} storage requires samples")
            if samples.dtype.kind not in "biuf":
                raise InvalidArgument("samples must be real numbers")


class DenseStorage(Storage):
    """
    Numeric cells in one numpy array.

    Parameters
    ----------
    dtype : numpy dtype-like, default float
        Integer dtypes, signed or not, are stored as int64 (the ``int64``
        kind); floating dtypes give the ``double`` kind.
    """

    sample_arity = 0

    def __init__(self, dtype=np.float64, size=0):
        self.dtype = np.dtype(dtype)
        if self.dtype.kind not in "iuf":
            raise InvalidArgument(f"unsupported storage dtype {self.dtype}")
        if self.dtype.kind in "iu":
            self.dtype = np.dtype(np.int64)
        self._values = np.zeros(int(size), dtype=self.dtype)

    @property
    def kind(self):
        return "double" if self.dtype.kind == "f" else "int64"

    @property
    def size(self):
        return len(self._values)

    @property
    def values(self):
        return self._values

    def reset(self, n):
        self._values = np.zeros(int(n), dtype=self.dtype)

    def empty_like(self):
        return DenseStorage(self.dtype)

    def _promote(self, dtype):
        out_dtype = np.result_type(self.dtype, dtype)
        if self.dtype != out_dtype:
            self._values = self._values.astype(out_dtype, copy=True)
            self.dtype = out_dtype

    def _check_value(self, value):
        if not isinstance(value, numbers.Real):
            raise InvalidArgument(f"cell value must be a real number, got {value!r}")
        if self.dtype.kind != "f" and not float(value).is_integer():
            raise InvalidArgument(f"{self.kind} storage holds integers, got {value!r}")

    def __getitem__(self, offset):
        return self._values[offset].item()

    def __setitem__(self, offset, value):
        self._check_value(value)
        self._values[offset] = value

    def __iter__(self):
        return iter(self._values.tolist())

    def _equal(self, other):
        return np.array_equal(self._values, other._values)

    def check_fill(self, weight, sample):
        super().check_fill(weight, sample)
        if weight is not None:
            self._check_value(weight)

    def check_fill_many(self, weights, samples):
        super().check_fill_many(weights, samples)
        if weights is not None and self.dtype.kind != "f":
            if not np.all(np.mod(weights, 1) == 0):
                raise InvalidArgument(f"{self.kind} storage holds integers")

    def fill(self, offset, weight=None, sample=()):
        self._values[offset] += 1 if weight is None else weight

    def fill_many(self, offsets, weights=None, samples=None):
        # accumulate via bincount
        if weights is None:
            add = np.bincount(offsets, minlength=self.size)
        else:
            add = np.bincount(offsets, weights=weights, minlength=self.size)
        self._values += add.astype(self.dtype, copy=False)

    def __iadd__(self, other):
        """In-place cell-wise sum. May upcast the dtype."""
        if not isinstance(other, DenseStorage):
            return NotImplemented
        if other.size != self.size:
            raise InvalidArgument(f"storage sizes differ: {self.size} vs {other.size}")
        self._promote(other.dtype)
        self._values += other._values.astype(self.dtype, copy=False)
        return self

    def __imul__(self, x):
        """Scale every cell. Integer cells are promoted to float unless ``x`` is integral."""
        if not isinstance(x, numbers.Real):
            return NotImplemented
        self._promote(np.int64 if isinstance(x, numbers.Integral) else np.float64)
        self._values *= x
        return self

    def __repr__(self):
        return f"DenseStorage(dtype={self.dtype}, size={self.size})"


class AccumulatorStorage(Storage):
    """Cells are accumulator objects; item access returns the live cell."""

    def __init__(self, cell_type, size=0):
        self.cell_type = cell_type
        self._cells = [cell_type() for _ in range(int(size))]

    @property
    def kind(self):
        return self.cell_type.kind

    @property
    def accepts_weight(self):
        return self.cell_type.accepts_weight

    @property
    def sample_arity(self):
        return self.cell_type.sample_arity

    @property
    def size(self):
        return len(self._cells)

    @property
    def values(self):
        return np.array([c.value for c in self._cells], dtype=float)

    def reset(self, n):
        self._cells = [self.cell_type() for _ in range(int(n))]

    def empty_like(self):
        return AccumulatorStorage(self.cell_type)

    def __getitem__(self, offset):
        return self._cells[offset]

    def __setitem__(self, offset, value):
        if not isinstance(value, self.cell_type):
            raise InvalidArgument(
                f"{self.kind} storage holds {self.cell_type.__name__} cells, got {value!r}"
            )
        self._cells[offset] = copy.copy(value)

    def __iter__(self):
        return iter(self._cells)

    def _equal(self, other):
        return self._cells == other._cells

    def fill(self, offset, weight=None, sample=()):
        cell = self._cells[offset]
        if weight is None:
            cell.fill(*sample)
        else:
            cell.fill(*sample, weight=weight)

    def fill_many(self, offsets, weights=None, samples=None):
        for k, offset in enumerate(offsets.tolist()):
            sample = () if samples is None else (samples[k].item(),)
            weight = None if weights is None else weights[k].item()
            self.fill(offset, weight, sample)

    def __iadd__(self, other):
        if not isinstance(other, AccumulatorStorage):
            return NotImplemented
        if other.cell_type is not self.cell_type:
            raise InvalidArgument(f"cannot add {other.kind} storage to {self.kind} storage")
        if other.size != self.size:
            raise InvalidArgument(f"storage sizes differ: {self.size} vs {other.size}")
        for a, b in zip(self._cells, other._cells):
            a += b
        return self

    def __imul__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        for c in self._cells:
            c *= x
        return self

    def __repr__(self):
        return f"AccumulatorStorage({self.cell_type.__name__}, size={self.size})"


def Int64():
    """Integer counts."""
    return DenseStorage(np.int64)


def Double():
    """Floating point counts; the default."""
    return DenseStorage(np.float64)


def Weight():
    """Sum of weights and sum of squared weights per cell."""
    return AccumulatorStorage(accumulators.WeightedSum)


def Mean():
    """Profile: mean of one sample value per cell."""
    return AccumulatorStorage(accumulators.Mean)


def WeightedMean():
    """Profile with weighted samples."""
    return AccumulatorStorage(accumulators.WeightedMean)


_FACTORIES = {
    "int64": Int64,
    "double": Double,
    "weight": Weight,
    "mean": Mean,
    "weighted_mean": WeightedMean,
}
STORAGE_KINDS = tuple(_FACTORIES)


def storage_kind(storage):
    """Kind name of a storage instance, or the name itself."""
    if isinstance(storage, Storage):
        return storage.kind
    if isinstance(storage, str) and storage in _FACTORIES:
        return storage
    raise InvalidArgument(f"unknown storage kind {storage!r}")


def make_storage(kind, size=0):
    out = _FACTORIES[storage_kind(kind)]()
    out.reset(size)
    return out


def common_storage(a, b):
    """Kind able to hold the cells of both ``a`` and ``b``."""
    ka, kb = storage_kind(a), storage_kind(b)
    if ka == kb:
        return ka
    if ka in RANKED_KINDS and kb in RANKED_KINDS:
        return max(ka, kb, key=RANKED_KINDS.index)
    raise InvalidArgument(f"no common storage for {ka!r} and {kb!r}")


def convert_storage(storage, kind):
    """Return a new storage of ``kind`` holding the promoted cells of ``storage``."""
    kind = storage_kind(kind)
    if storage.kind == kind:
        return copy.deepcopy(storage)
    if common_storage(storage, kind) != kind:
        raise InvalidArgument(f"cannot convert {storage.kind} storage to {kind}")
    out = make_storage(kind, storage.size)
    if kind == "double":
        out.values[:] = storage.values
    else:
        for offset, value in enumerate(storage):
            out[offset] = accumulators.WeightedSum(value)
    return out
