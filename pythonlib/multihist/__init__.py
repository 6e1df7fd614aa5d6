from . import accumulators, storage
from .errors import AxesMismatch, InvalidArgument, OutOfRange
from .axis import AxesList, Axis, Category, Integer, Radial, Regular, Variable
from .markers import sample, weight
from .histogram import Histogram, convert, make_histogram
from .merging.merge import merge, merge_mappings
from .parallel import fill_parallel
from .config import (
    AxisConfig,
    HistConfig,
    build_histogram,
    histograms_from_dict,
    histograms_from_yaml,
)

__all__ = [name for name in dir() if not name.startswith("_")]
