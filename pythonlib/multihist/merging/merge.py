from __future__ import annotations
import copy
import numbers
from typing import Any, Dict, Hashable, Iterable, List

from ..errors import AxesMismatch, InvalidArgument
from ..histogram import Histogram


def merge(histograms: Iterable[Histogram]) -> Histogram:
    """Sum of histograms with equal axes, as a new histogram."""
    hists = list(histograms)
    if not hists:
        raise InvalidArgument("merge: empty histogram list")
    out = hists[0].copy()
    for h in hists[1:]:
        out += h
    return out


def _merge_leaf(a: Any, b: Any, key: Hashable | None) -> Any:
    # Histogram: cell-wise sum, promoting storages if needed
    if isinstance(a, Histogram) and isinstance(b, Histogram):
        try:
            return a + b
        except AxesMismatch:
            raise AxesMismatch(f"axes of histograms differ at {key!r}") from None

    # counters kept next to histograms (e.g. number of events): sum
    if (
        isinstance(a, numbers.Real)
        and isinstance(b, numbers.Real)
        and not isinstance(a, bool)
        and not isinstance(b, bool)
    ):
        return a + b

    raise TypeError(
        f"cannot merge values of type {type(a)} and {type(b)} at key {key!r}"
    )


def _merge_any(a: Any, b: Any, key: Hashable | None) -> Any:
    if isinstance(a, dict) and isinstance(b, dict):
        out: Dict[Any, Any] = {}
        for k in list(a) + [k for k in b if k not in a]:
            if k in a and k in b:
                out[k] = _merge_any(a[k], b[k], k)
            elif k in a:
                out[k] = copy.deepcopy(a[k])
            else:
                out[k] = copy.deepcopy(b[k])
        return out
    return _merge_leaf(a, b, key)


def merge_mappings(states: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge dicts of histograms filled independently, e.g. one per worker.

    Nested dicts are merged key by key; keys present in one state only are
    copied. Leaves must be histograms or plain counters.
    """
    if not states:
        raise InvalidArgument("merge_mappings: empty state list")

    acc: Dict[str, Any] = copy.deepcopy(states[0])
    for st in states[1:]:
        acc = _merge_any(acc, st, key=None)
    return acc
