from __future__ import annotations
import difflib
import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

import yaml

from .axis import Category, Integer, Radial, Regular, Variable
from .errors import InvalidArgument
from .histogram import Histogram
from .storage import STORAGE_KINDS, make_storage, storage_kind


@dataclass
class AxisConfig:
    type: str = "regular"  # regular/variable/integer/category/radial
    bins: Any = None  # a list of edges turns a regular axis into a variable one
    start: Optional[float] = None
    stop: Optional[float] = None
    edges: Optional[List[float]] = None
    labels: Optional[List[Any]] = None
    arity: int = 2  # radial only
    underflow: bool = True
    overflow: bool = True
    label: str = ""


@dataclass
class HistConfig:
    axes: List[AxisConfig] = field(default_factory=list)
    storage: str = "double"


def _suggest(name, options):
    match = difflib.get_close_matches(name, list(options), n=1)
    return f" (did you mean '{match[0]}'?)" if match else ""


def _from_mapping(cls, mapping, where):
    if not isinstance(mapping, dict):
        raise InvalidArgument(f"{where}: expected a mapping, got {mapping!r}")
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for k, v in mapping.items():
        if k in known:
            kwargs[k] = v
        else:
            print(f"[WARN] {where}: ignoring unknown key {k!r}", file=sys.stderr)
    return cls(**kwargs)


def _require(cfg, *names):
    for name in names:
        if getattr(cfg, name) is None:
            raise InvalidArgument(f"{cfg.type} axis requires {name!r}")


def _regular(c):
    if isinstance(c.bins, (list, tuple)):
        return _variable(replace(c, type="variable", edges=list(c.bins)))
    _require(c, "bins", "start", "stop")
    return Regular(c.bins, c.start, c.stop, underflow=c.underflow,
                   overflow=c.overflow, label=c.label)


def _variable(c):
    _require(c, "edges")
    return Variable(c.edges, underflow=c.underflow, overflow=c.overflow, label=c.label)


def _integer(c):
    _require(c, "start", "stop")
    return Integer(c.start, c.stop, underflow=c.underflow, overflow=c.overflow,
                   label=c.label)


def _category(c):
    _require(c, "labels")
    return Category(c.labels, overflow=c.overflow, label=c.label)


def _radial(c):
    _require(c, "bins", "stop")
    return Radial(c.bins, c.stop, arity=c.arity, overflow=c.overflow, label=c.label)


_AXIS_BUILDERS = {
    "regular": _regular,
    "variable": _variable,
    "integer": _integer,
    "category": _category,
    "radial": _radial,
}


def build_axis(cfg: AxisConfig):
    try:
        builder = _AXIS_BUILDERS[cfg.type]
    except KeyError:
        raise InvalidArgument(
            f"unknown axis type {cfg.type!r}" + _suggest(str(cfg.type), _AXIS_BUILDERS)
        ) from None
    return builder(cfg)


def build_histogram(cfg: HistConfig) -> Histogram:
    try:
        kind = storage_kind(cfg.storage)
    except InvalidArgument:
        raise InvalidArgument(
            f"unknown storage {cfg.storage!r}"
            + _suggest(str(cfg.storage), STORAGE_KINDS)
        ) from None
    return Histogram([build_axis(a) for a in cfg.axes], make_storage(kind))


def parse_hist_config(mapping: Dict[str, Any], where: str = "histogram") -> HistConfig:
    cfg = _from_mapping(HistConfig, mapping, where)
    cfg.axes = [
        _from_mapping(AxisConfig, a, f"{where}.axes[{i}]") for i, a in enumerate(cfg.axes)
    ]
    return cfg


def histograms_from_dict(mapping: Dict[str, Any]) -> Dict[str, Histogram]:
    """
    Build named histograms from a mapping like::

        pt:
          storage: weight
          axes:
            - {type: regular, bins: 50, start: 0, stop: 500}
    """
    if not isinstance(mapping, dict):
        raise InvalidArgument("histogram config must be a mapping of names")
    return {
        name: build_histogram(parse_hist_config(spec, where=str(name)))
        for name, spec in mapping.items()
    }


def histograms_from_yaml(stream) -> Dict[str, Histogram]:
    """Build histograms from YAML text or an open stream; the caller owns the file."""
    cfg = yaml.safe_load(stream) or {}
    return histograms_from_dict(cfg)
