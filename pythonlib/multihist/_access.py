"""Privileged access to histogram internals, for conversion and merging code only."""
from .errors import InvalidArgument
from .linearize import bincount


def from_parts(cls, axes, storage):
    """Assemble a histogram without resetting ``storage``."""
    if storage.size != bincount(axes):
        raise InvalidArgument(
            f"storage has {storage.size} cells, axes need {bincount(axes)}"
        )
    h = cls.__new__(cls)
    h._axes = axes
    h._storage = storage
    return h


def replace_storage(h, storage):
    if storage.size != bincount(h._axes):
        raise InvalidArgument(
            f"storage has {storage.size} cells, axes need {bincount(h._axes)}"
        )
    h._storage = storage
