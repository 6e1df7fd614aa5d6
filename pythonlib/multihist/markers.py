from .errors import InvalidArgument


class _Marker:
    __slots__ = ()


class WeightMarker(_Marker):
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"weight({self.value!r})"


class SampleMarker(_Marker):
    __slots__ = ("values",)

    def __init__(self, values):
        self.values = tuple(values)

    def __repr__(self):
        return f"sample({', '.join(repr(v) for v in self.values)})"


def weight(value):
    """Mark a fill argument as the weight of the entry."""
    return WeightMarker(value)


def sample(*values):
    """Mark fill arguments as sample values passed on to the cell."""
    if not values:
        raise InvalidArgument("sample needs at least one value")
    return SampleMarker(values)


def decompose(args):
    """
    Split fill arguments into ``(values, weight, sample)``.

    Markers are stripped from both ends first; the remaining arguments must
    not contain any marker. ``weight`` is None and ``sample`` is an empty
    tuple when not given.
    """
    values = list(args)
    markers = []
    while values and isinstance(values[0], _Marker):
        markers.append(values.pop(0))
    while values and isinstance(values[-1], _Marker):
        markers.append(values.pop())
    if any(isinstance(v, _Marker) for v in values):
        raise InvalidArgument("weight and sample must be the first or last arguments")

    w = None
    s = None
    for m in markers:
        if isinstance(m, WeightMarker):
            if w is not None:
                raise InvalidArgument("weight given more than once")
            w = m
        else:
            if s is not None:
                raise InvalidArgument("sample given more than once")
            s = m
    return (
        values,
        None if w is None else w.value,
        () if s is None else s.values,
    )
