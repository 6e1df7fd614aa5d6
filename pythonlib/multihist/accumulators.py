import math
import numbers


class WeightedSum:
    """
    Sum of weights and sum of squared weights.

    ``WeightedSum(v)`` with no variance is the promotion of a plain count
    ``v``: for unit weights the variance equals the count.
    """

    kind = "weight"
    accepts_weight = True
    sample_arity = 0

    def __init__(self, value=0.0, variance=None):
        self.value = float(value)
        self.variance = self.value if variance is None else float(variance)

    def fill(self, weight=1.0):
        self.value += weight
        self.variance += weight * weight

    def __iadd__(self, other):
        if isinstance(other, numbers.Real):
            other = WeightedSum(other)
        if not isinstance(other, WeightedSum):
            return NotImplemented
        self.value += other.value
        self.variance += other.variance
        return self

    def __imul__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        self.value *= x
        self.variance *= x * x
        return self

    def __eq__(self, other):
        if not isinstance(other, WeightedSum):
            return NotImplemented
        return self.value == other.value and self.variance == other.variance

    __hash__ = None

    def __repr__(self):
        return f"WeightedSum(value={self.value!r}, variance={self.variance!r})"


class Mean:
    """
    Running mean and variance of samples (profile cell).

    Uses Welford's update; ``count`` is the number of samples.
    """

    kind = "mean"
    accepts_weight = False
    sample_arity = 1

    def __init__(self, count=0, value=0.0, variance=0.0):
        self.count = float(count)
        self.value = float(value)
        self._sum_of_deltas_squared = float(variance) * max(self.count - 1.0, 0.0)

    @property
    def variance(self):
        if self.count < 2:
            return math.nan
        return self._sum_of_deltas_squared / (self.count - 1.0)

    def fill(self, x):
        self.count += 1.0
        delta = x - self.value
        self.value += delta / self.count
        self._sum_of_deltas_squared += delta * (x - self.value)

    def __iadd__(self, other):
        if not isinstance(other, Mean):
            return NotImplemented
        n1, mu1 = self.count, self.value
        n2, mu2, d2 = other.count, other.value, other._sum_of_deltas_squared
        n = n1 + n2
        if n == 0:
            return self
        mu = (n1 * mu1 + n2 * mu2) / n
        self._sum_of_deltas_squared += (
            d2 + n1 * (mu - mu1) ** 2 + n2 * (mu - mu2) ** 2
        )
        self.count = n
        self.value = mu
        return self

    def __imul__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        self.value *= x
        self._sum_of_deltas_squared *= x * x
        return self

    def __eq__(self, other):
        if not isinstance(other, Mean):
            return NotImplemented
        return (
            self.count == other.count
            and self.value == other.value
            and self._sum_of_deltas_squared == other._sum_of_deltas_squared
        )

    __hash__ = None

    def __repr__(self):
        return f"Mean(count={self.count!r}, value={self.value!r})"


class WeightedMean:
    """Mean and variance of samples, each entering with a weight."""

    kind = "weighted_mean"
    accepts_weight = True
    sample_arity = 1

    def __init__(self):
        self.sum_of_weights = 0.0
        self.sum_of_weights_squared = 0.0
        self.value = 0.0
        self._sum_of_weighted_deltas_squared = 0.0

    @property
    def variance(self):
        w, w2 = self.sum_of_weights, self.sum_of_weights_squared
        if w == 0 or w - w2 / w == 0:
            return math.nan
        return self._sum_of_weighted_deltas_squared / (w - w2 / w)

    def fill(self, x, weight=1.0):
        w = self.sum_of_weights + weight
        if w != 0:
            delta = x - self.value
            value = self.value + weight * delta / w
            self._sum_of_weighted_deltas_squared += weight * delta * (x - value)
            self.value = value
        # a zero sum of weights leaves the mean undefined; keep the previous one
        self.sum_of_weights = w
        self.sum_of_weights_squared += weight * weight

    def __iadd__(self, other):
        if not isinstance(other, WeightedMean):
            return NotImplemented
        w1, mu1 = self.sum_of_weights, self.value
        w2, mu2 = other.sum_of_weights, other.value
        w = w1 + w2
        self._sum_of_weighted_deltas_squared += other._sum_of_weighted_deltas_squared
        if w != 0:
            mu = (w1 * mu1 + w2 * mu2) / w
            self._sum_of_weighted_deltas_squared += (
                w1 * (mu - mu1) ** 2 + w2 * (mu - mu2) ** 2
            )
            self.value = mu
        self.sum_of_weights = w
        self.sum_of_weights_squared += other.sum_of_weights_squared
        return self

    def __imul__(self, x):
        if not isinstance(x, numbers.Real):
            return NotImplemented
        self.value *= x
        self._sum_of_weighted_deltas_squared *= x * x
        return self

    def __eq__(self, other):
        if not isinstance(other, WeightedMean):
            return NotImplemented
        return (
            self.sum_of_weights == other.sum_of_weights
            and self.sum_of_weights_squared == other.sum_of_weights_squared
            and self.value == other.value
            and self._sum_of_weighted_deltas_squared
            == other._sum_of_weighted_deltas_squared
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"WeightedMean(sum_of_weights={self.sum_of_weights!r}, "
            f"value={self.value!r})"
        )
