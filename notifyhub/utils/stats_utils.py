import math


class RunningStats:
    """Welford online mean/variance with a running maximum."""

    def __init__(self) -> None:
        self.n = 0
        self.mean = 0.0
        self.M2 = 0.0  # sum of squares of diffs
        self.maximum = 0.0

    def update(self, x: float) -> None:
        x = float(x)
        self.n += 1
        delta = x - self.mean
        self.mean += delta / self.n
        delta2 = x - self.mean
        self.M2 += delta * delta2
        self.maximum = x if self.n == 1 else max(self.maximum, x)

    @property
    def var(self) -> float:
        # unbiased sample variance
        if self.n < 2:
            return 0.0
        return self.M2 / (self.n - 1)

    @property
    def std(self) -> float:
        return math.sqrt(self.var)

    def reset(self) -> None:
        self.n = 0
        self.mean = 0.0
        self.M2 = 0.0
        self.maximum = 0.0
