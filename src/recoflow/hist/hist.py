"""Fixed-binning one-dimensional histogram."""

import numpy as np

__all__ = ["Hist1D"]


class Hist1D:
    """One-dimensional histogram with uniform binning.

    The counts include an underflow (index 0) and an overflow (index -1) bin,
    such that the bin `i` in [1, num_bins] covers
    `[low + (i - 1) * width, low + i * width)`.

    Attributes
    ----------
    name : str
        Name of the histogram, unique within a :class:`HistoManager`
    title : str
        Title of the histogram, with axis labels separated by `;`
    num_bins : int
        Number of bins in the [low, high) range
    low : float
        Lower edge of the first bin
    high : float
        Upper edge of the last bin
    counts : np.ndarray
        (num_bins + 2) Weighted bin contents
    """

    def __init__(self, name, title="", num_bins=100, low=0.0, high=1.0):
        assert num_bins > 0, "A histogram must have at least one bin."
        assert high > low, "The upper edge must be larger than the lower edge."

        self.name = name
        self.title = title
        self.num_bins = num_bins
        self.low = low
        self.high = high
        self.counts = np.zeros(num_bins + 2, dtype=np.float64)
        self.entries = 0

    @property
    def edges(self):
        """Edges of the in-range bins."""
        return np.linspace(self.low, self.high, self.num_bins + 1)

    @property
    def width(self):
        return (self.high - self.low) / self.num_bins

    def find_bin(self, value):
        """Index of the bin a value falls into (0: underflow, -1: overflow).

        Values which are not numbers (NaN) go to the overflow bin.
        """
        if value < self.low:
            return 0
        if not value < self.high:
            return self.num_bins + 1

        return min(int((value - self.low) / self.width), self.num_bins - 1) + 1

    def fill(self, value, weight=1.0):
        """Add one value to the histogram.

        Parameters
        ----------
        value : float
            Value to fill
        weight : float, default 1.0
            Weight of the value
        """
        self.counts[self.find_bin(value)] += weight
        self.entries += 1

    def fill_array(self, values, weights=None):
        """Add an array of values to the histogram."""
        values = np.asarray(values, dtype=np.float64)
        weights = np.ones(len(values)) if weights is None else np.asarray(weights)
        bins = np.full(len(values), self.num_bins + 1, dtype=np.int64)
        bins[values < self.low] = 0
        inside = (values >= self.low) & (values < self.high)
        index = ((values[inside] - self.low) / self.width).astype(np.int64)
        bins[inside] = np.minimum(index, self.num_bins - 1) + 1
        np.add.at(self.counts, bins, weights)
        self.entries += len(values)

    @property
    def underflow(self):
        return self.counts[0]

    @property
    def overflow(self):
        return self.counts[-1]

    def integral(self):
        """Sum of the in-range bin contents."""
        return float(np.sum(self.counts[1:-1]))

    def mean(self):
        """Weighted mean of the in-range bin centers."""
        total = self.integral()
        if total == 0.0:
            return 0.0

        centers = 0.5 * (self.edges[1:] + self.edges[:-1])
        return float(np.sum(centers * self.counts[1:-1]) / total)

    def reset(self):
        self.counts[:] = 0.0
        self.entries = 0
