"""Manages the histograms registered by the modules of a job."""

from collections import OrderedDict
from typing import Optional

import h5py

from recoflow.utils.logger import logger

from .hist import Hist1D

__all__ = ["HistoManager"]


class HistoManager:
    """Registry of named histograms, saved to an HDF5 file.

    The QA modules share a single instance, obtained via :meth:`instance`.
    """

    _instance: Optional["HistoManager"] = None

    def __init__(self, name="QAHISTOMANAGER"):
        self.name = name
        self._hists = OrderedDict()

    @classmethod
    def instance(cls) -> "HistoManager":
        """Returns the shared manager, creating it if needed."""
        if cls._instance is None:
            cls._instance = cls()

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared manager, a new one is created on the next access."""
        cls._instance = None

    def __contains__(self, name):
        return name in self._hists

    def __len__(self):
        return len(self._hists)

    def names(self):
        return list(self._hists.keys())

    def register(self, hist):
        """Register a histogram under its name.

        Parameters
        ----------
        hist : Hist1D
            Histogram to register

        Returns
        -------
        Hist1D
            Registered histogram
        """
        if hist.name in self._hists:
            raise ValueError(f"Histogram `{hist.name}` is already registered.")
        self._hists[hist.name] = hist

        return hist

    def get(self, name) -> Optional[Hist1D]:
        return self._hists.get(name)

    def save(self, file_name):
        """Store all the histograms to an HDF5 file.

        Each histogram is stored as a dataset of bin contents (including the
        underflow and overflow bins), with its binning as attributes.

        Parameters
        ----------
        file_name : str
            Path to the output file
        """
        with h5py.File(file_name, "w") as out_file:
            group = out_file.create_group(self.name)
            for name, hist in self._hists.items():
                dataset = group.create_dataset(name, data=hist.counts)
                dataset.attrs["title"] = hist.title
                dataset.attrs["num_bins"] = hist.num_bins
                dataset.attrs["low"] = hist.low
                dataset.attrs["high"] = hist.high
                dataset.attrs["entries"] = hist.entries

        logger.info("Saved %d histogram(s) to %s", len(self._hists), file_name)

    @classmethod
    def load(cls, file_name, name="QAHISTOMANAGER"):
        """Load histograms stored with :meth:`save` into a new manager."""
        manager = cls(name)
        with h5py.File(file_name, "r") as in_file:
            for key, dataset in in_file[name].items():
                hist = Hist1D(
                    key,
                    str(dataset.attrs["title"]),
                    int(dataset.attrs["num_bins"]),
                    float(dataset.attrs["low"]),
                    float(dataset.attrs["high"]),
                )
                hist.counts[:] = dataset[()]
                hist.entries = int(dataset.attrs["entries"])
                manager.register(hist)

        return manager
