"""Calorimeter tower information."""

from dataclasses import dataclass

import numpy as np

from .base import ContainerBase, DataBase

__all__ = ["TowerInfo", "TowerInfoContainer"]


@dataclass(eq=False)
class TowerInfo(DataBase):
    """Calibrated information of one calorimeter channel.

    Attributes
    ----------
    energy : float
        Calibrated energy (GeV)
    time : float
        Peak time (in samples)
    chi2 : float
        Quality of the waveform fit
    status : int
        Status bit mask (hot, dead, saturated, etc.)
    """

    energy: float = 0.0
    time: float = 0.0
    chi2: float = 0.0
    status: int = 0


class TowerInfoContainer(ContainerBase):
    """Fixed-size collection of towers of one calorimeter, by channel.

    The tower attributes are stored as one array per attribute.
    """

    _attrs = ("energy", "time", "chi2", "status")

    def __init__(self, num_channels=0):
        """Initialize an empty container with a fixed number of channels.

        Parameters
        ----------
        num_channels : int, default 0
            Number of calorimeter channels
        """
        self.energy = np.zeros(num_channels, dtype=np.float32)
        self.time = np.zeros(num_channels, dtype=np.float32)
        self.chi2 = np.zeros(num_channels, dtype=np.float32)
        self.status = np.zeros(num_channels, dtype=np.uint8)

    def size(self):
        return len(self.energy)

    def reset(self):
        for attr in self._attrs:
            getattr(self, attr)[:] = 0

    def get_tower_at_channel(self, channel):
        """Returns a copy of the information of one channel."""
        return TowerInfo(**{a: getattr(self, a)[channel].item() for a in self._attrs})

    def set_tower_at_channel(self, channel, tower):
        for attr in self._attrs:
            getattr(self, attr)[channel] = getattr(tower, attr)

    def copy_from(self, other):
        """Copies the content of another container of the same size."""
        if other.size() != self.size():
            raise ValueError(
                f"Cannot copy a container of {other.size()} channels into one "
                f"of {self.size()} channels."
            )
        for attr in self._attrs:
            getattr(self, attr)[:] = getattr(other, attr)

    def to_arrays(self):
        return {attr: getattr(self, attr) for attr in self._attrs}

    @classmethod
    def from_arrays(cls, arrays):
        container = cls(len(arrays["energy"]))
        for attr in cls._attrs:
            getattr(container, attr)[:] = arrays[attr]

        return container
