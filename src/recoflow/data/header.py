"""Run- and event-level bookkeeping records."""

from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from .base import DataBase

__all__ = ["RunHeader", "EventHeader", "SyncObject", "FlagSave", "PrdfEvent"]


@dataclass(eq=False)
class RunHeader(DataBase):
    """Run-level information.

    Attributes
    ----------
    run_number : int
        Run number
    """

    run_number: int = 0

    reset_per_event = False


@dataclass(eq=False)
class EventHeader(DataBase):
    """Event-level information.

    Attributes
    ----------
    run_number : int
        Run number
    evt_sequence : int
        Event number within the run
    evt_type : int
        Raw data event type (data event, special event, etc.)
    impact_parameter : float
        Generated impact parameter of a heavy-ion collision (fm)
    event_plane_angle : float
        Generated reaction plane angle
    flow_psi : np.ndarray
        (6) Generated event plane angle of the harmonics n = 1 to 6
    eccentricity : float
        Generated eccentricity of the overlap region
    ncoll : int
        Number of binary nucleon-nucleon collisions
    npart : int
        Number of participant nucleons (projectile + target)
    """

    run_number: int = 0
    evt_sequence: int = 0
    evt_type: int = 0
    impact_parameter: float = np.nan
    event_plane_angle: float = np.nan
    flow_psi: np.ndarray = None
    eccentricity: float = np.nan
    ncoll: int = -1
    npart: int = -1

    _fixed_length_attrs = (("flow_psi", 6),)

    def set_flow_psi(self, n, psi):
        """Set the event plane angle of the n-th harmonic (1-indexed)."""
        if not 1 <= n <= len(self.flow_psi):
            raise ValueError(f"Flow harmonic out of range [1, 6]: {n}")
        self.flow_psi[n - 1] = psi

    def get_flow_psi(self, n):
        return self.flow_psi[n - 1]


@dataclass(eq=False)
class SyncObject(DataBase):
    """Information used to synchronize independent input streams.

    Attributes
    ----------
    event_counter : int
        Number of events processed so far
    event_number : int
        Event number
    run_number : int
        Run number
    segment_number : int
        Segment (file index) of the run the event belongs to
    """

    event_counter: int = 0
    event_number: int = 0
    run_number: int = 0
    segment_number: int = 0


@dataclass(eq=False)
class FlagSave(DataBase):
    """Persistent copy of the job flags.

    Attributes
    ----------
    flags : Dict[str, object]
        Flag values by name
    """

    flags: Dict[str, object] = field(default_factory=dict)

    reset_per_event = False

    def to_arrays(self):
        return {f"flag_{k}": v for k, v in self.flags.items()}

    @classmethod
    def from_arrays(cls, arrays):
        flags = {}
        for key, value in arrays.items():
            value = value.item() if isinstance(value, np.generic) else value
            if isinstance(value, bytes):
                value = value.decode()
            flags[key[len("flag_"):]] = value

        return cls(flags=flags)


@dataclass(eq=False)
class PrdfEvent(DataBase):
    """Header of a raw data event.

    Attributes
    ----------
    evt_type : int
        Raw event type
    evt_sequence : int
        Raw event sequence number
    """

    evt_type: int = 0
    evt_sequence: int = 0
