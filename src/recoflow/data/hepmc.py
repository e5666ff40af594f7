"""Generator-level event records."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from recoflow.utils.globals import STABLE_STATUS

from .base import ContainerBase, DataBase

__all__ = [
    "GenParticle",
    "HeavyIon",
    "GenEvent",
    "PHHepMCGenEvent",
    "PHHepMCGenEventMap",
]


@dataclass(eq=False)
class GenParticle(DataBase):
    """Generated particle.

    Attributes
    ----------
    pdg_id : int
        PDG code of the particle
    status : int
        Generator status (1 for final-state particles)
    momentum : np.ndarray
        (4) Four-momentum (px, py, pz, E) in GeV
    has_end_vertex : bool
        Whether the particle decays within the generator record
    parents : np.ndarray
        PDG codes of the particle parents
    """

    pdg_id: int = 0
    status: int = 0
    momentum: np.ndarray = None
    has_end_vertex: bool = False
    parents: np.ndarray = None

    _fixed_length_attrs = (("momentum", 4),)

    def __post_init__(self):
        super().__post_init__()
        self.parents = np.asarray(
            self.parents if self.parents is not None else [], dtype=np.int64
        )

    @property
    def pt(self):
        return float(np.hypot(self.momentum[0], self.momentum[1]))

    @property
    def p(self):
        return float(np.linalg.norm(self.momentum[:3]))

    @property
    def pz(self):
        return float(self.momentum[2])

    @property
    def eta(self):
        """Pseudorapidity (infinite along the beam axis)."""
        p, pz = self.p, self.pz
        if p == abs(pz):
            return float(np.copysign(np.inf, pz))
        return float(0.5 * np.log((p + pz) / (p - pz)))

    @property
    def stable(self):
        """Final-state particle which does not decay in the record."""
        return self.status == STABLE_STATUS and not self.has_end_vertex


@dataclass(eq=False)
class HeavyIon(DataBase):
    """Heavy-ion collision geometry of a generated event.

    Attributes
    ----------
    impact_parameter : float
        Impact parameter (fm)
    event_plane_angle : float
        Reaction plane angle
    eccentricity : float
        Eccentricity of the overlap region
    ncoll : int
        Number of binary collisions
    npart_proj : int
        Number of participants from the projectile
    npart_targ : int
        Number of participants from the target
    """

    impact_parameter: float = 0.0
    event_plane_angle: float = 0.0
    eccentricity: float = 0.0
    ncoll: int = 0
    npart_proj: int = 0
    npart_targ: int = 0


@dataclass(eq=False)
class GenEvent(DataBase):
    """Generated event.

    Attributes
    ----------
    particles : List[GenParticle]
        Generated particles
    heavy_ion : HeavyIon, optional
        Collision geometry (heavy-ion generators only)
    """

    particles: List[GenParticle] = field(default_factory=list)
    heavy_ion: Optional[HeavyIon] = None


@dataclass(eq=False)
class PHHepMCGenEvent(DataBase):
    """Generated event wrapped with its embedding information.

    Attributes
    ----------
    embedding_id : int
        Embedding identifier (0 for the foreground event)
    event : GenEvent, optional
        Generated event
    flow_psi : Dict[int, float]
        Event plane angle for each flow harmonic
    """

    embedding_id: int = 0
    event: Optional[GenEvent] = None
    flow_psi: Dict[int, float] = field(default_factory=dict)

    def get_flow_psi(self, n):
        return self.flow_psi.get(n, 0.0)


class PHHepMCGenEventMap(ContainerBase):
    """Generated events of one collision, keyed by embedding identifier."""

    _attrs = ("pdg_id", "status", "has_end_vertex")
    _hi_attrs = (
        "impact_parameter",
        "event_plane_angle",
        "eccentricity",
        "ncoll",
        "npart_proj",
        "npart_targ",
    )

    def __init__(self):
        self._events: Dict[int, PHHepMCGenEvent] = {}

    def size(self):
        return len(self._events)

    def reset(self):
        self._events.clear()

    def __iter__(self):
        return iter(sorted(self._events.items()))

    def __reversed__(self):
        return iter(sorted(self._events.items(), reverse=True))

    def insert(self, gen_event):
        """Insert an event under its embedding identifier."""
        self._events[gen_event.embedding_id] = gen_event
        return gen_event

    def get(self, embedding_id):
        return self._events.get(embedding_id)

    def to_arrays(self):
        arrays = {"embedding_id": [], "has_heavy_ion": [], "particle_event": []}
        arrays.update({k: [] for k in (*self._attrs, *self._hi_attrs)})
        arrays.update({"momentum": [], "parents": [], "parent_count": []})
        arrays.update({"flow_event": [], "flow_n": [], "flow_psi": []})
        for embedding_id, gen_event in self:
            event = gen_event.event or GenEvent()
            hi = event.heavy_ion
            arrays["embedding_id"].append(embedding_id)
            arrays["has_heavy_ion"].append(hi is not None)
            for attr in self._hi_attrs:
                arrays[attr].append(getattr(hi, attr) if hi is not None else 0)
            for n, psi in sorted(gen_event.flow_psi.items()):
                arrays["flow_event"].append(embedding_id)
                arrays["flow_n"].append(n)
                arrays["flow_psi"].append(psi)
            for part in event.particles:
                arrays["particle_event"].append(embedding_id)
                for attr in self._attrs:
                    arrays[attr].append(getattr(part, attr))
                arrays["momentum"].append(part.momentum)
                arrays["parents"].extend(part.parents.tolist())
                arrays["parent_count"].append(len(part.parents))

        arrays = {k: np.asarray(v) for k, v in arrays.items()}
        arrays["momentum"] = arrays["momentum"].reshape(-1, 4).astype(np.float64)
        arrays["parents"] = arrays["parents"].astype(np.int64)

        return arrays

    @classmethod
    def from_arrays(cls, arrays):
        gen_map = cls()
        for i, embedding_id in enumerate(arrays["embedding_id"]):
            hi = None
            if arrays["has_heavy_ion"][i]:
                hi = HeavyIon(**{a: arrays[a][i].item() for a in cls._hi_attrs})
            gen_map.insert(
                PHHepMCGenEvent(
                    embedding_id=int(embedding_id), event=GenEvent(heavy_ion=hi)
                )
            )

        for event_id, n, psi in zip(
            arrays["flow_event"], arrays["flow_n"], arrays["flow_psi"]
        ):
            gen_map.get(int(event_id)).flow_psi[int(n)] = float(psi)

        offsets = np.concatenate([[0], np.cumsum(arrays["parent_count"])]).astype(int)
        for i, event_id in enumerate(arrays["particle_event"]):
            part = GenParticle(
                pdg_id=int(arrays["pdg_id"][i]),
                status=int(arrays["status"][i]),
                momentum=np.array(arrays["momentum"][i]),
                has_end_vertex=bool(arrays["has_end_vertex"][i]),
                parents=arrays["parents"][offsets[i] : offsets[i + 1]],
            )
            gen_map.get(int(event_id)).event.particles.append(part)

        return gen_map
