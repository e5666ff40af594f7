"""Accepts events which contain specific generated particles."""

import numpy as np

from .base import GenTriggerBase

__all__ = ["HepMCParticleTrigger"]


class HepMCParticleTrigger(GenTriggerBase):
    """Keeps events which contain at least one particle of each requested
    species passing kinematic cuts.

    The cuts come in pairs of (high, low) bounds on the pseudorapidity, its
    absolute value, the transverse momentum, the momentum and its component
    along the beam. By default, only the pseudorapidity cut in [-1.1, 1.1] is
    applied. A non-zero threshold enables a transverse momentum low cut at
    the threshold value.

    .. code-block:: yaml

        particle_trigger:
          module: hepmc_particle_trigger
          particles: [443]
          parents: [5, 511, 521]
          pt_low: 2.0
          abs_eta_high: 1.0
    """

    name = "hepmc_particle_trigger"
    aliases = ("HepMCParticleTrigger",)

    # Kinematic variables which can be cut on
    _cuts = ("eta", "abs_eta", "pt", "p", "pz")

    def __init__(
        self,
        particles=None,
        parents=None,
        stable_only=True,
        eta_high=None,
        eta_low=None,
        abs_eta_high=None,
        abs_eta_low=None,
        pt_high=None,
        pt_low=None,
        p_high=None,
        p_low=None,
        pz_high=None,
        pz_low=None,
        **kwargs,
    ):
        """Initialize the filter.

        Parameters
        ----------
        particles : List[int], optional
            PDG codes which must all be found in the event (sign ignored)
        parents : List[int], optional
            If specified, only count particles with one of these parents
        stable_only : bool, default True
            Only consider final-state particles which do not decay
        eta_high, eta_low : float, optional
            Pseudorapidity bounds
        abs_eta_high, abs_eta_low : float, optional
            Absolute pseudorapidity bounds
        pt_high, pt_low : float, optional
            Transverse momentum bounds (GeV/c)
        p_high, p_low : float, optional
            Momentum bounds (GeV/c)
        pz_high, pz_low : float, optional
            Longitudinal momentum bounds (GeV/c)
        **kwargs : dict, optional
            Threshold, event limit and base module parameters
        """
        super().__init__(**kwargs)
        self.particles = []
        self.parents = []
        self.stable_only = stable_only

        # Default bounds, only the pseudorapidity cut is active
        self.high = {"eta": 1.1, "abs_eta": 999.9, "pt": 999.9, "p": 999.9, "pz": 999.9}
        self.low = {"eta": -1.1, "abs_eta": 0.0, "pt": 0.0, "p": -999.9, "pz": -999.9}
        self.do_high = {k: k == "eta" for k in self._cuts}
        self.do_low = {k: k == "eta" for k in self._cuts}

        if self.threshold != 0:
            self.set_low("pt", self.threshold)

        bounds = {
            "eta": (eta_high, eta_low),
            "abs_eta": (abs_eta_high, abs_eta_low),
            "pt": (pt_high, pt_low),
            "p": (p_high, p_low),
            "pz": (pz_high, pz_low),
        }
        for key, (high, low) in bounds.items():
            if high is not None:
                self.set_high(key, high)
            if low is not None:
                self.set_low(key, low)

        self.add_particles(particles or [])
        self.add_parents(parents or [])

    def add_particle(self, pdg_id):
        self.particles.append(pdg_id)

    def add_particles(self, pdg_ids):
        self.particles.extend(pdg_ids)

    def add_parents(self, pdg_ids):
        self.parents.extend(abs(p) for p in pdg_ids)

    def set_high(self, key, value):
        """Set the upper bound of one kinematic variable and enable the cut."""
        self._check_cut(key)
        self.high[key] = value
        self.do_high[key] = True

    def set_low(self, key, value):
        """Set the lower bound of one kinematic variable and enable the cut."""
        self._check_cut(key)
        self.low[key] = value
        self.do_low[key] = True

    def set_high_low(self, key, high, low):
        """Set both bounds of one kinematic variable and enable the cuts."""
        self.set_high(key, high)
        self.set_low(key, low)

    def _check_cut(self, key):
        if key not in self._cuts:
            raise ValueError(
                f"Unknown kinematic variable `{key}`. Must be one of {self._cuts}."
            )

    def is_good_event(self, event):
        """Whether every requested species is found at least once."""
        counts = self.get_particles(event)
        return all(counts.get(abs(pdg_id), 0) > 0 for pdg_id in self.particles)

    def get_particles(self, event):
        """Count the particles of each species which pass the cuts.

        Parameters
        ----------
        event : GenEvent
            Generated event

        Returns
        -------
        Dict[int, int]
            Number of selected particles per absolute PDG code
        """
        counts = {}
        for particle in event.particles:
            if self.stable_only and not particle.stable:
                continue
            parents = np.abs(particle.parents)
            if self.parents and not np.isin(parents, self.parents).any():
                continue

            eta = particle.eta
            values = {
                "eta": eta,
                "abs_eta": abs(eta),
                "pt": particle.pt,
                "p": particle.p,
                "pz": particle.pz,
            }
            if not self.pass_cuts(values):
                continue

            pdg_id = abs(particle.pdg_id)
            counts[pdg_id] = counts.get(pdg_id, 0) + 1

        return counts

    def pass_cuts(self, values):
        """Check the kinematic variables of one particle against the bounds."""
        for key in self._cuts:
            if self.do_high[key] and values[key] > self.high[key]:
                return False
            if self.do_low[key] and values[key] < self.low[key]:
                return False

        return True
