"""Accepts events with a high transverse momentum generator-level jet."""

import numpy as np

from recoflow.math.jet import antikt, pseudorapidity, pt
from recoflow.utils.globals import JET_MAX_ABS_ETA, JET_RADIUS, NEUTRINO_PDG_RANGE

from .base import GenTriggerBase

__all__ = ["HepMCJetTrigger"]


class HepMCJetTrigger(GenTriggerBase):
    """Keeps events with at least one anti-kt (R = 0.4) jet with
    |eta| <= 1.1 and a transverse momentum above the threshold.

    Jets are clustered from the stable final-state particles, excluding
    neutrinos and the other |pdg| in [12, 18]. A threshold of 0 accepts
    every event.

    The event limit counts accepted generated sub-events, such that an event
    with several embedded sub-events brings the filter closer to its goal.
    """

    name = "hepmc_jet_trigger"
    aliases = ("HepMCJetTrigger",)
    count_sub_events = True

    def is_good_event(self, event):
        if self.threshold == 0:
            return True

        return self.jets_above_threshold(self.find_all_jets(event)) > 0

    @staticmethod
    def find_all_jets(event):
        """Cluster the final-state particles of an event into jets.

        Parameters
        ----------
        event : GenEvent
            Generated event

        Returns
        -------
        np.ndarray
            (J, 4) Jet four-momenta
        """
        low, high = NEUTRINO_PDG_RANGE
        momenta = [
            p.momentum
            for p in event.particles
            if p.stable and not low <= abs(p.pdg_id) <= high
        ]
        if not momenta:
            return np.empty((0, 4), dtype=np.float64)

        return antikt(np.asarray(momenta, dtype=np.float64), JET_RADIUS)

    def jets_above_threshold(self, jets):
        """Number of central jets above the transverse momentum threshold."""
        if not len(jets):
            return 0

        central = np.abs(pseudorapidity(jets)) <= JET_MAX_ABS_ETA
        return int(np.sum(central & (pt(jets) > self.threshold)))
