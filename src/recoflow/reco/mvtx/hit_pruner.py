"""Merges the MVTX hits of all the readout strobes of a chip."""

from recoflow.data import TrkrHitSetContainer
from recoflow.defs import mvtx
from recoflow.node import get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode, TrkrId
from recoflow.utils.logger import logger

__all__ = ["MvtxHitPruner"]


class MvtxHitPruner(SubsysReco):
    """Moves the hits of all non-zero strobe MVTX hitsets into the strobe-0
    hitset of the same chip, then removes the non-zero strobe hitsets.

    A hit which already exists in the strobe-0 hitset (same hit key) is a
    duplicate and is not copied.
    """

    name = "mvtx_hit_pruner"
    aliases = ("MvtxHitPruner",)

    def process_event(self, top_node):
        """Merge the hitsets of one event.

        Parameters
        ----------
        top_node : CompositeNode
            Top of the node tree

        Returns
        -------
        ReturnCode
            `ABORTRUN` if the hitset container is missing, `EVENT_OK` otherwise
        """
        hitsets = get_class(top_node, "TRKR_HITSET", TrkrHitSetContainer)
        if hitsets is None:
            logger.error("%s: Can't find node TRKR_HITSET.", self.name)
            return ReturnCode.ABORTRUN

        # Map each physical chip onto its non-zero strobe hitsets
        strobe_map = {}
        for hitset_key, _ in hitsets.get_hit_sets(TrkrId.MVTX):
            if mvtx.get_strobe_id(hitset_key) == 0:
                continue

            bare_key = mvtx.reset_strobe(hitset_key)
            strobe_map.setdefault(bare_key, []).append(hitset_key)
            if self.verbosity:
                logger.info(
                    "Found hitset key %d for bare hitset key %d.", hitset_key, bare_key
                )

        # Consolidate all the hits into the strobe-0 hitsets
        for bare_key in sorted(strobe_map):
            bare_hitset = hitsets.find_or_add_hit_set(bare_key)
            if self.verbosity:
                logger.info(
                    "Bare hitset %d initially has %d hits.",
                    bare_key,
                    bare_hitset.size(),
                )

            for hitset_key in strobe_map[bare_key]:
                hitset = hitsets.find_hit_set(hitset_key)
                for hit_key, hit in hitset.get_hits():
                    if bare_hitset.get_hit(hit_key) is not None:
                        if self.verbosity > 1:
                            logger.info(
                                "Hit key %d is already in the bare hitset.", hit_key
                            )
                        continue

                    bare_hitset.add_hit(hit_key, hit.copy())

                hitsets.remove_hit_set(hitset_key)

        return ReturnCode.EVENT_OK
