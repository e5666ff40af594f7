"""Removes MVTX clusters duplicated across consecutive readout strobes."""

from recoflow.data import TrkrClusterContainer, TrkrClusterHitAssoc
from recoflow.defs import mvtx, trkr
from recoflow.node import get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode, TrkrId
from recoflow.utils.logger import logger

__all__ = ["MvtxClusterPruner"]


class MvtxClusterPruner(SubsysReco):
    """Prunes MVTX clusters which appear in two consecutive strobes.

    The same particle crossing a chip can be read out in two consecutive
    strobes, producing two clusters made of the same pixels. For each
    chip and strobe, the clusters are compared against the clusters of the
    same chip in the next strobe using the set of hits they are built from:

    - Strict matching: if both hit sets are identical, the cluster of the
      next strobe is removed.
    - Loose matching: if one hit set is a subset of the other, the cluster
      with the smaller hit set is removed.

    Attributes
    ----------
    use_strict_matching : bool
        Whether to only remove clusters with identical hit sets
    cluster_counter_total : int
        Number of clusters considered so far
    cluster_counter_deleted : int
        Number of clusters removed so far
    """

    name = "mvtx_cluster_pruner"
    aliases = ("MvtxClusterPruner",)

    def __init__(self, use_strict_matching=False, **kwargs):
        """Initialize the pruner.

        Parameters
        ----------
        use_strict_matching : bool, default False
            If True, only remove clusters with identical hit sets
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.use_strict_matching = use_strict_matching
        self.cluster_counter_total = 0
        self.cluster_counter_deleted = 0

    def init_run(self, top_node):
        logger.info("%s: use_strict_matching: %s", self.name, self.use_strict_matching)
        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        """Prune the clusters of one event.

        Parameters
        ----------
        top_node : CompositeNode
            Top of the node tree

        Returns
        -------
        ReturnCode
            Always `EVENT_OK`, the event is left untouched if the cluster
            container or the cluster/hit association is missing
        """
        clusters = get_class(top_node, "TRKR_CLUSTER", TrkrClusterContainer)
        if clusters is None:
            logger.warning("%s: TRKR_CLUSTER not found. Doing nothing.", self.name)
            return ReturnCode.EVENT_OK

        assoc = get_class(top_node, "TRKR_CLUSTERHITASSOC", TrkrClusterHitAssoc)
        if assoc is None:
            logger.warning(
                "%s: TRKR_CLUSTERHITASSOC not found. Doing nothing.", self.name
            )
            return ReturnCode.EVENT_OK

        removed = set()
        for hitset_key in clusters.get_hit_set_keys(TrkrId.MVTX):
            cluster_map = self.get_cluster_map(clusters, assoc, hitset_key)

            # The last strobe has no successor
            next_strobe = mvtx.get_strobe_id(hitset_key) + 1
            if next_strobe >= mvtx.STROBE_OFFSET:
                self.cluster_counter_total += len(cluster_map)
                continue

            next_key = mvtx.gen_hitset_key(
                trkr.get_layer(hitset_key),
                mvtx.get_stave_id(hitset_key),
                mvtx.get_chip_id(hitset_key),
                next_strobe,
            )
            next_map = self.get_cluster_map(clusters, assoc, next_key)

            for key1, hits1 in cluster_map.items():
                self.cluster_counter_total += 1
                if key1 in removed:
                    continue

                for key2, hits2 in next_map.items():
                    if key2 in removed:
                        continue

                    if self.use_strict_matching:
                        if hits1 == hits2:
                            self.remove(clusters, removed, key2, key1)
                            break

                    else:
                        # Compare the smaller hit set against the larger one
                        swapped = len(hits2) > len(hits1)
                        larger, smaller = (hits2, hits1) if swapped else (hits1, hits2)
                        if smaller <= larger:
                            if swapped:
                                self.remove(clusters, removed, key1, key2)
                                break

                            self.remove(clusters, removed, key2, key1)

        return ReturnCode.EVENT_OK

    def end(self, top_node):
        fraction = (
            self.cluster_counter_deleted / self.cluster_counter_total
            if self.cluster_counter_total
            else 0.0
        )
        logger.info(
            "%s: cluster_counter_total: %d, cluster_counter_deleted: %d, "
            "fraction: %.4f",
            self.name,
            self.cluster_counter_total,
            self.cluster_counter_deleted,
            fraction,
        )

        return ReturnCode.EVENT_OK

    @staticmethod
    def get_cluster_map(clusters, assoc, hitset_key):
        """Builds the set of hit keys of each cluster of a hitset.

        Parameters
        ----------
        clusters : TrkrClusterContainer
            Cluster container
        assoc : TrkrClusterHitAssoc
            Cluster/hit association
        hitset_key : int
            Hitset key

        Returns
        -------
        Dict[int, Set[int]]
            Map from cluster key to its set of hit keys
        """
        return {
            key: set(assoc.get_hits(key))
            for key, _ in clusters.get_clusters(hitset_key)
        }

    def remove(self, clusters, removed, key, kept_key):
        """Remove one cluster, keep track of it."""
        if self.verbosity:
            logger.info("Removing cluster %s", self.describe(clusters, key))
            logger.info("Keeping  cluster %s", self.describe(clusters, kept_key))

        clusters.remove_cluster(key)
        removed.add(key)
        self.cluster_counter_deleted += 1

    @staticmethod
    def describe(clusters, cluster_key):
        """One-line description of an MVTX cluster."""
        hitset_key = trkr.get_hitset_key(cluster_key)
        text = f"{cluster_key}"
        cluster = clusters.find_cluster(cluster_key)
        if cluster is not None:
            text += (
                f" position: ({cluster.local_x}, {cluster.local_y})"
                f" size: {cluster.size}"
            )

        return text + (
            f" layer: {trkr.get_layer(hitset_key)}"
            f" stave: {mvtx.get_stave_id(hitset_key)}"
            f" chip: {mvtx.get_chip_id(hitset_key)}"
            f" strobe: {mvtx.get_strobe_id(hitset_key)}"
            f" index: {trkr.get_cluster_index(cluster_key)}"
        )
