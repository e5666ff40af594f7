"""Tests of the tracker hit and cluster containers."""

import numpy as np

from recoflow.data import (
    TrkrCluster,
    TrkrClusterContainer,
    TrkrClusterHitAssoc,
    TrkrHit,
    TrkrHitSetContainer,
)
from recoflow.defs import mvtx, tpc, trkr
from recoflow.utils.enums import TrkrId


class TestTrkrHitSetContainer:
    """Test the hitset container."""

    def test_find_or_add(self):
        """A hitset is created once and then reused."""
        container = TrkrHitSetContainer()
        key = mvtx.gen_hitset_key(0, 1, 2)

        hitset = container.find_or_add_hit_set(key)
        assert container.find_or_add_hit_set(key) is hitset
        assert container.find_hit_set(key) is hitset
        assert container.size() == 1
        assert hitset.hitset_key == key

    def test_add_hit_keeps_existing(self):
        """Adding a hit under an existing key keeps the first hit."""
        hitset = TrkrHitSetContainer().find_or_add_hit_set(0)
        first = hitset.add_hit(5, TrkrHit(adc=10))
        second = hitset.add_hit(5, TrkrHit(adc=20))

        assert second is first
        assert hitset.get_hit(5).adc == 10
        assert hitset.size() == 1

    def test_get_hit_sets_by_subsystem(self):
        """Hitsets are sorted by key and can be filtered by subsystem."""
        container = TrkrHitSetContainer()
        mvtx_keys = [mvtx.gen_hitset_key(1, 0, 0), mvtx.gen_hitset_key(0, 3, 0)]
        tpc_key = tpc.gen_hitset_key(10, 2, 0)
        for key in [*mvtx_keys, tpc_key]:
            container.find_or_add_hit_set(key)

        keys = [k for k, _ in container.get_hit_sets(TrkrId.MVTX)]
        assert keys == sorted(mvtx_keys)
        assert [k for k, _ in container.get_hit_sets(TrkrId.TPC)] == [tpc_key]
        assert len(container.get_hit_sets()) == 3

    def test_remove_and_reset(self):
        container = TrkrHitSetContainer()
        container.find_or_add_hit_set(1)
        container.find_or_add_hit_set(2)

        container.remove_hit_set(1)
        container.remove_hit_set(42)
        assert container.find_hit_set(1) is None
        assert container.size() == 1

        container.reset()
        assert len(container) == 0

    def test_arrays(self):
        """The container can be flattened to arrays and rebuilt."""
        container = TrkrHitSetContainer()
        hitset = container.find_or_add_hit_set(mvtx.gen_hitset_key(0, 1, 2))
        hitset.add_hit(mvtx.gen_hit_key(3, 4), TrkrHit(adc=7))
        hitset.add_hit(mvtx.gen_hit_key(1, 2), TrkrHit(adc=9))

        arrays = container.to_arrays()
        assert len(arrays["hit_key"]) == 2

        rebuilt = TrkrHitSetContainer.from_arrays(arrays)
        hits = rebuilt.find_hit_set(hitset.hitset_key).get_hits()
        assert [k for k, _ in hits] == [mvtx.gen_hit_key(1, 2), mvtx.gen_hit_key(3, 4)]
        assert [h.adc for _, h in hits] == [9, 7]


class TestTrkrClusterContainer:
    """Test the cluster container."""

    def test_add_to_hit_set(self):
        """Clusters added to a hitset get consecutive indexes."""
        container = TrkrClusterContainer()
        hitset_key = mvtx.gen_hitset_key(0, 0, 0)

        key_a = container.add_cluster_to_hit_set(hitset_key, TrkrCluster(adc=1))
        key_b = container.add_cluster_to_hit_set(hitset_key, TrkrCluster(adc=2))

        assert key_a == trkr.gen_cluster_key(hitset_key, 0)
        assert key_b == trkr.gen_cluster_key(hitset_key, 1)
        assert container.find_cluster(key_b).adc == 2
        assert container.size() == 2

    def test_remove_cluster(self):
        """Removing the last cluster of a hitset drops the hitset key."""
        container = TrkrClusterContainer()
        hitset_key = mvtx.gen_hitset_key(0, 0, 0)
        key = container.add_cluster_to_hit_set(hitset_key, TrkrCluster())

        container.remove_cluster(key)
        container.remove_cluster(key)

        assert container.find_cluster(key) is None
        assert container.get_hit_set_keys() == []

    def test_hit_set_keys_by_layer(self):
        container = TrkrClusterContainer()
        keys = [
            mvtx.gen_hitset_key(0, 0, 0),
            mvtx.gen_hitset_key(1, 0, 0),
            tpc.gen_hitset_key(7, 0, 0),
        ]
        for key in keys:
            container.add_cluster_to_hit_set(key, TrkrCluster())

        assert container.get_hit_set_keys(TrkrId.MVTX) == keys[:2]
        assert container.get_hit_set_keys(TrkrId.MVTX, 1) == [keys[1]]
        assert container.get_hit_set_keys(TrkrId.TPC) == [keys[2]]

    def test_arrays(self):
        container = TrkrClusterContainer()
        hitset_key = tpc.gen_hitset_key(30, 1, 0)
        key = container.add_cluster_to_hit_set(
            hitset_key, TrkrCluster(local_x=0.5, position=[1.0, 2.0, 3.0], adc=12)
        )

        rebuilt = TrkrClusterContainer.from_arrays(container.to_arrays())
        cluster = rebuilt.find_cluster(key)

        assert cluster.adc == 12
        assert cluster.local_x == 0.5
        np.testing.assert_array_equal(cluster.position, [1.0, 2.0, 3.0])


class TestTrkrClusterHitAssoc:
    """Test the cluster-hit association map."""

    def test_assoc(self):
        assoc = TrkrClusterHitAssoc()
        assoc.add_assoc(1, 10)
        assoc.add_assoc(1, 11)
        assoc.add_assoc(2, 12)

        assert assoc.get_hits(1) == [10, 11]
        assert assoc.get_hits(3) == []
        assert assoc.size() == 3

        assoc.remove_assoc(1)
        assert assoc.get_hits(1) == []

    def test_arrays(self):
        assoc = TrkrClusterHitAssoc()
        assoc.add_assoc(1 << 40, 10)
        assoc.add_assoc(1 << 40, 11)

        rebuilt = TrkrClusterHitAssoc.from_arrays(assoc.to_arrays())
        assert rebuilt.get_hits(1 << 40) == [10, 11]
