"""Stores the information needed to synchronize independent input streams."""

from recoflow.data import SyncObject
from recoflow.node import RecoConsts, RecoServer, get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode

__all__ = ["SyncReco"]


class SyncReco(SubsysReco):
    """Fills the `Sync` node with the event counter, event number, run number
    and segment number of each event.

    Attributes
    ----------
    forced_segment : int
        Segment number which overrides the `RUNSEGMENT` flag, if non-negative.
        Used when reusing input files which set their own segment number.
    """

    name = "sync"
    aliases = ("SyncReco",)

    def __init__(self, forced_segment=-1, **kwargs):
        super().__init__(**kwargs)
        self.forced_segment = forced_segment

    def init(self, top_node):
        dst = top_node.child("DST")
        if get_class(dst, "Sync", SyncObject) is None:
            dst.add_data("Sync", SyncObject())

        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        server = RecoServer.instance()
        sync = get_class(top_node, "Sync", SyncObject)
        sync.event_counter = server.event_counter
        sync.event_number = server.event_number
        sync.run_number = server.run_number
        if self.forced_segment >= 0:
            sync.segment_number = self.forced_segment
        elif RecoConsts.flag_exists("RUNSEGMENT"):
            sync.segment_number = RecoConsts.get_int_flag("RUNSEGMENT")

        return ReturnCode.EVENT_OK
