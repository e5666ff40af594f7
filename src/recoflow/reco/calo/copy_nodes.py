"""Copies event-level nodes from an input node tree into the job tree."""

from recoflow.data import (
    CentralityInfo,
    EventHeader,
    GlobalVertexMap,
    MbdOut,
    MinimumBiasInfo,
    RunHeader,
    SyncObject,
    TowerInfoContainer,
)
from recoflow.node import CompositeNode, RecoServer, get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode
from recoflow.utils.logger import logger

__all__ = ["CopyIODataNodes"]


class CopyIODataNodes(SubsysReco):
    """Copies the global event information of an input stream into the
    default node tree of the job (e.g. the headers of a data event into the
    tree in which simulated showers are embedded).

    The module runs on the source tree (set through `top_node_name`) and
    writes into the default tree of the :class:`RecoServer`. Destination
    nodes are created at the start of the run and filled for every event.
    If a source node is missing at the start of the run, its copy is
    disabled. The run header is only copied at the start of the run.
    """

    name = "copy_io_data_nodes"
    aliases = ("CopyIODataNodes",)

    # (flag, node name, class, path of the destination parent node)
    _nodes = (
        ("run_header", "RunHeader", RunHeader, ("RUN",)),
        ("event_header", "EventHeader", EventHeader, ("DST",)),
        ("centrality_info", "CentralityInfo", CentralityInfo, ("DST",)),
        ("global_vertex_map", "GlobalVertexMap", GlobalVertexMap, ("DST",)),
        ("minimum_bias_info", "MinimumBiasInfo", MinimumBiasInfo, ("DST",)),
        ("mbd_out", "MbdOut", MbdOut, ("DST", "MBD")),
        ("sync_object", "Sync", SyncObject, ("DST",)),
    )

    def __init__(
        self,
        copy_run_header=True,
        copy_event_header=True,
        copy_centrality_info=True,
        copy_global_vertex_map=True,
        copy_minimum_bias_info=True,
        copy_mbd_out=True,
        copy_sync_object=True,
        copy_tower_info=False,
        from_tower_info_name="TOWERINFO_CALIB_CEMC",
        to_tower_info_name="TOWERINFO_CALIB_CEMC",
        **kwargs,
    ):
        """Initialize the module.

        Parameters
        ----------
        copy_* : bool
            Whether to copy each of the event-level nodes
        copy_tower_info : bool, default False
            Whether to copy a tower container
        from_tower_info_name : str
            Name of the tower container in the source tree
        to_tower_info_name : str
            Name of the tower container in the destination tree
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.copy = {
            "run_header": copy_run_header,
            "event_header": copy_event_header,
            "centrality_info": copy_centrality_info,
            "global_vertex_map": copy_global_vertex_map,
            "minimum_bias_info": copy_minimum_bias_info,
            "mbd_out": copy_mbd_out,
            "sync_object": copy_sync_object,
            "tower_info": copy_tower_info,
        }
        self.from_tower_info_name = from_tower_info_name
        self.to_tower_info_name = to_tower_info_name

    def init_run(self, top_node):
        """Create the destination nodes and copy the run header."""
        to_top = RecoServer.instance().top_node
        for flag, name, cls, path in self._nodes:
            if self.copy[flag]:
                self.create_node(top_node, to_top, flag, name, name, cls, path)

        if self.copy["tower_info"]:
            self.create_node(
                top_node,
                to_top,
                "tower_info",
                self.from_tower_info_name,
                self.to_tower_info_name,
                TowerInfoContainer,
                ("DST",),
            )

        # The run header is only needed once
        if self.copy["run_header"]:
            self.copy_node(top_node, to_top, "RunHeader", "RunHeader", RunHeader)

        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        to_top = RecoServer.instance().top_node
        for flag, node_name, cls, _ in self._nodes:
            if flag != "run_header" and self.copy[flag]:
                self.copy_node(top_node, to_top, node_name, node_name, cls)

        if self.copy["tower_info"]:
            self.copy_node(
                top_node,
                to_top,
                self.from_tower_info_name,
                self.to_tower_info_name,
                TowerInfoContainer,
            )

        return ReturnCode.EVENT_OK

    def create_node(self, from_top, to_top, flag, from_name, to_name, cls, path):
        """Create an empty destination node mirroring a source node.

        Parameters
        ----------
        from_top : CompositeNode
            Top of the source tree
        to_top : CompositeNode
            Top of the destination tree
        flag : str
            Copy flag, disabled if the source node is missing
        from_name : str
            Name of the source node
        to_name : str
            Name of the destination node
        cls : type
            Class of the node content
        path : Tuple[str]
            Names of the composite nodes under which to create the node
        """
        source = get_class(from_top, from_name, cls)
        if source is None:
            logger.warning("Could not locate %s on %s.", from_name, from_top.name)
            self.copy[flag] = False
            return

        if get_class(to_top, to_name, cls) is not None:
            return

        parent = to_top
        for name in path:
            child = parent.child(name)
            if child is None:
                child = parent.add_node(CompositeNode(name))
            parent = child

        if isinstance(source, TowerInfoContainer):
            target = TowerInfoContainer(source.size())
        else:
            target = type(source)()
        parent.add_data(to_name, target)

    def copy_node(self, from_top, to_top, from_name, to_name, cls):
        """Copy the content of a source node into its destination node."""
        source = get_class(from_top, from_name, cls)
        target = get_class(to_top, to_name, cls)
        target.copy_from(source)
        if self.verbosity > 0:
            logger.info("From %s: %s", from_name, source.identify())
            logger.info("To %s: %s", to_name, target.identify())
