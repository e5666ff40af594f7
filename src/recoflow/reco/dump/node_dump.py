"""Writes a text description of selected nodes for each event."""

import os

from recoflow.node import DataNode, RecoServer, find_first
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode
from recoflow.utils.logger import logger

__all__ = ["NodeDump"]


class NodeDump(SubsysReco):
    """Appends the `identify()` text of each selected node to a
    `<output_dir>/<node>.list` file, once per event.

    Useful to compare the content of two processings of the same input
    with a plain `diff`.
    """

    name = "node_dump"
    aliases = ("NodeDump", "dumper")

    def __init__(self, nodes=None, output_dir=".", **kwargs):
        """Initialize the dumper.

        Parameters
        ----------
        nodes : List[str], optional
            Names of the data nodes to dump. If not specified, all data nodes
            found under `DST` at the start of the run are dumped.
        output_dir : str, default '.'
            Directory where to write the dump files
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.nodes = list(nodes) if nodes is not None else None
        self.output_dir = output_dir
        self.files = {}

    def init_run(self, top_node):
        if self.nodes is None:
            self.nodes = [n.name for n in self.iter_data(top_node.child("DST"))]

        os.makedirs(self.output_dir, exist_ok=True)
        for name in self.nodes:
            if name not in self.files:
                path = os.path.join(self.output_dir, f"{name}.list")
                self.files[name] = open(path, "w", encoding="utf-8")

        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        server_event = self.event_header()
        for name, out_file in self.files.items():
            node = find_first(top_node, name, DataNode.node_type)
            if node is None:
                if self.verbosity > 0:
                    logger.warning("%s: could not find node %s.", self.name, name)
                continue

            out_file.write(f"{server_event}\n")
            out_file.write(f"{self.describe(node.data)}\n")

        return ReturnCode.EVENT_OK

    def end(self, top_node):
        for out_file in self.files.values():
            out_file.close()
        self.files = {}

        return ReturnCode.EVENT_OK

    @classmethod
    def describe(cls, data):
        """Text description of a node payload.

        Records provide their own `identify()`. Dictionaries are listed one
        entry per line, sorted by key. Anything else falls back to `repr`.
        """
        if hasattr(data, "identify"):
            return data.identify()
        if isinstance(data, dict):
            lines = [f"{type(data).__name__}: {len(data)} entries"]
            for key in sorted(data):
                lines.append(f"{key}: {cls.describe(data[key])}")
            return "\n".join(lines)

        return repr(data)

    @staticmethod
    def event_header():
        """Returns the line which separates two events in the dump files."""
        server = RecoServer.instance()
        return f"RUN {server.run_number} EVENT {server.event_number}"

    @classmethod
    def iter_data(cls, node):
        """Recursively yields the data nodes below a composite node."""
        if node is None:
            return
        for child in node:
            if isinstance(child, DataNode):
                yield child
            else:
                yield from cls.iter_data(child)
