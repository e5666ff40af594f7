"""Module to write the content of the node tree to file."""

import os

import h5py
import numpy as np
import yaml

from recoflow.node import CompositeNode, DataNode
from recoflow.version import __version__

__all__ = ["HDF5Writer"]


class HDF5Writer:
    """Writes the persistent nodes of the tree to an HDF5 file.

    Event-level nodes (under `DST`) are written once per accepted event,
    run-level nodes (under `RUN`) are rewritten at the end of each run. Only
    objects which can be converted to arrays are stored (geometry objects are
    not).

    Typical configuration should look like:

    .. code-block:: yaml

        io:
          ...
          writer:
            name: hdf5
            file_name: output.h5
            nodes:
              - TRKR_CLUSTER
              - SVTX_TRACK_MAP
              - ...
    """

    name = "hdf5"

    def __init__(
        self, file_name=None, nodes=None, skip_nodes=None, overwrite=False, prefix=None
    ):
        """Initializes the basics of the output file.

        Parameters
        ----------
        file_name : str, optional
            Name of the output HDF5 file
        nodes : List[str], optional
            Names of the event-level nodes to store. If not specified, store
            every persistent node.
        skip_nodes : List[str], optional
            Names of the event-level nodes not to store
        overwrite : bool, default False
            If `True`, overwrite the output file if it already exists
        prefix : str, optional
            Input file prefix. It will be use to form the output file name,
            provided that no file_name is explicitely provided
        """
        # If the output file name is not provided, use the input file prefix
        if not file_name:
            assert prefix is not None, (
                "If the output `file_name` is not provided, must provide "
                "the input file `prefix` to build it from."
            )
            file_name = f"{prefix}_recoflow.h5"

        # Check that the output file does not already exist, if requested
        if not overwrite and os.path.isfile(file_name):
            raise FileExistsError(f"File with name {file_name} already exists.")

        assert (
            nodes is None or skip_nodes is None
        ), "Must not specify both `nodes` and `skip_nodes`."

        self.file_name = file_name
        self.nodes = nodes
        self.skip_nodes = skip_nodes or []
        self.ready = False
        self.num_events = 0

    def create(self, cfg=None):
        """Create the output file structure.

        Parameters
        ----------
        cfg : dict, optional
            Dictionary containing the complete job configuration
        """
        with h5py.File(self.file_name, "w") as out_file:
            info = out_file.create_group("info")
            info.attrs["version"] = __version__
            if cfg is not None:
                info.attrs["cfg"] = yaml.dump(cfg)

            out_file.create_group("run")
            out_file.create_group("events")

        self.ready = True
        self.num_events = 0

    def __call__(self, top_node, run_number, event_number, cfg=None):
        """Append one event to the output file.

        Parameters
        ----------
        top_node : CompositeNode
            Top of the tree to write out
        run_number : int
            Run number of the event
        event_number : int
            Event number of the event
        cfg : dict, optional
            Dictionary containing the complete job configuration
        """
        if not self.ready:
            self.create(cfg)

        with h5py.File(self.file_name, "a") as out_file:
            event = out_file["events"].create_group(str(self.num_events))
            event.attrs["run_number"] = run_number
            event.attrs["event_number"] = event_number
            for node in self.get_data_nodes(top_node.child("DST")):
                if self.nodes is not None and node.name not in self.nodes:
                    continue
                if node.name in self.skip_nodes:
                    continue
                self.store_object(event, node.name, node.data)

        self.num_events += 1

    def write_run(self, top_node, cfg=None):
        """Store the run-level nodes, replacing those already stored.

        Parameters
        ----------
        top_node : CompositeNode
            Top of the tree to write out
        cfg : dict, optional
            Dictionary containing the complete job configuration
        """
        if not self.ready:
            self.create(cfg)

        with h5py.File(self.file_name, "a") as out_file:
            run = out_file["run"]
            for node in self.get_data_nodes(top_node.child("RUN")):
                if node.name in run:
                    del run[node.name]
                self.store_object(run, node.name, node.data)

    @classmethod
    def get_data_nodes(cls, node):
        """Returns the persistent data nodes below a composite node which
        hold objects that can be stored.

        Parameters
        ----------
        node : CompositeNode
            Node to start the search from

        Returns
        -------
        List[DataNode]
            List of data nodes
        """
        nodes = []
        if node is None:
            return nodes
        for child in node:
            if isinstance(child, CompositeNode):
                nodes.extend(cls.get_data_nodes(child))
            elif (
                isinstance(child, DataNode)
                and child.persistent
                and hasattr(child.data, "to_arrays")
            ):
                nodes.append(child)

        return nodes

    @staticmethod
    def store_object(parent, name, obj):
        """Store one object as a group of datasets.

        Parameters
        ----------
        parent : h5py.Group
            Group under which to store the object
        name : str
            Name of the node which holds the object
        obj : object
            Object to store
        """
        group = parent.create_group(name)
        group.attrs["class_name"] = type(obj).__name__
        for key, value in obj.to_arrays().items():
            if isinstance(value, str):
                group.create_dataset(key, data=value)
            else:
                group.create_dataset(key, data=np.asarray(value))
