"""Contains a reader class dedicated to loading events from HDF5 files."""

import h5py
import numpy as np
import yaml

from recoflow.data import DATA_DICT
from recoflow.utils.logger import logger

from .base import ReaderBase

__all__ = ["HDF5Reader"]


class HDF5Reader(ReaderBase):
    """Class which reads events stored in HDF5 files.

    The files must be structured as follows:
      - An `info` group with the version and configuration of the job which
        produced the file as attributes
      - A `run` group with one group per run-level node
      - An `events` group with one group per event (named after the entry
        index), itself holding one group per event-level node

    Each node group holds one dataset per array of the stored object and the
    name of its class under the `class_name` attribute. Each event group
    holds its run and event numbers as attributes.

    Typical configuration should look like:

    .. code-block:: yaml

        io:
          reader:
            name: hdf5
            file_keys: /path/to/files_*.h5
            n_entry: 100
    """

    name = "hdf5"

    def __init__(
        self,
        file_keys=None,
        list_files=None,
        repeat=0,
        max_print_files=10,
        n_entry=None,
        n_skip=None,
        entry_list=None,
        skip_entry_list=None,
        nodes=None,
        skip_nodes=None,
        opening_script="",
        opening_args="",
        verbosity=0,
    ):
        """Initalize the HDF5 file reader.

        Parameters
        ----------
        file_keys : Union[str, List[str]], optional
            Paths (or glob patterns) to the HDF5 files to be read
        list_files : Union[str, List[str]], optional
            Paths to text files which list the HDF5 files to be read
        repeat : int, default 0
            Number of times a file is repeated at the end of the list
        max_print_files : int, default 10
            Maximum number of loaded file names to be printed
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : list, optional
            List of integer entry IDs to add to the index
        skip_entry_list : list, optional
            List of integer entry IDs to skip from the index
        nodes : List[str], optional
            Names of the event-level nodes to load. If not specified, load all
        skip_nodes : List[str], optional
            Names of the event-level nodes not to load
        opening_script : str, optional
            Executable run before opening each file
        opening_args : str, optional
            Arguments passed to the opening script
        verbosity : int, default 0
            Verbosity level
        """
        super().__init__(verbosity=verbosity)
        assert (
            nodes is None or skip_nodes is None
        ), "Must not specify both `nodes` and `skip_nodes`."
        self.nodes = nodes
        self.skip_nodes = skip_nodes or []
        self.opening_script = opening_script
        self.opening_args = opening_args

        # Process the list of files
        self.process_file_paths(file_keys, list_files, repeat, max_print_files)

        # Process the entry list
        self.process_entry_list(n_entry, n_skip, entry_list, skip_entry_list)

        # Process the configuration used to produce the HDF5 file
        self.cfg = self.process_cfg()

        # Process the release version used to produced the HDF5 file
        self.version = self.process_version()

    def count_entries(self, file_name):
        """Returns the number of events in a file, -1 if it is not readable."""
        try:
            with h5py.File(file_name, "r") as in_file:
                if "events" not in in_file:
                    logger.warning("File %s does not contain events.", file_name)
                    return -1

                return len(in_file["events"])

        except OSError:
            return -1

    def process_cfg(self):
        """Fetches the configuration used to produce the HDF5 file.

        Returns
        -------
        dict
            Configuration dictionary, None if it was not stored
        """
        with h5py.File(self.file_paths[0], "r") as in_file:
            if "info" not in in_file or "cfg" not in in_file["info"].attrs:
                return None
            cfg_str = in_file["info"].attrs["cfg"]

        return yaml.safe_load(cfg_str)

    def process_version(self):
        """Returns the release version used to produce the HDF5 file."""
        with h5py.File(self.file_paths[0], "r") as in_file:
            if "info" not in in_file:
                return None

            return in_file["info"].attrs.get("version", None)

    def get(self, idx):
        """Returns a specific entry in the file.

        Parameters
        ----------
        idx : int
            Integer entry ID to access

        Returns
        -------
        dict
            Dictionary with the following keys:
            - `index`: global entry index
            - `run_number`, `event_number`: event identification
            - `run`: run-level objects, by node name
            - `dst`: event-level objects, by node name
        """
        # Get the appropriate entry index
        assert idx < len(self.entry_index)
        file_idx = self.get_file_index(idx)
        entry_idx = self.get_file_entry_index(idx)

        with h5py.File(self.file_paths[file_idx], "r") as in_file:
            run = {}
            if "run" in in_file:
                for name, group in in_file["run"].items():
                    run[name] = self.load_object(group)

            event = in_file["events"][str(entry_idx)]
            dst = {}
            for name, group in event.items():
                if self.nodes is not None and name not in self.nodes:
                    continue
                if name in self.skip_nodes:
                    continue
                dst[name] = self.load_object(group)

            data = {
                "index": int(self.entry_index[idx]),
                "run_number": int(event.attrs.get("run_number", 0)),
                "event_number": int(event.attrs.get("event_number", entry_idx)),
                "run": run,
                "dst": dst,
            }

        return data

    @staticmethod
    def load_object(group):
        """Build an object back from its HDF5 group.

        Parameters
        ----------
        group : h5py.Group
            Group which holds one dataset per array of the object

        Returns
        -------
        object
            Rebuilt object
        """
        class_name = group.attrs["class_name"]
        if isinstance(class_name, bytes):
            class_name = class_name.decode()
        assert class_name in DATA_DICT, f"Unknown stored class: {class_name}"

        arrays = {}
        for key, dataset in group.items():
            value = dataset[()]
            if isinstance(value, bytes):
                value = value.decode()
            elif isinstance(value, np.ndarray) and value.dtype == object:
                value = np.array(
                    [v.decode() if isinstance(v, bytes) else v for v in value]
                )
            arrays[key] = value

        return DATA_DICT[class_name].from_arrays(arrays)
