"""Contains the data reader base class.

Data readers are used to extract specific entries from files and store their
data products into dictionaries, which the driver then places in the node
tree.
"""

import glob
import os

import numpy as np

from recoflow.io.file_handler import InputFileHandler
from recoflow.utils.logger import logger


class ReaderBase(InputFileHandler):
    """Parent reader class which provides common functions between all readers.

    This class provides these basic functions:
    1. Method to parse the requested file keys and list files into a list of
       paths to existing files (throws if nothing is found)
    2. Method to produce a list of entries in the file(s) as selected by the
       provided parameters, checks that they exist (throws if they do not)
    3. Essential `__len__` and `__getitem__` methods. Must define the
       `get` function in the inheriting class for both of them to work.

    Attributes
    ----------
    name : str
        Name of the reader, as requested in the configuration
    num_entries : int
        Total number of entries in the files provided
    entry_index : np.ndarray
        List of global indexes to cycle through
    file_paths : List[str]
        List of files to read data from
    file_offsets : np.ndarray
        Offsets between the global index and each individual file start index
    file_index : np.ndarray
        Index of the file each entry lives in
    """

    name = ""
    num_entries = None
    entry_index = None
    file_paths = None
    file_offsets = None
    file_index = None

    def __len__(self):
        return len(self.entry_index)

    def __getitem__(self, idx):
        return self.get(idx)

    def get(self, idx):
        """Placeholder to be defined by the daughter class."""
        raise NotImplementedError

    def count_entries(self, file_name):
        """Placeholder to be defined by the daughter class.

        Returns the number of entries in a file, or -1 if it is not readable.
        """
        raise NotImplementedError

    def file_open(self, file_name):
        num_entries = self.count_entries(file_name)
        if num_entries < 0:
            return False

        self.file_paths.append(file_name)
        self.file_entries.append(num_entries)

        return True

    def process_file_paths(
        self, file_keys=None, list_files=None, repeat=0, max_print_files=10
    ):
        """Process the list of files.

        Parameters
        ----------
        file_keys : Union[str, List[str]], optional
            Paths (or glob patterns) to the input files
        list_files : Union[str, List[str]], optional
            Paths to text files with one input file path per line
        repeat : int, default 0
            Number of times a file is put back at the end of the list once it
            has been registered
        max_print_files : int, default 10
            Maximum number of loaded file names to be printed
        """
        # Some basic checks
        assert (
            file_keys is not None or list_files is not None
        ), "No input `file_keys` or `list_files` provided, abort."
        assert repeat >= 0, "Files cannot be repeated forever by a reader."

        # Register the files
        if isinstance(file_keys, str):
            file_keys = [file_keys]
        for file_key in file_keys or []:
            file_paths = sorted(glob.glob(file_key))
            assert file_paths, f"File key {file_key} yielded no compatible path."
            for path in file_paths:
                self.add_file(path)

        if isinstance(list_files, str):
            list_files = [list_files]
        for list_file in list_files or []:
            self.add_list_file(list_file)

        # Open each file in turn, only keep those which are readable
        self.repeat = repeat
        self.file_paths, self.file_entries = [], []
        while self.open_next_file():
            self.update_file_list()

        assert self.file_paths, "None of the input files could be opened."

        # Print out the list of loaded files
        num_files = len(self.file_paths)
        file_list = " - " + "\n - ".join(self.file_paths[:max_print_files])
        file_list += "\n ... \n" if num_files > max_print_files else "\n"
        logger.info("Will load %d file(s):\n%s", num_files, file_list)

        # Build a map from the global entry index to the file index
        self.file_offsets = np.concatenate([[0], np.cumsum(self.file_entries)[:-1]])
        self.file_offsets = self.file_offsets.astype(np.int64)
        self.file_index = np.repeat(np.arange(num_files), self.file_entries)
        self.num_entries = int(np.sum(self.file_entries))

        logger.info("Total number of entries in the file(s): %d\n", self.num_entries)

    def process_entry_list(
        self, n_entry=None, n_skip=None, entry_list=None, skip_entry_list=None
    ):
        """Create a list of entries that can be accessed by :meth:`__getitem__`.

        Parameters
        ----------
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : list, optional
            List of integer entry IDs to add to the index
        skip_entry_list : list, optional
            List of integer entry IDs to skip from the index
        """
        # Make sure the parameters are sensible
        assert (n_entry is None and n_skip is None) or (
            entry_list is None and skip_entry_list is None
        ), (
            "Cannot specify `n_entry` or `n_skip` at the same time "
            "as `entry_list` or `skip_entry_list`."
        )
        assert not entry_list or not skip_entry_list, (
            "Cannot specify both `entry_list` and "
            "`skip_entry_list` at the same time."
        )

        entry_index = np.arange(self.num_entries, dtype=np.int64)
        if n_entry is not None or n_skip is not None:
            n_skip = n_skip if n_skip else 0
            entry_index = entry_index[n_skip:]
            if n_entry is not None and n_entry > -1:
                entry_index = entry_index[:n_entry]

        elif entry_list:
            entry_list = self.parse_entry_list(entry_list)
            assert np.all(
                entry_list < self.num_entries
            ), "Values in entry_list outside of bounds."
            entry_index = entry_index[entry_list]

        elif skip_entry_list:
            skip_entry_list = self.parse_entry_list(skip_entry_list)
            assert np.all(
                skip_entry_list < self.num_entries
            ), "Values in skip_entry_list outside of bounds."
            entry_mask = np.ones(self.num_entries, dtype=bool)
            entry_mask[skip_entry_list] = False
            entry_index = entry_index[entry_mask]

        assert len(entry_index), "Must at least have one entry to load."

        logger.info("Total number of entries selected: %d\n", len(entry_index))

        self.entry_index = entry_index

    def get_file_path(self, idx):
        """Returns the path to the file corresponding to a specific entry."""
        return self.file_paths[self.get_file_index(idx)]

    def get_file_index(self, idx):
        """Returns the index of the file corresponding to a specific entry."""
        return self.file_index[self.entry_index[idx]]

    def get_file_entry_index(self, idx):
        """Returns the index of an entry within the file it lives in,
        provided a global index over the list of files.

        Parameters
        ----------
        idx : int
            Integer entry ID to access

        Returns
        -------
        int
            Index of the entry in the file
        """
        file_idx = self.get_file_index(idx)
        return int(self.entry_index[idx] - self.file_offsets[file_idx])

    @staticmethod
    def parse_entry_list(list_source):
        """Parses a list into an np.ndarray.

        The list can be passed as a simple python list or a path to a file
        which contains space or comma separated numbers.

        Parameters
        ----------
        list_source : Union[list, str]
            List as a python list or a text file path

        Returns
        -------
        np.ndarray
            List as a numpy array
        """
        if not isinstance(list_source, str):
            return np.asarray(list_source, dtype=np.int64)

        assert os.path.isfile(
            list_source
        ), "The list source must either be a list or a path to a text file."
        with open(list_source, "r", encoding="utf-8") as in_file:
            text = in_file.read().replace(",", " ")

        return np.array(text.split(), dtype=np.int64)
