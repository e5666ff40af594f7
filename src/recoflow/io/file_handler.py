"""Management of the list of input files of an input stream."""

import os
import stat
import subprocess as sc
from typing import List

from recoflow.utils.logger import logger

__all__ = ["InputFileHandler"]


class InputFileHandler:
    """Keeps track of the input files of an input stream.

    Files are opened in the order in which they are added. Once a file has
    been processed, :meth:`update_file_list` moves on to the next one, or
    puts the file back at the end of the list if it is to be repeated.

    Attributes
    ----------
    file_list : List[str]
        Files left to open
    file_list_copy : List[str]
        All the files ever added, used to reset the list
    file_list_opened : List[str]
        Files which were successfully opened
    repeat : int
        Number of times files are put back at the end of the list. If
        negative, files are repeated forever.
    opening_script : str
        Executable run before opening each file
    opening_args : str
        Arguments passed to the opening script, before the file name
    """

    def __init__(self, verbosity=0):
        """Initialize an empty file list.

        Parameters
        ----------
        verbosity : int, default 0
            Verbosity level
        """
        self.verbosity = verbosity
        self.file_list: List[str] = []
        self.file_list_copy: List[str] = []
        self.file_list_opened: List[str] = []
        self.file_name = ""
        self.repeat = 0
        self.is_open = False
        self.opening_script = ""
        self.opening_args = ""

    @property
    def file_list_empty(self):
        return not self.file_list

    def add_file(self, file_name):
        """Append one file to the list of files to open."""
        if self.verbosity > 0:
            logger.info("Adding %s to the list of input files.", file_name)
        self.file_list.append(file_name)
        self.file_list_copy.append(file_name)

    def add_list_file(self, list_name):
        """Append the files listed in a text file.

        Empty lines and lines starting with `#` are ignored.

        Parameters
        ----------
        list_name : str
            Path to the text file with one file path per line

        Returns
        -------
        int
            Number of files added to the list
        """
        if not os.path.exists(list_name):
            raise FileNotFoundError(f"Could not open list file: {list_name}")
        if not os.path.isfile(list_name):
            raise ValueError(f"{list_name} is not a regular file.")

        with open(list_name, "r", encoding="utf-8", errors="replace") as in_file:
            lines = in_file.read().splitlines()

        num_files = 0
        for line in lines:
            if not line.isprintable():
                raise ValueError(
                    f"File {list_name} contains non printable characters, "
                    "it is likely a binary file."
                )
            if line.startswith("#"):
                if self.verbosity > 0:
                    logger.info("Found comment: %s", line)
            elif line:
                self.add_file(line)
                num_files += 1

        if num_files == 0:
            logger.warning("List file %s does not contain file names.", list_name)

        return num_files

    def file_open(self, file_name):
        """Open one file.

        Parameters
        ----------
        file_name : str
            Path to the file to open

        Returns
        -------
        bool
            `True` if the file was opened successfully
        """
        logger.info("Opening %s", file_name)
        return True

    def open_next_file(self):
        """Open the next file in the list which can be opened.

        Files which cannot be opened are removed from the list.

        Returns
        -------
        bool
            `True` if a file was opened, `False` if the list is exhausted
        """
        while self.file_list:
            file_name = self.file_list[0]
            if self.verbosity > 0:
                logger.info("Opening next file: %s", file_name)

            if self.opening_script:
                args = [file_name]
                if self.file_name:
                    args.append(self.file_name)
                if self.run_before_opening(args):
                    logger.warning("Script run before opening %s failed.", file_name)

            if self.file_open(file_name):
                self.file_list_opened.append(file_name)
                return True

            logger.warning("Could not open file: %s", file_name)
            self.file_list.pop(0)

        return False

    def update_file_list(self):
        """Move on from the current file, repeating it if requested."""
        if not self.file_list:
            return

        file_name = self.file_list.pop(0)
        if self.repeat:
            self.file_list.append(file_name)
            if self.repeat > 0:
                self.repeat -= 1

    def reset_file_list(self):
        """Restore the list of all the files ever added."""
        if not self.file_list_copy:
            raise ValueError("Cannot reset a file list which was never filled.")

        self.file_list = list(self.file_list_copy)

    def run_before_opening(self, args):
        """Run the opening script with the provided arguments.

        Parameters
        ----------
        args : List[str]
            Arguments appended to the script command (typically file names)

        Returns
        -------
        int
            Exit status of the script. -1 if the script does not exist or is
            not executable by its owner.
        """
        if not self.opening_script:
            return 0

        if not os.path.exists(self.opening_script):
            logger.error("Script %s not found.", self.opening_script)
            return -1

        if not os.stat(self.opening_script).st_mode & stat.S_IXUSR:
            logger.error("Script %s is not owner executable.", self.opening_script)
            return -1

        cmd = [self.opening_script, *self.opening_args.split(), *args]
        if self.verbosity > 1:
            logger.info("Running %s", " ".join(cmd))

        return sc.run(cmd, check=False).returncode

    def print_files(self):
        """Returns the list of files left to open, one per line."""
        return "file list:\n" + "\n".join(self.file_list)
