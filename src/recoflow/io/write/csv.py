"""Module to write the job log to CSV."""

import os

__all__ = ["CSVWriter"]


class CSVWriter:
    """Writes one row of scalars per call to a CSV file.

    The columns are fixed by the keys of the first row written. It is used
    by the driver to record the time and memory usage of each event.
    """

    name = "csv"

    def __init__(
        self,
        file_name="recoflow_log.csv",
        overwrite=False,
        append=False,
        accept_missing=False,
    ):
        """Initialize the basics of the output file.

        Parameters
        ----------
        file_name : str, default 'recoflow_log.csv'
            Name of the output CSV file
        overwrite : bool, default False
            If True, overwrite the output file if it already exists
        append : bool, default False
            If True, add more rows to an existing CSV file
        accept_missing : bool, default False
            Tolerate missing keys, filled with -1
        """
        # An existing file is only reused when explicitly allowed
        if not overwrite and not append and os.path.isfile(file_name):
            raise FileExistsError(f"File with name {file_name} already exists.")

        self.file_name = file_name
        self.append_file = append
        self.accept_missing = accept_missing
        self.keys = None
        if self.append_file:
            if not os.path.isfile(file_name):
                raise FileNotFoundError(
                    f"File not found at path: {file_name}. When using "
                    "`append=True` in CSVWriter, the file must exist at "
                    "the prescribed path before data is written to it."
                )

            with open(self.file_name, "r", encoding="utf-8") as out_file:
                self.keys = out_file.readline().rstrip("\n").split(",")

    def create(self, row):
        """Write the header of the CSV file and record its columns.

        Parameters
        ----------
        row : dict
            First row to be written to the file
        """
        self.keys = list(row.keys())
        with open(self.file_name, "w", encoding="utf-8") as out_file:
            out_file.write(",".join(self.keys) + "\n")

    def append(self, row):
        """Append one row to the CSV file.

        Parameters
        ----------
        row : dict
            Dictionary of scalars, one per column
        """
        if self.keys is None:
            self.create(row)

        elif list(row.keys()) != self.keys:
            missing = self.array_diff(self.keys, row.keys())
            excess = self.array_diff(row.keys(), self.keys)
            if excess:
                raise KeyError(
                    "There are keys in this row which were not present when "
                    f"the CSV file was initialized. New keys: {sorted(excess)}"
                )
            if missing and not self.accept_missing:
                raise KeyError(
                    "There are keys missing in this row which were present "
                    f"when the CSV file was initialized: {sorted(missing)}"
                )
            row = {k: row.get(k, -1) for k in self.keys}

        with open(self.file_name, "a", encoding="utf-8") as out_file:
            out_file.write(",".join(str(row[k]) for k in self.keys) + "\n")

    @staticmethod
    def array_diff(array_x, array_y):
        """Returns the elements of the first array absent from the second."""
        return set(array_x).difference(set(array_y))
