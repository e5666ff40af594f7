"""Input/output tools.

- `file_handler`: Input file lists (list files, repeats, opening scripts)
- `read`: Readers which load events from HDF5 files
- `write`: Writers which store events to HDF5 files and logs to CSV files
"""

from .factories import reader_factory, writer_factory
from .file_handler import InputFileHandler
