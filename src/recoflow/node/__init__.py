"""Shared, named and typed object graph used to exchange data between modules.

The tree is made of composite nodes (directories) and data nodes (leaves
which wrap one object). A job tree is rooted at `TOP` and contains three
standard composite nodes:

- `DST`: per-event data, reset at the end of each event
- `RUN`: per-run data (run header, geometry, flags)
- `PAR`: parameters
"""

from .consts import RecoConsts
from .errors import MissingNodeError, NodeError
from .server import RecoServer
from .tree import CompositeNode, DataNode, find_first, get_class, make_top_node
