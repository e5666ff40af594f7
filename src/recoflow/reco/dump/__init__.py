"""Text dumps of the node tree content."""

from .node_dump import *
