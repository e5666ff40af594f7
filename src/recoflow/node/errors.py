"""Exceptions raised when manipulating the node tree."""

__all__ = ["NodeError", "MissingNodeError"]


class NodeError(Exception):
    """Base exception for all node tree errors."""


class MissingNodeError(NodeError):
    """Raised when a node required to set up a module cannot be found."""

    def __init__(self, name, node_type=None):
        """Initialize with the name of the missing node.

        Parameters
        ----------
        name : str
            Name of the missing node
        node_type : str, optional
            Expected type of the node
        """
        self.name = name
        self.node_type = node_type
        msg = f"Could not find node `{name}`"
        if node_type is not None:
            msg += f" of type {node_type}"
        super().__init__(msg + " in the node tree.")
