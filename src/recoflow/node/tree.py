"""Node tree classes and lookup functions."""

from collections import OrderedDict
from typing import Optional

from .errors import NodeError

__all__ = ["CompositeNode", "DataNode", "find_first", "get_class", "make_top_node"]


class Node:
    """Base class of all nodes.

    Attributes
    ----------
    name : str
        Name of the node, unique among its siblings
    """

    node_type = ""

    def __init__(self, name):
        self.name = name
        self.parent = None

    def path(self):
        """Returns the full path of the node from the top of its tree."""
        if self.parent is None:
            return f"/{self.name}"
        return f"{self.parent.path()}/{self.name}"


class DataNode(Node):
    """Leaf node which wraps one object.

    Attributes
    ----------
    data : object
        Wrapped object
    persistent : bool
        Whether the object is written out by the output managers
    """

    node_type = "data"

    def __init__(self, name, data, persistent=True):
        super().__init__(name)
        self.data = data
        self.persistent = persistent

    def reset(self):
        """Reset the wrapped object if it holds per-event information."""
        if getattr(self.data, "reset_per_event", False):
            self.data.reset()


class CompositeNode(Node):
    """Node which holds an ordered set of uniquely-named children."""

    node_type = "composite"

    def __init__(self, name):
        super().__init__(name)
        self._children = OrderedDict()

    def __iter__(self):
        return iter(self._children.values())

    def __contains__(self, name):
        return name in self._children

    def __len__(self):
        return len(self._children)

    def add_node(self, node):
        """Add a child node.

        Parameters
        ----------
        node : Node
            Node to add under this one

        Returns
        -------
        Node
            Added node
        """
        if node.name in self._children:
            raise NodeError(
                f"A node named `{node.name}` already exists under {self.path()}."
            )
        node.parent = self
        self._children[node.name] = node

        return node

    def add_data(self, name, data, persistent=True):
        """Wrap an object in a data node and add it as a child."""
        return self.add_node(DataNode(name, data, persistent))

    def remove_node(self, name):
        """Remove a child node, if it exists."""
        node = self._children.pop(name, None)
        if node is not None:
            node.parent = None

        return node

    def child(self, name) -> Optional[Node]:
        return self._children.get(name)

    def reset(self):
        """Recursively reset all the data nodes under this one."""
        for node in self:
            node.reset()

    def print_tree(self, indent=0):
        """Returns a text representation of the tree below this node."""
        lines = [" " * indent + f"{self.name} ({self.node_type})"]
        for node in self:
            if isinstance(node, CompositeNode):
                lines.append(node.print_tree(indent + 2))
            else:
                kind = type(node.data).__name__
                lines.append(" " * (indent + 2) + f"{node.name} ({kind})")

        return "\n".join(lines)


def find_first(top, name, node_type=None):
    """Depth-first search of the first node with a given name.

    Parameters
    ----------
    top : CompositeNode
        Node to start the search from (it is itself a candidate)
    name : str
        Name of the node to find
    node_type : str, optional
        If specified, only match nodes of this type ('composite' or 'data')

    Returns
    -------
    Node
        First matching node, None if there is none
    """
    if top.name == name and (node_type is None or top.node_type == node_type):
        return top

    if isinstance(top, CompositeNode):
        for node in top:
            match = find_first(node, name, node_type)
            if match is not None:
                return match

    return None


def get_class(top, name, cls):
    """Fetch an object from the tree by node name and type.

    Parameters
    ----------
    top : CompositeNode
        Node to start the search from
    name : str
        Name of the data node
    cls : Union[type, Tuple[type]]
        Expected type of the wrapped object

    Returns
    -------
    object
        Wrapped object, None if the node does not exist or holds an object
        of another type
    """
    node = find_first(top, name, DataNode.node_type)
    if node is None or not isinstance(node.data, cls):
        return None

    return node.data


def make_top_node(name="TOP"):
    """Build an empty job tree with its standard composite nodes.

    Returns
    -------
    CompositeNode
        Top node with `DST`, `RUN` and `PAR` children
    """
    top = CompositeNode(name)
    for child in ("DST", "RUN", "PAR"):
        top.add_node(CompositeNode(child))

    return top
