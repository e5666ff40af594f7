"""Manages a singleton holding the state of the event loop."""

from typing import Dict, Optional

from .tree import CompositeNode, make_top_node

__all__ = ["RecoServer"]


class RecoServer:
    """Event loop state shared by every module of a job.

    A job may own several independent node trees (e.g. one per input stream
    when embedding). The default tree is named `TOP`.

    Attributes
    ----------
    top_node : CompositeNode
        Top of the default node tree
    run_number : int
        Run number of the event being processed
    event_number : int
        Event number of the event being processed
    event_counter : int
        Number of events processed so far in the job
    """

    _instance: Optional["RecoServer"] = None

    def __init__(self, top_node: Optional[CompositeNode] = None):
        top_node = top_node if top_node is not None else make_top_node()
        self.top_nodes: Dict[str, CompositeNode] = {top_node.name: top_node}
        self.top_node = top_node
        self.run_number = 0
        self.event_number = 0
        self.event_counter = 0

    @classmethod
    def instance(cls) -> "RecoServer":
        """Returns the server instance, creating it if needed."""
        if cls._instance is None:
            cls._instance = cls()

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the server instance (useful for testing)."""
        cls._instance = None

    def get_top_node(self, name=None) -> CompositeNode:
        """Returns a node tree by name, creating it if needed.

        Parameters
        ----------
        name : str, optional
            Name of the tree. If not specified, returns the default tree.

        Returns
        -------
        CompositeNode
            Top node of the tree
        """
        if name is None:
            return self.top_node
        if name not in self.top_nodes:
            self.top_nodes[name] = make_top_node(name)

        return self.top_nodes[name]

    def reset_event(self):
        """Reset the per-event data of every tree."""
        for top_node in self.top_nodes.values():
            top_node.reset()
