"""Sums the tower energies of two calorimeter tower containers."""

from recoflow.data import TowerInfoContainer
from recoflow.node import CompositeNode, MissingNodeError, find_first, get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode

__all__ = ["CombineTowerInfo"]


class CombineTowerInfo(SubsysReco):
    """Builds a tower container which is a copy of container A with the
    energy of each channel replaced by the sum of the energies in A and B.

    The output container is created under the detector node of `DST` (e.g.
    `DST/CEMC`) at the start of the run.

    .. code-block:: yaml

        combine_cemc:
          module: combine_tower_info
          input_node_a: TOWERINFO_CALIB_CEMC
          input_node_b: TOWERINFO_CALIB_CEMC_SIM
          output_node: TOWERINFO_CALIB_CEMC_EMBED
          detector: CEMC
    """

    name = "combine_tower_info"
    aliases = ("CombineTowerInfo",)

    def __init__(
        self, input_node_a="", input_node_b="", output_node="", detector="", **kwargs
    ):
        """Initialize the module.

        Parameters
        ----------
        input_node_a : str
            Name of the first tower container, used as a template
        input_node_b : str
            Name of the second tower container
        output_node : str
            Name of the combined tower container
        detector : str
            Name of the detector node the output is stored under
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.input_node_a = input_node_a
        self.input_node_b = input_node_b
        self.output_node = output_node
        self.detector = detector

    def init_run(self, top_node):
        if not self.input_node_a or not self.input_node_b or not self.output_node:
            raise ValueError(f"{self.name}: input/output node names not set.")

        self.create_nodes(top_node)

        return ReturnCode.EVENT_OK

    def create_nodes(self, top_node):
        """Create the output container from input container A.

        Raises
        ------
        MissingNodeError
            If the `DST` node or one of the input containers is missing
        ValueError
            If the input containers have different sizes
        """
        dst = find_first(top_node, "DST", CompositeNode.node_type)
        if dst is None:
            raise MissingNodeError("DST", "CompositeNode")

        towers_a = get_class(top_node, self.input_node_a, TowerInfoContainer)
        towers_b = get_class(top_node, self.input_node_b, TowerInfoContainer)
        if towers_b is None:
            raise MissingNodeError(self.input_node_b, "TowerInfoContainer")
        if towers_a is None:
            raise MissingNodeError(self.input_node_a, "TowerInfoContainer")

        if get_class(dst, self.output_node, TowerInfoContainer) is None:
            det_node = dst
            if self.detector:
                det_node = find_first(dst, self.detector, CompositeNode.node_type)
                if det_node is None:
                    det_node = dst.add_node(CompositeNode(self.detector))
            det_node.add_data(self.output_node, TowerInfoContainer(towers_a.size()))

        if towers_a.size() != towers_b.size():
            raise ValueError(f"{self.name}: input containers have different sizes.")

    def process_event(self, top_node):
        towers_a = get_class(top_node, self.input_node_a, TowerInfoContainer)
        towers_b = get_class(top_node, self.input_node_b, TowerInfoContainer)
        towers_out = get_class(top_node, self.output_node, TowerInfoContainer)

        towers_out.copy_from(towers_a)
        towers_out.energy[:] = towers_a.energy + towers_b.energy

        return ReturnCode.EVENT_OK
