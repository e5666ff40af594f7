"""Construct a reconstruction module class from its name."""

from recoflow.utils.factory import instantiate, module_dict

from . import calo, dump, ffa, gen, mvtx, qa, skim, tpc
from .base import SubsysReco

# Build a dictionary of available reconstruction modules
RECO_DICT = {}
for module in [ffa, mvtx, tpc, qa, gen, calo, skim, dump]:
    for key, cls in module_dict(module).items():
        if issubclass(cls, SubsysReco):
            RECO_DICT[key] = cls


def reco_factory(name, cfg):
    """Instantiates a reconstruction module from a configuration dictionary.

    The class is given by the `module` field of the configuration block, or
    by the name of the block itself if there is no such field.

    Parameters
    ----------
    name : str
        Name of the reconstruction module instance
    cfg : dict
        Reconstruction module configuration

    Returns
    -------
    SubsysReco
        Initialized reconstruction module
    """
    # An empty block only provides the class name
    cfg = dict(cfg) if cfg is not None else {}
    cfg.setdefault("module", name)

    return instantiate(RECO_DICT, cfg, alt_name="module", name=name)
