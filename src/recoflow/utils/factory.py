"""Contains functions needed to instantiate a class from a dictionary.

This allows to generically convert a YAML block into an instantiated
reconstruction module, reader or writer, with the appropriate checks that the
requested class exists and receives valid arguments.
"""

from copy import deepcopy

from .logger import logger

__all__ = ["module_dict", "instantiate"]


def module_dict(module, pattern=None):
    """Converts a module into a dictionary which maps names onto classes.

    Each class is registered under its class name, its `name` attribute (if
    it is not empty) and any of its `aliases`.

    Parameters
    ----------
    module : module
        Module from which to fetch the classes
    pattern : str, optional
        If specified, only keep classes which contain this pattern in their name

    Returns
    -------
    dict
        Dictionary which maps acceptable class names to classes themselves
    """
    # Loop over the public objects of the module
    classes = {}
    cls_names = getattr(module, "__all__", dir(module))
    for cls_name in cls_names:
        if cls_name[0] == "_":
            continue

        cls = getattr(module, cls_name)
        if not isinstance(cls, type):
            continue
        if pattern is not None and pattern not in cls.__name__:
            continue

        # Only consider classes which belong to the module of interest
        if module.__name__ not in cls.__module__:
            continue

        classes[cls_name] = cls
        if getattr(cls, "name", None):
            classes[cls.name] = cls
        for alias in getattr(cls, "aliases", ()):
            classes[alias] = cls

    return classes


def instantiate(module_dict, cfg, alt_name=None, **kwargs):
    """Instantiates a class based on a configuration dictionary and a
    dictionary of possible classes to chose from.

    The configuration block is expected to be of the form:

    .. code-block:: yaml

        module:
          name: class_name
          kwarg_1: value_1
          kwarg_2: value_2
          ...

    The `name` field can have a different key, as long as it is specified.

    Parameters
    ----------
    module_dict : dict
        Dictionary which maps a class name onto an object class.
    cfg : Union[str, dict]
        Configuration dictionary, or simply the name of the class
    alt_name : str, optional
        Key under which the class name can be specified, beside 'name' itself
    **kwargs : dict, optional
        Additional parameters to pass to the class constructor

    Returns
    -------
    object
        Instantiated object
    """
    # A bare string is a class name with no parameters
    if isinstance(cfg, str):
        cfg = {"name": cfg}

    # Get the name of the class, check that it exists
    config = deepcopy(cfg)
    if alt_name is not None and alt_name in config:
        class_name = config.pop(alt_name)
    else:
        if "name" not in config:
            raise KeyError("Could not find the name of the class under `name`.")
        class_name = config.pop("name")

    if class_name not in module_dict:
        raise ValueError(
            f"Could not find '{class_name}' in the dictionary which maps "
            f"names to classes. Available names: {list(module_dict.keys())}"
        )

    # Parameters provided at the top level and explicitly cannot overlap
    for key in config:
        if key in kwargs:
            raise ValueError(
                f"The keyword argument `{key}` is provided both in the "
                "configuration and explicitly. Ambiguous."
            )
    kwargs.update(config)

    # Initialize
    cls = module_dict[class_name]
    try:
        return cls(**kwargs)

    except Exception as err:
        logger.error(
            "Failed to instantiate %s with these arguments:\n  - kwargs: %s",
            cls.__name__,
            kwargs,
        )
        raise err
