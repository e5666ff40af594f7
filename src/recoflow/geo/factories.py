"""Construct a geometry from its name."""

from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from .base import Geometry

# Get config directory relative to this module
GEO_CONFIG_DIR = Path(__file__).parent / "config"

__all__ = ["geo_factory"]


def geo_dict() -> Dict[Path, Dict[str, str]]:
    """Builds a dictionary of available geometry configurations.

    Returns
    -------
    dict
        Dictionary which maps each geometry file onto its name, tag and version
    """
    options = {}
    for path in GEO_CONFIG_DIR.glob("*/*_geometry.yaml"):
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        options[path] = {k: cfg[k] for k in ("name", "tag", "version")}
        options[path]["version"] = str(float(options[path]["version"]))

    return options


def geo_factory(
    detector: str,
    tag: Optional[str] = None,
    version: Optional[Union[str, int, float]] = None,
) -> Geometry:
    """Instantiates a geometry from a detector name, tag and/or version.

    Parameters
    ----------
    detector : str
        Name of the detector (e.g. "sphenix")
    tag : str, optional
        Geometry tag
    version : str, optional
        Geometry version (e.g. "1", "2.1")

    Returns
    -------
    Geometry
         Initialized geometry object
    """
    options = geo_dict()
    paths, tags, versions = [], [], []
    for path, cfg in options.items():
        if cfg["name"].lower() == detector.lower():
            paths.append(path)
            tags.append(cfg.get("tag", None))
            versions.append(cfg.get("version", None))

    if len(paths) == 0:
        raise ValueError(f"No geometry found for detector '{detector}'.")

    # A tag must be matched exactly
    if tag is not None:
        if tag not in tags:
            raise ValueError(
                f"No geometry found for detector '{detector}' with tag '{tag}'. "
                f"Available tags are: {set(tags)}"
            )
        index = tags.index(tag)
        assert version is None or str(float(version)) == versions[index], (
            f"Geometry version '{version}' does not match found version "
            f"'{versions[index]}' for detector '{detector}' with tag '{tag}'."
        )
        file_path = paths[index]

    # A version must match the major revision, and the minor one if provided
    elif version is not None:
        version_parts = str(version).split(".")
        file_path = None
        for i, ver in enumerate(versions):
            ver_parts = ver.split(".")
            if version_parts == ver_parts[: len(version_parts)]:
                file_path = paths[i]
                break

        if file_path is None:
            raise ValueError(
                f"No geometry found for detector '{detector}' with version "
                f"'{version}'. Available versions are: {set(versions)}"
            )

    # Otherwise, use the most recent version
    else:
        index = max(range(len(versions)), key=lambda i: float(versions[i]))
        file_path = paths[index]

    with open(file_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    cfg["version"] = str(float(cfg["version"]))

    return Geometry(**cfg)
