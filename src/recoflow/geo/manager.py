"""Manages a singleton instance of a Geometry class."""

import inspect
from typing import Optional

from .base import Geometry
from .factories import geo_factory

__all__ = ["GeoManager"]


class GeoManager:
    """Manages a singleton instance of a Geometry class."""

    _instance: Optional[Geometry] = None

    @classmethod
    def initialize(
        cls, detector: str, tag: Optional[str] = None, version: Optional[str] = None
    ) -> Geometry:
        """Initialize the geometry for a given detector.

        Parameters
        ----------
        detector : str
            The name of the detector.
        tag : str, optional
            A tag to identify a specific configuration.
        version : str, optional
            A version number for the geometry configuration.

        Returns
        -------
        Geometry
            The initialized geometry instance.
        """
        if cls._instance is not None:
            raise ValueError("Geometry module already initialized.")

        cls._instance = geo_factory(detector, tag, version)

        return cls._instance

    @classmethod
    def initialize_or_get(
        cls, detector: str, tag: Optional[str] = None, version: Optional[str] = None
    ) -> Geometry:
        """Initialize the geometry if needed, or return the existing instance.

        If the existing instance does not match the requested detector, it
        is replaced.
        """
        current = cls._instance
        if (
            current is None
            or current.name.lower() != detector.lower()
            or (tag is not None and current.tag != tag)
            or (version is not None and current.version != str(float(version)))
        ):
            cls._instance = geo_factory(detector, tag, version)

        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None

    @classmethod
    def get_instance(cls) -> Geometry:
        """Get the current geometry instance.

        Returns
        -------
        Geometry
            The current geometry instance.
        """
        if cls._instance is None:
            # Raise an error with detailed information about the call site
            frame_info = inspect.stack()[1]
            frame = frame_info.frame
            func = frame.f_code.co_name
            cls_obj = frame.f_locals.get("self")
            class_name = cls_obj.__class__.__name__ if cls_obj else None

            location = f"{class_name}.{func}()" if class_name else f"{func}()"

            raise ValueError(
                "Geometry singleton instance is not initialized.\n"
                f"Attempted access from: {location}\n"
                f"File: {frame_info.filename}:{frame_info.lineno}\n\n"
                "If using the Driver, include a `geo` block in the configuration.\n"
                "If running standalone, initialize geometry with either:\n"
                "    GeoManager.initialize(detector='sphenix')\n"
                "    GeoManager.initialize_or_get(detector='sphenix')\n"
                "before calling geometry-dependent modules."
            )

        return cls._instance

    @classmethod
    def get_instance_if_initialized(cls) -> Optional[Geometry]:
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the geometry instance (useful for testing)."""
        cls._instance = None
