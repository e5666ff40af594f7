"""Module with the parent classes of all data structures."""

from copy import deepcopy
from dataclasses import asdict, dataclass, fields

import numpy as np

__all__ = ["DataBase", "ContainerBase"]


@dataclass(eq=False)
class DataBase:
    """Base class of all the value records stored in the node tree.

    Defines basic methods shared by all data structures.
    """

    # Fixed-length attributes as (key, size) or (key, (size, dtype)) pairs
    _fixed_length_attrs = ()

    # String attributes
    _str_attrs = ()

    # Attributes which are not reset at the end of an event
    _persistent_attrs = ()

    # Whether the object is reset at the end of each event
    reset_per_event = True

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Provides two functions:
        - Gives default values to array-like attributes. If a default value was
          provided in the attribute definition, all instances of this class
          would point to the same memory location.
        - Casts strings when they are provided as binary objects, which is the
          format one gets when loading string from HDF5 files.
        """
        for attr, size in self._fixed_length_attrs:
            if getattr(self, attr) is None:
                dtype = np.float64
                if isinstance(size, tuple):
                    size, dtype = size
                setattr(self, attr, np.full(size, -np.inf, dtype=dtype))
            else:
                setattr(self, attr, np.asarray(getattr(self, attr)))

        for attr in self._str_attrs:
            if isinstance(getattr(self, attr), bytes):
                setattr(self, attr, getattr(self, attr).decode())

    def __eq__(self, other):
        """Checks that all attributes of two class instances are the same.

        This overloads the default dataclass `__eq__` method to include an
        appopriate check for vector (numpy) attributes.

        Parameters
        ----------
        other : obj
            Other instance of the same object class

        Returns
        -------
        bool
            `True` if all attributes of both objects are identical
        """
        if self.__class__ != other.__class__:
            return False

        for k, v in self.__dict__.items():
            v_other = getattr(other, k)
            if isinstance(v, np.ndarray):
                if v.shape != v_other.shape or (v_other != v).any():
                    return False
            elif isinstance(v, float) and np.isnan(v):
                # Unset floating point values compare equal
                if not (isinstance(v_other, float) and np.isnan(v_other)):
                    return False
            elif v != v_other:
                return False

        return True

    def copy(self):
        """Returns an independant copy of the object."""
        return deepcopy(self)

    def copy_from(self, other):
        """Copies all the attributes of another instance of the same class.

        Parameters
        ----------
        other : DataBase
            Object to copy the attributes from
        """
        if not isinstance(other, type(self)):
            raise TypeError(
                f"Cannot copy a {type(other).__name__} into a {type(self).__name__}."
            )
        for f in fields(self):
            setattr(self, f.name, deepcopy(getattr(other, f.name)))

    def reset(self):
        """Restores the default value of all non-persistent attributes."""
        default = type(self)()
        for f in fields(self):
            if f.name not in self._persistent_attrs:
                setattr(self, f.name, getattr(default, f.name))

    def as_dict(self):
        """Returns the data class as dictionary of (key, value) pairs.

        Returns
        -------
        dict
            Dictionary of attribute names and their values
        """
        return asdict(self)

    def to_arrays(self):
        """Returns the attributes in a form which can be stored to HDF5.

        Returns
        -------
        Dict[str, object]
            Dictionary of scalars and arrays
        """
        return self.as_dict()

    @classmethod
    def from_arrays(cls, arrays):
        """Builds an object from the output of :meth:`to_arrays`.

        Parameters
        ----------
        arrays : Dict[str, object]
            Dictionary of scalars and arrays

        Returns
        -------
        DataBase
            Rebuilt object
        """
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in arrays.items():
            if key in names:
                if isinstance(value, np.ndarray) and value.ndim == 0:
                    value = value[()]
                kwargs[key] = value.item() if isinstance(value, np.generic) else value

        return cls(**kwargs)

    def identify(self):
        """Returns a one-line description of the object.

        Returns
        -------
        str
            Class name followed by all the attribute values
        """
        attrs = ", ".join(f"{k}: {v}" for k, v in self.as_dict().items())
        return f"{type(self).__name__}: {attrs}"


class ContainerBase:
    """Base class of all the keyed collections stored in the node tree.

    Containers hold per-event information: by default they are emptied when
    the event is reset.
    """

    # Whether the content is dropped at the end of each event
    reset_per_event = True

    def __len__(self):
        return self.size()

    def size(self):
        raise NotImplementedError

    def reset(self):
        raise NotImplementedError

    def to_arrays(self):
        raise NotImplementedError

    @classmethod
    def from_arrays(cls, arrays):
        raise NotImplementedError

    def copy(self):
        """Returns an independant copy of the container."""
        return deepcopy(self)

    def copy_from(self, other):
        """Replaces the content of the container with that of another one.

        Parameters
        ----------
        other : ContainerBase
            Container of the same class to copy the content from
        """
        if not isinstance(other, type(self)):
            raise TypeError(
                f"Cannot copy a {type(other).__name__} into a {type(self).__name__}."
            )
        self.__dict__.update(deepcopy(other.__dict__))

    def identify(self):
        """Returns a short description of the container."""
        return f"{type(self).__name__} with {self.size()} entries"
