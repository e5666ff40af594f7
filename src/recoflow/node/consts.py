"""Job-wide flags shared by all modules."""

from typing import Any, Dict

__all__ = ["RecoConsts"]


class RecoConsts:
    """Manages a process-wide set of typed flags.

    Flags are set from the configuration (e.g. `RUNNUMBER`) and read back by
    the modules which need them. They can be persisted to the `RUN` node by
    the :class:`recoflow.reco.ffa.FlagHandler` module.
    """

    _flags: Dict[str, Any] = {}

    @classmethod
    def set_flag(cls, name: str, value: Any) -> None:
        """Set a flag value.

        Parameters
        ----------
        name : str
            Name of the flag
        value : Union[int, float, str]
            Value of the flag
        """
        if not isinstance(value, (int, float, str)):
            raise TypeError(
                f"Flag `{name}` must be an int, a float or a string, "
                f"got {type(value).__name__}."
            )
        cls._flags[name] = value

    @classmethod
    def flag_exists(cls, name: str) -> bool:
        return name in cls._flags

    @classmethod
    def get_flag(cls, name: str, default: Any = None) -> Any:
        """Get a flag value.

        Parameters
        ----------
        name : str
            Name of the flag
        default : object, optional
            Value returned if the flag is not set. If not specified, a
            missing flag raises.

        Returns
        -------
        Union[int, float, str]
            Value of the flag
        """
        if name not in cls._flags:
            if default is not None:
                return default
            raise KeyError(f"Flag `{name}` is not set.")

        return cls._flags[name]

    @classmethod
    def get_int_flag(cls, name: str, default: Any = None) -> int:
        return int(cls.get_flag(name, default))

    @classmethod
    def get_float_flag(cls, name: str, default: Any = None) -> float:
        return float(cls.get_flag(name, default))

    @classmethod
    def get_string_flag(cls, name: str, default: Any = None) -> str:
        return str(cls.get_flag(name, default))

    @classmethod
    def flags(cls) -> Dict[str, Any]:
        """Returns a copy of all the flags."""
        return dict(cls._flags)

    @classmethod
    def print_flags(cls) -> str:
        """Returns a text summary of all the flags."""
        return "\n".join(f"  {k}: {v}" for k, v in sorted(cls._flags.items()))

    @classmethod
    def reset(cls) -> None:
        """Clear all flags."""
        cls._flags = {}
