"""Base class for solver configurations with change notification and range metadata.

Uses dataclasses with field metadata for range constraints and settings files.
"""

from __future__ import annotations

import threading
import warnings
from dataclasses import dataclass, fields, field, MISSING
from typing import Any, Callable, TypeVar

T = TypeVar('T')


class ConfigError(ValueError):
    """Raised when a configuration or parameter record is not usable."""


# Valid metadata keys for config fields
METADATA_KEYS = {
    "description",  # Field documentation
    "fixed",        # Field can be set at init, then becomes readonly
    "min",          # Inclusive lower bound
    "max",          # Inclusive upper bound
    "open_min",     # Lower bound is exclusive
}


def config_field(
    default: T = MISSING,
    *,
    default_factory: Any = MISSING,
    description: str = "",
    min: float | int | None = None,
    max: float | int | None = None,
    open_min: bool = False,
    fixed: bool = False,
    repr: bool = True,
) -> T:
    """Create a config field with metadata.

    Note: Returns Field at runtime but typed as T for type checker compatibility.

    Args:
        default: Default value
        default_factory: Factory function for mutable defaults
        description: Field documentation
        min: Lower bound checked by ConfigBase.check_ranges()
        max: Upper bound checked by ConfigBase.check_ranges()
        open_min: Treat min as an exclusive bound
        fixed: Field can be set during __init__, then becomes locked
        repr: Include field in __repr__ output

    Examples:
        >>> dt: float = config_field(0.25, min=0.0, open_min=True, description="Timestep")
        >>> grid_size: int = config_field(256, min=1, fixed=True, description="Cells per side")
    """
    metadata: dict[str, Any] = {}
    if description:
        metadata["description"] = description
    if min is not None:
        metadata["min"] = min
    if max is not None:
        metadata["max"] = max
    if open_min:
        metadata["open_min"] = True
    if fixed:
        metadata["fixed"] = True

    return field(  # type: ignore[return-value]
        default=default,
        default_factory=default_factory,
        repr=repr,
        metadata=metadata
    )


def _in_range(value: Any, low: Any, high: Any, open_min: bool) -> bool:
    if low is not None and (value <= low if open_min else value < low):
        return False
    if high is not None and value > high:
        return False
    return True


@dataclass
class ConfigBase:
    """Base class for configs with change notification and range checks.

    Subclasses use dataclass fields built with config_field():

    Example:
        @dataclass
        class MyConfig(ConfigBase):
            strength: float = config_field(1.0, min=0.0, description="Strength")
            grid_size: int = config_field(64, min=1, fixed=True, description="Cells per side")

    Metadata flags:
        - fixed: Field can be set during __init__, but becomes readonly after
        - min/max: Bounds enforced by check_ranges()
        - open_min: min is an exclusive bound
        - description: Field documentation
    """

    def __post_init__(self) -> None:
        """Initialize listeners and lock, and validate metadata keys."""
        object.__setattr__(self, '_listeners', set())
        object.__setattr__(self, '_lock', threading.Lock())

        fixed_set: set[str] = set()
        for f in fields(self):
            for key in f.metadata:
                if key not in METADATA_KEYS:
                    warnings.warn(
                        f"{self.__class__.__name__}.{f.name}: unknown metadata key '{key}' "
                        f"(valid keys: {', '.join(sorted(METADATA_KEYS))})",
                        UserWarning,
                        stacklevel=2
                    )
            if f.metadata.get('fixed'):
                fixed_set.add(f.name)

        object.__setattr__(self, '_fixed_fields', fixed_set)
        object.__setattr__(self, '_initialized', True)

    def __setattr__(self, name: str, value: Any) -> None:
        """Intercept attribute changes for validation and notification.

        Raises:
            AttributeError: If field is undeclared, or fixed.
        """
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return

        field_names: set[str] = {f.name for f in fields(self)}
        if name not in field_names:
            raise AttributeError(
                f"Cannot set undeclared attribute '{name}' on {self.__class__.__name__}"
            )

        if not hasattr(self, '_initialized'):
            object.__setattr__(self, name, value)
            return

        if name in self._fixed_fields:  # type: ignore
            raise AttributeError(f"Cannot modify field '{name}'")

        with self._lock:  # type: ignore
            object.__setattr__(self, name, value)
            listeners_copy = list(self._listeners)  # type: ignore

        # Notify listeners OUTSIDE lock to prevent deadlock
        for listener in listeners_copy:
            listener()

    def check_ranges(self) -> None:
        """Check every field against its min/max metadata.

        Raises:
            ConfigError: If a value falls outside its declared range.
        """
        for f in fields(self):
            low = f.metadata.get('min')
            high = f.metadata.get('max')
            if low is None and high is None:
                continue
            value = getattr(self, f.name)
            open_min: bool = f.metadata.get('open_min', False)
            if not _in_range(value, low, high, open_min):
                raise ConfigError(
                    f"{self.__class__.__name__}.{f.name}={value!r} outside "
                    f"{'(' if open_min else '['}{low}, {high}]"
                )

    def watch(self, callback: Callable, attribute: str | None = None) -> Callable[[], None]:
        """Watch for config changes.

        Args:
            callback: callback() for any change, or callback(value) when an
                attribute name is given.
            attribute: Optional attribute name to watch.

        Returns:
            Function that when called, stops watching.

        Raises:
            AttributeError: If the specified attribute does not exist.
        """
        if attribute is None:
            listener = callback
        else:
            if attribute not in {f.name for f in fields(self)}:
                raise AttributeError(
                    f"Attribute '{attribute}' not found in {self.__class__.__name__}"
                )

            def listener() -> None:
                callback(getattr(self, attribute))

        with self._lock:  # type: ignore
            self._listeners.add(listener)  # type: ignore

        def unwatch() -> None:
            with self._lock:  # type: ignore
                self._listeners.discard(listener)  # type: ignore
        return unwatch

    def info(self) -> dict[str, dict[str, Any]]:
        """Field metadata merged with type, default and current value."""
        result: dict[str, dict[str, Any]] = {}
        for f in fields(self):
            if f.default is not MISSING:
                default_val = f.default
            elif f.default_factory is not MISSING:
                default_val = f.default_factory()
            else:
                default_val = None

            result[f.name] = {
                "description": "",
                "min": None,
                "max": None,
                "fixed": False,
                **f.metadata,
                "type": f.type,
                "default": default_val,
                "value": getattr(self, f.name),
            }
        return result
