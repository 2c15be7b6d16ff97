"""
Parameter sets describing a motorcycle frame and its simulation environment.

A parameter set has two groups:
- ``frame``: tube lengths, pivot distances, wheel diameters, swingarm length
- ``simulation``: ground size, spring frequency/damping, material density

Every parameter is an immutable (display name, value, unit) triple. Editing a
value produces a new ParameterSet, so a rig built from one snapshot can never
observe a half-applied edit.
"""

import json
import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from .errors import ParameterError
from .units import convert, quantity_of


FRAME_GROUP = 'frame'
SIMULATION_GROUP = 'simulation'
PARAMETER_GROUPS = (FRAME_GROUP, SIMULATION_GROUP)


@dataclass(frozen=True)
class Parameter:
    """
    A single named physical dimension.

    Attributes:
        display_name: Human readable name used in error messages and UI labels
        value: Numeric value expressed in ``unit``
        unit: Unit string understood by :mod:`pymotorig.units`
    """
    display_name: str
    value: float
    unit: str = 'm'

    def get_value(self, unit: Optional[str] = None) -> float:
        """
        Get the value, optionally converted to another unit.

        Args:
            unit: Target unit (default: the parameter's own unit)

        Returns:
            Value in the requested unit
        """
        if unit is None:
            return self.value
        return convert(self.value, self.unit, unit)

    def with_value(self, value: float) -> 'Parameter':
        """Return a copy of this parameter holding a different value."""
        return Parameter(self.display_name, value, self.unit)

    def to_dict(self) -> dict:
        return {
            'display_name': self.display_name,
            'value': self.value,
            'unit': self.unit,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Parameter':
        """
        Create a Parameter from a dictionary.

        Accepts both ``display_name``/``value`` keys and the camelCase
        ``displayName``/``defaultValue`` keys used by older parameter files.
        """
        display_name = data.get('display_name', data.get('displayName'))
        value = data.get('value', data.get('defaultValue'))
        unit = data.get('unit', 'm')
        return cls(display_name=display_name, value=value, unit=unit)

    def __str__(self) -> str:
        return f"{self.display_name}: {self.value} {self.unit}".rstrip()


class ParameterSet:
    """
    Immutable snapshot of frame and simulation parameters.

    Groups are exposed as read-only views; use :meth:`with_value` to derive an
    edited snapshot.
    """

    def __init__(self, groups: Dict[str, Dict[str, Parameter]]):
        self._groups = {
            name: dict(parameters) for name, parameters in groups.items()
        }

    @property
    def frame(self) -> Dict[str, Parameter]:
        return self.group(FRAME_GROUP)

    @property
    def simulation(self) -> Dict[str, Parameter]:
        return self.group(SIMULATION_GROUP)

    def has_group(self, name: str) -> bool:
        return name in self._groups

    def group(self, name: str) -> Dict[str, Parameter]:
        """
        Get a copy of one parameter group.

        Raises:
            ParameterError: If the group is missing
        """
        if name not in self._groups:
            raise ParameterError(f"Missing required parameter group '{name}'")
        return dict(self._groups[name])

    def get(self, group: str, key: str) -> Parameter:
        """
        Get one parameter.

        Raises:
            ParameterError: If the group or the parameter is missing
        """
        parameters = self.group(group)
        if key not in parameters:
            raise ParameterError(f"Missing required parameter '{group}.{key}'")
        return parameters[key]

    def require(self, group: str, keys: Iterable[str]) -> Dict[str, Parameter]:
        """
        Check that a group holds every listed parameter.

        Args:
            group: Group name
            keys: Parameter keys that must be present

        Returns:
            The group's parameters

        Raises:
            ParameterError: Naming the group and every missing key
        """
        parameters = self.group(group)
        missing = [key for key in keys if key not in parameters]
        if missing:
            raise ParameterError(f"Parameter group '{group}' is missing: {', '.join(missing)}")
        return parameters

    def with_value(self, group: str, key: str, value: float) -> 'ParameterSet':
        """
        Derive a new parameter set with a single value changed.

        Args:
            group: Group name
            key: Parameter key
            value: New value, in the parameter's existing unit

        Returns:
            New ParameterSet; this one is left unchanged
        """
        parameter = self.get(group, key)
        groups = {name: dict(parameters) for name, parameters in self._groups.items()}
        groups[group][key] = parameter.with_value(value)
        return ParameterSet(groups)

    def items(self):
        """Iterate over ``(group, key, parameter)`` triples."""
        for group, parameters in self._groups.items():
            for key, parameter in parameters.items():
                yield group, key, parameter

    def to_dict(self) -> dict:
        return {
            group: {key: parameter.to_dict() for key, parameter in parameters.items()}
            for group, parameters in self._groups.items()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ParameterSet':
        """
        Create a ParameterSet from a nested dictionary.

        Args:
            data: ``{group: {key: {display_name, value, unit}}}``

        Returns:
            New ParameterSet

        Raises:
            ParameterError: If data is not a mapping of groups
        """
        if not isinstance(data, dict):
            raise ParameterError(f"Parameter data must be a dictionary, got {type(data).__name__}")
        groups = {}
        for group, parameters in data.items():
            if not isinstance(parameters, dict):
                raise ParameterError(f"Parameter group '{group}' must be a dictionary")
            groups[group] = {}
            for key, entry in parameters.items():
                if isinstance(entry, Parameter):
                    groups[group][key] = entry
                elif isinstance(entry, dict):
                    groups[group][key] = Parameter.from_dict(entry)
                else:
                    raise ParameterError(f"Parameter '{group}.{key}' must be a dictionary")
        return cls(groups)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._groups == other._groups

    def __repr__(self) -> str:
        counts = ', '.join(f"{name}={len(parameters)}" for name, parameters in self._groups.items())
        return f"ParameterSet({counts})"


def _p(display_name: str, value: float, unit: str) -> Parameter:
    return Parameter(display_name=display_name, value=value, unit=unit)


DEFAULT_PARAMETERS = ParameterSet({
    FRAME_GROUP: {
        'swing_arm_pivot_to_head_tube_top_center': _p("Swing Arm Pivot to Head Tube Top Center", 0.75, 'm'),
        'swing_arm_pivot_to_head_tube_bottom_center': _p("Swing Arm Pivot to Head Tube Bottom Center", 0.80, 'm'),
        'head_tube_length': _p("Head Tube Length", 0.20, 'm'),
        'top_fork_tube_length': _p("Top Fork Tube Length", 0.50, 'm'),
        'bottom_fork_tube_length': _p("Bottom Fork Tube Length", 0.45, 'm'),
        'rear_shock_upper_pivot_to_head_tube_top': _p("Rear Shock Upper Pivot to Head Tube Top", 0.50, 'm'),
        'rear_shock_upper_pivot_to_frame_pivot': _p("Rear Shock Upper Pivot to Frame Pivot", 0.40, 'm'),
        'front_wheel_diameter': _p("Front Wheel Diameter", 0.60, 'm'),
        'rear_wheel_diameter': _p("Rear Wheel Diameter", 0.60, 'm'),
        'swingarm_length': _p("Swingarm Length", 0.55, 'm'),
    },
    SIMULATION_GROUP: {
        'ground_width': _p("Ground Width", 4.0, 'm'),
        'ground_height': _p("Ground Height", 0.1, 'm'),
        'ground_offset': _p("Ground Offset", 1.2, 'm'),
        'density': _p("Material Density", 10.0, 'kg/m^2'),
        'fork_spring_frequency': _p("Fork Spring Frequency", 4.0, 'Hz'),
        'fork_spring_damping': _p("Fork Spring Damping Ratio", 0.5, ''),
        'gravity': _p("Gravity", 9.81, 'm/s^2'),
    },
})

FRAME_KEYS = tuple(DEFAULT_PARAMETERS.frame)
SIMULATION_KEYS = tuple(DEFAULT_PARAMETERS.simulation)


def ensure_parameter_set(parameters) -> ParameterSet:
    """
    Accept a ParameterSet or its dictionary form.

    Raises:
        ParameterError: If the value is neither
    """
    if isinstance(parameters, ParameterSet):
        return parameters
    if isinstance(parameters, dict):
        return ParameterSet.from_dict(parameters)
    raise ParameterError(f"Expected a ParameterSet, got {type(parameters).__name__}")


DEFAULT_GRAVITY = 9.81


@dataclass(frozen=True)
class SimulationSettings:
    """
    Simulation values converted to SI units and checked.

    Attributes:
        density: Material density (kg/m^2)
        fork_spring_frequency: Fork spring natural frequency (Hz), 0 for rigid
        fork_spring_damping: Fork spring damping ratio
        gravity: Downward gravitational acceleration (m/s^2)
    """
    density: float
    fork_spring_frequency: float
    fork_spring_damping: float
    gravity: float = DEFAULT_GRAVITY


def checked_value(parameter: Parameter, key: str, unit: str, minimum: Optional[float] = None,
                  allow_minimum: bool = True) -> float:
    """
    Read a parameter's value converted to ``unit``.

    Args:
        parameter: Parameter to read
        key: Parameter key, used when the display name is unavailable
        unit: Target unit
        minimum: Lowest accepted value (None for no bound)
        allow_minimum: Whether ``minimum`` itself is accepted

    Returns:
        Converted value

    Raises:
        ParameterError: Naming the parameter if its value is not a finite
            number, its unit cannot be converted, or it is out of range
    """
    name = getattr(parameter, 'display_name', key)
    raw = getattr(parameter, 'value', None)
    if not isinstance(raw, numbers.Real) or isinstance(raw, bool) or not math.isfinite(raw):
        raise ParameterError(f"\"{name}\" must have a numeric value, got {raw!r}")
    if not isinstance(parameter.unit, str):
        raise ParameterError(f"\"{name}\" has an invalid unit {parameter.unit!r}")
    try:
        value = float(parameter.get_value(unit))
    except ValueError as e:
        raise ParameterError(f"\"{name}\": {e}") from e

    if minimum is not None:
        if value < minimum or (value == minimum and not allow_minimum):
            bound = "at least" if allow_minimum else "greater than"
            raise ParameterError(f"\"{name}\" must be {bound} {minimum} {unit}, got {parameter.value}")
    return value


def simulation_settings(parameters) -> SimulationSettings:
    """
    Convert and check every simulation value the rig and space depend on.

    Gravity is optional and defaults to DEFAULT_GRAVITY.

    Raises:
        ParameterError: If a value is missing, malformed or out of range
    """
    parameters = ensure_parameter_set(parameters)
    settings = parameters.require(
        SIMULATION_GROUP, ('density', 'fork_spring_frequency', 'fork_spring_damping'))
    gravity = DEFAULT_GRAVITY
    if 'gravity' in settings:
        gravity = checked_value(settings['gravity'], 'gravity', 'm/s^2')
    return SimulationSettings(
        density=checked_value(settings['density'], 'density', 'kg/m^2', 0.0, allow_minimum=False),
        fork_spring_frequency=checked_value(
            settings['fork_spring_frequency'], 'fork_spring_frequency', 'Hz', 0.0),
        fork_spring_damping=checked_value(
            settings['fork_spring_damping'], 'fork_spring_damping', '', 0.0),
        gravity=gravity,
    )


def parameter_range(parameter: Parameter, low: float = 0.5, high: float = 1.5) -> Tuple[float, float]:
    """
    Get the adjustable range for a parameter around its current value.

    Args:
        parameter: Parameter to bound
        low: Lower bound as a fraction of the value (default: 50%)
        high: Upper bound as a fraction of the value (default: 150%)

    Returns:
        (minimum, maximum) in the parameter's unit
    """
    bounds = (parameter.value * low, parameter.value * high)
    return min(bounds), max(bounds)


def save_parameters(parameters: ParameterSet, path: Union[str, Path]) -> None:
    """Write a parameter set to a JSON file."""
    Path(path).write_text(json.dumps(parameters.to_dict(), indent=2), encoding='utf-8')


def load_parameters(path: Union[str, Path]) -> ParameterSet:
    """
    Read a parameter set from a JSON file.

    Every unit in the file must be recognised by :mod:`pymotorig.units`.

    Raises:
        ParameterError: If the file content is not a parameter mapping or a
            unit is unknown
    """
    data = json.loads(Path(path).read_text(encoding='utf-8'))
    parameters = ParameterSet.from_dict(data)
    for group, key, parameter in parameters.items():
        try:
            quantity_of(parameter.unit)
        except ValueError as e:
            raise ParameterError(f"Parameter '{group}.{key}': {e}") from e
    return parameters
