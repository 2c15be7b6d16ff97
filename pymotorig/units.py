"""
Unit conversion utilities for rig parameters.

All internal calculations are performed in:
- meters (m) for length
- hertz (Hz) for frequency
- kilograms per square meter (kg/m^2) for 2D density
- meters per second squared (m/s^2) for acceleration

Dimensionless values (damping ratios) use the unit '' or 'ratio'.

This module provides conversion functions to/from various units.
"""
import numpy as np
from typing import Union


# Length conversion factors to meters (base unit)
UNIT_TO_M = {
    'm': 1.0,
    'meter': 1.0,
    'meters': 1.0,
    'mm': 0.001,
    'millimeter': 0.001,
    'millimeters': 0.001,
    'cm': 0.01,
    'centimeter': 0.01,
    'centimeters': 0.01,
    'in': 0.0254,
    'inch': 0.0254,
    'inches': 0.0254,
    'ft': 0.3048,
    'foot': 0.3048,
    'feet': 0.3048,
}

# Conversion factors from meters
M_TO_UNIT = {unit: 1.0 / factor for unit, factor in UNIT_TO_M.items()}


# Frequency conversion factors to hertz
FREQUENCY_UNIT_TO_HZ = {
    'hz': 1.0,
    'hertz': 1.0,
    'rpm': 1.0 / 60.0,
    'khz': 1000.0,
}

# Area density conversion factors to kg/m^2
DENSITY_UNIT_TO_KG_PER_M2 = {
    'kg/m^2': 1.0,
    'kg/m2': 1.0,
    'g/cm^2': 10.0,
    'g/cm2': 10.0,
}

# Acceleration conversion factors to m/s^2
ACCELERATION_UNIT_TO_M_PER_S2 = {
    'm/s^2': 1.0,
    'm/s2': 1.0,
    'g': 9.80665,
}

# Dimensionless units
RATIO_UNITS = {
    '': 1.0,
    'ratio': 1.0,
    '%': 0.01,
}

# Quantity name -> conversion table to the base unit of that quantity
QUANTITY_TABLES = {
    'length': UNIT_TO_M,
    'frequency': FREQUENCY_UNIT_TO_HZ,
    'density': DENSITY_UNIT_TO_KG_PER_M2,
    'acceleration': ACCELERATION_UNIT_TO_M_PER_S2,
    'ratio': RATIO_UNITS,
}


def validate_unit(unit: str) -> str:
    """
    Validate and normalize length unit string.

    Args:
        unit: Unit string (e.g., 'mm', 'm', 'in')

    Returns:
        Normalized unit string

    Raises:
        ValueError: If unit is not recognized
    """
    unit_lower = unit.lower().strip()
    if unit_lower not in UNIT_TO_M:
        valid_units = sorted(set(['mm', 'cm', 'm', 'in', 'ft']))
        raise ValueError(f"Unknown unit '{unit}'. Valid units: {valid_units}")
    return unit_lower


def to_m(value: Union[float, np.ndarray], from_unit: str = 'm') -> Union[float, np.ndarray]:
    """
    Convert a value from the specified unit to meters (base unit).

    Args:
        value: Value or array to convert
        from_unit: Source unit (default: 'm')

    Returns:
        Value in meters
    """
    unit = validate_unit(from_unit)
    return value * UNIT_TO_M[unit]


def from_m(value: Union[float, np.ndarray], to_unit: str = 'm') -> Union[float, np.ndarray]:
    """
    Convert a value from meters (base unit) to the specified unit.

    Args:
        value: Value or array in meters
        to_unit: Target unit (default: 'm')

    Returns:
        Value in target unit
    """
    unit = validate_unit(to_unit)
    return value * M_TO_UNIT[unit]


def quantity_of(unit: str) -> str:
    """
    Find which physical quantity a unit string measures.

    Args:
        unit: Unit string (e.g., 'mm', 'Hz', 'kg/m^2')

    Returns:
        Quantity name, one of the keys of QUANTITY_TABLES

    Raises:
        ValueError: If unit is not recognized
    """
    unit_lower = unit.lower().strip()
    for quantity, table in QUANTITY_TABLES.items():
        if unit_lower in table:
            return quantity
    raise ValueError(f"Unknown unit '{unit}'. Valid quantities: {sorted(QUANTITY_TABLES)}")


def to_base(value: Union[float, np.ndarray], from_unit: str) -> Union[float, np.ndarray]:
    """
    Convert a value of any supported quantity to that quantity's base unit.

    Args:
        value: Value or array to convert
        from_unit: Source unit

    Returns:
        Value in the base unit (m, Hz, kg/m^2, m/s^2 or ratio)
    """
    table = QUANTITY_TABLES[quantity_of(from_unit)]
    return value * table[from_unit.lower().strip()]


def convert(value: Union[float, np.ndarray], from_unit: str, to_unit: str) -> Union[float, np.ndarray]:
    """
    Convert a value from one unit to another of the same quantity.

    Args:
        value: Value or array to convert
        from_unit: Source unit
        to_unit: Target unit

    Returns:
        Value in target unit

    Raises:
        ValueError: If the units measure different quantities
    """
    source = quantity_of(from_unit)
    target = quantity_of(to_unit)
    if source != target:
        raise ValueError(f"Cannot convert {source} unit '{from_unit}' to {target} unit '{to_unit}'")
    if from_unit.lower().strip() == to_unit.lower().strip():
        return value
    table = QUANTITY_TABLES[source]
    return to_base(value, from_unit) / table[to_unit.lower().strip()]


def format_value(value: float, unit: str = 'm', precision: int = 3) -> str:
    """
    Format a value with units for display.

    Args:
        value: Value in the specified unit
        unit: Unit string
        precision: Number of decimal places

    Returns:
        Formatted string (e.g., "0.800 m")
    """
    quantity_of(unit)
    if not unit.strip():
        return f"{value:.{precision}f}"
    return f"{value:.{precision}f} {unit}"


if __name__ == "__main__":
    print("=" * 60)
    print("UNITS MODULE TEST")
    print("=" * 60)

    test_value = 800.0  # mm
    print(f"\nOriginal: {test_value} mm")
    print(f"To m: {to_m(test_value, 'mm')} m")
    print(f"To in: {convert(test_value, 'mm', 'in')} in")
    print(f"120 rpm in Hz: {to_base(120.0, 'rpm')}")
    print(f"Formatted: {format_value(0.8, 'm')}")

    try:
        convert(1.0, 'm', 'Hz')
        print("ERROR: Should have raised ValueError")
    except ValueError as e:
        print(f"✓ Correctly caught error: {e}")

    print("\n✓ All tests completed successfully!")
