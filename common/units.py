"""
Unit Registry for Projection Parameters.

Projection parameters arrive from configuration in mixed units: angles in
degrees (the OGC convention for central meridians), lengths in meters or
kilometers. This module converts them with the `pint` library so that a
length passed where an angle is expected fails loudly instead of being
silently misread.

Example Usage
-------------
>>> from common.units import Q_, to_radians
>>> round(to_radians(Q_(180, 'degree')), 6)
3.141593
>>> round(to_radians(90), 6)
1.570796
"""

from typing import Union

import pint
from pint import UnitRegistry as PintUnitRegistry

from common.errors import ConfigurationError

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

Numeric = Union[float, int, pint.Quantity]


def ensure_quantity(value: Numeric, default_unit: str) -> pint.Quantity:
    """Ensure a value is a pint Quantity, applying default unit if necessary.

    Parameters
    ----------
    value : float or pint.Quantity
        The value to convert.
    default_unit : str
        The unit to apply if value is a bare number.

    Returns
    -------
    pint.Quantity
        The value with units.
    """
    if isinstance(value, pint.Quantity):
        return value
    return ureg.Quantity(float(value), default_unit)


def _convert(value: Numeric, default_unit: str, target_unit: str) -> float:
    quantity = ensure_quantity(value, default_unit)
    try:
        return float(quantity.to(target_unit).magnitude)
    except pint.DimensionalityError as e:
        raise ConfigurationError(
            f"Incompatible units: expected {target_unit}, got {quantity.units}",
            context={"value": str(quantity)},
        ) from e


def to_radians(value: Numeric, default_unit: str = "degree") -> float:
    """Convert an angle to radians.

    Bare numbers are interpreted in `default_unit` (degrees by default).
    """
    return _convert(value, default_unit, "radian")


def to_meters(value: Numeric, default_unit: str = "meter") -> float:
    """Convert a length to meters.

    Bare numbers are interpreted in `default_unit` (meters by default).
    """
    return _convert(value, default_unit, "meter")


# Units assumed for bare numbers in projection parameter mappings
STANDARD_UNITS = {
    "central_meridian": "degree",
    "semi_major": "meter",
    "semi_minor": "meter",
    "false_easting": "meter",
    "false_northing": "meter",
}
