"""
Global Configuration for Apsis Package
======================================

This module provides package-wide configuration settings that users can modify
to control the gravitational constant, numerical tolerances, validation
behavior and which external force contributors are recognised.

Examples
--------
View current configuration:

>>> import apsis
>>> print(apsis.config)

Modify settings:

>>> apsis.config.GRAVITATIONAL_CONSTANT = 1.0  # Toy units for experiments
>>> apsis.config.EXTERNAL_CONTRIBUTORS = ('drag', 'solar-sail')

Reset to defaults:

>>> apsis.config.reset()

Temporarily modify settings:

>>> with apsis.temp_config(GRAVITATIONAL_CONSTANT=1.0):
...     # Solve with G = 1 for this block only
...     apsis.solve_orbit_from(1.0, (1.0, 0.0), (0.0, 1.0))

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent operations until changed again or reset.
"""

import math
from dataclasses import dataclass
from contextlib import contextmanager
from typing import Tuple


@dataclass
class ApsisConfig:
    """
    Global configuration for Apsis package.

    Attributes
    ----------
    GRAVITATIONAL_CONSTANT : float
        Default G used by the orbit solver and gravity contributors when no
        explicit value is passed [m^3 kg^-1 s^-2].
        Default: 6.6e-11
    EQUALITY_RTOL : float
        Relative tolerance for floating-point equality comparisons.
        Default: 1e-12
    EQUALITY_ATOL : float
        Absolute tolerance for floating-point equality comparisons.
        Default: 1e-14
    HASH_DECIMALS : int
        Number of decimal places for rounding when computing hash values.
        Automatically computed to preserve hash contract
    PARABOLIC_TOLERANCE : float
        Vis-viva denominators with |2GM - v^2 r| below this fraction of 2GM
        are reported as parabolic instead of evaluated.
        Default: 1e-12
    RADICAND_TOLERANCE : float
        Negative eccentricity radicands no deeper than this are rounding
        noise and snap to zero. Deeper values are reported as degenerate.
        Default: 1e-12
    SNAP_TO_CIRCULAR : float
        Eccentricity below this threshold treated as circular orbit (e=0).
        Default: 1e-8
    STRICT_VALIDATION : bool
        If True, validation failures raise exceptions.
        If False, validation failures issue warnings.
        Default: True
    EXTERNAL_CONTRIBUTORS : tuple of str
        Tags accepted for ``ContributorKind.EXTERNAL`` force contributors.
        Default: ('drag', 'collision', 'docking')
    DEFAULT_TICK : float
        Fixed tick length used by ``run_tick`` when none is given [s].
        Default: 1/60
    """

    # Physical constants
    GRAVITATIONAL_CONSTANT: float = 6.6e-11

    # Numerical tolerance for equality comparisons
    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14

    # Orbit classification thresholds
    PARABOLIC_TOLERANCE: float = 1e-12
    RADICAND_TOLERANCE: float = 1e-12
    SNAP_TO_CIRCULAR: float = 1e-8

    # Validation behavior
    STRICT_VALIDATION: bool = True

    # Force composition
    EXTERNAL_CONTRIBUTORS: Tuple[str, ...] = ('drag', 'collision', 'docking')
    DEFAULT_TICK: float = 1.0 / 60.0

    @property
    def HASH_DECIMALS(self) -> int:
        """
        Compute hash rounding decimals from equality tolerance.

        The hash rounding must be coarse enough that if two values
        are equal (within EQUALITY_ATOL), they hash to the same value.

        Returns
        -------
        int
            Number of decimal places for hash rounding
        """
        magnitude = -math.floor(math.log10(self.EQUALITY_ATOL))
        return max(magnitude - 2, 0)

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import apsis
        >>> apsis.config.GRAVITATIONAL_CONSTANT = 1.0  # Modify
        >>> apsis.config.reset()  # Back to defaults
        >>> apsis.config.GRAVITATIONAL_CONSTANT
        6.6e-11
        """
        defaults = ApsisConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["ApsisConfig:"]
        lines.append("  Physics:")
        lines.append(f"    GRAVITATIONAL_CONSTANT = {self.GRAVITATIONAL_CONSTANT}")
        lines.append("  Numerical Tolerances:")
        lines.append(f"    EQUALITY_RTOL = {self.EQUALITY_RTOL}")
        lines.append(f"    EQUALITY_ATOL = {self.EQUALITY_ATOL}")
        lines.append(f"    HASH_DECIMALS = {self.HASH_DECIMALS}")
        lines.append("  Orbit Classification:")
        lines.append(f"    PARABOLIC_TOLERANCE = {self.PARABOLIC_TOLERANCE}")
        lines.append(f"    RADICAND_TOLERANCE = {self.RADICAND_TOLERANCE}")
        lines.append(f"    SNAP_TO_CIRCULAR = {self.SNAP_TO_CIRCULAR}")
        lines.append("  Behavior:")
        lines.append(f"    STRICT_VALIDATION = {self.STRICT_VALIDATION}")
        lines.append("  Force Composition:")
        lines.append(f"    EXTERNAL_CONTRIBUTORS = {self.EXTERNAL_CONTRIBUTORS}")
        lines.append(f"    DEFAULT_TICK = {self.DEFAULT_TICK}")
        return "\n".join(lines)


# Global configuration instance
config = ApsisConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import apsis
    >>> with apsis.temp_config(STRICT_VALIDATION=False):
    ...     # Invalid solver input warns instead of raising
    ...     apsis.solve_orbit_from(-1.0, (1.0, 0.0), (0.0, 1.0))
    >>> # Original config restored here
    >>> apsis.config.STRICT_VALIDATION
    True

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"ApsisConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
