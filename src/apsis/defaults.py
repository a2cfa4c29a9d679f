"""
Default Gravity Sources and Reference States
============================================

Predefined Solar System gravity sources, plus a few reference relative
states useful for checking the orbit solver.

Masses in kg, radii in m. Multiply by ``config.GRAVITATIONAL_CONSTANT`` (or
call ``GravitySource.mu``) for gravitational parameters.

Examples
--------
>>> from apsis.defaults import EARTH, MOON, earth_moon
>>> earth, moon = earth_moon()
>>> EARTH.moved_to((1.0e9, 0.0, 0.0))  # Same body elsewhere in the scene
"""
import math
from typing import Optional

from .bodies import GravitySource
from .orbit import OrbitalState

"""
Predefined Solar System bodies
Values taken from Vallado, Fundamentals of Astrodynamics, Fifth Edition, 2022, Appendix D
"""
MERCURY = GravitySource(mass=3.302e23, radius=2.4390e6, name='Mercury')
VENUS = GravitySource(mass=4.869e24, radius=6.0520e6, name='Venus')
EARTH = GravitySource(mass=5.972e24, radius=6.3781363e6, name='Earth')
MOON = GravitySource(mass=7.3483e22, radius=1.7380e6, name='Moon')
MARS = GravitySource(mass=6.4191e23, radius=3.3972e6, name='Mars')
JUPITER = GravitySource(mass=1.8988e27, radius=7.1492e7, name='Jupiter')
SUN = GravitySource(mass=1.9891e30, radius=6.96e8, name='Sun')

# Mean Earth-Moon distance [m]
EARTH_MOON_DISTANCE = 3.84400e8

"""
Reference relative states about EARTH
"""
# 42 km from the centre moving at 3074 m/s: a nearly radial ellipse
# with its apoapsis at the current position
NEAR_RADIAL_STATE = OrbitalState(m=EARTH.mass, x=42000.0, y=0.0, vx=0.0, vy=3074.0)

# Circular low orbit 400 km above the surface
LEO_RADIUS = EARTH.radius + 4.0e5


def circular_state(source: GravitySource, radius: float,
                   G: Optional[float] = None) -> OrbitalState:
    """
    Prograde circular orbit about source, starting on the +x axis.

    Parameters
    ----------
    source : GravitySource
        Central body
    radius : float
        Orbit radius from the centre of source [m]
    G : float, optional
        Gravitational constant, defaults to config.GRAVITATIONAL_CONSTANT
        at call time

    Returns
    -------
    OrbitalState
    """
    speed = math.sqrt(source.mu(G) / radius)
    return OrbitalState(m=source.mass, x=radius, y=0.0, vx=0.0, vy=speed)


# Built once at import with the default gravitational constant; call
# circular_state for any other G
LEO_STATE = circular_state(EARTH, LEO_RADIUS)


def earth_moon(moon_phase: float = 0.0):
    """
    Earth at the origin and the Moon on its mean circular orbit.

    Parameters
    ----------
    moon_phase : float, optional
        Angle of the Moon from +x in the xy plane [rad]

    Returns
    -------
    tuple of GravitySource
        (earth, moon)
    """
    x = EARTH_MOON_DISTANCE * math.cos(moon_phase)
    y = EARTH_MOON_DISTANCE * math.sin(moon_phase)
    speed = math.sqrt((EARTH.mu() + MOON.mu()) / EARTH_MOON_DISTANCE)
    moon = MOON.moved_to((x, y, 0.0),
                         (-speed * math.sin(moon_phase),
                          speed * math.cos(moon_phase), 0.0))
    return EARTH, moon
