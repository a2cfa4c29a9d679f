'''Coordinate helpers for the orbit solver
Polar conversion and projection of 3D relative states into the orbital plane'''

import math
from typing import Tuple

import numpy as np


def cartesian_to_polar(x: float, y: float) -> Tuple[float, float]:
    """
    Convert a planar cartesian vector to polar form.

    Parameters
    ----------
    x, y : float
        Cartesian components

    Returns
    -------
    r : float
        Magnitude, always >= 0
    angle : float
        Polar angle in (-pi, pi], measured from +x with quadrant taken
        from the signs of both components. (0, 0) maps to angle 0.
    """
    return math.hypot(x, y), math.atan2(y, x)


def polar_to_cartesian(r: float, angle: float) -> Tuple[float, float]:
    """Inverse of cartesian_to_polar."""
    return r * math.cos(angle), r * math.sin(angle)


def project_to_orbital_plane(r_vec, v_vec) -> Tuple[Tuple[float, float],
                                                    Tuple[float, float]]:
    """
    Express a 3D relative state in 2D coordinates of its orbital plane.

    The in-plane basis is built the same way as the line-of-nodes frame used
    for classical element extraction: the first axis is along the position
    vector and the second completes a right-handed frame with the specific
    angular momentum h = r x v. Magnitudes and the angle between r and v are
    preserved, so the planar state yields the same orbit.

    Parameters
    ----------
    r_vec : array-like, shape (3,)
        Relative position of the orbiting body
    v_vec : array-like, shape (3,)
        Relative velocity of the orbiting body

    Returns
    -------
    (x, y), (vx, vy)
        Planar position and velocity. Position always lies on +x.

    Notes
    -----
    For radial motion (h = 0) the plane is undefined; any plane containing
    r is equivalent and the velocity is returned along +x or -x.
    """
    r_vec = np.asarray(r_vec, dtype=float)
    v_vec = np.asarray(v_vec, dtype=float)
    if r_vec.shape != (3,) or v_vec.shape != (3,):
        raise ValueError(
            f"Position and velocity must be 3-vectors, "
            f"got shapes {r_vec.shape} and {v_vec.shape}")

    r_mag = np.linalg.norm(r_vec)
    if r_mag == 0:
        # no radial direction; keep magnitudes only
        return (0.0, 0.0), (float(np.linalg.norm(v_vec)), 0.0)

    xhat = r_vec / r_mag
    hvec = np.cross(r_vec, v_vec)
    h_mag = np.linalg.norm(hvec)
    if h_mag == 0:
        return (float(r_mag), 0.0), (float(np.dot(v_vec, xhat)), 0.0)

    yhat = np.cross(hvec / h_mag, xhat)
    return ((float(r_mag), 0.0),
            (float(np.dot(v_vec, xhat)), float(np.dot(v_vec, yhat))))
