'''Orbit solver for the apsis flight core
OrbitalState, OrbitElements and DegenerateOrbit definitions'''

import logging
import math
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .config import config
from .coordinates import cartesian_to_polar, project_to_orbital_plane
from .utils import validation_error

logger = logging.getLogger(__name__)


# define an enumerated list of orbit classifications
class OrbitType(Enum):
    ELLIPTICAL = 'elliptical'   # 0 <= e < 1, a > 0
    HYPERBOLIC = 'hyperbolic'   # e > 1, a < 0
    PARABOLIC = 'parabolic'     # e = 1, a undefined
    DEGENERATE = 'degenerate'   # rectilinear (zero angular momentum), e = 1


class DegenerateReason(Enum):
    PARABOLIC_DENOMINATOR_ZERO = 'parabolic-denominator-zero'
    NEGATIVE_RADICAND = 'negative-radicand'
    DEGENERATE_GEOMETRY = 'degenerate-geometry'
    INVALID_INPUT = 'invalid-input'


@dataclass(frozen=True)
class OrbitalState:
    """
    Solver input: a relative two-body state in the orbital plane.

    Attributes
    ----------
    m : float
        Central mass [kg]
    x, y : float
        Position relative to the central mass [m]
    vx, vy : float
        Velocity relative to the central mass [m/s]
    """
    m: float
    x: float
    y: float
    vx: float
    vy: float

    @classmethod
    def from_vectors(cls, m, r_vec, v_vec) -> 'OrbitalState':
        """
        Build a planar state from 2D or 3D relative position and velocity.
        3D vectors are projected into their orbital plane first.
        """
        r_vec = np.asarray(r_vec, dtype=float)
        v_vec = np.asarray(v_vec, dtype=float)
        if r_vec.shape == (2,) and v_vec.shape == (2,):
            return cls(float(m), *map(float, r_vec), *map(float, v_vec))
        (x, y), (vx, vy) = project_to_orbital_plane(r_vec, v_vec)
        return cls(float(m), x, y, vx, vy)

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self.vx, self.vy)


@dataclass(frozen=True)
class DegenerateOrbit:
    """
    Marker returned when no orbit elements can be reported for a state.

    The display layer should treat this as "orbit unavailable" for the
    current tick; it is never an exception.

    Attributes
    ----------
    reason : DegenerateReason
        Which degeneracy was detected
    detail : str
        Human-readable description including the offending values
    """
    reason: DegenerateReason
    detail: str = ''

    is_degenerate = True

    @property
    def orbit_type(self) -> OrbitType:
        if self.reason == DegenerateReason.PARABOLIC_DENOMINATOR_ZERO:
            return OrbitType.PARABOLIC
        return OrbitType.DEGENERATE

    def __str__(self):
        return f"Degenerate orbit ({self.reason.value}): {self.detail}"


class OrbitElements:
    """
    Classical two-body orbit elements matching an instantaneous state.

    OrbitElements is immutable. Instances are normally produced by
    ``solve_orbit`` / ``OrbitElements.from_state``; direct construction
    validates that the semi-major axis, eccentricity and classification
    are consistent.

    Parameters
    ----------
    semi_major_axis : float
        Semi-major axis [m]. Positive for bound orbits, negative for
        hyperbolic orbits.
    eccentricity : float
        Eccentricity (dimensionless, >= 0)
    orbit_type : OrbitType or str
        Classification of the orbit
    mu : float
        Gravitational parameter G*M of the central mass [m^3/s^2]
    validate : bool, optional
        Check element consistency (default True)

    Examples
    --------
    >>> elements = OrbitElements.from_state(
    ...     OrbitalState(m=1.0, x=1.0, y=0.0, vx=0.0, vy=1.2), G=1.0)
    >>> elements.orbit_type
    <OrbitType.ELLIPTICAL: 'elliptical'>
    >>> elements.periapsis <= elements.apoapsis
    True
    """

    is_degenerate = False

    # ========== CONSTRUCTION ==========
    def __init__(self, semi_major_axis: float, eccentricity: float,
                 orbit_type: Union[OrbitType, str], mu: float, validate=True):
        self._a = float(semi_major_axis)
        self._e = float(eccentricity)
        self._orbit_type = self._parse_orbit_type(orbit_type)
        self._mu = float(mu)
        if validate:
            self._validate()

    @classmethod
    def from_state(cls, state: OrbitalState, G: Optional[float] = None):
        """
        Solve the orbit matching state. See ``solve_orbit``.

        Returns
        -------
        OrbitElements or DegenerateOrbit
        """
        return solve_orbit(state, G=G)

    # ========== VALIDATION ==========
    def _validate(self):
        a, e = self._a, self._e
        if not (math.isfinite(a) and math.isfinite(e) and math.isfinite(self._mu)):
            raise ValueError("Elements contain NaN or Inf")
        if self._mu <= 0:
            raise ValueError(f"Gravitational parameter must be positive, "
                             f"got {self._mu}")
        if a == 0:
            raise ValueError("Semi-major axis cannot be zero")
        if e < 0:
            raise ValueError(f"Eccentricity must be non-negative, got {e}")

        if self._orbit_type == OrbitType.ELLIPTICAL:
            if a <= 0 or e >= 1:
                raise ValueError(f"Elliptic orbit requires a > 0 and e < 1, "
                                 f"got a={a}, e={e}")
        elif self._orbit_type == OrbitType.HYPERBOLIC:
            if a >= 0 or e <= 1:
                raise ValueError(f"Hyperbolic orbit requires a < 0 and e > 1, "
                                 f"got a={a}, e={e}")
        elif self._orbit_type == OrbitType.DEGENERATE:
            if e != 1:
                raise ValueError(f"Rectilinear orbit requires e = 1, got e={e}")
        else:
            raise ValueError("Parabolic orbits have no finite semi-major axis; "
                             "they are reported as DegenerateOrbit")

    # ========== PROPERTY ACCESS ==========
    @property
    def semi_major_axis(self) -> float:
        """Semi-major axis [m]"""
        return self._a

    @property
    def eccentricity(self) -> float:
        """Eccentricity"""
        return self._e

    @property
    def orbit_type(self) -> OrbitType:
        return self._orbit_type

    @property
    def mu(self) -> float:
        """Gravitational parameter [m^3/s^2]"""
        return self._mu

    # abbreviations matching textbook notation
    a = semi_major_axis
    e = eccentricity

    @property
    def is_bound(self) -> bool:
        return self._a > 0

    # ========== ORBITAL PROPERTIES ==========
    @property
    def apoapsis(self) -> Optional[float]:
        """
        Farthest distance from the central mass [m].

        None for unbound orbits, which have no apoapsis.
        """
        if not self.is_bound:
            return None
        return self._a * (1 + self._e)

    @property
    def periapsis(self) -> float:
        """Nearest distance from the central mass [m]"""
        return self._a * (1 - self._e)

    def semi_latus_rectum(self) -> float:
        """p = a(1 - e^2) [m]"""
        return self._a * (1 - self._e**2)

    def specific_energy(self) -> float:
        """Specific orbital energy -mu/(2a) [J/kg]"""
        return -self._mu / (2 * self._a)

    def specific_angular_momentum(self) -> float:
        """Specific angular momentum magnitude sqrt(mu p) [m^2/s]"""
        return math.sqrt(max(self._mu * self.semi_latus_rectum(), 0.0))

    def orbital_period(self) -> float:
        """
        Calculate orbital period

        Returns period in seconds (only for elliptic orbits)
        """
        if self._orbit_type != OrbitType.ELLIPTICAL:
            raise ValueError(f"Orbital period undefined for "
                             f"{self._orbit_type.value} orbits")
        return 2 * math.pi * math.sqrt(self._a**3 / self._mu)

    def mean_motion(self) -> float:
        """
        Calculate mean motion (n = sqrt(mu/a^3))

        Returns
        -------
        float
            Mean motion [rad/s]

        Raises
        ------
        ValueError
            If the orbit is not elliptical
        """
        if self._orbit_type != OrbitType.ELLIPTICAL:
            raise ValueError(f"Mean motion undefined for "
                             f"{self._orbit_type.value} orbits")
        return math.sqrt(self._mu / self._a**3)

    # ========== BATCH OPERATIONS ==========
    class Batch:
        """
        Batch operations on collections of states and solver results.
        """
        @staticmethod
        def solve(states, G=None):
            """Solve every OrbitalState, keeping degenerate markers in place"""
            return [solve_orbit(s, G=G) for s in states]

        @staticmethod
        def to_numpy(results):
            """
            Convert solver results to an array of shape (n, 4).

            Columns are [a, e, apoapsis, periapsis]. Degenerate results and
            missing apoapses are filled with NaN.
            """
            rows = []
            for res in results:
                if res.is_degenerate:
                    rows.append([np.nan] * 4)
                else:
                    apo = res.apoapsis
                    rows.append([res.a, res.e,
                                 np.nan if apo is None else apo, res.periapsis])
            return np.array(rows, dtype=float).reshape(-1, 4)

        @staticmethod
        def to_dataframe(results, index=None):
            """
            Convert solver results to a pandas DataFrame.

            Parameters
            ----------
            results : list of OrbitElements or DegenerateOrbit
            index : array-like, optional
                Index for the DataFrame (e.g., tick numbers).

            Returns
            -------
            pd.DataFrame
                Columns ['a', 'e', 'apoapsis', 'periapsis', 'type', 'reason']
            """
            # pandas isn't needed unless this function is used
            try:
                import pandas as pd
            except ImportError:
                raise ImportError("pandas required for to_dataframe()")

            if index is not None and len(index) != len(results):
                raise ValueError(
                    f"Index length ({len(index)}) must match "
                    f"number of results ({len(results)})"
                )

            data = OrbitElements.Batch.to_numpy(results)
            df = pd.DataFrame(data, columns=['a', 'e', 'apoapsis', 'periapsis'],
                              index=index)
            df['type'] = [r.orbit_type.value for r in results]
            df['reason'] = [r.reason.value if r.is_degenerate else None
                            for r in results]
            return df

    # ========== SPECIAL METHODS ==========
    def __repr__(self):
        #Machine-readable representation
        return (f"OrbitElements(semi_major_axis={self._a!r}, "
                f"eccentricity={self._e!r}, orbit_type={self._orbit_type}, "
                f"mu={self._mu!r})")

    def __str__(self):
        #Human-readable representation
        apo = self.apoapsis
        apo_str = f"{apo:14.4f} m" if apo is not None else f"{'unbounded':>14}"
        return (f"{self._orbit_type.value.capitalize()} Orbit:\n"
                f"  a     = {self._a:14.4f} m\n"
                f"  e     = {self._e:14.8f}\n"
                f"  apo   = {apo_str}\n"
                f"  peri  = {self.periapsis:14.4f} m")

    def __eq__(self, other):
        #Check equality with tolerance
        if not isinstance(other, OrbitElements):
            return False
        return (self._orbit_type == other._orbit_type and
                np.allclose([self._a, self._e, self._mu],
                            [other._a, other._e, other._mu],
                            rtol=config.EQUALITY_RTOL,
                            atol=config.EQUALITY_ATOL))

    def __hash__(self):
        #Hash with rounding to match equality
        rounded = tuple(round(x, config.HASH_DECIMALS)
                        for x in (self._a, self._e, self._mu))
        return hash((self._orbit_type, rounded))

    # ========== STATIC METHODS ==========
    @staticmethod
    def _parse_orbit_type(orbit_type):
        """Convert string or enum to OrbitType enum"""
        if isinstance(orbit_type, OrbitType):
            return orbit_type
        elif isinstance(orbit_type, str):
            type_map = {
                'ell': OrbitType.ELLIPTICAL,
                'elliptic': OrbitType.ELLIPTICAL,
                'elliptical': OrbitType.ELLIPTICAL,
                'hyp': OrbitType.HYPERBOLIC,
                'hyperbolic': OrbitType.HYPERBOLIC,
                'parabolic': OrbitType.PARABOLIC,
                'radial': OrbitType.DEGENERATE,
                'degenerate': OrbitType.DEGENERATE,
            }
            if orbit_type in type_map:
                return type_map[orbit_type]
            else:
                raise ValueError(f"Unknown orbit type '{orbit_type}'. "
                                 f"Use: {list(type_map.keys())}")
        else:
            raise TypeError(f"orbit_type must be OrbitType or str, "
                            f"got {type(orbit_type)}")


# ========== SOLVER ==========
def _invalid(message: str) -> DegenerateOrbit:
    validation_error(message)
    return DegenerateOrbit(DegenerateReason.INVALID_INPUT, message)


def _degenerate(reason: DegenerateReason, detail: str) -> DegenerateOrbit:
    logger.debug("Degenerate orbit (%s): %s", reason.value, detail)
    return DegenerateOrbit(reason, detail)


def solve_orbit(state: OrbitalState, G: Optional[float] = None
                ) -> Union[OrbitElements, DegenerateOrbit]:
    """
    Compute the two-body orbit that instantaneously matches a planar state.

    Pure and stateless; safe to call concurrently.

    Parameters
    ----------
    state : OrbitalState
        Central mass and relative position/velocity in the orbital plane
    G : float, optional
        Gravitational constant. Defaults to config.GRAVITATIONAL_CONSTANT.

    Returns
    -------
    OrbitElements
        When an elliptical, hyperbolic or rectilinear orbit is defined
    DegenerateOrbit
        When v^2 r = 2GM (parabolic), the position is the origin, an
        intermediate overflows or underflows double precision, the
        eccentricity radicand is negative beyond rounding, or (with
        STRICT_VALIDATION off) the input is invalid

    Raises
    ------
    ValueError
        If STRICT_VALIDATION is on and m or G are not positive, or any
        component is NaN/Inf

    Notes
    -----
    Semi-major axis from the vis-viva equation, a = GMr / (2GM - v^2 r).
    Eccentricity from the angular momentum relation
    (r v sin(psi - theta))^2 = GMa (1 - e^2), solved on the branch
    selected by the sign of a.
    """
    if G is None:
        G = config.GRAVITATIONAL_CONSTANT

    values = (state.m, state.x, state.y, state.vx, state.vy, G)
    if not all(math.isfinite(v) for v in values):
        return _invalid(f"Orbital state contains NaN or Inf: {state}, G={G}")
    if state.m <= 0:
        return _invalid(f"Central mass must be positive, got {state.m}")
    if G <= 0:
        return _invalid(f"Gravitational constant must be positive, got {G}")

    r, theta = cartesian_to_polar(state.x, state.y)
    if r == 0:
        return _degenerate(DegenerateReason.DEGENERATE_GEOMETRY,
                           "relative position is zero")
    v, psi = cartesian_to_polar(state.vx, state.vy)

    mu = G * state.m
    if mu == 0 or not math.isfinite(mu):
        return _degenerate(DegenerateReason.DEGENERATE_GEOMETRY,
                           f"GM = {mu!r} outside floating-point range")
    # semi major axis from vis-viva
    denom = 2 * mu - v * v * r
    if abs(denom) <= config.PARABOLIC_TOLERANCE * 2 * mu:
        return _degenerate(DegenerateReason.PARABOLIC_DENOMINATOR_ZERO,
                           f"v^2 r = {v * v * r!r} equals 2GM = {2 * mu!r}")
    a = mu * r / denom
    # angular momentum per unit mass
    rvsin = r * v * math.sin(psi - theta)
    gma = mu * a
    if gma == 0 or not math.isfinite(gma) or not math.isfinite(rvsin):
        return _degenerate(DegenerateReason.DEGENERATE_GEOMETRY,
                           f"state outside floating-point range: a = {a!r}, "
                           f"r v sin(psi - theta) = {rvsin!r}")

    if rvsin == 0:
        # rectilinear motion; the conic collapses onto a line
        return OrbitElements(a, 1.0, OrbitType.DEGENERATE, mu)

    ratio = rvsin * rvsin / gma
    if not math.isfinite(ratio):
        return _degenerate(DegenerateReason.DEGENERATE_GEOMETRY,
                           f"h^2/(GMa) = {ratio!r} for a = {a!r}")

    if a > 0:
        radicand = 1 - ratio
        if radicand < 0:
            if radicand < -config.RADICAND_TOLERANCE:
                return _degenerate(DegenerateReason.NEGATIVE_RADICAND,
                                   f"1 - h^2/(GMa) = {radicand!r} for a = {a!r}")
            radicand = 0.0
        e = math.sqrt(radicand)
        if e < config.SNAP_TO_CIRCULAR:
            e = 0.0
        if e >= 1:
            # h^2/(GMa) below double precision
            return OrbitElements(a, 1.0, OrbitType.DEGENERATE, mu)
        return OrbitElements(a, e, OrbitType.ELLIPTICAL, mu)

    # hyperbolic branch, GMa < 0 so the radicand exceeds one
    e = math.sqrt(1 - ratio)
    if e <= 1:
        return OrbitElements(a, 1.0, OrbitType.DEGENERATE, mu)
    return OrbitElements(a, e, OrbitType.HYPERBOLIC, mu)


def solve_orbit_from(m: float, position, velocity, G: Optional[float] = None
                     ) -> Union[OrbitElements, DegenerateOrbit]:
    """
    Convenience wrapper around ``solve_orbit``.

    Parameters
    ----------
    m : float
        Central mass [kg]
    position, velocity : array-like, shape (2,) or (3,)
        Relative state; 3D input is projected into the orbital plane
    G : float, optional
        Gravitational constant

    Examples
    --------
    >>> solve_orbit_from(5.972e24, (42000.0, 0.0), (0.0, 3074.0), G=6.6e-11)
    """
    return solve_orbit(OrbitalState.from_vectors(m, position, velocity), G=G)
