'''Bodies for the apsis flight core
Body (force-bearing body owning a ledger) and GravitySource definitions'''

import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import config
from .forces import ForceContribution, ForceLedger, ZERO
from .orbit import OrbitalState, solve_orbit
from .utils import as_vector3


@dataclass(frozen=True)
class GravitySource:
    """
    Immutable parameters for a point-mass gravity source.

    Attributes
    ----------
    mass : float
        Mass of the source [kg]
    position : tuple of float
        Position in the world frame [m]
    velocity : tuple of float
        Velocity in the world frame [m/s]
    radius : float, optional
        Physical radius [m], informational only
    name : str, optional
        Identifier, also used as the tag of its gravity contributor key
    """
    mass: float
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    radius: Optional[float] = None
    name: Optional[str] = None

    def __post_init__(self):
        #Validate parameters
        if not np.isfinite(self.mass) or self.mass <= 0:
            raise ValueError(f"Source mass must be positive, got {self.mass}")
        if self.radius is not None and self.radius <= 0:
            raise ValueError(f"Radius must be positive, got {self.radius}")
        # normalise to plain float tuples so instances stay hashable
        for field_name in ('position', 'velocity'):
            vec = as_vector3(getattr(self, field_name), field_name)
            if not np.all(np.isfinite(vec)):
                raise ValueError(f"{field_name} contains NaN or Inf")
            object.__setattr__(self, field_name, tuple(float(x) for x in vec))

    def mu(self, G: Optional[float] = None) -> float:
        """Gravitational parameter G*M [m^3/s^2]"""
        if G is None:
            G = config.GRAVITATIONAL_CONSTANT
        return G * self.mass

    def moved_to(self, position, velocity=None) -> 'GravitySource':
        """Copy of this source at a new position (and optionally velocity)."""
        return GravitySource(self.mass, position,
                             self.velocity if velocity is None else velocity,
                             self.radius, self.name)


class Body:
    """
    A force-bearing body taking part in the flight simulation.

    Each Body exclusively owns one ForceLedger. Contributors write into it,
    the aggregation step publishes the combined value as ``external_force``
    and the physics integrator reads that value once per tick. Position and
    velocity belong to the integrator, which reports them through
    ``update_state``; the core only reads them.

    Parameters
    ----------
    mass : float
        Body mass [kg]
    position : array-like, shape (3,), optional
        Initial world-frame position [m]
    velocity : array-like, shape (3,), optional
        Initial world-frame velocity [m/s]
    name : str, optional
        Body identifier
    """

    def __init__(
        self,
        mass: float,
        position=(0.0, 0.0, 0.0),
        velocity=(0.0, 0.0, 0.0),
        name: Optional[str] = None
    ):
        if not np.isfinite(mass) or mass <= 0:
            raise ValueError(f"Mass must be positive, got {mass}")

        self._mass = float(mass)
        self._name = name
        self._ledger = ForceLedger()
        self._external_force = ZERO
        self.update_state(position, velocity)

    # ========== PROPERTY ACCESS ==========
    @property
    def mass(self) -> float:
        """Body mass [kg]"""
        return self._mass

    @property
    def name(self) -> Optional[str]:
        """Body identifier"""
        return self._name

    @property
    def ledger(self) -> ForceLedger:
        """Force contributions proposed for this body"""
        return self._ledger

    @property
    def position(self) -> np.ndarray:
        """World-frame position [m] (read-only)"""
        return self._position

    @property
    def velocity(self) -> np.ndarray:
        """World-frame velocity [m/s] (read-only)"""
        return self._velocity

    @property
    def external_force(self) -> ForceContribution:
        """Combined force/torque the integrator applies this tick"""
        return self._external_force

    @external_force.setter
    def external_force(self, value: ForceContribution):
        if not isinstance(value, ForceContribution):
            raise TypeError(f"external_force must be ForceContribution, "
                            f"got {type(value)}")
        self._external_force = value

    # ========== STATE ==========
    def update_state(self, position, velocity) -> None:
        """Record the integrator's latest position and velocity."""
        self._position = as_vector3(position, "position")
        self._velocity = as_vector3(velocity, "velocity")

    def relative_state(self, source: GravitySource) -> Tuple[np.ndarray, np.ndarray]:
        """Position and velocity of this body relative to a gravity source."""
        return (self._position - np.asarray(source.position),
                self._velocity - np.asarray(source.velocity))

    def orbital_state(self, source: GravitySource) -> OrbitalState:
        """Relative state about source, projected into its orbital plane."""
        r_vec, v_vec = self.relative_state(source)
        return OrbitalState.from_vectors(source.mass, r_vec, v_vec)

    def orbit_about(self, source: GravitySource, G: Optional[float] = None):
        """
        Instantaneous two-body orbit of this body about a gravity source.

        Returns
        -------
        OrbitElements or DegenerateOrbit
        """
        return solve_orbit(self.orbital_state(source), G=G)

    def __repr__(self) -> str:
        name_str = f"'{self.name}'" if self.name else "unnamed"
        return (f"Body({name_str}, mass={self.mass:.2f} kg, "
                f"contributors={len(self._ledger)})")
