'''Reference force contributors
Gravity and thruster subsystems writing into a body's ForceLedger'''

import itertools
import logging
import numpy as np
from typing import Optional, Protocol, runtime_checkable

from .bodies import Body, GravitySource
from .config import config
from .forces import ContributorKey, ForceContribution, THRUSTERS
from .utils import as_vector3

logger = logging.getLogger(__name__)

_unnamed_sources = itertools.count(1)


@runtime_checkable
class Contributor(Protocol):
    """
    Plugin interface for force contributors.
    Each contributor owns one ledger key and rewrites it every tick.
    """
    key: ContributorKey

    def applies_to(self, body: Body) -> bool:
        ...

    def contribute(self, body: Body, dt: float) -> None:
        ...


class GravityContributor:
    """
    Newtonian point-mass attraction of one gravity source.

    Writes F = G M m r_hat / r^2, directed from the body towards the
    source, under ``ContributorKey.gravity(source.name)``. Several
    contributors for differently named sources can act on the same body.

    Parameters
    ----------
    source : GravitySource
        Attracting mass
    G : float, optional
        Gravitational constant, defaults to config.GRAVITATIONAL_CONSTANT
    key : ContributorKey, optional
        Override the ledger key. Defaults to the source's gravity key; an
        unnamed source gets its own 'unnamed-<n>' tag so that several
        unnamed sources never share a slot.
    """

    def __init__(self, source: GravitySource, G: Optional[float] = None,
                 key: Optional[ContributorKey] = None):
        self.source = source
        self.G = G
        if key is None:
            tag = source.name
            if tag is None:
                tag = f"unnamed-{next(_unnamed_sources)}"
            key = ContributorKey.gravity(tag)
        self.key = key

    def applies_to(self, body: Body) -> bool:
        return True

    def force_on(self, body: Body) -> ForceContribution:
        """Gravitational pull of the source on body."""
        G = config.GRAVITATIONAL_CONSTANT if self.G is None else self.G
        offset = np.asarray(self.source.position) - body.position
        dist = np.linalg.norm(offset)
        if dist == 0:
            logger.warning("Body %r coincides with gravity source %r; "
                           "writing zero gravity", body.name, self.source.name)
            return ForceContribution.zero()
        magnitude = G * self.source.mass * body.mass / dist**2
        return ForceContribution(force=magnitude * offset / dist)

    def contribute(self, body: Body, dt: float) -> None:
        body.ledger.set(self.key, self.force_on(body))


class ThrusterContributor:
    """
    Thrusters mounted on a single body.

    The thrust vector is the world-frame force at full throttle. Setting
    the throttle to zero makes the contributor write the zero contribution
    rather than leaving a stale entry behind.

    Parameters
    ----------
    body : Body
        The body the thrusters are mounted on
    thrust : array-like, shape (3,)
        Force at full throttle [N]
    torque : array-like, shape (3,), optional
        Torque at full throttle [N m]
    key : ContributorKey, optional
        Ledger key, default THRUSTERS
    """

    def __init__(self, body: Body, thrust, torque=(0.0, 0.0, 0.0),
                 key: ContributorKey = THRUSTERS):
        self.body = body
        self.full = ForceContribution(as_vector3(thrust, "thrust"),
                                      as_vector3(torque, "torque"))
        self.key = key
        self._throttle = 0.0

    @property
    def throttle(self) -> float:
        """Fraction of full thrust currently commanded, in [0, 1]"""
        return self._throttle

    @throttle.setter
    def throttle(self, value: float):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Throttle must be within [0, 1], got {value}")
        self._throttle = float(value)

    def fire(self, throttle: float = 1.0) -> None:
        self.throttle = throttle

    def cut(self) -> None:
        self.throttle = 0.0

    def applies_to(self, body: Body) -> bool:
        return body is self.body

    def contribute(self, body: Body, dt: float) -> None:
        if self._throttle == 0.0:
            body.ledger.release(self.key)
        else:
            body.ledger.set(self.key, self.full * self._throttle)
