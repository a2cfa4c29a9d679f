'''Force aggregation step
Publishes each body's combined ledger force for the physics integrator'''

import logging
from typing import Callable, Iterable, Optional

from .bodies import Body
from .config import config
from .utils import validation_error

logger = logging.getLogger(__name__)

Integrator = Callable[[Body, float], None]


def update_external_forces(bodies: Iterable[Body]) -> None:
    """
    Combine every body's ledger into its ``external_force``.

    Must run once per tick, after all contributors have written their
    entries for that tick and before the integrator reads the result.
    The ordering is the caller's responsibility; no locking is done here.
    Different bodies are independent and may be aggregated in parallel.
    """
    count = 0
    for body in bodies:
        body.external_force = body.ledger.combine()
        count += 1
    logger.debug("Aggregated external forces for %d bodies", count)


def run_tick(bodies: Iterable[Body], contributors: Iterable,
             integrate: Optional[Integrator] = None,
             dt: Optional[float] = None) -> None:
    """
    Run one fixed tick in the order contributors -> aggregation -> integrator.

    For hosts without their own stage scheduler, and for tests.

    Parameters
    ----------
    bodies : iterable of Body
        Force-bearing bodies updated this tick
    contributors : iterable of Contributor
        Each is invoked for every body it ``applies_to``
    integrate : callable, optional
        ``integrate(body, dt)``; reads ``body.external_force`` and reports the
        new state through ``body.update_state``
    dt : float, optional
        Tick length [s], defaults to config.DEFAULT_TICK

    Raises
    ------
    ValueError
        If dt is not positive, or (with STRICT_VALIDATION on) two
        contributors would write the same key on the same body. With
        STRICT_VALIDATION off a warning is issued and the last write wins.
    """
    if dt is None:
        dt = config.DEFAULT_TICK
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")

    bodies = list(bodies)
    contributors = list(contributors)

    claimed = {}
    for contributor in contributors:
        for body in bodies:
            if not contributor.applies_to(body):
                continue
            slot = (id(body), contributor.key)
            if slot in claimed:
                validation_error(
                    f"Contributors {claimed[slot]!r} and {contributor!r} both "
                    f"write '{contributor.key}' on {body!r}")
            claimed[slot] = contributor
            contributor.contribute(body, dt)

    update_external_forces(bodies)

    if integrate is not None:
        for body in bodies:
            integrate(body, dt)
