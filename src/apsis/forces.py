'''Force composition for the apsis flight core
ContributorKey, ForceContribution and ForceLedger definitions'''

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Tuple, Union

from .config import config
from .utils import as_vector3, validation_error


# define the closed set of contributor kinds
class ContributorKind(Enum):
    THRUSTERS = 'thrusters'     # propulsion owned by the body itself
    GRAVITY = 'gravity'         # one entry per gravity source
    EXTERNAL = 'external'       # tags listed in config.EXTERNAL_CONTRIBUTORS


@dataclass(frozen=True)
class ContributorKey:
    """
    Identifier of one logical force contributor.

    Keys compare by value, so two subsystems constructing the same key share a
    ledger slot and two different keys never collide. No registry has to be
    consulted to claim a slot.

    Attributes
    ----------
    kind : ContributorKind
        Category of the contributor
    tag : str
        Distinguishes several contributors of the same kind, e.g. the name
        of a gravity source. Empty for THRUSTERS.

    Notes
    -----
    EXTERNAL keys are extendable by configuration: their tag must appear in
    ``config.EXTERNAL_CONTRIBUTORS``.
    """
    kind: ContributorKind
    tag: str = ''

    def __post_init__(self):
        if not isinstance(self.kind, ContributorKind):
            raise TypeError(f"kind must be ContributorKind, got {type(self.kind)}")
        if not isinstance(self.tag, str):
            raise TypeError(f"tag must be str, got {type(self.tag)}")
        if self.kind == ContributorKind.GRAVITY and not self.tag:
            raise ValueError("Gravity contributors require a source tag")
        if (self.kind == ContributorKind.EXTERNAL
                and self.tag not in config.EXTERNAL_CONTRIBUTORS):
            validation_error(
                f"Unknown external contributor '{self.tag}'. "
                f"Configured: {list(config.EXTERNAL_CONTRIBUTORS)}")

    # ========== ALTERNATE CONSTRUCTORS ==========
    @classmethod
    def gravity(cls, source_name: str = 'primary') -> 'ContributorKey':
        """Key for the gravity contribution of a named source."""
        return cls(ContributorKind.GRAVITY, source_name)

    @classmethod
    def external(cls, tag: str) -> 'ContributorKey':
        """Key for a configured external contributor."""
        return cls(ContributorKind.EXTERNAL, tag)

    @classmethod
    def parse(cls, key) -> 'ContributorKey':
        """
        Convert a ContributorKey, ContributorKind or string to a key.

        Accepted strings: 'thrusters', 'primary-gravity', 'gravity',
        'gravity:<source>', 'external:<tag>' and bare configured
        external tags such as 'drag'.
        """
        if isinstance(key, ContributorKey):
            return key
        if isinstance(key, ContributorKind):
            if key == ContributorKind.THRUSTERS:
                return THRUSTERS
            if key == ContributorKind.GRAVITY:
                return PRIMARY_GRAVITY
            raise ValueError("External contributors need a tag, "
                             "use ContributorKey.external(tag)")
        if not isinstance(key, str):
            raise TypeError(f"Contributor key must be ContributorKey or str, "
                            f"got {type(key)}")

        # kinds are case-insensitive, tags are kept verbatim
        name = key.strip()
        if name.lower() in ('thrusters', 'thruster'):
            return THRUSTERS
        if name.lower() in ('primary-gravity', 'gravity'):
            return PRIMARY_GRAVITY
        kind, sep, tag = name.partition(':')
        if sep:
            if kind.lower() == ContributorKind.GRAVITY.value:
                return cls.gravity(tag)
            if kind.lower() == ContributorKind.EXTERNAL.value:
                return cls.external(tag)
        if name in config.EXTERNAL_CONTRIBUTORS:
            return cls.external(name)
        raise ValueError(f"Unknown contributor key '{key}'. Use 'thrusters', "
                         f"'primary-gravity', 'gravity:<source>' or "
                         f"'external:<tag>'")

    def __str__(self):
        if not self.tag:
            return self.kind.value
        return f"{self.kind.value}:{self.tag}"


# Common keys
THRUSTERS = ContributorKey(ContributorKind.THRUSTERS)
PRIMARY_GRAVITY = ContributorKey.gravity('primary')

KeyLike = Union[ContributorKey, ContributorKind, str]


def _canonical_order(key: ContributorKey) -> Tuple[str, str]:
    return (key.kind.value, key.tag)


class ForceContribution:
    """
    A force and a torque proposed for one body, both 3-vectors.

    ForceContribution is immutable: the arrays are read-only and arithmetic
    returns new instances. Equality uses the package tolerances.

    Parameters
    ----------
    force : array-like, shape (3,), optional
        Force in the world frame [N]. Default zero.
    torque : array-like, shape (3,), optional
        Torque in the world frame [N m]. Default zero.
    validate : bool, optional
        Reject non-finite components (default True)
    """

    def __init__(self, force=(0.0, 0.0, 0.0), torque=(0.0, 0.0, 0.0),
                 validate=True):
        force = as_vector3(force, "force")
        torque = as_vector3(torque, "torque")
        if validate:
            force = self._check_finite(force, "force")
            torque = self._check_finite(torque, "torque")
        self._force = force
        self._torque = torque

    @staticmethod
    def _check_finite(vec, name):
        if np.all(np.isfinite(vec)):
            return vec
        validation_error(f"{name} contains NaN or Inf: {vec.tolist()}")
        # non-strict mode: drop the offending components
        cleaned = np.where(np.isfinite(vec), vec, 0.0)
        cleaned.flags.writeable = False
        return cleaned

    @classmethod
    def zero(cls) -> 'ForceContribution':
        """The neutral contribution: zero force and zero torque."""
        return ZERO

    # ========== PROPERTY ACCESS ==========
    @property
    def force(self) -> np.ndarray:
        """Force vector [N] (read-only)"""
        return self._force

    @property
    def torque(self) -> np.ndarray:
        """Torque vector [N m] (read-only)"""
        return self._torque

    def is_zero(self) -> bool:
        return not (np.any(self._force) or np.any(self._torque))

    # ========== ARITHMETIC ==========
    def __add__(self, other):
        if not isinstance(other, ForceContribution):
            return NotImplemented
        return ForceContribution(self._force + other._force,
                                 self._torque + other._torque, validate=False)

    def __sub__(self, other):
        if not isinstance(other, ForceContribution):
            return NotImplemented
        return ForceContribution(self._force - other._force,
                                 self._torque - other._torque, validate=False)

    def __neg__(self):
        return ForceContribution(-self._force, -self._torque, validate=False)

    def __mul__(self, scale):
        if not isinstance(scale, (int, float, np.floating, np.integer)):
            return NotImplemented
        return ForceContribution(self._force * scale, self._torque * scale)

    __rmul__ = __mul__

    # ========== SPECIAL METHODS ==========
    def __eq__(self, other):
        if not isinstance(other, ForceContribution):
            return NotImplemented
        return (np.allclose(self._force, other._force,
                            rtol=config.EQUALITY_RTOL, atol=config.EQUALITY_ATOL)
                and np.allclose(self._torque, other._torque,
                                rtol=config.EQUALITY_RTOL,
                                atol=config.EQUALITY_ATOL))

    def __hash__(self):
        decimals = config.HASH_DECIMALS
        rounded = tuple(round(x, decimals) for x in
                        np.concatenate([self._force, self._torque]))
        return hash(rounded)

    def __repr__(self):
        return (f"ForceContribution(force={self._force.tolist()}, "
                f"torque={self._torque.tolist()})")


ZERO = ForceContribution()


class ForceLedger:
    """
    Per-body record of the force/torque each contributor currently proposes.

    Contributors upsert their own entry every tick with ``set``; the
    aggregation step reads the total with ``combine``. Looking up a
    contributor that never wrote returns the zero contribution, so callers
    never need an existence check. Entries are never removed: a contributor
    going idle writes zero (see ``release``).

    Examples
    --------
    >>> ledger = ForceLedger()
    >>> ledger.set(THRUSTERS, ForceContribution(force=[0, 0, 10]))
    >>> ledger.set('primary-gravity', ForceContribution(force=[0, 0, -9.8]))
    >>> ledger.combine().force
    array([0. , 0. , 0.2])
    """

    def __init__(self):
        self._entries: Dict[ContributorKey, ForceContribution] = {}

    def get(self, key: KeyLike) -> ForceContribution:
        """
        Stored contribution for key, or the zero contribution.

        Never raises. A string naming a stored entry is found by its
        ``str`` form even if its external tag has since been removed from
        the configuration; any other unresolvable key reads as zero.
        """
        try:
            return self._entries.get(ContributorKey.parse(key), ZERO)
        except (TypeError, ValueError):
            if not isinstance(key, str):
                return ZERO
            name = key.strip()
            for stored, contribution in self._entries.items():
                if stored.kind != ContributorKind.EXTERNAL:
                    continue
                if name in (str(stored), stored.tag):
                    return contribution
            return ZERO

    def set(self, key: KeyLike, contribution: ForceContribution) -> None:
        """Insert or replace the contribution for key. Last write wins."""
        if not isinstance(contribution, ForceContribution):
            raise TypeError(f"contribution must be ForceContribution, "
                            f"got {type(contribution)}")
        self._entries[ContributorKey.parse(key)] = contribution

    def release(self, key: KeyLike) -> None:
        """Mark a contributor idle by setting its entry to zero."""
        self.set(key, ZERO)

    def combine(self) -> ForceContribution:
        """
        Sum all entries componentwise into one contribution.

        Entries are accumulated in a canonical key order, so the result is
        identical for any insertion order. An empty ledger combines to zero.
        """
        if not self._entries:
            return ZERO
        ordered = [self._entries[k]
                   for k in sorted(self._entries, key=_canonical_order)]
        force = np.sum([c.force for c in ordered], axis=0)
        torque = np.sum([c.torque for c in ordered], axis=0)
        return ForceContribution(force, torque, validate=False)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    def __contains__(self, key) -> bool:
        try:
            return ContributorKey.parse(key) in self._entries
        except (TypeError, ValueError):
            return False

    def __iter__(self) -> Iterator[ContributorKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self):
        entries = ", ".join(f"{k}: {v!r}" for k, v in self._entries.items())
        return f"ForceLedger({{{entries}}})"
