"""
Apsis: Force Composition and Orbit Solving for Real-Time Flight Simulation

A Python package providing the numerical core of an orbital-flight prototype:
per-body force ledgers recombined once per tick for a physics integrator, and
an instantaneous two-body orbit solver for prediction and display.
"""

# Configuration
from .config import config, temp_config

# Force composition
from .forces import (
    ContributorKind, ContributorKey, ForceContribution, ForceLedger,
    THRUSTERS, PRIMARY_GRAVITY,
)
from .bodies import Body, GravitySource
from .contributors import Contributor, GravityContributor, ThrusterContributor
from .aggregation import update_external_forces, run_tick

# Orbit solving
from .orbit import (
    OrbitType, DegenerateReason, OrbitalState, OrbitElements, DegenerateOrbit,
    solve_orbit, solve_orbit_from,
)
from .coordinates import cartesian_to_polar, polar_to_cartesian, project_to_orbital_plane

# Commonly-used gravity sources
from .defaults import EARTH, MOON, MARS, SUN

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from apsis import *"
__all__ = [
    # Configuration
    "config",
    "temp_config",
    # Force composition
    "ContributorKind",
    "ContributorKey",
    "ForceContribution",
    "ForceLedger",
    "THRUSTERS",
    "PRIMARY_GRAVITY",
    "Body",
    "GravitySource",
    "Contributor",
    "GravityContributor",
    "ThrusterContributor",
    "update_external_forces",
    "run_tick",
    # Orbit solving
    "OrbitType",
    "DegenerateReason",
    "OrbitalState",
    "OrbitElements",
    "DegenerateOrbit",
    "solve_orbit",
    "solve_orbit_from",
    "cartesian_to_polar",
    "polar_to_cartesian",
    "project_to_orbital_plane",
    # Constants
    "EARTH",
    "MOON",
    "MARS",
    "SUN",
]
