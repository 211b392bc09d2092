"""moonephem public API.

Keep this surface small: users should mostly interact with names re-exported here.
"""

from .core.errors import (
    LayoutError,
    MoonephemError,
    NoPeakFoundError,
    OutOfRangeError,
    TooFewSamplesError,
    UnknownSeriesError,
)
from .core.types import EphemProperties, SeriesKind, SeriesMetadata
from .ephemeris.bodies import BodyResolver
from .ephemeris.layout import SHIPPED_LAYOUT, EphemerisLayout, PhysicalConstants, load_layout
from .ephemeris.store import EphemerisStore
from .events import find_apogees, find_full_moons, find_new_moons, find_perigees, super_perigees
from .search.peaks import PeakObject, get_peaks, get_unrefined_peaks

__version__ = "0.1.0"

__all__ = [
    "EphemerisStore",
    "EphemerisLayout",
    "SHIPPED_LAYOUT",
    "load_layout",
    "PhysicalConstants",
    "SeriesKind",
    "SeriesMetadata",
    "EphemProperties",
    "BodyResolver",
    "find_perigees",
    "find_apogees",
    "find_full_moons",
    "find_new_moons",
    "super_perigees",
    "get_peaks",
    "get_unrefined_peaks",
    "PeakObject",
    "MoonephemError",
    "LayoutError",
    "UnknownSeriesError",
    "OutOfRangeError",
    "TooFewSamplesError",
    "NoPeakFoundError",
]
