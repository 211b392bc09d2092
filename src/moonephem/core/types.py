from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

Vector3 = Tuple[float, float, float]

class SeriesKind(Enum):
    SSB_TO_EMB = "ssb_to_emb"
    EARTH_TO_MOON = "earth_to_moon"
    SSB_TO_SUN = "ssb_to_sun"

@dataclass(frozen=True)
class SeriesMetadata:
    """Where one series lives in the ephemeris buffer and how its intervals are shaped."""
    kind: SeriesKind
    offset: int
    size_in_bytes: int
    interval_duration_days: float
    property_count: int
    coeff_count: int

    @property
    def interval_size_in_bytes(self) -> int:
        # 64-bit coefficients
        return 8 * self.coeff_count * self.property_count

    @property
    def property_size_in_bytes(self) -> int:
        return 8 * self.coeff_count

    @property
    def interval_count(self) -> int:
        return self.size_in_bytes // self.interval_size_in_bytes

@dataclass(frozen=True)
class IntervalLocation:
    index: int
    start_jd: float
    byte_offset: int
    normalized_time: float  # in [-1, 1)

@dataclass(frozen=True)
class EphemProperties:
    positions: Vector3   # km
    velocities: Vector3  # km/day
