"""
moonephem.events
----------------
Perigee, apogee and lunar-phase finders.

Each finder samples the ephemeris on a regular Julian Date grid, picks the
local maxima of a quality function and refines them with
`moonephem.search.peaks` down to `precision_days` (30 seconds by default).
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .core.time import jd_to_datetime_utc, seconds_to_days
from .ephemeris.bodies import BodyResolver, EarthMoonSunPositions
from .ephemeris.layout import DEFAULT_CONSTANTS, PhysicalConstants
from .geometry import (
    EclipseMagnitude,
    angle_between_moon_and_sun,
    angle_from_full_moon,
    cos_angle_from_full_moon,
    lunar_eclipse_magnitude,
    moon_distance,
    sun_distance,
    visible_angle,
)
from .search.peaks import PeakObject, get_peaks, get_unrefined_peaks

log = logging.getLogger(__name__)

PEAK_PRECISION_DAYS = seconds_to_days(30)
DEFAULT_STEP_DAYS = 1.0

FULL_MOON_COS_ANGLE = 1.0
NEW_MOON_COS_ANGLE = -1.0

# A perigee counts as a supermoon when it lies within this many hours of a
# full (new) Moon and is in the closest tenth of that year's distance range.
SUPERMOON_MAX_HOURS = 24.0
SUPERMOON_RANGE_FRACTION = 0.1


@dataclass(frozen=True)
class DateDistance:
    jd: float
    distance: float  # km, Earth center to Moon center


@dataclass(frozen=True)
class DatePosition:
    jd: float
    positions: EarthMoonSunPositions
    moon_distance: float
    sun_distance: float


@dataclass(frozen=True)
class LunarPhase:
    jd: float
    cos_angle: float  # cosine of the angle from full Moon at jd
    closest_sample_jd: float


@dataclass(frozen=True)
class Apogee:
    jd: float
    distance: float
    closest_sample_jd: float


@dataclass(frozen=True)
class Perigee:
    jd: float
    distance: float
    angle_from_full_moon: float        # radians
    angle_between_moon_and_sun: float  # radians
    moon_visible_angle: float
    sun_visible_angle: float
    hours_from_full_moon: float
    hours_from_new_moon: float
    is_super_moon: bool
    is_super_new_moon: bool
    lunar_eclipse_magnitude: EclipseMagnitude

    @property
    def angle_from_full_moon_degrees(self) -> float:
        return math.degrees(self.angle_from_full_moon)


# --------------------------
# sampling
# --------------------------

def sample_dates(start_jd: float, end_jd: float, step_days: float = DEFAULT_STEP_DAYS) -> List[float]:
    """Regular grid over [start_jd, end_jd)."""
    if not step_days > 0:
        raise ValueError("step_days must be positive")
    return np.arange(start_jd, end_jd, step_days).tolist()


def date_distance(resolver: BodyResolver, jd: float) -> DateDistance:
    return DateDistance(jd=jd, distance=moon_distance(resolver.earth_moon_positions(jd)))


def date_position(resolver: BodyResolver, jd: float) -> DatePosition:
    p = resolver.earth_moon_sun_positions(jd)
    return DatePosition(jd=jd, positions=p, moon_distance=moon_distance(p), sun_distance=sun_distance(p))


def date_distances(resolver: BodyResolver, jds: Sequence[float]) -> List[DateDistance]:
    return [date_distance(resolver, jd) for jd in jds]


def date_positions(resolver: BodyResolver, jds: Sequence[float]) -> List[DatePosition]:
    return [date_position(resolver, jd) for jd in jds]


# --------------------------
# lunar phases
# --------------------------

def closest_angle_times(
    resolver: BodyResolver,
    cos_target: float,
    jds: Sequence[float],
    precision_days: float = PEAK_PRECISION_DAYS,
) -> List[PeakObject[float]]:
    """Instants where cos(angle from full Moon) comes closest to cos_target."""
    def proximity_to_angle(jd: float) -> float:
        return -abs(cos_angle_from_full_moon(resolver.earth_moon_positions(jd)) - cos_target)

    return get_peaks(jds, lambda t: t, proximity_to_angle, lambda t: t, precision_days)


def _phases(resolver: BodyResolver, cos_target: float, jds: Sequence[float], precision_days: float) -> List[LunarPhase]:
    return [
        LunarPhase(
            jd=p.peak,
            cos_angle=cos_angle_from_full_moon(resolver.earth_moon_positions(p.peak)),
            closest_sample_jd=p.closest_source,
        )
        for p in closest_angle_times(resolver, cos_target, jds, precision_days)
    ]


def find_full_moons(
    resolver: BodyResolver,
    start_jd: float,
    end_jd: float,
    *,
    step_days: float = DEFAULT_STEP_DAYS,
    precision_days: float = PEAK_PRECISION_DAYS,
) -> List[LunarPhase]:
    return _phases(resolver, FULL_MOON_COS_ANGLE, sample_dates(start_jd, end_jd, step_days), precision_days)


def find_new_moons(
    resolver: BodyResolver,
    start_jd: float,
    end_jd: float,
    *,
    step_days: float = DEFAULT_STEP_DAYS,
    precision_days: float = PEAK_PRECISION_DAYS,
) -> List[LunarPhase]:
    return _phases(resolver, NEW_MOON_COS_ANGLE, sample_dates(start_jd, end_jd, step_days), precision_days)


def find_new_moons_by_elongation(
    resolver: BodyResolver,
    start_jd: float,
    end_jd: float,
    *,
    step_days: float = DEFAULT_STEP_DAYS,
    precision_days: float = PEAK_PRECISION_DAYS,
) -> List[DatePosition]:
    """
    New Moons as minima of the geocentric Moon-Sun angle, using the Sun series
    rather than the SSB direction.
    """
    samples = date_positions(resolver, sample_dates(start_jd, end_jd, step_days))
    peaks = get_peaks(
        samples,
        lambda dp: dp.jd,
        lambda dp: -angle_between_moon_and_sun(dp.positions),
        lambda jd: date_position(resolver, jd),
        precision_days,
    )
    return [p.peak for p in peaks]


# --------------------------
# perigee / apogee
# --------------------------

def _distance_peaks(
    resolver: BodyResolver,
    samples: Sequence[DateDistance],
    sign: float,
    precision_days: float,
) -> List[PeakObject[DateDistance]]:
    return get_peaks(
        samples,
        lambda dd: dd.jd,
        lambda dd: sign * dd.distance,
        lambda jd: date_distance(resolver, jd),
        precision_days,
    )


def find_apogees(
    resolver: BodyResolver,
    start_jd: float,
    end_jd: float,
    *,
    step_days: float = DEFAULT_STEP_DAYS,
    precision_days: float = PEAK_PRECISION_DAYS,
) -> List[Apogee]:
    samples = date_distances(resolver, sample_dates(start_jd, end_jd, step_days))
    return [
        Apogee(jd=p.peak.jd, distance=p.peak.distance, closest_sample_jd=p.closest_source.jd)
        for p in _distance_peaks(resolver, samples, 1.0, precision_days)
    ]


def _year(jd: float) -> int:
    return jd_to_datetime_utc(jd).year


def _yearly_distance_ranges(samples: Sequence[DateDistance]) -> Dict[int, Tuple[float, float]]:
    by_year: Dict[int, List[float]] = defaultdict(list)
    for dd in samples:
        by_year[_year(dd.jd)].append(dd.distance)
    return {year: (min(ds), max(ds)) for year, ds in by_year.items()}


def _hours_to_nearest(jd: float, phases: Sequence[LunarPhase]) -> float:
    if not phases:
        return math.inf
    return min(abs(p.jd - jd) for p in phases) * 24.0


def find_perigees(
    resolver: BodyResolver,
    start_jd: float,
    end_jd: float,
    *,
    step_days: float = DEFAULT_STEP_DAYS,
    precision_days: float = PEAK_PRECISION_DAYS,
    constants: Optional[PhysicalConstants] = None,
) -> List[Perigee]:
    constants = constants if constants is not None else DEFAULT_CONSTANTS
    jds = sample_dates(start_jd, end_jd, step_days)
    samples = date_distances(resolver, jds)
    peaks = _distance_peaks(resolver, samples, -1.0, precision_days)

    full_moons = _phases(resolver, FULL_MOON_COS_ANGLE, jds, precision_days)
    new_moons = _phases(resolver, NEW_MOON_COS_ANGLE, jds, precision_days)
    log.debug(
        "perigee search [%s, %s): %d samples, %d perigees, %d full, %d new",
        start_jd, end_jd, len(samples), len(peaks), len(full_moons), len(new_moons),
    )

    ranges = _yearly_distance_ranges(samples)
    overall = (min(dd.distance for dd in samples), max(dd.distance for dd in samples))

    perigees = []
    for p in peaks:
        jd = p.peak.jd
        dp = date_position(resolver, jd)
        lo, hi = ranges.get(_year(jd), overall)
        threshold = (hi - lo) * SUPERMOON_RANGE_FRACTION + lo

        hours_full = _hours_to_nearest(jd, full_moons)
        hours_new = _hours_to_nearest(jd, new_moons)
        elong = angle_between_moon_and_sun(dp.positions)
        perigees.append(
            Perigee(
                jd=jd,
                distance=p.peak.distance,
                angle_from_full_moon=angle_from_full_moon(dp.positions),
                angle_between_moon_and_sun=elong,
                moon_visible_angle=visible_angle(constants.moon_mean_radius_km, dp.moon_distance),
                sun_visible_angle=visible_angle(constants.sun_mean_radius_km, dp.sun_distance),
                hours_from_full_moon=hours_full,
                hours_from_new_moon=hours_new,
                is_super_moon=hours_full < SUPERMOON_MAX_HOURS and p.peak.distance < threshold,
                is_super_new_moon=hours_new < SUPERMOON_MAX_HOURS and p.peak.distance < threshold,
                lunar_eclipse_magnitude=lunar_eclipse_magnitude(elong, dp.moon_distance, dp.sun_distance, constants),
            )
        )
    return perigees


def super_perigees(perigees: Sequence[Perigee]) -> List[Perigee]:
    """The closest perigees among their neighbours (coarse peaks of -distance)."""
    if len(perigees) <= 3:
        return list(perigees)
    return [p.peak for p in get_unrefined_peaks(perigees, lambda p: p.jd, lambda p: -p.distance)]

