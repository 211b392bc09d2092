from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .core.types import Vector3
from .ephemeris.bodies import EarthMoonPositions, EarthMoonSunPositions
from .ephemeris.layout import DEFAULT_CONSTANTS, PhysicalConstants


# --------------------------
# small vector helpers
# --------------------------

def sub(a: Sequence[float], b: Sequence[float]) -> Vector3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def add(a: Sequence[float], b: Sequence[float]) -> Vector3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def scale(a: Sequence[float], k: float) -> Vector3:
    return (a[0] * k, a[1] * k, a[2] * k)


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Sequence[float], b: Sequence[float]) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def magnitude(a: Sequence[float]) -> float:
    return math.sqrt(dot(a, a))


def normalize(a: Sequence[float]) -> Vector3:
    m = magnitude(a)
    return (a[0] / m, a[1] / m, a[2] / m)


def _clamped_acos(c: float) -> float:
    # rounding can push |cos| a hair past 1
    return math.acos(max(-1.0, min(1.0, c)))


# --------------------------
# Earth / Moon / Sun geometry
# --------------------------

def moon_distance(p: EarthMoonPositions) -> float:
    """Center-to-center Earth-Moon distance (km)."""
    return magnitude(sub(p.moon, p.earth))


def sun_distance(p: EarthMoonSunPositions) -> float:
    return magnitude(sub(p.sun, p.earth))


def cos_angle_from_full_moon(p: EarthMoonPositions) -> float:
    """
    Cosine of the angle between Earth->Moon and SSB->Earth. The SSB sits
    close to the Sun, so +1 is (nearly) full Moon and -1 new Moon.
    """
    return dot(normalize(sub(p.moon, p.earth)), normalize(p.earth))


def angle_from_full_moon(p: EarthMoonPositions) -> float:
    return _clamped_acos(cos_angle_from_full_moon(p))


def angle_between_moon_and_sun(p: EarthMoonSunPositions) -> float:
    """Angle (radians) between the Moon and the Sun as seen from Earth's center."""
    return _clamped_acos(dot(normalize(sub(p.moon, p.earth)), normalize(sub(p.sun, p.earth))))


def visible_angle(radius_km: float, distance_km: float) -> float:
    """Apparent angular diameter (radians)."""
    return math.atan(radius_km / distance_km) * 2


@dataclass(frozen=True)
class EclipseMagnitude:
    umbral: float
    penumbral: float


def lunar_eclipse_magnitude(
    angle_between_moon_and_sun: float,
    moon_distance_km: float,
    sun_distance_km: float,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
) -> EclipseMagnitude:
    """
    Fraction of the Moon's diameter inside the umbral/penumbral cones of the
    Earth's shadow. Negative values mean no eclipse of that kind.
    """
    r_sun = constants.sun_mean_radius_km
    r_earth = constants.earth_mean_radius_km
    r_moon = constants.moon_mean_radius_km

    from_cone_center = math.pi - angle_between_moon_and_sun
    along_cone = moon_distance_km * math.cos(from_cone_center)

    penumbral_radius = r_earth + along_cone * (r_sun + r_earth) / sun_distance_km
    umbral_radius = r_earth - along_cone * (r_sun - r_earth) / sun_distance_km

    off_axis = moon_distance_km * math.sin(from_cone_center)
    innermost = off_axis - r_moon

    return EclipseMagnitude(
        umbral=(umbral_radius - innermost) / r_moon,
        penumbral=(penumbral_radius - innermost) / r_moon,
    )


@dataclass(frozen=True)
class LatLongPosition:
    lat: float       # radians
    long: float      # radians
    distance: float  # km


def lat_long_position(relative: Sequence[float]) -> LatLongPosition:
    x, y, z = relative
    return LatLongPosition(
        lat=math.atan2(z, math.sqrt(x * x + y * y)),
        long=math.atan2(y, x),
        distance=magnitude(relative),
    )


def earth_radius_at(lat: float, constants: PhysicalConstants = DEFAULT_CONSTANTS) -> float:
    """Geocentric radius of the reference ellipsoid at a geocentric latitude (km)."""
    a = constants.earth_equatorial_radius_km
    b = constants.earth_polar_radius_km
    b_cos = b * math.cos(lat)
    a_sin = a * math.sin(lat)
    return (a * b) / math.sqrt(b_cos * b_cos + a_sin * a_sin)
