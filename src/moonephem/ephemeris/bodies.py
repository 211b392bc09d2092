from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..core.types import EphemProperties, Vector3
from .layout import EARTH_MOON_MASS_RATIO
from .store import EphemerisStore


@dataclass(frozen=True)
class EarthMoonPositions:
    earth: Vector3
    moon: Vector3


@dataclass(frozen=True)
class EarthMoonSunPositions:
    earth: Vector3
    moon: Vector3
    sun: Vector3


def ssb_to_earth(
    ssb_to_emb: EphemProperties,
    earth_to_moon: EphemProperties,
    mass_ratio: float = EARTH_MOON_MASS_RATIO,
) -> EphemProperties:
    """r_earth = r_emb - r_em / (EMRAT + 1), applied to positions and velocities."""
    k = 1.0 + mass_ratio
    return EphemProperties(
        positions=tuple(e - m / k for e, m in zip(ssb_to_emb.positions, earth_to_moon.positions)),
        velocities=tuple(e - m / k for e, m in zip(ssb_to_emb.velocities, earth_to_moon.velocities)),
    )


def ssb_to_moon(ssb_to_earth: EphemProperties, earth_to_moon: EphemProperties) -> EphemProperties:
    return EphemProperties(
        positions=tuple(e + m for e, m in zip(ssb_to_earth.positions, earth_to_moon.positions)),
        velocities=tuple(e + m for e, m in zip(ssb_to_earth.velocities, earth_to_moon.velocities)),
    )


@dataclass(frozen=True)
class BodyResolver:
    """
    Absolute (SSB-relative) Earth, Moon and Sun states from the stored series.
    The Earth/Moon mass ratio is configuration; nothing here reads globals.
    """
    store: EphemerisStore
    mass_ratio: float = EARTH_MOON_MASS_RATIO

    def earth_and_moon(
        self, ssb_to_emb: EphemProperties, earth_to_moon: EphemProperties
    ) -> Tuple[EphemProperties, EphemProperties]:
        earth = ssb_to_earth(ssb_to_emb, earth_to_moon, self.mass_ratio)
        return earth, ssb_to_moon(earth, earth_to_moon)

    def earth_and_moon_at(self, jd: float) -> Tuple[EphemProperties, EphemProperties]:
        return self.earth_and_moon(self.store.ssb_to_emb(jd), self.store.earth_to_moon(jd))

    def sun(self, jd: float) -> EphemProperties:
        return self.store.ssb_to_sun(jd)

    def earth_moon_positions(self, jd: float) -> EarthMoonPositions:
        earth, moon = self.earth_and_moon_at(jd)
        return EarthMoonPositions(earth=earth.positions, moon=moon.positions)

    def earth_moon_sun_positions(self, jd: float) -> EarthMoonSunPositions:
        earth, moon = self.earth_and_moon_at(jd)
        return EarthMoonSunPositions(earth=earth.positions, moon=moon.positions, sun=self.sun(jd).positions)
