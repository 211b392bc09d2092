#ephemeris/jpl.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from ..core.types import EphemProperties, SeriesKind
from . import require_ephemeris
from .store import EphemerisStore

# NAIF ids
SSB = 0
EMB = 3
EARTH = 399
MOON = 301
SUN = 10


def _segment_state(kernel, center: int, target: int, jd: float) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
    position, velocity = kernel[center, target].compute_and_differentiate(jd)
    return tuple(float(v) for v in position), tuple(float(v) for v in velocity)


@dataclass
class JplReference:
    """
    The three compact series computed from a full JPL SPK kernel (e.g. de440.bsp).
    Units match the compact store: km and km/day.

    Requires optional deps:
      pip install "moonephem[ephemeris]"
    """
    kernel: object

    @classmethod
    def open(cls, path: str) -> "JplReference":
        require_ephemeris()
        from jplephem.spk import SPK  # type: ignore

        return cls(kernel=SPK.open(path))

    def close(self) -> None:
        self.kernel.close()

    def properties(self, kind: SeriesKind, jd: float) -> EphemProperties:
        if kind is SeriesKind.SSB_TO_EMB:
            p, v = _segment_state(self.kernel, SSB, EMB, jd)
        elif kind is SeriesKind.SSB_TO_SUN:
            p, v = _segment_state(self.kernel, SSB, SUN, jd)
        elif kind is SeriesKind.EARTH_TO_MOON:
            # both segments are EMB-centered: moon - earth
            pm, vm = _segment_state(self.kernel, EMB, MOON, jd)
            pe, ve = _segment_state(self.kernel, EMB, EARTH, jd)
            p = tuple(a - b for a, b in zip(pm, pe))
            v = tuple(a - b for a, b in zip(vm, ve))
        else:
            raise ValueError(f"Unsupported series {kind}")
        return EphemProperties(positions=p, velocities=v)


@dataclass(frozen=True)
class SeriesDeviation:
    kind: SeriesKind
    samples: int
    max_position_km: float
    max_velocity_km_per_day: float
    worst_jd: float


def _norm_diff(a: Iterable[float], b: Iterable[float]) -> float:
    return sum((x - y) ** 2 for x, y in zip(a, b)) ** 0.5


def compare(store: EphemerisStore, reference, jds: Iterable[float]) -> Dict[SeriesKind, SeriesDeviation]:
    """Largest position/velocity disagreement per series over the given dates."""
    jds = list(jds)
    out: Dict[SeriesKind, SeriesDeviation] = {}
    for kind in store.series_kinds:
        worst_p, worst_v = 0.0, 0.0
        worst_jd = jds[0] if jds else float("nan")
        for jd in jds:
            ours = store.properties(kind, jd)
            ref = reference.properties(kind, jd)
            dp = _norm_diff(ours.positions, ref.positions)
            dv = _norm_diff(ours.velocities, ref.velocities)
            if dp > worst_p:
                worst_p, worst_jd = dp, jd
            worst_v = max(worst_v, dv)
        out[kind] = SeriesDeviation(
            kind=kind,
            samples=len(jds),
            max_position_km=worst_p,
            max_velocity_km_per_day=worst_v,
            worst_jd=worst_jd,
        )
    return out
