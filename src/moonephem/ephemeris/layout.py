"""
moonephem.ephemeris.layout
--------------------------
Pure-data configuration: physical constants and the byte layout of the
compact ephemeris file.

The compact file has no header. Its meaning comes entirely from an
`EphemerisLayout`: a data start date plus, per series, the byte region and the
shape of its intervals. Layouts can be built in code, taken from
`SHIPPED_LAYOUT`, or read from a JSON sidecar.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union

from ..core.errors import LayoutError
from ..core.types import SeriesKind, SeriesMetadata


# ============================================================
# PHYSICAL CONSTANTS
# ============================================================

@dataclass(frozen=True)
class PhysicalConstants:
    earth_moon_mass_ratio: float = 0.813005682214972154e2  # DE440 header EMRAT
    au_km: float = 0.149597870699999988e9
    earth_equatorial_radius_km: float = 6378.137
    earth_polar_radius_km: float = 6356.752314245
    earth_mean_radius_km: float = 6371.0
    moon_mean_radius_km: float = 1737.4
    sun_mean_radius_km: float = 695700.0


DEFAULT_CONSTANTS = PhysicalConstants()
EARTH_MOON_MASS_RATIO = DEFAULT_CONSTANTS.earth_moon_mass_ratio


# ============================================================
# LAYOUT
# ============================================================

@dataclass(frozen=True)
class SeriesDef:
    """Interval shape of one series, before it is placed in a buffer."""
    kind: SeriesKind
    interval_duration_days: float
    coeff_count: int
    property_count: int = 3  # x, y, z


@dataclass(frozen=True)
class EphemerisLayout:
    data_start_jd: float
    series: Mapping[SeriesKind, SeriesMetadata] = field(default_factory=dict)

    @property
    def total_size_in_bytes(self) -> int:
        return max((m.offset + m.size_in_bytes for m in self.series.values()), default=0)

    @property
    def data_end_jd(self) -> float:
        """End of the shortest series coverage (exclusive)."""
        return min(
            (self.data_start_jd + m.interval_count * m.interval_duration_days
             for m in self.series.values()),
            default=self.data_start_jd,
        )


def build_layout(
    data_start_jd: float,
    duration_days: float,
    series_defs: Tuple[SeriesDef, ...],
) -> EphemerisLayout:
    """
    Packs the series contiguously in the given order, each holding
    floor(duration_days / interval_duration_days) intervals.
    """
    if duration_days <= 0:
        raise LayoutError("duration_days must be positive")

    series: Dict[SeriesKind, SeriesMetadata] = {}
    offset = 0
    for d in series_defs:
        if d.kind in series:
            raise LayoutError(f"Series {d.kind.name} listed twice")
        interval_count = int(duration_days // d.interval_duration_days)
        size = 8 * d.coeff_count * d.property_count * interval_count
        series[d.kind] = SeriesMetadata(
            kind=d.kind,
            offset=offset,
            size_in_bytes=size,
            interval_duration_days=d.interval_duration_days,
            property_count=d.property_count,
            coeff_count=d.coeff_count,
        )
        offset += size
    return EphemerisLayout(data_start_jd=data_start_jd, series=series)


# The bundled file covers 2000-01-01 .. 2099-12-31, cut from DE440 on its
# 32-day block grid (first block starts at JD 2451536.5, 1142 blocks).
SHIPPED_START_JD = 2451536.5
SHIPPED_DURATION_DAYS = 1142 * 32.0

SHIPPED_SERIES = (
    SeriesDef(SeriesKind.SSB_TO_EMB, interval_duration_days=16.0, coeff_count=13),
    SeriesDef(SeriesKind.EARTH_TO_MOON, interval_duration_days=4.0, coeff_count=13),
    SeriesDef(SeriesKind.SSB_TO_SUN, interval_duration_days=16.0, coeff_count=4),
)

SHIPPED_LAYOUT = build_layout(SHIPPED_START_JD, SHIPPED_DURATION_DAYS, SHIPPED_SERIES)


# ============================================================
# JSON SIDECAR
# ============================================================

def layout_to_dict(layout: EphemerisLayout) -> Dict[str, Any]:
    return {
        "data_start_jd": layout.data_start_jd,
        "series": {
            kind.value: {
                "offset": m.offset,
                "size_in_bytes": m.size_in_bytes,
                "interval_duration_days": m.interval_duration_days,
                "property_count": m.property_count,
                "coeff_count": m.coeff_count,
            }
            for kind, m in layout.series.items()
        },
    }


def layout_from_dict(data: Mapping[str, Any]) -> EphemerisLayout:
    try:
        start = float(data["data_start_jd"])
        raw_series = data["series"]
    except KeyError as e:
        raise LayoutError(f"Layout is missing key {e}") from e

    series: Dict[SeriesKind, SeriesMetadata] = {}
    for name, entry in raw_series.items():
        try:
            kind = SeriesKind(name)
        except ValueError as e:
            raise LayoutError(f"Unknown series '{name}'. Expected one of {[k.value for k in SeriesKind]}") from e
        try:
            series[kind] = SeriesMetadata(
                kind=kind,
                offset=int(entry["offset"]),
                size_in_bytes=int(entry["size_in_bytes"]),
                interval_duration_days=float(entry["interval_duration_days"]),
                property_count=int(entry["property_count"]),
                coeff_count=int(entry["coeff_count"]),
            )
        except KeyError as e:
            raise LayoutError(f"Series '{name}' is missing key {e}") from e
    return EphemerisLayout(data_start_jd=start, series=series)


def load_layout(path: Union[str, Path]) -> EphemerisLayout:
    with open(path, "r", encoding="utf-8") as f:
        return layout_from_dict(json.load(f))


def dump_layout(layout: EphemerisLayout, path: Union[str, Path]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(layout_to_dict(layout), f, indent=2)
        f.write("\n")
