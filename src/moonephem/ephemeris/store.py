"""
moonephem.ephemeris.store
-------------------------
Decodes the compact ephemeris buffer.

Each series occupies one contiguous byte region made of fixed-size intervals
in date order, starting at the layout's data start date. An interval holds
`coeff_count * property_count` little-endian float64 values, property-major
(all coefficients of x, then of y, then of z).

Coverage: a series covers [data_start, data_start + interval_count * duration).
Dates outside that range raise OutOfRangeError instead of extrapolating from
the nearest polynomial.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

import numpy as np

from ..core.errors import LayoutError, OutOfRangeError, UnknownSeriesError
from ..core.types import EphemProperties, IntervalLocation, SeriesKind, SeriesMetadata
from .chebyshev import MIN_COEFF_COUNT, evaluate
from .layout import SHIPPED_LAYOUT, EphemerisLayout

log = logging.getLogger(__name__)

_F64_LE = np.dtype("<f8")


def locate(metadata: SeriesMetadata, data_start_jd: float, jd: float) -> IntervalLocation:
    """Maps a Julian Date to its interval and the normalized time inside it."""
    duration = metadata.interval_duration_days
    index = math.floor((jd - data_start_jd) / duration)
    if index < 0 or index >= metadata.interval_count:
        end_jd = data_start_jd + metadata.interval_count * duration
        raise OutOfRangeError(
            f"JD {jd} is outside {metadata.kind.name} coverage [{data_start_jd}, {end_jd})"
        )

    start_jd = data_start_jd + index * duration
    byte_offset = metadata.offset + index * metadata.interval_size_in_bytes
    x = ((jd - start_jd) / duration) * 2 - 1
    return IntervalLocation(index=index, start_jd=start_jd, byte_offset=byte_offset, normalized_time=x)


def validate_metadata(metadata: SeriesMetadata, buffer_size: int) -> None:
    name = metadata.kind.name
    if metadata.coeff_count < MIN_COEFF_COUNT:
        raise LayoutError(f"{name}: coeff_count must be >= {MIN_COEFF_COUNT}, got {metadata.coeff_count}")
    if metadata.property_count < 1:
        raise LayoutError(f"{name}: property_count must be >= 1, got {metadata.property_count}")
    if not metadata.interval_duration_days > 0:
        raise LayoutError(f"{name}: interval_duration_days must be positive")
    if metadata.offset < 0:
        raise LayoutError(f"{name}: negative offset {metadata.offset}")
    if metadata.size_in_bytes <= 0 or metadata.size_in_bytes % metadata.interval_size_in_bytes:
        raise LayoutError(
            f"{name}: size_in_bytes={metadata.size_in_bytes} is not a positive multiple of "
            f"the interval size {metadata.interval_size_in_bytes}"
        )
    if metadata.offset + metadata.size_in_bytes > buffer_size:
        raise LayoutError(
            f"{name}: region [{metadata.offset}, {metadata.offset + metadata.size_in_bytes}) "
            f"exceeds buffer of {buffer_size} bytes"
        )


class EphemerisStore:
    """
    Read-only view over an ephemeris buffer.

    The buffer is wrapped, not copied; callers must not mutate it afterwards.
    All queries are pure: identical inputs give bit-identical outputs.
    """

    def __init__(
        self,
        buffer: Union[bytes, bytearray, memoryview],
        metadata: Mapping[SeriesKind, SeriesMetadata],
        data_start_jd: float,
    ):
        self._buffer = memoryview(buffer).cast("B")
        self._metadata = dict(metadata)
        self._data_start_jd = float(data_start_jd)

        for kind, m in self._metadata.items():
            if m.kind is not kind:
                raise LayoutError(f"Metadata for {kind.name} is labelled {m.kind.name}")
            validate_metadata(m, len(self._buffer))

        log.debug(
            "ephemeris store: %d bytes, start JD %s, series %s",
            len(self._buffer), self._data_start_jd, sorted(k.name for k in self._metadata),
        )

    @classmethod
    def from_layout(cls, buffer: Union[bytes, bytearray, memoryview], layout: EphemerisLayout) -> "EphemerisStore":
        return cls(buffer, layout.series, layout.data_start_jd)

    @classmethod
    def open(cls, path: Union[str, Path], layout: Optional[EphemerisLayout] = None) -> "EphemerisStore":
        """Reads the whole file once; the store never touches the file again."""
        data = Path(path).read_bytes()
        log.info("loaded ephemeris file %s (%d bytes)", path, len(data))
        return cls.from_layout(data, layout if layout is not None else SHIPPED_LAYOUT)

    @property
    def data_start_jd(self) -> float:
        return self._data_start_jd

    @property
    def series_kinds(self) -> Tuple[SeriesKind, ...]:
        return tuple(self._metadata)

    def metadata(self, kind: SeriesKind) -> SeriesMetadata:
        try:
            return self._metadata[kind]
        except KeyError:
            raise UnknownSeriesError(
                f"No series found for {kind}. Available: {sorted(k.name for k in self._metadata)}"
            ) from None

    def coverage(self, kind: SeriesKind) -> Tuple[float, float]:
        """[start, end) in Julian Days covered by the series."""
        m = self.metadata(kind)
        return self._data_start_jd, self._data_start_jd + m.interval_count * m.interval_duration_days

    def valid_range(self) -> Tuple[float, float]:
        """[start, end) covered by every series in the store."""
        ends = [self.coverage(k)[1] for k in self._metadata]
        return self._data_start_jd, min(ends, default=self._data_start_jd)

    def locate(self, kind: SeriesKind, jd: float) -> IntervalLocation:
        return locate(self.metadata(kind), self._data_start_jd, jd)

    def coefficients(self, kind: SeriesKind, jd: float) -> np.ndarray:
        """Coefficient block of the interval containing jd, shape (property_count, coeff_count)."""
        m = self.metadata(kind)
        loc = locate(m, self._data_start_jd, jd)
        return self._read_interval(m, loc.byte_offset)

    def properties(self, kind: SeriesKind, jd: float) -> EphemProperties:
        m = self.metadata(kind)
        loc = locate(m, self._data_start_jd, jd)
        block = self._read_interval(m, loc.byte_offset)

        positions = []
        velocities = []
        for coeffs in block.tolist():
            position, velocity = evaluate(coeffs, loc.normalized_time)
            positions.append(position)
            # chain rule for the [-1, 1] rescale of the interval
            velocities.append((velocity * 2) / m.interval_duration_days)

        return EphemProperties(positions=tuple(positions), velocities=tuple(velocities))

    def ssb_to_emb(self, jd: float) -> EphemProperties:
        return self.properties(SeriesKind.SSB_TO_EMB, jd)

    def earth_to_moon(self, jd: float) -> EphemProperties:
        return self.properties(SeriesKind.EARTH_TO_MOON, jd)

    def ssb_to_sun(self, jd: float) -> EphemProperties:
        return self.properties(SeriesKind.SSB_TO_SUN, jd)

    def _read_interval(self, m: SeriesMetadata, byte_offset: int) -> np.ndarray:
        values = np.frombuffer(
            self._buffer,
            dtype=_F64_LE,
            count=m.coeff_count * m.property_count,
            offset=byte_offset,
        )
        return values.reshape(m.property_count, m.coeff_count)
