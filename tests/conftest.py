# tests/conftest.py

import math

import numpy as np
import pytest
from numpy.polynomial import chebyshev as C

from moonephem.core.types import SeriesKind
from moonephem.ephemeris.bodies import BodyResolver
from moonephem.ephemeris.layout import SHIPPED_SERIES, build_layout
from moonephem.ephemeris.store import EphemerisStore

# --- Synthetic Earth-Moon system ---
# EMB on a circular 1 AU orbit around the SSB, Sun pinned at the SSB.
# Moon distance varies with the anomalistic month, its direction turns with
# the synodic month relative to the SSB->EMB direction.
START_JD = 2458416.5
DURATION_DAYS = 64.0

AU_KM = 1.495978707e8
YEAR_DAYS = 365.25
MOON_MEAN_KM = 384400.0
MOON_AMPLITUDE_KM = 20000.0
ANOMALISTIC_DAYS = 27.55
SYNODIC_DAYS = 29.53

PERIGEE_JD = START_JD + 10.0
FULL_MOON_JD = START_JD + 10.0


def emb_xyz(jd):
    w = 2 * math.pi * (jd - START_JD) / YEAR_DAYS
    return np.array([AU_KM * np.cos(w), AU_KM * np.sin(w), np.zeros_like(jd)])


def earth_to_moon_xyz(jd):
    r = MOON_MEAN_KM - MOON_AMPLITUDE_KM * np.cos(2 * math.pi * (jd - PERIGEE_JD) / ANOMALISTIC_DAYS)
    phi = 2 * math.pi * (jd - START_JD) / YEAR_DAYS + 2 * math.pi * (jd - FULL_MOON_JD) / SYNODIC_DAYS
    return np.array([r * np.cos(phi), r * np.sin(phi), np.zeros_like(jd)])


def sun_xyz(jd):
    return np.zeros((3,) + np.shape(jd))


def fit_series(func, start_jd, duration, interval_count, coeff_count):
    """Chebyshev-interpolates func over each interval; returns the packed bytes."""
    blocks = []
    for i in range(interval_count):
        t0 = start_jd + i * duration
        props = []
        for prop in range(3):
            props.append(C.chebinterpolate(lambda x: func(t0 + (x + 1) * duration / 2)[prop], coeff_count - 1))
        blocks.append(np.stack(props))
    return np.asarray(blocks, dtype="<f8").tobytes()


def synthetic_buffer_and_layout():
    layout = build_layout(START_JD, DURATION_DAYS, SHIPPED_SERIES)
    funcs = {
        SeriesKind.SSB_TO_EMB: emb_xyz,
        SeriesKind.EARTH_TO_MOON: earth_to_moon_xyz,
        SeriesKind.SSB_TO_SUN: sun_xyz,
    }
    parts = []
    for d in SHIPPED_SERIES:
        m = layout.series[d.kind]
        parts.append(fit_series(funcs[d.kind], START_JD, d.interval_duration_days, m.interval_count, d.coeff_count))
    return b"".join(parts), layout


@pytest.fixture(scope="session")
def synthetic():
    return synthetic_buffer_and_layout()


@pytest.fixture(scope="session")
def store(synthetic):
    buffer, layout = synthetic
    return EphemerisStore.from_layout(buffer, layout)


@pytest.fixture(scope="session")
def resolver(store):
    return BodyResolver(store)


def pack_intervals(intervals):
    """intervals: nested [interval][property][coeff] -> little-endian float64 bytes."""
    return np.asarray(intervals, dtype="<f8").tobytes()
