# tests/test_bodies.py

import math

import pytest

from conftest import START_JD, earth_to_moon_xyz, emb_xyz
from moonephem.core.types import EphemProperties
from moonephem.ephemeris.bodies import BodyResolver, ssb_to_earth, ssb_to_moon
from moonephem.ephemeris.layout import EARTH_MOON_MASS_RATIO


def _props(p, v=(0.0, 0.0, 0.0)):
    return EphemProperties(positions=tuple(p), velocities=tuple(v))


def test_barycentric_identity_exact():
    # 1 + ratio = 4 keeps every division exact
    emb = _props((10.0, 20.0, 30.0), (1.0, 2.0, 3.0))
    em = _props((4.0, 8.0, -12.0), (-4.0, 0.0, 4.0))

    earth = ssb_to_earth(emb, em, mass_ratio=3.0)
    moon = ssb_to_moon(earth, em)

    assert earth.positions == (9.0, 18.0, 33.0)
    assert earth.velocities == (2.0, 2.0, 2.0)
    assert moon.positions == (13.0, 26.0, 21.0)
    assert moon.velocities == (-2.0, 2.0, 6.0)

    # moon - earth is the offset; the mass-weighted mean is the EMB
    assert tuple(m - e for m, e in zip(moon.positions, earth.positions)) == em.positions
    assert tuple((3.0 * e + m) / 4.0 for e, m in zip(earth.positions, moon.positions)) == emb.positions


def test_default_mass_ratio():
    emb = _props((1.5e8, -2.0e7, 3.0e6))
    em = _props((3.0e5, 2.0e5, -1.0e4))
    earth = ssb_to_earth(emb, em)
    k = 1.0 + EARTH_MOON_MASS_RATIO
    assert earth.positions == pytest.approx(tuple(a - b / k for a, b in zip(emb.positions, em.positions)))


def test_resolver_uses_configured_mass_ratio(store):
    jd = START_JD + 21.5
    light = BodyResolver(store, mass_ratio=1.0)
    earth, moon = light.earth_and_moon_at(jd)

    emb = store.ssb_to_emb(jd).positions
    em = store.earth_to_moon(jd).positions
    assert earth.positions == pytest.approx(tuple(a - b / 2.0 for a, b in zip(emb, em)))
    assert moon.positions == pytest.approx(tuple(a + b / 2.0 for a, b in zip(emb, em)))


def test_resolver_positions(resolver):
    jd = START_JD + 33.25
    p = resolver.earth_moon_sun_positions(jd)
    assert p.sun == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)

    offset = earth_to_moon_xyz(jd)
    expected_earth = emb_xyz(jd) - offset / (1.0 + EARTH_MOON_MASS_RATIO)
    assert p.earth == pytest.approx(tuple(expected_earth), abs=1e-3)

    d = math.dist(p.moon, p.earth)
    assert d == pytest.approx(math.hypot(offset[0], offset[1]), abs=1e-3)

    em = resolver.earth_moon_positions(jd)
    assert (em.earth, em.moon) == (p.earth, p.moon)


def test_sun_passthrough(resolver, store):
    jd = START_JD + 5.0
    assert resolver.sun(jd) == store.ssb_to_sun(jd)
