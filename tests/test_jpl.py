# tests/test_jpl.py

import sys
from unittest.mock import patch

import pytest

from conftest import START_JD
from moonephem.cli import main as cli_main
from moonephem.core.types import EphemProperties, SeriesKind
from moonephem.ephemeris import require_ephemeris
from moonephem.ephemeris.jpl import EARTH, EMB, MOON, SSB, SUN, JplReference, compare
from moonephem.ephemeris.layout import dump_layout


class FakeSegment:
    def __init__(self, state):
        self.state = state

    def compute_and_differentiate(self, jd):
        p = self.state(jd)
        return p.positions, p.velocities


class FakeKernel(dict):
    closed = False

    def close(self):
        self.closed = True


def _shifted(state, dx):
    def shifted(jd):
        p = state(jd)
        return EphemProperties(positions=(p.positions[0] + dx, *p.positions[1:]), velocities=p.velocities)
    return shifted


def _kernel_from(store, sun_offset_km=0.0):
    """SPK-shaped segments: Earth and Moon relative to EMB, the rest relative to SSB."""
    def emb_to_earth(jd):
        return EphemProperties(positions=(-100.0, 0.0, 0.0), velocities=(0.0, 0.0, 0.0))

    return FakeKernel({
        (SSB, EMB): FakeSegment(store.ssb_to_emb),
        (SSB, SUN): FakeSegment(_shifted(store.ssb_to_sun, sun_offset_km)),
        (EMB, EARTH): FakeSegment(emb_to_earth),
        (EMB, MOON): FakeSegment(_shifted(store.earth_to_moon, -100.0)),
    })


def test_reference_moon_is_difference_of_emb_segments(store):
    ref = JplReference(kernel=_kernel_from(store))
    jd = START_JD + 5.3
    assert ref.properties(SeriesKind.EARTH_TO_MOON, jd).positions == pytest.approx(
        store.earth_to_moon(jd).positions, abs=1e-6
    )
    assert ref.properties(SeriesKind.SSB_TO_EMB, jd) == store.ssb_to_emb(jd)


def test_compare_reports_worst_deviation(store):
    ref = JplReference(kernel=_kernel_from(store, sun_offset_km=1.5))
    jds = [START_JD + 0.5 + 3.7 * i for i in range(10)]
    report = compare(store, ref, jds)

    assert set(report) == set(SeriesKind)
    assert report[SeriesKind.SSB_TO_EMB].max_position_km == 0.0
    assert report[SeriesKind.EARTH_TO_MOON].max_position_km < 1e-6
    sun = report[SeriesKind.SSB_TO_SUN]
    assert sun.samples == 10
    assert sun.max_position_km == pytest.approx(1.5)
    assert sun.max_velocity_km_per_day == 0.0
    assert sun.worst_jd in jds


def test_close_closes_kernel(store):
    kernel = _kernel_from(store)
    JplReference(kernel=kernel).close()
    assert kernel.closed


def test_missing_jplephem_is_reported():
    with patch.dict(sys.modules, {"jplephem": None}):
        with pytest.raises(RuntimeError, match="ephemeris"):
            require_ephemeris()
        with pytest.raises(RuntimeError):
            JplReference.open("de440.bsp")


def test_worst_jd_is_a_sampled_date_without_deviation(store):
    ref = JplReference(kernel=_kernel_from(store))
    jds = [START_JD + 2.0, START_JD + 5.0]
    report = compare(store, ref, jds)
    emb = report[SeriesKind.SSB_TO_EMB]
    assert emb.max_position_km == 0.0
    assert emb.worst_jd == jds[0]


@pytest.fixture
def validate_args(tmp_path, synthetic):
    buffer, layout = synthetic
    data = tmp_path / "moon.bin"
    data.write_bytes(buffer)
    sidecar = tmp_path / "moon.json"
    dump_layout(layout, sidecar)
    return ["validate", "--data", str(data), "--layout", str(sidecar), "--kernel", "de440.bsp"]


@pytest.mark.parametrize("sun_offset_km, rc", [(0.0, 0), (5.0, 1)])
def test_validate_exit_code(monkeypatch, capsys, store, validate_args, sun_offset_km, rc):
    kernel = _kernel_from(store, sun_offset_km=sun_offset_km)
    monkeypatch.setattr(JplReference, "open", lambda path: JplReference(kernel=kernel))

    assert cli_main(validate_args) == rc
    out = capsys.readouterr().out
    assert "nan" not in out
    assert ("FAIL" in out) == bool(rc)
    assert kernel.closed
