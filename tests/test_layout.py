# tests/test_layout.py

import json

import pytest

from moonephem.core.errors import LayoutError
from moonephem.core.types import SeriesKind, SeriesMetadata
from moonephem.ephemeris.layout import (
    SHIPPED_LAYOUT,
    SeriesDef,
    build_layout,
    dump_layout,
    layout_from_dict,
    load_layout,
)


def test_shipped_layout_regions():
    s = SHIPPED_LAYOUT.series
    assert SHIPPED_LAYOUT.data_start_jd == 2451536.5

    emb = s[SeriesKind.SSB_TO_EMB]
    moon = s[SeriesKind.EARTH_TO_MOON]
    sun = s[SeriesKind.SSB_TO_SUN]

    assert (emb.offset, emb.size_in_bytes, emb.interval_count) == (0, 712608, 2284)
    assert (moon.offset, moon.size_in_bytes, moon.interval_count) == (712608, 2850432, 9136)
    assert (sun.offset, sun.size_in_bytes, sun.interval_count) == (3563040, 219264, 2284)
    assert SHIPPED_LAYOUT.total_size_in_bytes == 3782304
    assert SHIPPED_LAYOUT.data_end_jd == 2451536.5 + 36544


def test_interval_byte_size_law():
    m = SeriesMetadata(SeriesKind.SSB_TO_SUN, 0, 96 * 10, 16.0, 3, 4)
    assert m.interval_size_in_bytes == 8 * 4 * 3 == 96
    assert m.interval_count == 10


def test_build_layout_rejects_duplicates():
    defs = (SeriesDef(SeriesKind.SSB_TO_SUN, 16.0, 4), SeriesDef(SeriesKind.SSB_TO_SUN, 16.0, 4))
    with pytest.raises(LayoutError):
        build_layout(2451536.5, 32.0, defs)


def test_json_round_trip(tmp_path):
    path = tmp_path / "layout.json"
    dump_layout(SHIPPED_LAYOUT, path)

    raw = json.loads(path.read_text())
    assert set(raw["series"]) == {"ssb_to_emb", "earth_to_moon", "ssb_to_sun"}
    assert load_layout(path) == SHIPPED_LAYOUT


def test_unknown_series_name():
    with pytest.raises(LayoutError):
        layout_from_dict({"data_start_jd": 0.0, "series": {"ssb_to_mars": {}}})


def test_missing_keys():
    with pytest.raises(LayoutError):
        layout_from_dict({"series": {}})
    with pytest.raises(LayoutError):
        layout_from_dict({"data_start_jd": 0.0, "series": {"ssb_to_sun": {"offset": 0}}})
