# tests/test_cli.py

import json

import pytest

from conftest import FULL_MOON_JD, START_JD
from moonephem.cli import main
from moonephem.ephemeris.layout import SHIPPED_LAYOUT, dump_layout, layout_from_dict, load_layout


@pytest.fixture
def data_args(tmp_path, synthetic):
    buffer, layout = synthetic
    data = tmp_path / "moon.bin"
    data.write_bytes(buffer)
    sidecar = tmp_path / "moon.json"
    dump_layout(layout, sidecar)
    return ["--data", str(data), "--layout", str(sidecar)]


def test_layout_prints_shipped_json(capsys):
    assert main(["layout"]) == 0
    assert layout_from_dict(json.loads(capsys.readouterr().out)) == SHIPPED_LAYOUT


def test_layout_writes_file(tmp_path):
    out = tmp_path / "layout.json"
    assert main(["layout", "--out", str(out)]) == 0
    assert load_layout(out) == SHIPPED_LAYOUT


def test_position(capsys, data_args):
    assert main(["position", *data_args, "--at", str(FULL_MOON_JD)]) == 0
    out = capsys.readouterr().out
    assert "Earth-Moon distance       = 364400.0" in out
    assert "2018-11-04 00:00:00 UTC" in out
    for body in ("Earth", "Moon", "Sun"):
        assert body in out


def test_perigees(capsys, data_args):
    rc = main(["perigees", *data_args, "--start", str(START_JD + 1), "--end", str(START_JD + 62)])
    assert rc == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert "supermoon" in lines[0]
    assert "supermoon" not in lines[1]


def test_phases_are_sorted(capsys, data_args):
    assert main(["phases", *data_args, "--start", str(START_JD + 1), "--end", str(START_JD + 62)]) == 0
    labels = [line.split()[0] for line in capsys.readouterr().out.strip().splitlines()]
    assert labels == ["full", "new", "full", "new"]


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        main(["eclipses"])
