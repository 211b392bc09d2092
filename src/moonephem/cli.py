from __future__ import annotations

import argparse
import importlib
import inspect
import json
import logging
import math
import sys

from .core.time import jd_to_datetime_utc, parse_date_or_jd


def _run_module_main(modpath: str, argv: list[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _fmt_jd(jd: float) -> str:
    return f"{jd:.6f}  ({jd_to_datetime_utc(jd):%Y-%m-%d %H:%M:%S} UTC)"


def _add_data_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--data", required=True, help="compact ephemeris file")
    p.add_argument("--layout", default=None, help="JSON layout sidecar (default: shipped layout)")


def _add_range_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--start", required=True, help="JD or ISO date (UTC)")
    p.add_argument("--end", required=True, help="JD or ISO date (UTC), exclusive")
    p.add_argument("--step-days", type=float, default=1.0, help="coarse sampling step")
    p.add_argument("--precision-seconds", type=float, default=30.0, help="refinement target")


def _resolver(args: argparse.Namespace):
    from .ephemeris.bodies import BodyResolver
    from .ephemeris.layout import load_layout
    from .ephemeris.store import EphemerisStore

    layout = load_layout(args.layout) if args.layout else None
    return BodyResolver(EphemerisStore.open(args.data, layout))


def _range(args: argparse.Namespace):
    from .core.time import seconds_to_days

    return (
        parse_date_or_jd(args.start),
        parse_date_or_jd(args.end),
        dict(step_days=args.step_days, precision_days=seconds_to_days(args.precision_seconds)),
    )


def cmd_position(argv: list[str]) -> int:
    from . import geometry as geo

    p = argparse.ArgumentParser(prog="moonephem position", description="Earth, Moon and Sun SSB states at one instant.")
    _add_data_args(p)
    p.add_argument("--at", required=True, help="JD or ISO date/datetime (UTC)")
    args = p.parse_args(argv)

    res = _resolver(args)
    jd = parse_date_or_jd(args.at)
    earth, moon = res.earth_and_moon_at(jd)
    sun = res.sun(jd)

    print(f"JD = {_fmt_jd(jd)}")
    print()
    print("SSB states (km, km/day):")
    for name, st in (("Earth", earth), ("Moon", moon), ("Sun", sun)):
        x, y, z = st.positions
        vx, vy, vz = st.velocities
        print(f"  {name:<5} r = ({x:.3f}, {y:.3f}, {z:.3f})")
        print(f"        v = ({vx:.6f}, {vy:.6f}, {vz:.6f})")
    print()
    positions = res.earth_moon_sun_positions(jd)
    print(f"Earth-Moon distance       = {geo.moon_distance(positions):.3f} km")
    print(f"Earth-Sun distance        = {geo.sun_distance(positions):.3f} km")
    print(f"Angle from full Moon      = {math.degrees(geo.angle_from_full_moon(positions)):.4f} deg")
    return 0


def cmd_perigees(argv: list[str]) -> int:
    from . import events

    p = argparse.ArgumentParser(prog="moonephem perigees", description="Refined perigees with supermoon flags.")
    _add_data_args(p)
    _add_range_args(p)
    p.add_argument("--super", action="store_true", help="only the closest perigee of each run")
    args = p.parse_args(argv)

    start, end, opts = _range(args)
    perigees = events.find_perigees(_resolver(args), start, end, **opts)
    if args.super:
        perigees = events.super_perigees(perigees)

    for pg in perigees:
        tags = []
        if pg.is_super_moon:
            tags.append("supermoon")
        if pg.is_super_new_moon:
            tags.append("super new moon")
        if pg.lunar_eclipse_magnitude.penumbral > 0:
            tags.append(f"eclipse (umbral {pg.lunar_eclipse_magnitude.umbral:.3f})")
        print(
            f"{_fmt_jd(pg.jd)}  {pg.distance:12.3f} km  "
            f"full {pg.hours_from_full_moon:7.1f} h  new {pg.hours_from_new_moon:7.1f} h  {', '.join(tags)}"
        )
    return 0


def cmd_apogees(argv: list[str]) -> int:
    from . import events

    p = argparse.ArgumentParser(prog="moonephem apogees", description="Refined apogees.")
    _add_data_args(p)
    _add_range_args(p)
    args = p.parse_args(argv)

    start, end, opts = _range(args)
    for ap in events.find_apogees(_resolver(args), start, end, **opts):
        print(f"{_fmt_jd(ap.jd)}  {ap.distance:12.3f} km")
    return 0


def cmd_phases(argv: list[str]) -> int:
    from . import events

    p = argparse.ArgumentParser(prog="moonephem phases", description="Full and new Moon instants.")
    _add_data_args(p)
    _add_range_args(p)
    args = p.parse_args(argv)

    start, end, opts = _range(args)
    res = _resolver(args)
    rows = [("full", ph) for ph in events.find_full_moons(res, start, end, **opts)]
    rows += [("new", ph) for ph in events.find_new_moons(res, start, end, **opts)]
    for label, ph in sorted(rows, key=lambda r: r[1].jd):
        print(f"{label:<4}  {_fmt_jd(ph.jd)}  cos = {ph.cos_angle:+.8f}")
    return 0


def cmd_layout(argv: list[str]) -> int:
    from .ephemeris.layout import SHIPPED_LAYOUT, dump_layout, layout_to_dict

    p = argparse.ArgumentParser(prog="moonephem layout", description="Print or write the shipped layout as JSON.")
    p.add_argument("--out", default=None, help="write to this file instead of stdout")
    args = p.parse_args(argv)

    if args.out:
        dump_layout(SHIPPED_LAYOUT, args.out)
    else:
        print(json.dumps(layout_to_dict(SHIPPED_LAYOUT), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="moonephem", description="Compact lunar ephemeris toolkit CLI.")
    p.add_argument("-v", "--verbose", action="count", default=0)
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("position", help="Earth, Moon and Sun SSB states at one instant")
    sub.add_parser("perigees", help="Refined perigees with supermoon flags")
    sub.add_parser("apogees", help="Refined apogees")
    sub.add_parser("phases", help="Full and new Moon instants")
    sub.add_parser("layout", help="Print the shipped ephemeris layout as JSON")
    sub.add_parser("validate", help="Compare against a full JPL kernel (needs ephemeris extras)")

    args, rest = p.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "position":
        return cmd_position(rest)

    if args.cmd == "perigees":
        return cmd_perigees(rest)

    if args.cmd == "apogees":
        return cmd_apogees(rest)

    if args.cmd == "phases":
        return cmd_phases(rest)

    if args.cmd == "layout":
        return cmd_layout(rest)

    if args.cmd == "validate":
        return _run_module_main("moonephem.diagnostics.validate_reference", rest)

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
