#!/usr/bin/env python3
from __future__ import annotations

import argparse
from typing import List, Optional

import numpy as np

from moonephem.core.time import jd_to_datetime_utc
from moonephem.ephemeris.jpl import JplReference, compare
from moonephem.ephemeris.layout import load_layout
from moonephem.ephemeris.store import EphemerisStore


def _need_matplotlib():
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "moonephem[diagnostics]"') from e


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Validate the compact ephemeris against a full JPL SPK kernel.")
    p.add_argument("--data", required=True, help="compact ephemeris file")
    p.add_argument("--layout", default=None, help="JSON layout sidecar (default: shipped layout)")
    p.add_argument("--kernel", required=True, help="JPL SPK kernel, e.g. de440.bsp")
    p.add_argument("--step-days", type=float, default=3.7)
    p.add_argument("--tolerance-km", type=float, default=1.0)
    p.add_argument("--out-png", default=None, help="also plot position residuals")
    args = p.parse_args(argv)

    layout = load_layout(args.layout) if args.layout else None
    store = EphemerisStore.open(args.data, layout)
    start, end = store.valid_range()

    # Odd step so samples land at many different normalized times.
    jds = np.arange(start, end, args.step_days).tolist()
    print(f"Validating {len(jds)} points from {jd_to_datetime_utc(start):%Y-%m-%d} to {jd_to_datetime_utc(end):%Y-%m-%d}...")

    ref = JplReference.open(args.kernel)
    try:
        report = compare(store, ref, jds)
        failed = False
        for kind, dev in report.items():
            ok = dev.max_position_km <= args.tolerance_km
            failed = failed or not ok
            print(
                f"  {kind.name:<14} max |dr| = {dev.max_position_km:.6e} km  "
                f"max |dv| = {dev.max_velocity_km_per_day:.6e} km/day  "
                f"worst JD {dev.worst_jd:.4f}  {'OK' if ok else 'FAIL'}"
            )

        if args.out_png:
            plt = _need_matplotlib()
            years = [2000 + (jd - 2451545.0) / 365.25 for jd in jds]
            fig, axs = plt.subplots(len(report), 1, figsize=(12, 3 * len(report)), sharex=True, squeeze=False)
            for ax, kind in zip(axs[:, 0], report):
                errs = [
                    sum((a - b) ** 2 for a, b in zip(
                        store.properties(kind, jd).positions, ref.properties(kind, jd).positions
                    )) ** 0.5
                    for jd in jds
                ]
                ax.scatter(years, errs, s=1, alpha=0.5)
                ax.set_title(f"{kind.name} position residual (compact - JPL)")
                ax.set_ylabel("km")
                ax.grid(True, alpha=0.3)
            axs[-1, 0].set_xlabel("Year")
            plt.tight_layout()
            plt.savefig(args.out_png, dpi=200)
            print(f"Plot saved to {args.out_png}")
    finally:
        ref.close()

    return 1 if failed else 0

if __name__ == "__main__":
    raise SystemExit(main())
