"""Correctness checks for the CORAL benchmark input decks."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Sequence, TextIO

_UINT64_MASK = 0xFFFF_FFFF_FFFF_FFFF

# Expected (fission, scatter, absorb) ratios and percent tolerance per benchmark.
_BENCHMARK_RATIOS = {
    1: (0.05, 1.0, 0.04, 1.0),
    2: (0.075, 0.830, 0.094, 1.1),
}

_FLUENCE_PERCENT_TOLERANCE = 6.0


@dataclass
class Balance:
    """Cumulative event counts of a run."""

    absorb: int = 0
    census: int = 0
    escape: int = 0
    collision: int = 0
    fission: int = 0
    produce: int = 0
    scatter: int = 0
    start: int = 0
    source: int = 0
    rr: int = 0
    split: int = 0
    num_segments: int = 0


def _div(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.nan if numerator == 0 else math.copysign(math.inf, numerator)
    return numerator / denominator


def balance_ratio_test(balance: Balance, benchmark: int, out: TextIO | None = None) -> bool:
    """Check absorption, fission and scatter counts keep their expected ratios."""
    out = sys.stdout if out is None else out
    out.write("\n")
    out.write("Testing Ratios for Absorbtion, Fission, and Scattering are maintained\n")

    try:
        fission_ratio, scatter_ratio, absorb_ratio, percent_tolerance = _BENCHMARK_RATIOS[
            benchmark
        ]
    except KeyError:
        raise ValueError(f"unknown coral benchmark {benchmark}") from None

    absorb, fission, scatter = balance.absorb, balance.fission, balance.scatter
    tolerance = percent_tolerance / 100.0

    absorb2scatter = abs(_div(absorb, absorb_ratio) * _div(scatter_ratio, scatter) - 1)
    absorb2fission = abs(_div(absorb, absorb_ratio) * _div(fission_ratio, fission) - 1)
    scatter2absorb = abs(_div(scatter, scatter_ratio) * _div(absorb_ratio, absorb) - 1)
    scatter2fission = abs(_div(scatter, scatter_ratio) * _div(fission_ratio, fission) - 1)
    fission2absorb = abs(_div(fission, fission_ratio) * _div(absorb_ratio, absorb) - 1)
    fission2scatter = abs(_div(fission, fission_ratio) * _div(scatter_ratio, scatter) - 1)

    relatives = (
        ("Absorb to Scatter: ", absorb2scatter),
        ("Absorb to Fission: ", absorb2fission),
        ("Scatter to Absorb: ", scatter2absorb),
        ("Scatter to Fission:", scatter2fission),
        ("Fission to Absorb: ", fission2absorb),
        ("Fission to Scatter:", fission2scatter),
    )
    passed = not any(value > tolerance for _, value in relatives)

    if passed:
        out.write(
            "PASS:: Absorption / Fission / Scatter Ratios maintained with %g%% tolerance\n"
            % (tolerance * 100.0)
        )
    else:
        out.write(
            "FAIL:: Absorption / Fission / Scatter Ratios NOT maintained with %g%% tolerance\n"
            % (tolerance * 100.0)
        )
        out.write("absorb:  %12d\t%g\n" % (absorb, absorb_ratio))
        out.write("scatter: %12d\t%g\n" % (scatter, scatter_ratio))
        out.write("fission: %12d\t%g\n" % (fission, fission_ratio))
        for label, value in relatives:
            out.write("Relative %s %g < %g\n" % (label, value, tolerance))
    return passed


def balance_event_test(balance: Balance, out: TextIO | None = None) -> bool:
    """Check facet crossings and collisions occur equally often."""
    out = sys.stdout if out is None else out
    out.write("\n")
    out.write("Testing balance between number of facet crossings and reactions\n")

    collisions = balance.collision
    facet_crossing = (balance.num_segments - balance.census - collisions) & _UINT64_MASK
    ratio = abs(_div(float(facet_crossing), float(collisions)) - 1)

    tolerance = 1.0
    passed = not ratio > tolerance / 100.0
    if passed:
        out.write(
            "PASS:: Collision to Facet Crossing Ratio maintained even balanced within "
            "%g%% tolerance\n" % tolerance
        )
    else:
        out.write(
            " FAIL:: Collision to Facet Crossing Ratio balanced NOT maintained within "
            "%g%% tolerance\n" % tolerance
        )
        out.write(
            "\tFacet Crossing: %d\tCollision: %d\tRatio: %g\n"
            % (facet_crossing, collisions, ratio)
        )
    return passed


def missing_particle_test(balance: Balance, out: TextIO | None = None) -> bool:
    """Check every particle gained was also lost."""
    out = sys.stdout if out is None else out
    out.write("\n")
    out.write("Test for lost / unaccounted for particles in this simulation\n")

    gains = balance.start + balance.source + balance.produce + balance.split
    losses = balance.absorb + balance.census + balance.escape + balance.rr + balance.fission
    passed = gains == losses
    if passed:
        out.write("PASS:: No Particles Lost During Run\n")
    else:
        out.write("FAIL:: Particles Were Lost During Run, test for done should have failed\n")
    return passed


def fluence_test(fluence: Sequence[Sequence[float]], out: TextIO | None = None) -> bool:
    """Check the scalar flux of each domain is homogeneous across its cells.

    ``fluence`` holds, for each domain, the tallied value of every cell.
    """
    out = sys.stdout if out is None else out
    out.write("\n")
    out.write("Test Fluence for homogeneity across cells\n")

    max_diff = 0.0
    for cells in fluence:
        values = list(cells)
        if not values:
            continue
        average = sum(values) / len(values)
        for value in values:
            percent_diff = _div(abs(value - average), (value + average) / 2.0) * 100
            max_diff = max_diff if max_diff > percent_diff else percent_diff

    passed = not max_diff > _FLUENCE_PERCENT_TOLERANCE
    if passed:
        out.write(
            "PASS:: Fluence is homogenous across cells with %g%% tolerance\n"
            % _FLUENCE_PERCENT_TOLERANCE
        )
    else:
        out.write(
            "FAIL:: Fluence not homogenous across cells within %g%% tolerance\n"
            % _FLUENCE_PERCENT_TOLERANCE
        )
        out.write(
            "\tTry running more particles or more cycles to see if Max Percent "
            "Difference goes down.\n"
        )
        out.write("\tCurrent Max Percent Diff: %4.1f%%\n" % max_diff)
    return passed


def coral_benchmark_correctness(
    balance: Balance,
    fluence: Sequence[Sequence[float]],
    benchmark: int,
    out: TextIO | None = None,
) -> dict[str, bool]:
    """Run all checks for a CORAL benchmark deck; nothing runs if ``benchmark`` is 0."""
    if not benchmark:
        return {}
    return {
        "balance_ratio": balance_ratio_test(balance, benchmark, out),
        "balance_event": balance_event_test(balance, out),
        "missing_particle": missing_particle_test(balance, out),
        "fluence": fluence_test(fluence, out),
    }