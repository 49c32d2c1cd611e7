"""Closed real intervals.

Intervals bound the valid ray parameters during intersection queries and
clamp color channels before quantisation. ``contains`` is inclusive and
``surrounds`` is exclusive; intersection code uses ``surrounds`` so a hit
exactly on the query bound is rejected.

Two sentinels exist: the empty interval (+inf, -inf) contains nothing and the
universe (-inf, +inf) contains everything. Any other interval with
min > max is a caller error and is not checked.
"""

import math

import taichi as ti

from pathtracer.core.vector import real

INFINITY = math.inf


@ti.dataclass
class Interval:
    """A range [lo, hi] of real numbers.

    Attributes:
        lo: Lower bound (min).
        hi: Upper bound (max).
    """

    lo: real
    hi: real


# Host-side bounds of the two sentinels, as (lo, hi)
EMPTY = (INFINITY, -INFINITY)
UNIVERSE = (-INFINITY, INFINITY)


@ti.func
def make_interval(lo: real, hi: real) -> Interval:
    """Create an interval from its bounds."""
    return Interval(lo=lo, hi=hi)


@ti.func
def empty_interval() -> Interval:
    """The interval that contains nothing."""
    return Interval(lo=INFINITY, hi=-INFINITY)


@ti.func
def universe_interval() -> Interval:
    """The interval that contains every real number."""
    return Interval(lo=-INFINITY, hi=INFINITY)


@ti.func
def interval_size(interval: Interval) -> real:
    """Length of the interval (negative for the empty interval)."""
    return interval.hi - interval.lo


@ti.func
def interval_contains(interval: Interval, x: real) -> ti.i32:
    """Check lo <= x <= hi."""
    return interval.lo <= x and x <= interval.hi


@ti.func
def interval_surrounds(interval: Interval, x: real) -> ti.i32:
    """Check lo < x < hi."""
    return interval.lo < x and x < interval.hi


@ti.func
def interval_clamp(interval: Interval, x: real) -> real:
    """Clamp x into [lo, hi]."""
    result = x
    if x < interval.lo:
        result = interval.lo
    if x > interval.hi:
        result = interval.hi
    return result
