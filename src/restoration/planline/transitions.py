"""
Crossing method: joining dense plan lines with smooth transitions.
"""

from typing import Optional, Sequence

import numpy as np
from loguru import logger

from restoration.config import settings
from restoration.core import MeasurementSeries
from restoration.errors import InvalidCurvature, InvalidInput, InvalidRange
from restoration.planline.segments import TransitionKind, blend_weight

RAIL_GAUGE = 1067.0  # mm
MAX_CANT = 200.0  # mm
MIN_TRANSITION_LENGTH = 20.0  # m
MAX_TRANSITION_LENGTH = 100.0  # m
DEFAULT_CROSSING_LENGTH = 50.0  # m


def transition_length(radius: float, cant_gradient: Optional[float] = None) -> float:
    """
    Transition length (m) for a curve of ``radius`` m: the equilibrium cant
    ``min(200, G²/R/15)`` mm run out at ``cant_gradient`` mm/m, clamped to 20-100 m.
    """
    cant_gradient = settings.CANT_GRADIENT if cant_gradient is None else cant_gradient
    if not radius > 0:
        raise InvalidCurvature(f"radius must be positive, got {radius}", "radius", radius)
    if not cant_gradient > 0:
        raise InvalidInput("cant gradient must be positive", "cant_gradient", cant_gradient)
    cant = min(MAX_CANT, RAIL_GAUGE * RAIL_GAUGE / radius / 15.0)
    return float(np.clip(cant / cant_gradient, MIN_TRANSITION_LENGTH, MAX_TRANSITION_LENGTH))


def connect(
    plan1: MeasurementSeries,
    plan2: MeasurementSeries,
    crossing_distance: float,
    length: float = DEFAULT_CROSSING_LENGTH,
    kind: TransitionKind = TransitionKind.CUBIC,
) -> MeasurementSeries:
    """
    Join ``plan1`` to ``plan2`` around ``crossing_distance``.

    The result lies on ``plan1``'s grid: ``plan1`` before the transition,
    ``plan2`` (linearly interpolated) after it, and a blend of both over
    ``length`` m centred on the crossing.
    """
    if not length > 0:
        raise InvalidInput("transition length must be positive", "length", length)
    start = crossing_distance - length / 2.0
    end = crossing_distance + length / 2.0
    d = plan1.distance
    if len(plan1) < 2 or start < d[0] or end > d[-1]:
        raise InvalidRange(f"transition [{start}, {end}] leaves the plan line", "crossing_distance", crossing_distance)

    first = plan1.values
    second = np.interp(d, plan2.distance, plan2.values)
    w = blend_weight((d - start) / length, TransitionKind(kind))
    return plan1.with_values((1.0 - w) * first + w * second)


def auto_connect(plans: Sequence[MeasurementSeries], length: float = DEFAULT_CROSSING_LENGTH) -> MeasurementSeries:
    """Chain plan lines, crossing midway between the end of one and the start of the next."""
    if not plans:
        raise InvalidInput("no plan lines to connect", "plans")
    result = plans[0]
    for following in plans[1:]:
        crossing = (result.distance[-1] + following.distance[0]) / 2.0
        merged = np.union1d(result.distance, following.distance)
        base = MeasurementSeries(merged, np.interp(merged, result.distance, result.values))
        result = connect(base, following, crossing, length)
    return result


def _clothoid_offset(s, length: float, k0: float, k1: float):
    # integral of a linearly varying curvature, m -> mm
    return 1000.0 * (k0 * s * s / 2.0 + (k1 - k0) * s**3 / (6.0 * length))


def _clothoid_slope(s, length: float, k0: float, k1: float):
    return 1000.0 * (k0 * s + (k1 - k0) * s * s / (2.0 * length))


def _hermite_correction(t, dy: float, dm: float, length: float):
    """Offset with value ``dy`` and slope ``dm`` at t=0, zero value and slope at t=1."""
    h00 = 2 * t**3 - 3 * t**2 + 1
    h10 = t**3 - 2 * t**2 + t
    return h00 * dy + h10 * length * dm


def straight_to_curve(
    plan: MeasurementSeries,
    connection: float,
    radius: float,
    side: str = "entry",
    sign: int = 1,
    cant_gradient: Optional[float] = None,
    blend_length: Optional[float] = None,
) -> MeasurementSeries:
    """
    Insert a clothoid at ``connection``.

    ``side="entry"`` runs from the straight (curvature 0) into the curve
    (curvature 1/R) and ends at ``connection``; ``side="exit"`` starts there and
    runs back to the straight. The clothoid leaves the tangent of the plan
    line at its first sample. Beyond its last sample the difference in value
    and slope to the plan line is faded out over ``blend_length`` m
    (defaults to the clothoid length), so both ends stay continuous.
    """
    length = transition_length(radius, cant_gradient)
    # same sign convention as Circular: +1 bulges towards positive values
    curvature = -sign / radius
    if side == "entry":
        start, end, k0, k1 = connection - length, connection, 0.0, curvature
    elif side == "exit":
        start, end, k0, k1 = connection, connection + length, curvature, 0.0
    else:
        raise InvalidInput(f"side must be 'entry' or 'exit', got {side}", "side", side)
    blend_length = length if blend_length is None else blend_length
    if not blend_length > 0:
        raise InvalidInput("blend length must be positive", "blend_length", blend_length)

    i0, i1 = plan.index_range(start, end)
    d, v = plan.distance, plan.values
    tangent = (v[i0] - v[i0 - 1]) / (d[i0] - d[i0 - 1]) if i0 > 0 else (v[1] - v[0]) / (d[1] - d[0])

    s = d[i0 : i1 + 1] - d[i0]
    updated = np.array(v)
    updated[i0 : i1 + 1] = v[i0] + tangent * s + _clothoid_offset(s, length, k0, k1)

    if i1 < len(plan) - 1:
        # fade the clothoid end back into the plan line
        end_slope = tangent + _clothoid_slope(s[-1], length, k0, k1)
        plan_slope = (v[i1 + 1] - v[i1]) / (d[i1 + 1] - d[i1])
        span = min(blend_length, d[-1] - d[i1])
        tail = np.flatnonzero((d > d[i1]) & (d <= d[i1] + span))
        t = (d[tail] - d[i1]) / span
        updated[tail] = v[tail] + _hermite_correction(t, updated[i1] - v[i1], end_slope - plan_slope, span)

    logger.debug(f"Clothoid ({side}) of {length:.1f} m at {connection} m for R={radius} m")
    return plan.with_values(updated)
