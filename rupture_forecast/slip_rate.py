"""Interpolation of slip rates along a partitioned fault trace.

Slip rates are usually only known at a handful of points along a fault
(anchors). Once the fault is split into equal-length sections, every
section is given a slip rate by linear interpolation between consecutive
anchors.
"""

import math
from collections.abc import Mapping, Sequence

import numpy as np

from rupture_forecast import geometry
from rupture_forecast.errors import ConsistencyError

SLIP_RATE_DECIMALS = 3

_POSITION_DECIMALS = 6


def interpolate(
    start: float, end: float, steps: int, decimals: int = SLIP_RATE_DECIMALS
) -> np.ndarray:
    """Linearly interpolate between two values, inclusive of both.

    Parameters
    ----------
    start : float
        The first value.
    end : float
        The last value.
    steps : int
        The number of values to produce (including endpoints).
    decimals : int, optional
        Interior values are rounded to this many decimal places. The
        endpoints are returned exactly. Default is 3.

    Returns
    -------
    np.ndarray
        The interpolated values.
    """
    values = np.linspace(start, end, steps)
    values[1:-1] = np.round(values[1:-1], decimals)
    if steps > 0:
        values[-1] = end
    if steps > 1:
        values[0] = start
    return values


def combine_segments(segments: Sequence[np.ndarray]) -> np.ndarray:
    """Join interpolated segments that share their boundary values.

    Parameters
    ----------
    segments : Sequence[np.ndarray]
        The segments to join. The last value of each segment is assumed to
        be equal to the first value of the next.

    Returns
    -------
    np.ndarray
        The concatenated segments with the shared values appearing once.
    """
    return np.concatenate(
        [segments[0]] + [segment[1:] for segment in segments[1:]]
    )


def _check_count(slip_rates: np.ndarray, section_count: int) -> np.ndarray:
    if len(slip_rates) != section_count:
        raise ConsistencyError(
            f"Slip rate count ({len(slip_rates)}) != section count ({section_count})"
        )
    return slip_rates


def _check_anchors(indices: list[int], last_index: int) -> None:
    if len(indices) < 2:
        raise ConsistencyError("At least two slip rate anchors are required.")
    if indices[0] != 0 or indices[-1] != last_index:
        raise ConsistencyError(
            f"Slip rate anchors must span indices 0 to {last_index}, got {indices[0]} to {indices[-1]}"
        )


def interpolate_section_slip_rates(
    section_count: int,
    anchors: Mapping[int, float],
    decimals: int = SLIP_RATE_DECIMALS,
) -> np.ndarray:
    """Assign slip rates to sections from slip rates at anchor sections.

    Parameters
    ----------
    section_count : int
        The number of sections along the fault.
    anchors : Mapping[int, float]
        A map from section index to slip rate (mm/yr). Must include the
        first (0) and last (section_count - 1) index.
    decimals : int, optional
        Rounding precision for interpolated values. Default is 3.

    Returns
    -------
    np.ndarray
        One slip rate per section.

    Raises
    ------
    ConsistencyError
        If the anchors do not cover the first and last section, or do not
        produce exactly `section_count` values.

    Examples
    --------
    >>> interpolate_section_slip_rates(5, {0: 0.6, 4: 8.4})
    array([0.6 , 2.55, 4.5 , 6.45, 8.4 ])
    """
    indices = sorted(anchors)
    _check_anchors(indices, section_count - 1)
    segments = [
        interpolate(anchors[start], anchors[end], end - start + 1, decimals)
        for start, end in zip(indices[:-1], indices[1:])
    ]
    return _check_count(combine_segments(segments), section_count)


def interpolate_trace_slip_rates(
    trace: np.ndarray,
    anchors: Mapping[int, float],
    target_section_length: float,
    decimals: int = SLIP_RATE_DECIMALS,
) -> np.ndarray:
    """Assign slip rates to the sections of a trace from trace-vertex anchors.

    The trace is taken to be partitioned as by
    `geometry.partition_trace(trace, target_section_length)`. Each anchor
    vertex lies in one section, and between each pair of consecutive
    anchors values are interpolated over the sections spanned, from the
    section of the first anchor to the section of the second inclusive. An
    anchor on a section boundary belongs to the section that follows it.

    Parameters
    ----------
    trace : np.ndarray
        The full fault trace.
    anchors : Mapping[int, float]
        A map from trace vertex index to slip rate (mm/yr). Must include
        the first and last vertex.
    target_section_length : float
        The target section length used to partition the trace (km).
    decimals : int, optional
        Rounding precision for interpolated values. Default is 3.

    Returns
    -------
    np.ndarray
        One slip rate per section.

    Raises
    ------
    ConsistencyError
        If the anchors do not cover the first and last vertex, or the number
        of slip rates does not match the number of sections.
    """
    length = geometry.trace_length(trace)
    section_count = max(1, round(length / target_section_length))
    section_length = length / section_count

    vertex_positions = np.concatenate(
        ([0.0], np.cumsum(geometry.segment_lengths(trace)))
    )
    indices = sorted(anchors)
    _check_anchors(indices, len(trace) - 1)

    def section_of(vertex: int) -> int:
        # Rounded so vertices a hair short of a boundary are not misplaced.
        position = round(vertex_positions[vertex] / section_length, _POSITION_DECIMALS)
        return min(math.floor(position), section_count - 1)

    segments = []
    for start, end in zip(indices[:-1], indices[1:]):
        steps = section_of(end) - section_of(start) + 1
        segments.append(interpolate(anchors[start], anchors[end], steps, decimals))
    return _check_count(combine_segments(segments), section_count)
