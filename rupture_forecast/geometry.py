"""Geometry primitives for fault traces.

Traces are numpy arrays of shape (n x 2) holding (lat, lon) rows in
degrees. Any additional columns (e.g. depth in km) are carried through
untouched by the functions here. All distances are great-circle distances
on a sphere, in kilometres.
"""

import numpy as np
import numpy.typing as npt
import pyproj

_KM_TO_M = 1000

# Distances are computed on a sphere to match the reference fault models.
_GEOD = pyproj.Geod(ellps="sphere")

# Vertices closer than this (km) to a partition boundary are dropped in
# favour of the interpolated boundary point.
_PARTITION_TOLERANCE = 1e-6


def horizontal_distance(
    location_a: npt.ArrayLike, location_b: npt.ArrayLike
) -> float | np.ndarray:
    """Compute the horizontal distance between locations.

    Parameters
    ----------
    location_a : array-like
        A location (lat, lon[, depth]) or an array of locations.
    location_b : array-like
        A location (lat, lon[, depth]) or an array of locations, broadcast
        against `location_a`.

    Returns
    -------
    float or np.ndarray
        The great-circle distance(s) (in km), ignoring depth.
    """
    location_a = np.asarray(location_a, dtype=np.float64)
    location_b = np.asarray(location_b, dtype=np.float64)
    lat_a, lon_a, lat_b, lon_b = np.broadcast_arrays(
        location_a[..., 0], location_a[..., 1], location_b[..., 0], location_b[..., 1]
    )
    _, _, distance = _GEOD.inv(lon_a, lat_a, lon_b, lat_b)
    distance = np.asarray(distance) / _KM_TO_M
    if distance.ndim == 0:
        return float(distance)
    return distance


def azimuth(location_a: npt.ArrayLike, location_b: npt.ArrayLike) -> float:
    """Compute the azimuth from one location to another.

    Parameters
    ----------
    location_a : array-like
        The start location (lat, lon[, depth]).
    location_b : array-like
        The end location (lat, lon[, depth]).

    Returns
    -------
    float
        The forward azimuth (in degrees, [0, 360)).
    """
    az, _, _ = _GEOD.inv(location_a[1], location_a[0], location_b[1], location_b[0])
    return float(az) % 360


def segment_lengths(trace: np.ndarray) -> np.ndarray:
    """Lengths (in km) of each consecutive segment of a trace.

    Parameters
    ----------
    trace : np.ndarray
        The trace to measure.

    Returns
    -------
    np.ndarray
        An array of length n - 1 of segment lengths.
    """
    trace = np.asarray(trace, dtype=np.float64)
    return np.atleast_1d(horizontal_distance(trace[:-1], trace[1:]))


def trace_length(trace: np.ndarray) -> float:
    """Total length (in km) of a trace.

    Parameters
    ----------
    trace : np.ndarray
        The trace to measure.

    Returns
    -------
    float
        The sum of all segment lengths.
    """
    if len(trace) < 2:
        return 0.0
    return float(segment_lengths(trace).sum())


def strike(trace: np.ndarray) -> float:
    """The strike of a trace, taken from its first to its last point.

    Parameters
    ----------
    trace : np.ndarray
        The fault trace.

    Returns
    -------
    float
        The strike (in degrees, [0, 360)).
    """
    return azimuth(trace[0], trace[-1])


def dip_direction(trace: np.ndarray) -> float:
    """The dip direction of a trace according to the right-hand rule.

    Parameters
    ----------
    trace : np.ndarray
        The fault trace.

    Returns
    -------
    float
        The dip direction (in degrees, [0, 360)), 90 degrees clockwise
        from strike.
    """
    return (strike(trace) + 90) % 360


def translate(points: np.ndarray, bearing: float, distance: float) -> np.ndarray:
    """Move points a fixed distance along a bearing.

    Parameters
    ----------
    points : np.ndarray
        Points (lat, lon, ...) to move. Extra columns are preserved.
    bearing : float
        Direction of travel (degrees).
    distance : float
        Distance to travel (km). Negative distances travel backwards.

    Returns
    -------
    np.ndarray
        The moved points.
    """
    points = np.array(points, dtype=np.float64, ndmin=2)
    if distance < 0:
        bearing, distance = bearing + 180, -distance
    lon, lat, _ = _GEOD.fwd(
        points[:, 1],
        points[:, 0],
        np.full(len(points), bearing),
        np.full(len(points), distance * _KM_TO_M),
    )
    moved = points.copy()
    moved[:, 0] = lat
    moved[:, 1] = lon
    return moved


def _point_along_trace(
    trace: np.ndarray, cumulative_lengths: np.ndarray, distance: float
) -> np.ndarray:
    """Interpolate the point a given distance (km) along a trace."""
    i = int(
        np.clip(
            np.searchsorted(cumulative_lengths, distance, side="right") - 1,
            0,
            len(trace) - 2,
        )
    )
    bearing = azimuth(trace[i], trace[i + 1])
    return translate(trace[i], bearing, distance - cumulative_lengths[i])[0]


def partition_trace(trace: np.ndarray, target_length: float) -> list[np.ndarray]:
    """Split a trace into equal-length sections.

    The number of sections is `round(length / target_length)` (at least
    one), so the actual section length is `length / round(length /
    target_length)`. Section boundaries are interpolated along the trace;
    trace vertices falling inside a section are preserved.

    Parameters
    ----------
    trace : np.ndarray
        The trace to partition (n x 2).
    target_length : float
        The preferred section length (km).

    Returns
    -------
    list[np.ndarray]
        The section traces in order along the trace. Consecutive sections
        share their boundary point.

    Raises
    ------
    ValueError
        If the trace has fewer than two points or `target_length` is not
        positive.
    """
    trace = np.asarray(trace, dtype=np.float64)
    if len(trace) < 2:
        raise ValueError("A trace needs at least two points to be partitioned.")
    if target_length <= 0:
        raise ValueError("Target section length must be positive.")

    cumulative_lengths = np.concatenate(([0.0], np.cumsum(segment_lengths(trace))))
    length = cumulative_lengths[-1]
    count = max(1, round(length / target_length))
    boundaries = np.linspace(0.0, length, count + 1)

    boundary_points = [trace[0]]
    boundary_points.extend(
        _point_along_trace(trace, cumulative_lengths, distance)
        for distance in boundaries[1:-1]
    )
    boundary_points.append(trace[-1])

    sections = []
    for i in range(count):
        start, end = boundaries[i], boundaries[i + 1]
        interior = trace[
            (cumulative_lengths > start + _PARTITION_TOLERANCE)
            & (cumulative_lengths < end - _PARTITION_TOLERANCE)
        ]
        sections.append(
            np.vstack([boundary_points[i], *interior, boundary_points[i + 1]])
        )
    return sections
