"""Ruptures from externally computed inversion solutions.

An inversion solution supplies, for every rupture, the participating
section indices, a magnitude, an annual rate and a rake as parallel
arrays. The geometry of each rupture (dip, width and depth) is derived
from the composite surface of its sections unless supplied.
"""

import logging
from collections.abc import Callable, Sequence

import numpy.typing as npt

from rupture_forecast.aftershock import AftershockFilter
from rupture_forecast.errors import ConsistencyError
from rupture_forecast.ruptures import Rupture
from rupture_forecast.surfaces import SurfaceContext

logger = logging.getLogger(__name__)

SectionFilter = Callable[[tuple[int, ...]], bool]


def _check_size(data: Sequence | npt.ArrayLike | None, size: int, name: str) -> None:
    if data is not None and len(data) != size:
        raise ConsistencyError(f"{name} size mismatch [{size}, {len(data)}]")


def ruptures_from_solution(
    section_indices: Sequence[Sequence[int]],
    magnitudes: npt.ArrayLike,
    rates: npt.ArrayLike,
    rakes: npt.ArrayLike,
    context: SurfaceContext,
    dips: npt.ArrayLike | None = None,
    widths: npt.ArrayLike | None = None,
    depths: npt.ArrayLike | None = None,
    aftershock_filter: AftershockFilter | None = None,
    exclude: SectionFilter | None = None,
) -> list[Rupture]:
    """Build ruptures from the parallel arrays of an inversion solution.

    Parameters
    ----------
    section_indices : Sequence[Sequence[int]]
        Participating section indices of each rupture.
    magnitudes : array-like
        Magnitude of each rupture.
    rates : array-like
        Annual rate of each rupture.
    rakes : array-like
        Rake of each rupture (degrees).
    context : SurfaceContext
        Surfaces of every section referenced by the solution.
    dips : array-like, optional
        Dip of each rupture. Derived from the composite surface if None.
    widths : array-like, optional
        Width of each rupture. Derived from the composite surface if None.
    depths : array-like, optional
        Depth of each rupture. Derived from the composite surface if None.
    aftershock_filter : AftershockFilter, optional
        If given, rates are scaled to remove aftershocks.
    exclude : SectionFilter, optional
        A predicate on section indices; ruptures for which it returns True
        are dropped.

    Returns
    -------
    list[Rupture]
        The ruptures with non-zero rate, in solution order.

    Raises
    ------
    ConsistencyError
        If the attribute arrays do not all have one entry per rupture.
    """
    size = len(section_indices)
    for data, name in [
        (magnitudes, "magnitudes"),
        (rates, "rates"),
        (rakes, "rakes"),
        (dips, "dips"),
        (widths, "widths"),
        (depths, "depths"),
    ]:
        _check_size(data, size, name)

    ruptures = []
    zero_rate = 0
    excluded = 0
    for i, indices in enumerate(section_indices):
        indices = tuple(int(index) for index in indices)
        rate = float(rates[i])
        if rate == 0.0:
            zero_rate += 1
            continue
        if exclude is not None and exclude(indices):
            excluded += 1
            continue

        magnitude = float(magnitudes[i])
        if aftershock_filter is not None:
            rate = aftershock_filter.scale_fault_rate(magnitude, rate)

        surface = (
            context.composite(indices)
            if dips is None or widths is None or depths is None
            else None
        )
        ruptures.append(
            Rupture(
                section_indices=indices,
                magnitude=magnitude,
                rate=rate,
                dip=float(dips[i]) if dips is not None else surface.dip,
                width=float(widths[i]) if widths is not None else surface.width,
                depth=float(depths[i]) if depths is not None else surface.depth,
                rake=float(rakes[i]),
            )
        )

    logger.info(
        "Solution ruptures: %d positive rate, %d zero rate, %d excluded",
        len(ruptures),
        zero_rate,
        excluded,
    )
    return ruptures
