"""Rupture set generation from magnitude-frequency branches.

For every magnitude bin of every MFD branch, ruptures are generated as all
runs of adjacent sections long enough for the magnitude. The bin rate is
shared between these ruptures in proportion to their average slip rate, so
that parts of a fault that slip faster host more earthquakes.

    sections    0   1   2   3   4   5
    window 0   [0   1   2]
    window 1       [1   2   3]
    window 2           [2   3   4]
    window 3               [3   4   5]
"""

import dataclasses
import itertools
import warnings
from collections.abc import Iterable, Sequence
from typing import Self

import numpy as np
import pandas as pd

from rupture_forecast import magnitude_scaling
from rupture_forecast.errors import DomainError, PolicyWarning
from rupture_forecast.magnitude_scaling import LengthFunction
from rupture_forecast.mfd import BranchKey, MfdBranch
from rupture_forecast.sections import SectionGeometry
from rupture_forecast.surfaces import SurfaceContext

# Rupture magnitudes are matched at this precision.
_SIGNATURE_DECIMALS = 4


@dataclasses.dataclass(frozen=True)
class Rupture:
    """A single earthquake rupture spanning adjacent fault sections.

    Attributes
    ----------
    section_indices : tuple[int, ...]
        Indices of the participating sections, in rupture order.
    magnitude : float
        Moment magnitude of the rupture.
    rate : float
        Annual rate of the rupture.
    dip : float
        Aggregate dip (degrees).
    width : float
        Aggregate down-dip width (km).
    depth : float
        Aggregate depth of the upper edge (km).
    rake : float
        Rake (degrees).
    """

    section_indices: tuple[int, ...]
    magnitude: float
    rate: float
    dip: float
    width: float
    depth: float
    rake: float

    def __post_init__(self) -> None:
        """Validate the rupture.

        Raises
        ------
        ValueError
            If the rate is negative or no sections participate.
        """
        if self.rate < 0:
            raise ValueError(f"Rupture rate must be non-negative, got {self.rate}.")
        if not self.section_indices:
            raise ValueError("A rupture must involve at least one section.")

    @property
    def signature(self) -> tuple[float, tuple[int, ...]]:  # numpydoc ignore=RT01
        """tuple[float, tuple[int, ...]]: The identity used to match ruptures."""
        return (round(self.magnitude, _SIGNATURE_DECIMALS), self.section_indices)

    def with_rate(self, rate: float) -> Self:
        """Copy the rupture with a new rate.

        Parameters
        ----------
        rate : float
            The new annual rate.

        Returns
        -------
        Rupture
            The updated rupture.
        """
        return dataclasses.replace(self, rate=rate)


@dataclasses.dataclass
class RuptureSet:
    """Ruptures of a fault or fault system, grouped by MFD branch.

    Attributes
    ----------
    ruptures : dict[BranchKey, list[Rupture]]
        The ruptures generated for each branch.
    skipped_magnitudes : dict[BranchKey, list[float]]
        Magnitude bins of each branch that were too long for the available
        sections and produced no ruptures.
    """

    ruptures: dict[BranchKey, list[Rupture]] = dataclasses.field(
        default_factory=dict
    )
    skipped_magnitudes: dict[BranchKey, list[float]] = dataclasses.field(
        default_factory=dict
    )

    @property
    def total_rate(self) -> float:  # numpydoc ignore=RT01
        """float: The total annual rate of all ruptures."""
        return float(
            sum(rupture.rate for ruptures in self.ruptures.values() for rupture in ruptures)
        )

    def __len__(self) -> int:
        return sum(len(ruptures) for ruptures in self.ruptures.values())

    def __iter__(self):
        """Iterate over (branch key, rupture) pairs."""
        return (
            (key, rupture)
            for key, ruptures in self.ruptures.items()
            for rupture in ruptures
        )


def rupture_count(section_count: int, rupture_size: int) -> int:
    """The number of ruptures of a given size that fit along a fault.

    Parameters
    ----------
    section_count : int
        Number of sections along the fault.
    rupture_size : int
        Number of adjacent sections per rupture.

    Returns
    -------
    int
        The number of sliding windows, zero if the rupture does not fit.
    """
    return max(0, section_count - rupture_size + 1)


def average_slip_rate(sections: Sequence[SectionGeometry]) -> float:
    """Average slip rate over sections of equal area.

    Parameters
    ----------
    sections : Sequence[SectionGeometry]
        The sections.

    Returns
    -------
    float
        The arithmetic mean slip rate (mm/yr).
    """
    return float(np.mean([section.slip_rate for section in sections]))


def ruptures_for_magnitude(
    sections: Sequence[SectionGeometry],
    rupture_size: int,
    magnitude: float,
    rate: float,
    rake: float,
    context: SurfaceContext,
) -> list[Rupture]:
    """Create all ruptures of a magnitude spanning `rupture_size` sections.

    Parameters
    ----------
    sections : Sequence[SectionGeometry]
        The sections along the fault, in order.
    rupture_size : int
        Number of adjacent sections per rupture.
    magnitude : float
        Rupture magnitude.
    rate : float
        Annual rate of the magnitude bin, shared between the ruptures.
    rake : float
        Rake of the ruptures (degrees).
    context : SurfaceContext
        Surfaces of the sections.

    Returns
    -------
    list[Rupture]
        One rupture per window. The rates sum to `rate`.

    Raises
    ------
    DomainError
        If every window has zero slip rate, so the rate cannot be shared.
    """
    windows = [
        sections[i : i + rupture_size]
        for i in range(rupture_count(len(sections), rupture_size))
    ]
    if not windows:
        return []

    weights = np.array([average_slip_rate(window) for window in windows])
    total_weight = weights.sum()
    if total_weight <= 0:
        raise DomainError(
            f"Cannot distribute the rate of M{magnitude:.2f} over sections with no slip."
        )
    rates = rate * weights / total_weight

    ruptures = []
    for window, window_rate in zip(windows, rates):
        indices = tuple(section.index for section in window)
        surface = context.composite(indices)
        ruptures.append(
            Rupture(
                section_indices=indices,
                magnitude=float(magnitude),
                rate=float(window_rate),
                dip=surface.dip,
                width=surface.width,
                depth=surface.depth,
                rake=rake,
            )
        )
    return ruptures


def generate_rupture_set(
    branches: Iterable[MfdBranch],
    sections: Sequence[SectionGeometry],
    length_of: LengthFunction = magnitude_scaling.wells_coppersmith_magnitude_to_length,
    target_section_length: float = 4.0,
    rake: float = 0.0,
    context: SurfaceContext | None = None,
) -> RuptureSet:
    """Generate the ruptures of every magnitude bin of every branch.

    Parameters
    ----------
    branches : Iterable[MfdBranch]
        The MFD branches of the fault.
    sections : Sequence[SectionGeometry]
        The sections along the fault, in order.
    length_of : LengthFunction, optional
        Magnitude to rupture length function. Default is Wells and
        Coppersmith.
    target_section_length : float, optional
        Section length used to size ruptures (km). Default is 4 km.
    rake : float, optional
        Rake of the ruptures (degrees). Default is 0.
    context : SurfaceContext, optional
        Precomputed section surfaces. If None, one is built for `sections`.

    Returns
    -------
    RuptureSet
        The ruptures of each branch.

    Warns
    -----
    PolicyWarning
        Once per branch for which some magnitude bins spanned more sections
        than available and were skipped.
    """
    if context is None:
        context = SurfaceContext(sections)

    rupture_set = RuptureSet()
    for branch in branches:
        ruptures = []
        skipped = []
        for magnitude, rate in branch:
            rupture_size = magnitude_scaling.section_count_for_magnitude(
                magnitude, target_section_length, length_of
            )
            if rupture_size > len(sections):
                skipped.append(magnitude)
                continue
            ruptures.extend(
                ruptures_for_magnitude(
                    sections, rupture_size, magnitude, rate, rake, context
                )
            )
        rupture_set.ruptures[branch.key] = ruptures
        if skipped:
            rupture_set.skipped_magnitudes[branch.key] = skipped
            warnings.warn(
                f"{branch.label}: skipped {len(skipped)} magnitude bin(s) from "
                f"M{skipped[0]:.2f} spanning more than {len(sections)} sections.",
                PolicyWarning,
            )
    return rupture_set


def section_range_string(indices: Iterable[int]) -> str:
    """Compact a list of section indices into a range string.

    Parameters
    ----------
    indices : Iterable[int]
        Section indices.

    Returns
    -------
    str
        Comma separated runs, with runs of consecutive indices written as
        "start:end".

    Examples
    --------
    >>> section_range_string([0, 1, 2, 5])
    '0:2,5'
    """
    runs = []
    for _, group in itertools.groupby(
        enumerate(indices), key=lambda pair: pair[1] - pair[0]
    ):
        run = [index for _, index in group]
        runs.append(f"{run[0]}:{run[-1]}" if len(run) > 1 else f"{run[0]}")
    return ",".join(runs)


def ruptures_as_dataframe(rupture_set: RuptureSet) -> pd.DataFrame:
    """Tabulate a rupture set.

    Parameters
    ----------
    rupture_set : RuptureSet
        The rupture set.

    Returns
    -------
    pd.DataFrame
        A dataframe with one row per rupture and columns `label`,
        `sections`, `magnitude`, `rate`, `dip`, `width`, `depth` and `rake`.
    """
    return pd.DataFrame(
        [
            {
                "label": key.label,
                "sections": section_range_string(rupture.section_indices),
                "magnitude": rupture.magnitude,
                "rate": rupture.rate,
                "dip": rupture.dip,
                "width": rupture.width,
                "depth": rupture.depth,
                "rake": rupture.rake,
            }
            for key, rupture in rupture_set
        ],
        columns=[
            "label",
            "sections",
            "magnitude",
            "rate",
            "dip",
            "width",
            "depth",
            "rake",
        ],
    )
