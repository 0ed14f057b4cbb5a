"""Merging of rupture sets built independently for overlapping fault paths.

A bifurcating fault system is forecast one path at a time. Ruptures that
lie entirely on the shared part of the system are generated once per path;
combining the path rupture sets adds their rates together so each unique
rupture appears once.
"""

from collections.abc import Sequence

from rupture_forecast.errors import ConsistencyError
from rupture_forecast.ruptures import Rupture, RuptureSet


def _index_by_signature(ruptures: Sequence[Rupture]) -> dict:
    index = {}
    for position, rupture in enumerate(ruptures):
        if rupture.signature in index:
            raise ConsistencyError(
                f"Duplicate rupture M{rupture.magnitude:.2f} on sections {rupture.section_indices}."
            )
        index[rupture.signature] = position
    return index


def combine_ruptures(
    ruptures_a: Sequence[Rupture], ruptures_b: Sequence[Rupture]
) -> list[Rupture]:
    """Combine two rupture lists, summing the rates of identical ruptures.

    Ruptures are identical if they have the same magnitude and the same
    section indices in the same order. Unmatched ruptures are kept as is,
    those of `ruptures_a` first.

    Parameters
    ----------
    ruptures_a : Sequence[Rupture]
        The first rupture list.
    ruptures_b : Sequence[Rupture]
        The second rupture list.

    Returns
    -------
    list[Rupture]
        The combined rupture list.

    Raises
    ------
    ConsistencyError
        If either list contains the same rupture twice.
    """
    index = _index_by_signature(ruptures_a)
    _index_by_signature(ruptures_b)

    combined = list(ruptures_a)
    unmatched = []
    for rupture in ruptures_b:
        position = index.get(rupture.signature)
        if position is None:
            unmatched.append(rupture)
        else:
            matched = combined[position]
            combined[position] = matched.with_rate(matched.rate + rupture.rate)
    return combined + unmatched


def combine_rupture_sets(set_a: RuptureSet, set_b: RuptureSet) -> RuptureSet:
    """Combine two rupture sets branch by branch.

    Parameters
    ----------
    set_a : RuptureSet
        The first rupture set.
    set_b : RuptureSet
        The second rupture set.

    Returns
    -------
    RuptureSet
        The combined rupture set.

    Raises
    ------
    ConsistencyError
        If the rupture sets were built from different MFD branches.
    """
    if set(set_a.ruptures) != set(set_b.ruptures):
        raise ConsistencyError(
            "Rupture sets must be built from identical MFD branches to be combined."
        )

    skipped = {}
    for key in dict.fromkeys([*set_a.skipped_magnitudes, *set_b.skipped_magnitudes]):
        skipped[key] = sorted(
            set(set_a.skipped_magnitudes.get(key, []))
            | set(set_b.skipped_magnitudes.get(key, []))
        )

    return RuptureSet(
        ruptures={
            key: combine_ruptures(ruptures, set_b.ruptures[key])
            for key, ruptures in set_a.ruptures.items()
        },
        skipped_magnitudes=skipped,
    )
