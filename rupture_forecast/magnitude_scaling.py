"""Magnitude scaling relationships for rupture length.

The rupture generator needs to know how many sections a rupture of a given
magnitude spans. These functions turn a magnitude into a rupture length,
which is then divided by the section length.
"""

import functools
from collections.abc import Callable
from enum import Enum, StrEnum, auto

import numpy as np
import scipy as sp

LengthFunction = Callable[[float], float]


class RakeType(Enum):
    """Enumeration of rake types."""

    NORMAL = auto()
    REVERSE = auto()
    STRIKE_SLIP = auto()
    REVERSE_OBLIQUE = auto()
    NORMAL_OBLIQUE = auto()
    UNDEFINED = auto()


class ScalingRelation(StrEnum):
    """Enumeration of magnitude to length scaling relations."""

    WELLS_COPPERSMITH1994 = auto()
    LEONARD2014 = auto()


def rake_type(rake: float) -> RakeType:
    """Determine the rake type of a fault given its rake.

    Parameters
    ----------
    rake : float
        Rake of the fault.

    Returns
    -------
    RakeType
        Type of rake of the fault.
    """
    if -30 <= rake <= 30 or 150 <= rake <= 210:
        return RakeType.STRIKE_SLIP
    elif 60 <= rake <= 120:
        return RakeType.REVERSE
    elif -120 <= rake <= -60:
        return RakeType.NORMAL
    elif -150 < rake < -120 or -60 < rake < -30:
        return RakeType.NORMAL_OBLIQUE
    elif 30 < rake < 60 or 120 < rake < 150:
        return RakeType.REVERSE_OBLIQUE

    return RakeType.UNDEFINED


def wells_coppersmith_magnitude_to_length(magnitude: float) -> float:
    """Convert magnitude to surface rupture length using Wells and Coppersmith [0]_.

    Uses the all slip type regression for surface rupture length,
    M = 5.08 + 1.16 log10(L).

    Parameters
    ----------
    magnitude : float
        Moment magnitude of the rupture.

    Returns
    -------
    float
        Surface rupture length (km).

    References
    ----------
    .. [0] Wells, Donald L., and Kevin J. Coppersmith. "New empirical
           relationships among magnitude, rupture length, rupture width,
           rupture area, and surface displacement." Bulletin of the
           Seismological Society of America 84.4 (1994): 974-1002.
    """
    return 10 ** ((magnitude - 5.08) / 1.16)


def wells_coppersmith_length_to_magnitude(length: float) -> float:
    """Convert surface rupture length to magnitude using Wells and Coppersmith [0]_.

    Parameters
    ----------
    length : float
        Surface rupture length (km).

    Returns
    -------
    float
        Moment magnitude of the rupture.

    References
    ----------
    .. [0] Wells, Donald L., and Kevin J. Coppersmith. "New empirical
           relationships among magnitude, rupture length, rupture width,
           rupture area, and surface displacement." Bulletin of the
           Seismological Society of America 84.4 (1994): 974-1002.
    """
    return 5.08 + 1.16 * np.log10(length)


def leonard_magnitude_to_length(
    magnitude: float,
    rake: float,
    random: bool = False,
) -> float:
    """Convert magnitude to length using the Leonard scaling relationship [0]_.

    Parameters
    ----------
    magnitude : float
        Moment magnitude of the fault.
    rake : float
        Rake of the fault (degrees).
    random : bool, optional
        If True, sample the strike-slip intercept according to the
        uncertainty in the paper, otherwise use the best-fit value.
        Default is False.

    Returns
    -------
    float
        Length of the fault (km).

    References
    ----------
    .. [0] Leonard, Mark. "Self‐consistent earthquake fault‐scaling
           relations: Update and extension to stable continental strike‐slip
           faults." Bulletin of the Seismological Society of America 104.6
           (2014): 2953-2965.
    """
    length: float
    if rake_type(rake) == RakeType.STRIKE_SLIP:
        a_small = sp.stats.norm(loc=4.16, scale=0.39).rvs() if random else 4.17
        length = 10 ** ((magnitude - a_small) / 1.667)
        # Length saturates once the rupture spans the seismogenic width.
        if length > 45.0:
            length = 10 ** (magnitude - 5.27)
    else:
        length = 10 ** ((magnitude - 4.0) / 2.0)
        if length > 5.4:
            length = 10 ** ((magnitude - 4.24) / 1.667)

    return length


def length_function(
    scaling_relation: ScalingRelation, rake: float | None = None
) -> LengthFunction:
    """Get a magnitude to length function for a scaling relation.

    Parameters
    ----------
    scaling_relation : ScalingRelation
        Scaling relation to use.
    rake : float, optional
        Rake of the fault (degrees). Required for Leonard scaling.

    Returns
    -------
    LengthFunction
        A function taking magnitude and returning rupture length (km).

    Raises
    ------
    ValueError
        If Leonard scaling is requested without a rake.
    """
    if scaling_relation == ScalingRelation.LEONARD2014:
        if rake is None:
            raise ValueError("Rake must be specified for Leonard scaling.")
        return functools.partial(leonard_magnitude_to_length, rake=rake)
    return wells_coppersmith_magnitude_to_length


def magnitude_to_length(
    scaling_relation: ScalingRelation,
    magnitude: float,
    rake: float | None = None,
) -> float:
    """Convert magnitude to rupture length using a scaling relationship.

    Parameters
    ----------
    scaling_relation : ScalingRelation
        Scaling relation to use.
    magnitude : float
        Moment magnitude of the rupture.
    rake : float, optional
        Rake of the fault (degrees). Required for Leonard scaling.

    Returns
    -------
    float
        Rupture length (km).
    """
    return length_function(scaling_relation, rake)(magnitude)


def section_count_for_magnitude(
    magnitude: float,
    target_section_length: float,
    length_of: LengthFunction = wells_coppersmith_magnitude_to_length,
) -> int:
    """Find the number of adjacent sections a rupture of a magnitude spans.

    Parameters
    ----------
    magnitude : float
        Moment magnitude of the rupture.
    target_section_length : float
        Section length (km).
    length_of : LengthFunction, optional
        Magnitude to length function. Default is Wells and Coppersmith.

    Returns
    -------
    int
        `round(length / target_section_length)`, never less than one.
    """
    return max(1, int(np.rint(length_of(magnitude) / target_section_length)))
