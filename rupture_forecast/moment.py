"""Utility functions for working with moment rate and moment."""

from collections.abc import Iterable

import numpy as np
import numpy.typing as npt

from rupture_forecast.sections import SectionGeometry

# Shear modulus (Pa)
MU = 3.0e10

_KM_TO_M = 1000
_MM_TO_M = 1e-3


def moment_to_magnitude(moment: npt.ArrayLike) -> float | np.ndarray:
    """Convert moment to magnitude.

    Parameters
    ----------
    moment : array-like
        The moment of the rupture in Nm.

    Returns
    -------
    float or np.ndarray
        Rupture magnitude
    """
    return 2 / 3 * np.log10(moment) - 6.03333


def magnitude_to_moment(magnitude: npt.ArrayLike) -> float | np.ndarray:
    """Convert magnitude to moment.

    Parameters
    ----------
    magnitude : array-like
        The magnitude of the rupture.

    Returns
    -------
    float or np.ndarray
        Rupture moment in Nm.
    """
    return 10 ** ((np.asarray(magnitude) + 6.03333) * 3 / 2)


def moment(area: float, slip: float, mu: float = MU) -> float:
    """Seismic moment of slip over an area.

    Parameters
    ----------
    area : float
        Area (m^2).
    slip : float
        Slip (m). A slip rate (m/yr) gives a moment rate (Nm/yr).
    mu : float, optional
        Shear modulus (Pa). Default is `MU`.

    Returns
    -------
    float
        The moment (Nm).
    """
    return mu * area * slip


def section_moment_rate(section: SectionGeometry, mu: float = MU) -> float:
    """Moment rate of a single fault section.

    Uses the aseismic-corrected width, so only the seismogenic part of the
    section contributes.

    Parameters
    ----------
    section : SectionGeometry
        The section.
    mu : float, optional
        Shear modulus (Pa). Default is `MU`.

    Returns
    -------
    float
        The moment rate (Nm/yr).
    """
    area = section.length * _KM_TO_M * section.width * _KM_TO_M
    return moment(area, section.slip_rate * _MM_TO_M, mu)


def moment_rate(sections: Iterable[SectionGeometry], mu: float = MU) -> float:
    """Total moment rate of a set of fault sections.

    Parameters
    ----------
    sections : Iterable[SectionGeometry]
        The sections.
    mu : float, optional
        Shear modulus (Pa). Default is `MU`.

    Returns
    -------
    float
        The summed moment rate (Nm/yr).
    """
    return float(sum(section_moment_rate(section, mu) for section in sections))


def moment_rate_of_mfd(magnitudes: npt.ArrayLike, rates: npt.ArrayLike) -> float:
    """Moment rate released by a magnitude-frequency distribution.

    Parameters
    ----------
    magnitudes : array-like
        Bin magnitudes.
    rates : array-like
        Annual rate of each bin.

    Returns
    -------
    float
        Sum of rate x moment over the bins (Nm/yr).
    """
    return float(np.sum(np.asarray(rates) * magnitude_to_moment(magnitudes)))
