"""Removal of aftershocks from raw earthquake rates.

Forecast rates derived from catalogues or moment budgets include dependent
events. Gridded (point) source rates are scaled down by a magnitude
dependent mainshock fraction in the style of Gardner and Knopoff [0]_,
derived from two reference Gutenberg-Richter curves: one for all events
(b = 1.0) and one for mainshocks only (b = 0.8). The curves are scaled so
that mainshocks make up 4.17 / 7.5 of the M >= 5 events (Table 21 of
Felzer [1]_). Fault ruptures large enough to break the whole seismogenic
thickness are scaled by a constant factor instead.

References
----------
.. [0] Gardner, J. K., and Leon Knopoff. "Is the sequence of earthquakes
       in Southern California, with aftershocks removed, Poissonian?"
       Bulletin of the Seismological Society of America 64.5 (1974):
       1363-1367.
.. [1] Felzer, Karen R. "Appendix I: Calculating California seismicity
       rates." US Geological Survey Open-File Report 2007-1437I (2008).
"""

import numpy as np

from rupture_forecast.errors import DomainError

FRACTION_MAINSHOCK_ABOVE_M5 = 4.17 / 7.5

SUPRA_SEISMOGENIC_SCALE = 0.97

ALL_EVENTS_B_VALUE = 1.0
MAINSHOCK_B_VALUE = 0.8


def _gutenberg_richter_curve(magnitudes: np.ndarray, b_value: float) -> np.ndarray:
    return 10 ** (-b_value * (magnitudes - magnitudes[0]))


def _scale_to_cumulative_rate(
    rates: np.ndarray, index: int, cumulative_rate: float
) -> np.ndarray:
    return rates * (cumulative_rate / rates[index:].sum())


class AftershockFilter:
    """Magnitude dependent mainshock fractions.

    The fraction curve is computed once on construction and is read-only,
    so a single filter can be shared between concurrent forecasts.

    Parameters
    ----------
    min_magnitude : float, optional
        Magnitude of the first bin. Default is 0.05.
    count : int, optional
        Number of bins. Default is 100.
    delta : float, optional
        Bin width. Default is 0.1.

    Attributes
    ----------
    magnitudes : np.ndarray
        Bin magnitudes.
    fractions : np.ndarray
        Fraction of events in each bin that are mainshocks, at most one.
    """

    def __init__(
        self, min_magnitude: float = 0.05, count: int = 100, delta: float = 0.1
    ):
        self.delta = delta
        self.magnitudes = min_magnitude + delta * np.arange(count)

        all_events = _gutenberg_richter_curve(self.magnitudes, ALL_EVENTS_B_VALUE)
        mainshocks = _gutenberg_richter_curve(self.magnitudes, MAINSHOCK_B_VALUE)
        m5_index = self._closest_index(5.0 + delta / 2)
        all_events = _scale_to_cumulative_rate(all_events, m5_index, 1.0)
        mainshocks = _scale_to_cumulative_rate(
            mainshocks, m5_index, FRACTION_MAINSHOCK_ABOVE_M5
        )

        self.fractions = np.minimum(mainshocks / all_events, 1.0)
        self.magnitudes.flags.writeable = False
        self.fractions.flags.writeable = False

    @property
    def min_magnitude(self) -> float:  # numpydoc ignore=RT01
        """float: The magnitude of the first bin."""
        return float(self.magnitudes[0])

    @property
    def max_magnitude(self) -> float:  # numpydoc ignore=RT01
        """float: The magnitude of the last bin."""
        return float(self.magnitudes[-1])

    def _closest_index(self, magnitude: float) -> int:
        index = int(round((magnitude - self.magnitudes[0]) / self.delta))
        return int(np.clip(index, 0, len(self.magnitudes) - 1))

    def mainshock_fraction(self, magnitude: float) -> float:
        """The mainshock fraction of the bin closest to a magnitude.

        Parameters
        ----------
        magnitude : float
            The magnitude, strictly between the first and last bin.

        Returns
        -------
        float
            The fraction of events that are mainshocks.

        Raises
        ------
        DomainError
            If the magnitude lies outside the curve.
        """
        if not self.min_magnitude < magnitude < self.max_magnitude:
            raise DomainError(
                f"Magnitude {magnitude} outside aftershock filter range "
                f"({self.min_magnitude}, {self.max_magnitude})."
            )
        return float(self.fractions[self._closest_index(magnitude)])

    def scale_grid_rate(self, magnitude: float, rate: float) -> float:
        """Remove aftershocks from the rate of a gridded source.

        Parameters
        ----------
        magnitude : float
            The magnitude of the source.
        rate : float
            The raw annual rate.

        Returns
        -------
        float
            The mainshock rate.

        Raises
        ------
        DomainError
            If the magnitude lies outside the curve.
        """
        return rate * self.mainshock_fraction(magnitude)

    def scale_fault_rate(self, magnitude: float, rate: float) -> float:
        """Remove aftershocks from the rate of a supra-seismogenic fault rupture.

        Parameters
        ----------
        magnitude : float
            The magnitude of the rupture (unused, the scale is constant).
        rate : float
            The raw annual rate.

        Returns
        -------
        float
            The mainshock rate.
        """
        return SUPRA_SEISMOGENIC_SCALE * rate
