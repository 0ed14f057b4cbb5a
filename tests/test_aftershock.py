import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from rupture_forecast import aftershock
from rupture_forecast.aftershock import AftershockFilter
from rupture_forecast.errors import DomainError

FILTER = AftershockFilter()


def test_curve_bins():
    assert len(FILTER.magnitudes) == 100
    assert FILTER.min_magnitude == pytest.approx(0.05)
    assert FILTER.max_magnitude == pytest.approx(9.95)


def test_fraction_at_m5():
    # Cumulative fractions above M5 match the empirical mainshock ratio.
    m5_bins = FILTER.magnitudes >= 5.0
    all_events = 10 ** (-1.0 * FILTER.magnitudes)
    mainshocks = 10 ** (-0.8 * FILTER.magnitudes)
    all_events /= all_events[m5_bins].sum()
    mainshocks *= aftershock.FRACTION_MAINSHOCK_ABOVE_M5 / mainshocks[m5_bins].sum()
    assert FILTER.fractions == pytest.approx(np.minimum(mainshocks / all_events, 1.0))


def test_fractions_bounded_and_increasing():
    assert np.all(FILTER.fractions <= 1.0)
    assert np.all(FILTER.fractions > 0.0)
    assert np.all(np.diff(FILTER.fractions) >= 0)
    assert FILTER.fractions[-1] == 1.0


def test_curves_are_read_only():
    with pytest.raises(ValueError):
        FILTER.fractions[0] = 1.0
    with pytest.raises(ValueError):
        FILTER.magnitudes[0] = 1.0


def test_scale_grid_rate_at_m5():
    assert FILTER.scale_grid_rate(5.0, 1.0) <= 1.0
    assert FILTER.scale_grid_rate(5.0, 2.0) == pytest.approx(
        2.0 * FILTER.mainshock_fraction(5.0)
    )


def test_scale_grid_rate_nearest_bin():
    assert FILTER.mainshock_fraction(5.04) == FILTER.fractions[50]
    assert FILTER.mainshock_fraction(4.98) == FILTER.fractions[49]


@pytest.mark.parametrize("magnitude", [0.05, 0.0, 10.0, 10.5])
def test_scale_grid_rate_out_of_range(magnitude: float):
    with pytest.raises(DomainError):
        FILTER.scale_grid_rate(magnitude, 1.0)


@given(
    magnitude=st.floats(min_value=-5.0, max_value=15.0),
    rate=st.floats(min_value=0.0, max_value=1e3),
)
def test_scale_fault_rate(magnitude: float, rate: float):
    assert FILTER.scale_fault_rate(magnitude, rate) == pytest.approx(0.97 * rate)
