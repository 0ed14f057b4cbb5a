import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from rupture_forecast import moment
from rupture_forecast.sections import SectionGeometry


def test_moment_to_magnitude():
    """Very simple sanity checks for moment to magnitude.

    Tests are simple because function is simple.
    """
    # From Darfield FSP Atzori et al. 2012
    assert moment.moment_to_magnitude(5.01e19) == pytest.approx(7.10, abs=5e-02)
    # From Fiordland FSP Hayes 2009
    assert moment.moment_to_magnitude(2.82e20) == pytest.approx(7.6, abs=5e-02)
    # Kaikoura FSP Hayes 2017
    assert moment.moment_to_magnitude(8.96e20) == pytest.approx(7.89, abs=5e-02)


@given(magnitude=st.floats(min_value=0.0, max_value=10.0))
def test_magnitude_moment_inverse(magnitude: float):
    assert moment.moment_to_magnitude(
        moment.magnitude_to_moment(magnitude)
    ) == pytest.approx(magnitude)


def test_magnitude_to_moment_vectorised():
    magnitudes = np.array([6.0, 7.0])
    moments = moment.magnitude_to_moment(magnitudes)
    assert moments.shape == (2,)
    assert moments[1] / moments[0] == pytest.approx(10**1.5)


def test_section_moment_rate():
    section = SectionGeometry(
        index=0,
        name="test",
        trace=np.array([[0.0, 0.0], [0.0, 0.1]]),
        dip=90.0,
        dip_dir=180.0,
        top_depth=0.0,
        lower_depth=15.0,
        aseismic_factor=1 / 3,
        slip_rate=10.0,
    )
    length_m = section.length * 1000
    expected = moment.MU * length_m * 10_000 * 0.01
    assert moment.section_moment_rate(section) == pytest.approx(expected)
    assert moment.moment_rate([section, section]) == pytest.approx(2 * expected)
    assert moment.section_moment_rate(section, mu=3.3e10) == pytest.approx(
        expected * 1.1
    )


def test_moment_rate_of_mfd():
    assert moment.moment_rate_of_mfd([6.0, 7.0], [2.0, 0.5]) == pytest.approx(
        2.0 * moment.magnitude_to_moment(6.0) + 0.5 * moment.magnitude_to_moment(7.0)
    )
