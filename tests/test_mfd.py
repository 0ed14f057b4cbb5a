import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from rupture_forecast import mfd, moment
from rupture_forecast.errors import DomainError, PolicyWarning
from rupture_forecast.mfd import BranchKey, MfdBranch, MfdType, Uncertainty

MOMENT_RATE = 3.7e17


def test_magnitude_count():
    assert mfd.magnitude_count(6.5, 7.0, 0.1) == 6
    assert mfd.magnitude_count(6.55, 7.95, 0.1) == 15


def test_branch_key_rounding():
    key_a = BranchKey.create(MfdType.GR, 0.2, 7.0 + 0.2)
    key_b = BranchKey.create("GR", 0.2, 7.2)
    assert key_a == key_b
    assert hash(key_a) == hash(key_b)
    assert key_a.label == "GR: mMax=7.20 (+0.20)"


def test_branch_key_negative_zero():
    assert BranchKey.create(MfdType.CH, -0.0, 7.5).label == "CH: M=7.50 (+0.00)"


def test_gutenberg_richter_mfd_shape():
    magnitudes, rates = mfd.gutenberg_richter_mfd(6.5, 0.1, 6, 1.0, MOMENT_RATE)
    assert magnitudes == pytest.approx([6.5, 6.6, 6.7, 6.8, 6.9, 7.0])
    assert rates[1:] / rates[:-1] == pytest.approx([10**-0.1] * 5)
    assert moment.moment_rate_of_mfd(magnitudes, rates) == pytest.approx(MOMENT_RATE)


def test_gaussian_mfd_shape():
    magnitudes, rates = mfd.gaussian_mfd(7.5, 0.12, 11, MOMENT_RATE)
    assert len(magnitudes) == 11
    assert magnitudes[0] == pytest.approx(7.26)
    assert magnitudes[-1] == pytest.approx(7.74)
    assert magnitudes[5] == pytest.approx(7.5)
    assert np.argmax(rates) == 5
    assert moment.moment_rate_of_mfd(magnitudes, rates) == pytest.approx(MOMENT_RATE)


def test_gaussian_mfd_single_bin():
    magnitudes, rates = mfd.gaussian_mfd(7.5, 0.0, 11, MOMENT_RATE)
    assert magnitudes.tolist() == [7.5]
    assert rates[0] * moment.magnitude_to_moment(7.5) == pytest.approx(MOMENT_RATE)


def test_gutenberg_richter_example():
    """A 100 km fault with two equally weighted maximum magnitudes."""
    uncertainty = Uncertainty(epistemic_deltas=(0.0, 0.2), epistemic_weights=(0.5, 0.5))
    branches = mfd.gutenberg_richter_branches(
        6.5, 7.0, 0.1, 1.0, MOMENT_RATE, uncertainty
    )
    assert [branch.key.magnitude for branch in branches] == [7.0, 7.2]
    assert [len(branch.magnitudes) for branch in branches] == [6, 8]
    for branch in branches:
        assert branch.weight == 0.5
        assert branch.moment_rate == pytest.approx(0.5 * MOMENT_RATE, rel=1e-6)
        assert moment.moment_rate_of_mfd(
            branch.magnitudes, branch.unweighted_rates
        ) == pytest.approx(MOMENT_RATE, rel=1e-6)


@given(
    moment_rate=st.floats(min_value=1e14, max_value=1e20),
    m_max=st.floats(min_value=7.0, max_value=8.5),
    b_value=st.floats(min_value=0.5, max_value=1.5),
    gr_weight=st.floats(min_value=0.1, max_value=0.9),
)
def test_moment_conservation(
    moment_rate: float, m_max: float, b_value: float, gr_weight: float
):
    branches = mfd.gutenberg_richter_branches(
        6.55, m_max, 0.1, b_value, moment_rate, weight=gr_weight
    ) + mfd.characteristic_branches(m_max, moment_rate, weight=1 - gr_weight)
    mfd.check_branch_weights(branches)
    total = sum(branch.moment_rate for branch in branches)
    assert total == pytest.approx(moment_rate, rel=1e-6)
    weighted = sum(
        branch.weight
        * moment.moment_rate_of_mfd(branch.magnitudes, branch.unweighted_rates)
        for branch in branches
    )
    assert weighted == pytest.approx(moment_rate, rel=1e-6)


def test_characteristic_branches_keys():
    branches = mfd.characteristic_branches(7.9, MOMENT_RATE, weight=0.5)
    assert [branch.key for branch in branches] == [
        BranchKey.create(MfdType.CH, -0.2, 7.7),
        BranchKey.create(MfdType.CH, 0.0, 7.9),
        BranchKey.create(MfdType.CH, 0.2, 8.1),
    ]
    assert [branch.weight for branch in branches] == pytest.approx([0.1, 0.3, 0.1])
    assert all(len(branch.magnitudes) == 11 for branch in branches)


def test_gr_m_max_below_m_min():
    with pytest.raises(DomainError):
        mfd.gutenberg_richter_branches(7.0, 6.5, 0.1, 1.0, MOMENT_RATE)


def test_gr_epistemic_m_max_below_m_min():
    with pytest.raises(DomainError):
        mfd.gutenberg_richter_branches(6.55, 6.65, 0.1, 1.0, MOMENT_RATE)


def test_zero_weight_branch_dropped():
    uncertainty = Uncertainty(
        epistemic_deltas=(-0.2, 0.0, 0.2), epistemic_weights=(0.0, 1.0, 0.0)
    )
    with pytest.warns(PolicyWarning):
        branches = mfd.characteristic_branches(7.5, MOMENT_RATE, uncertainty)
    assert len(branches) == 1
    assert branches[0].key.epistemic_delta == 0.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"epistemic_deltas": (0.0,), "epistemic_weights": (0.5, 0.5)},
        {"epistemic_deltas": (0.0, 0.1), "epistemic_weights": (0.5, 0.6)},
        {"epistemic_deltas": (0.0, 0.1), "epistemic_weights": (1.5, -0.5)},
        {"aleatory_count": 0},
    ],
)
def test_invalid_uncertainty(kwargs: dict):
    with pytest.raises(DomainError):
        Uncertainty(**kwargs)


def test_check_branch_weights():
    branches = mfd.gutenberg_richter_branches(6.55, 7.5, 0.1, 0.87, MOMENT_RATE, weight=0.5)
    with pytest.raises(DomainError):
        mfd.check_branch_weights(branches)
    mfd.check_branch_weights(
        branches + mfd.characteristic_branches(7.5, MOMENT_RATE, weight=0.5)
    )


def test_invalid_branch():
    with pytest.raises(ValueError):
        MfdBranch(
            key=BranchKey.create(MfdType.GR, 0.0, 7.0),
            magnitudes=np.array([6.5, 7.0]),
            rates=np.array([1.0]),
            weight=1.0,
        )
    with pytest.raises(ValueError):
        MfdBranch(
            key=BranchKey.create(MfdType.GR, 0.0, 7.0),
            magnitudes=np.array([7.0]),
            rates=np.array([1.0]),
            weight=0.0,
        )


def test_branches_as_dataframe():
    branches = mfd.characteristic_branches(7.5, MOMENT_RATE)
    df = mfd.branches_as_dataframe(branches)
    assert len(df) == 33
    assert set(df["mfd_type"]) == {"CH"}
    assert df.groupby("label")["weight"].first().sum() == pytest.approx(1.0)
