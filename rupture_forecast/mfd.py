"""Magnitude-frequency distributions (MFDs) and their logic-tree branches.

A fault's slip-derived moment rate is released by earthquakes whose
magnitudes and annual rates follow an MFD. Two MFD families are supported:

- Gutenberg-Richter (GR): a truncated exponential distribution between a
  minimum and maximum magnitude.
- Characteristic (CH): a discretised Gaussian around a single
  characteristic magnitude, representing aleatory magnitude scatter.

Epistemic uncertainty in the maximum (or characteristic) magnitude is
represented by a set of weighted branches, each with its magnitude shifted
by an offset. Every branch is moment balanced: the moment it releases is
its weight multiplied by the target moment rate, so that the branches of a
fault together release exactly the fault's moment rate.

References
----------
.. [0] Gutenberg, Beno, and Charles F. Richter. "Frequency of earthquakes
       in California." Bulletin of the Seismological Society of America
       34.4 (1944): 185-188.
"""

import dataclasses
import warnings
from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import NamedTuple, Self

import numpy as np
import pandas as pd
import scipy as sp

from rupture_forecast import moment
from rupture_forecast.errors import DomainError, PolicyWarning

WEIGHT_TOLERANCE = 1e-6

# Branch key magnitudes and offsets are compared at this precision.
_KEY_DECIMALS = 4


class MfdType(StrEnum):
    """The family of a magnitude-frequency distribution."""

    GR = "GR"
    """Truncated Gutenberg-Richter."""
    CH = "CH"
    """Characteristic (discretised Gaussian)."""


class BranchKey(NamedTuple):
    """A structural identifier for an MFD branch.

    Keys compare by value, so branches built from the same parameters for
    different parts of a fault system have equal keys and can be matched.
    Use `BranchKey.create` to build keys with normalised floats.

    Attributes
    ----------
    mfd_type : MfdType
        The MFD family.
    epistemic_delta : float
        The magnitude offset of the branch.
    magnitude : float
        The maximum magnitude (GR) or characteristic magnitude (CH) of the
        branch, offset included.
    """

    mfd_type: MfdType
    epistemic_delta: float
    magnitude: float

    @classmethod
    def create(
        cls, mfd_type: MfdType, epistemic_delta: float, magnitude: float
    ) -> Self:
        """Create a branch key with rounded magnitudes.

        Parameters
        ----------
        mfd_type : MfdType
            The MFD family.
        epistemic_delta : float
            The magnitude offset of the branch.
        magnitude : float
            The offset maximum or characteristic magnitude.

        Returns
        -------
        BranchKey
            The branch key.
        """
        # Adding zero normalises -0.0 so keys print consistently.
        return cls(
            MfdType(mfd_type),
            round(float(epistemic_delta), _KEY_DECIMALS) + 0.0,
            round(float(magnitude), _KEY_DECIMALS) + 0.0,
        )

    @property
    def label(self) -> str:  # numpydoc ignore=RT01
        """str: A human readable label for the branch."""
        name = "mMax" if self.mfd_type == MfdType.GR else "M"
        return f"{self.mfd_type}: {name}={self.magnitude:.2f} ({self.epistemic_delta:+.2f})"


@dataclasses.dataclass(frozen=True)
class Uncertainty:
    """Epistemic and aleatory magnitude uncertainty of a fault.

    Attributes
    ----------
    epistemic_deltas : tuple[float, ...]
        Offsets applied to the maximum or characteristic magnitude.
    epistemic_weights : tuple[float, ...]
        The weight of each offset. Must sum to one.
    aleatory_sigma : float
        Standard deviation of the characteristic magnitude scatter.
    aleatory_count : int
        Number of magnitude bins in a characteristic distribution.
    truncation : float
        The characteristic distribution spans +/- truncation x sigma.
    """

    epistemic_deltas: tuple[float, ...] = (-0.2, 0.0, 0.2)
    epistemic_weights: tuple[float, ...] = (0.2, 0.6, 0.2)
    aleatory_sigma: float = 0.12
    aleatory_count: int = 11
    truncation: float = 2.0

    def __post_init__(self) -> None:
        """Validate the uncertainty weights.

        Raises
        ------
        DomainError
            If the deltas and weights differ in length, any weight is
            negative, or the weights do not sum to one.
        """
        if len(self.epistemic_deltas) != len(self.epistemic_weights):
            raise DomainError(
                "Epistemic deltas and weights must have the same length."
            )
        if any(weight < 0 for weight in self.epistemic_weights):
            raise DomainError("Epistemic weights must be non-negative.")
        if not np.isclose(sum(self.epistemic_weights), 1.0, atol=WEIGHT_TOLERANCE):
            raise DomainError(
                f"Epistemic weights must sum to 1, got {sum(self.epistemic_weights)}."
            )
        if self.aleatory_count < 1 or self.aleatory_sigma < 0:
            raise DomainError("Aleatory count must be positive and sigma non-negative.")


@dataclasses.dataclass(frozen=True, eq=False)
class MfdBranch:
    """A single weighted magnitude-frequency distribution.

    Attributes
    ----------
    key : BranchKey
        Structural identifier of the branch.
    magnitudes : np.ndarray
        Bin magnitudes, ascending.
    rates : np.ndarray
        Annual rate of each bin. Rates are weighted: the branch releases
        `weight` times the target moment rate.
    weight : float
        The branch weight, in (0, 1].
    """

    key: BranchKey
    magnitudes: np.ndarray
    rates: np.ndarray
    weight: float

    def __post_init__(self) -> None:
        """Validate the branch.

        Raises
        ------
        ValueError
            If the magnitude and rate arrays differ in length, or the weight
            is outside (0, 1].
        """
        if len(self.magnitudes) != len(self.rates):
            raise ValueError("Magnitudes and rates must have the same length.")
        if not 0 < self.weight <= 1 + WEIGHT_TOLERANCE:
            raise ValueError(f"Branch weight must be in (0, 1], got {self.weight}.")

    @property
    def label(self) -> str:  # numpydoc ignore=RT01
        """str: The branch label."""
        return self.key.label

    @property
    def moment_rate(self) -> float:  # numpydoc ignore=RT01
        """float: The moment rate released by the weighted rates (Nm/yr)."""
        return moment.moment_rate_of_mfd(self.magnitudes, self.rates)

    @property
    def unweighted_rates(self) -> np.ndarray:  # numpydoc ignore=RT01
        """np.ndarray: The rates of the branch as if it had weight one."""
        return self.rates / self.weight

    def __iter__(self):
        """Iterate over (magnitude, rate) pairs."""
        return zip(self.magnitudes.tolist(), self.rates.tolist())


def magnitude_count(m_min: float, m_max: float, d_mag: float) -> int:
    """Number of magnitude bins between two magnitudes, inclusive.

    Parameters
    ----------
    m_min : float
        The first bin magnitude.
    m_max : float
        The last bin magnitude.
    d_mag : float
        Bin width.

    Returns
    -------
    int
        The number of bins.

    Examples
    --------
    >>> magnitude_count(6.5, 7.0, 0.1)
    6
    """
    return int(round((m_max - m_min) / d_mag)) + 1


def moment_balance(
    magnitudes: np.ndarray, relative_rates: np.ndarray, moment_rate: float
) -> np.ndarray:
    """Scale relative rates so that they release a given moment rate.

    Parameters
    ----------
    magnitudes : np.ndarray
        Bin magnitudes.
    relative_rates : np.ndarray
        Unscaled bin rates.
    moment_rate : float
        The target moment rate (Nm/yr).

    Returns
    -------
    np.ndarray
        Rates with sum(rate x moment) == moment_rate.
    """
    return relative_rates * (
        moment_rate / moment.moment_rate_of_mfd(magnitudes, relative_rates)
    )


def gutenberg_richter_mfd(
    m_min: float, d_mag: float, count: int, b_value: float, moment_rate: float
) -> tuple[np.ndarray, np.ndarray]:
    """Build a moment balanced truncated Gutenberg-Richter distribution.

    Parameters
    ----------
    m_min : float
        Magnitude of the first bin.
    d_mag : float
        Bin width.
    count : int
        Number of bins.
    b_value : float
        Gutenberg-Richter b-value.
    moment_rate : float
        Moment rate to release (Nm/yr).

    Returns
    -------
    magnitudes : np.ndarray
        Bin magnitudes.
    rates : np.ndarray
        Annual rate of each bin, proportional to 10^(-b m).
    """
    magnitudes = m_min + d_mag * np.arange(count)
    relative_rates = 10 ** (-b_value * (magnitudes - m_min))
    return magnitudes, moment_balance(magnitudes, relative_rates, moment_rate)


def gaussian_mfd(
    mean: float,
    sigma: float,
    count: int,
    moment_rate: float,
    truncation: float = 2.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Build a moment balanced discretised Gaussian distribution.

    Parameters
    ----------
    mean : float
        The characteristic magnitude.
    sigma : float
        Standard deviation of the magnitude scatter.
    count : int
        Number of bins, evenly spaced over mean +/- truncation x sigma.
    moment_rate : float
        Moment rate to release (Nm/yr).
    truncation : float, optional
        Truncation in standard deviations. Default is 2.

    Returns
    -------
    magnitudes : np.ndarray
        Bin magnitudes.
    rates : np.ndarray
        Annual rate of each bin.
    """
    if count == 1 or sigma == 0:
        magnitudes = np.array([mean], dtype=np.float64)
        return magnitudes, moment_balance(magnitudes, np.ones(1), moment_rate)

    magnitudes = np.linspace(
        mean - truncation * sigma, mean + truncation * sigma, count
    )
    relative_rates = sp.stats.norm.pdf(magnitudes, loc=mean, scale=sigma)
    return magnitudes, moment_balance(magnitudes, relative_rates, moment_rate)


def _epistemic_branches(
    uncertainty: Uncertainty, weight: float, mfd_type: MfdType
) -> Iterable[tuple[float, float]]:
    for delta, epistemic_weight in zip(
        uncertainty.epistemic_deltas, uncertainty.epistemic_weights
    ):
        branch_weight = weight * epistemic_weight
        if branch_weight <= 0:
            warnings.warn(
                f"Dropping zero weight {mfd_type} branch with offset {delta:+.2f}.",
                PolicyWarning,
            )
            continue
        yield delta, branch_weight


def gutenberg_richter_branches(
    m_min: float,
    m_max: float,
    d_mag: float,
    b_value: float,
    moment_rate: float,
    uncertainty: Uncertainty = Uncertainty(),
    weight: float = 1.0,
) -> list[MfdBranch]:
    """Build the epistemic Gutenberg-Richter branches of a fault.

    Each branch has its maximum magnitude offset by one epistemic delta.
    Moment is balanced between `m_min` and the offset maximum magnitude, so
    it is spent on the earthquakes each branch actually represents.

    Parameters
    ----------
    m_min : float
        Minimum magnitude.
    m_max : float
        Maximum magnitude, before epistemic offsets.
    d_mag : float
        Bin width.
    b_value : float
        Gutenberg-Richter b-value.
    moment_rate : float
        The fault moment rate (Nm/yr).
    uncertainty : Uncertainty, optional
        Epistemic offsets and weights.
    weight : float, optional
        Weight of the GR family relative to other MFD families. Default is 1.

    Returns
    -------
    list[MfdBranch]
        One branch per non-zero weight offset.

    Raises
    ------
    DomainError
        If any (offset) maximum magnitude does not exceed `m_min`.

    Warns
    -----
    PolicyWarning
        If a branch has zero weight and is dropped.
    """
    if m_max <= m_min:
        raise DomainError(f"GR mMax ({m_max}) must exceed mMin ({m_min}).")

    branches = []
    for delta, branch_weight in _epistemic_branches(uncertainty, weight, MfdType.GR):
        epistemic_m_max = m_max + delta
        if epistemic_m_max <= m_min:
            raise DomainError(
                f"GR mMax with offset {delta:+.2f} ({epistemic_m_max}) must exceed mMin ({m_min})."
            )
        magnitudes, rates = gutenberg_richter_mfd(
            m_min,
            d_mag,
            magnitude_count(m_min, epistemic_m_max, d_mag),
            b_value,
            moment_rate * branch_weight,
        )
        branches.append(
            MfdBranch(
                key=BranchKey.create(MfdType.GR, delta, epistemic_m_max),
                magnitudes=magnitudes,
                rates=rates,
                weight=branch_weight,
            )
        )
    return branches


def characteristic_branches(
    magnitude: float,
    moment_rate: float,
    uncertainty: Uncertainty = Uncertainty(),
    weight: float = 1.0,
) -> list[MfdBranch]:
    """Build the epistemic characteristic branches of a fault.

    Parameters
    ----------
    magnitude : float
        The characteristic magnitude, before epistemic offsets.
    moment_rate : float
        The fault moment rate (Nm/yr).
    uncertainty : Uncertainty, optional
        Epistemic offsets and weights, and aleatory scatter.
    weight : float, optional
        Weight of the CH family relative to other MFD families. Default is 1.

    Returns
    -------
    list[MfdBranch]
        One branch per non-zero weight offset.

    Warns
    -----
    PolicyWarning
        If a branch has zero weight and is dropped.
    """
    branches = []
    for delta, branch_weight in _epistemic_branches(uncertainty, weight, MfdType.CH):
        magnitudes, rates = gaussian_mfd(
            magnitude + delta,
            uncertainty.aleatory_sigma,
            uncertainty.aleatory_count,
            moment_rate * branch_weight,
            uncertainty.truncation,
        )
        branches.append(
            MfdBranch(
                key=BranchKey.create(MfdType.CH, delta, magnitude + delta),
                magnitudes=magnitudes,
                rates=rates,
                weight=branch_weight,
            )
        )
    return branches


def check_branch_weights(branches: Sequence[MfdBranch]) -> None:
    """Check that the weights of a fault's branches sum to one.

    Parameters
    ----------
    branches : Sequence[MfdBranch]
        All the branches of a fault.

    Raises
    ------
    DomainError
        If the weights do not sum to one, or two branches share a key.
    """
    total = sum(branch.weight for branch in branches)
    if not np.isclose(total, 1.0, atol=WEIGHT_TOLERANCE):
        raise DomainError(f"Branch weights must sum to 1, got {total}.")
    if len({branch.key for branch in branches}) != len(branches):
        raise DomainError("Branch keys must be unique.")


def branches_as_dataframe(branches: Iterable[MfdBranch]) -> pd.DataFrame:
    """Tabulate MFD branches in long form.

    Parameters
    ----------
    branches : Iterable[MfdBranch]
        The branches to tabulate.

    Returns
    -------
    pd.DataFrame
        A dataframe with one row per branch bin and columns `label`,
        `mfd_type`, `epistemic_delta`, `magnitude`, `rate` and `weight`.
    """
    return pd.DataFrame(
        [
            {
                "label": branch.label,
                "mfd_type": str(branch.key.mfd_type),
                "epistemic_delta": branch.key.epistemic_delta,
                "magnitude": magnitude,
                "rate": rate,
                "weight": branch.weight,
            }
            for branch in branches
            for magnitude, rate in branch
        ],
        columns=["label", "mfd_type", "epistemic_delta", "magnitude", "rate", "weight"],
    )
