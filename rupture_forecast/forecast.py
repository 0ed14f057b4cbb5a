"""Rupture forecasts for faults and fault systems.

A fault forecast turns the sections of a fault into ruptures:

1. The fault's moment rate is computed from its section geometry and slip
   rates.
2. Gutenberg-Richter and characteristic MFD branches are built and moment
   balanced to that rate.
3. Each branch is turned into ruptures whose rates follow the along-strike
   slip rate variation.

Fault systems are forecast one linear path at a time, each with its own
moment budget, and the path rupture sets are then combined. Many fault
systems are independent and can be forecast in parallel with
`forecast_many`.
"""

import dataclasses
import functools
import logging
from collections.abc import Sequence
from concurrent.futures import ProcessPoolExecutor, as_completed

from rupture_forecast import combine, magnitude_scaling, mfd, moment, ruptures
from rupture_forecast.aftershock import AftershockFilter
from rupture_forecast.errors import ConsistencyError, DomainError
from rupture_forecast.fault_system import FaultSystem
from rupture_forecast.magnitude_scaling import LengthFunction, ScalingRelation
from rupture_forecast.mfd import MfdBranch, Uncertainty
from rupture_forecast.ruptures import RuptureSet
from rupture_forecast.sections import SectionGeometry
from rupture_forecast.surfaces import SurfaceContext

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ForecastConfig:
    """Parameters of a fault forecast.

    Attributes
    ----------
    gr_m_max : float
        Maximum magnitude of the Gutenberg-Richter branches.
    ch_magnitude : float
        Characteristic magnitude of the characteristic branches.
    gr_m_min : float
        Minimum magnitude of the Gutenberg-Richter branches.
    b_value : float
        Gutenberg-Richter b-value.
    d_mag : float
        Magnitude bin width.
    gr_weight : float
        Weight of the Gutenberg-Richter branches.
    ch_weight : float
        Weight of the characteristic branches.
    rake : float
        Rake of generated ruptures (degrees).
    target_section_length : float
        Length used to size ruptures (km).
    scaling_relation : ScalingRelation
        Magnitude to rupture length relation.
    uncertainty : Uncertainty
        Epistemic and aleatory magnitude uncertainty.
    mu : float
        Shear modulus (Pa).
    """

    gr_m_max: float
    ch_magnitude: float
    gr_m_min: float = 6.55
    b_value: float = 0.87
    d_mag: float = 0.1
    gr_weight: float = 0.5
    ch_weight: float = 0.5
    rake: float = 0.0
    target_section_length: float = 4.0
    scaling_relation: ScalingRelation = ScalingRelation.WELLS_COPPERSMITH1994
    uncertainty: Uncertainty = Uncertainty()
    mu: float = moment.MU

    def __post_init__(self) -> None:
        """Validate the family weights.

        Raises
        ------
        DomainError
            If the GR and CH weights do not sum to one.
        """
        if abs(self.gr_weight + self.ch_weight - 1.0) > mfd.WEIGHT_TOLERANCE:
            raise DomainError("GR and CH weights must sum to 1.")

    @property
    def length_function(self) -> LengthFunction:  # numpydoc ignore=RT01
        """LengthFunction: The magnitude to rupture length function."""
        return magnitude_scaling.length_function(self.scaling_relation, self.rake)


@dataclasses.dataclass
class FaultForecast:
    """The forecast of a single fault or fault path.

    Attributes
    ----------
    name : str
        The name of the fault.
    moment_rate : float
        The moment rate of the fault (Nm/yr).
    branches : list[MfdBranch]
        The MFD branches of the fault.
    rupture_set : RuptureSet
        The generated ruptures.
    """

    name: str
    moment_rate: float
    branches: list[MfdBranch]
    rupture_set: RuptureSet


@dataclasses.dataclass
class SystemForecast:
    """The forecast of a fault system.

    Attributes
    ----------
    name : str
        The name of the fault system.
    paths : list[FaultForecast]
        The forecast of each path through the system.
    rupture_set : RuptureSet
        The combined ruptures of every path.
    """

    name: str
    paths: list[FaultForecast]
    rupture_set: RuptureSet


def build_branches(moment_rate: float, config: ForecastConfig) -> list[MfdBranch]:
    """Build the moment balanced GR and CH branches of a fault.

    Parameters
    ----------
    moment_rate : float
        The fault moment rate (Nm/yr).
    config : ForecastConfig
        Forecast parameters.

    Returns
    -------
    list[MfdBranch]
        GR branches followed by CH branches.
    """
    branches = []
    if config.gr_weight > 0:
        branches += mfd.gutenberg_richter_branches(
            config.gr_m_min,
            config.gr_m_max,
            config.d_mag,
            config.b_value,
            moment_rate,
            config.uncertainty,
            config.gr_weight,
        )
    if config.ch_weight > 0:
        branches += mfd.characteristic_branches(
            config.ch_magnitude, moment_rate, config.uncertainty, config.ch_weight
        )
    mfd.check_branch_weights(branches)
    return branches


def remove_aftershocks(
    rupture_set: RuptureSet, aftershock_filter: AftershockFilter
) -> RuptureSet:
    """Scale the rates of fault ruptures to remove aftershocks.

    Parameters
    ----------
    rupture_set : RuptureSet
        The rupture set.
    aftershock_filter : AftershockFilter
        The aftershock filter.

    Returns
    -------
    RuptureSet
        A new rupture set with scaled rates.
    """
    return RuptureSet(
        ruptures={
            key: [
                rupture.with_rate(
                    aftershock_filter.scale_fault_rate(rupture.magnitude, rupture.rate)
                )
                for rupture in branch_ruptures
            ]
            for key, branch_ruptures in rupture_set.ruptures.items()
        },
        skipped_magnitudes=dict(rupture_set.skipped_magnitudes),
    )


def forecast_fault(
    name: str,
    sections: Sequence[SectionGeometry],
    config: ForecastConfig,
    aftershock_filter: AftershockFilter | None = None,
    context: SurfaceContext | None = None,
) -> FaultForecast:
    """Forecast the ruptures of a single fault.

    Parameters
    ----------
    name : str
        The name of the fault.
    sections : Sequence[SectionGeometry]
        The sections of the fault, in order along strike.
    config : ForecastConfig
        Forecast parameters.
    aftershock_filter : AftershockFilter, optional
        If given, rupture rates are scaled to remove aftershocks.
    context : SurfaceContext, optional
        Precomputed section surfaces shared between faults.

    Returns
    -------
    FaultForecast
        The fault forecast.
    """
    moment_rate = moment.moment_rate(sections, config.mu)
    branches = build_branches(moment_rate, config)
    rupture_set = ruptures.generate_rupture_set(
        branches,
        sections,
        config.length_function,
        config.target_section_length,
        config.rake,
        context,
    )
    if aftershock_filter is not None:
        rupture_set = remove_aftershocks(rupture_set, aftershock_filter)

    logger.info(
        "%s: %d sections, moment rate %.4e Nm/yr, %d branches, %d ruptures",
        name,
        len(sections),
        moment_rate,
        len(branches),
        len(rupture_set),
    )
    return FaultForecast(
        name=name,
        moment_rate=moment_rate,
        branches=branches,
        rupture_set=rupture_set,
    )


def forecast_fault_system(
    system: FaultSystem,
    config: ForecastConfig,
    aftershock_filter: AftershockFilter | None = None,
) -> SystemForecast:
    """Forecast the ruptures of a fault system.

    Each path through the system is forecast with its own moment budget and
    the path rupture sets are combined, so ruptures on faults shared by
    several paths accumulate the rates of every path.

    Parameters
    ----------
    system : FaultSystem
        The fault system.
    config : ForecastConfig
        Forecast parameters, shared by all paths.
    aftershock_filter : AftershockFilter, optional
        If given, rupture rates are scaled to remove aftershocks.

    Returns
    -------
    SystemForecast
        The system forecast.

    Raises
    ------
    ConsistencyError
        If the path rupture sets cannot be combined.
    """
    context = SurfaceContext(system.sections)
    paths = [
        forecast_fault(
            " - ".join(path),
            system.path_sections(path),
            config,
            aftershock_filter,
            context,
        )
        for path in system.paths()
    ]
    rupture_set = functools.reduce(
        combine.combine_rupture_sets, (path.rupture_set for path in paths)
    )
    logger.info(
        "%s: %d paths combined into %d ruptures", system.name, len(paths), len(rupture_set)
    )
    return SystemForecast(name=system.name, paths=paths, rupture_set=rupture_set)


def forecast_many(
    jobs: Sequence[tuple[FaultSystem, ForecastConfig]],
    max_workers: int | None = None,
    aftershock_filter: AftershockFilter | None = None,
) -> dict[str, SystemForecast]:
    """Forecast many independent fault systems in parallel.

    A fault system whose forecast raises a `ConsistencyError` is left out
    of the result entirely. Any other error cancels the remaining work and
    is raised.

    Parameters
    ----------
    jobs : Sequence[tuple[FaultSystem, ForecastConfig]]
        The fault systems and their forecast parameters.
    max_workers : int, optional
        The number of worker processes. Defaults to the number of CPUs.
    aftershock_filter : AftershockFilter, optional
        If given, rupture rates are scaled to remove aftershocks.

    Returns
    -------
    dict[str, SystemForecast]
        The forecast of each consistent fault system, by system name.

    Raises
    ------
    ValueError
        If two jobs share a fault system name.
    """
    names = [system.name for system, _ in jobs]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Fault system names must be unique, repeated: {duplicates}.")

    forecasts = {}
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(forecast_fault_system, system, config, aftershock_filter): system.name
            for system, config in jobs
        }
        for future in as_completed(futures):
            name = futures[future]
            try:
                forecasts[name] = future.result()
            except ConsistencyError:
                logger.exception("Discarding fault system %s", name)
            except Exception:
                logger.exception("Forecast of fault system %s failed", name)
                for pending in futures:
                    pending.cancel()
                raise

    return {system.name: forecasts[system.name] for system, _ in jobs if system.name in forecasts}
