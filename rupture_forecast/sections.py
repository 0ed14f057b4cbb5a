"""Fault sections: fixed-length subdivisions of a fault trace.

A fault is split into (roughly) equal-length sections along strike, each
with its own geometry and slip rate. Sections are identified by a stable
integer index that is unique within a fault system; ruptures refer to
sections only by index.
"""

import dataclasses
from collections.abc import Mapping

import numpy as np

from rupture_forecast import geometry, slip_rate


@dataclasses.dataclass(frozen=True)
class SectionGeometry:
    """The geometry and slip rate of a single fault section.

    Attributes
    ----------
    index : int
        The index of the section, unique within a fault system.
    name : str
        A human readable name for the section.
    trace : np.ndarray
        The surface trace of the section (n x 2, (lat, lon)).
    dip : float
        The dip of the section (degrees, in (0, 180)).
    dip_dir : float
        The dip direction of the section (degrees).
    top_depth : float
        The depth of the top of the section (km).
    lower_depth : float
        The depth of the bottom of the section (km).
    aseismic_factor : float
        The fraction of the down-dip extent, measured from the top, that
        slips aseismically (in [0, 1]).
    slip_rate : float
        The slip rate of the section (mm/yr).
    """

    index: int
    name: str
    trace: np.ndarray
    dip: float
    dip_dir: float
    top_depth: float
    lower_depth: float
    aseismic_factor: float = 0.0
    slip_rate: float = 0.0

    def __post_init__(self) -> None:
        """Validate the section parameters.

        Raises
        ------
        ValueError
            If the depths, dip or aseismic factor are out of range.
        """
        if not self.lower_depth > self.top_depth:
            raise ValueError(
                f"Section {self.index} lower depth ({self.lower_depth}) must exceed top depth ({self.top_depth})."
            )
        if not 0 < self.dip < 180:
            raise ValueError(f"Section {self.index} dip must be in (0, 180).")
        if not 0 <= self.aseismic_factor <= 1:
            raise ValueError(
                f"Section {self.index} aseismic factor must be in [0, 1]."
            )
        if len(self.trace) < 2:
            raise ValueError(f"Section {self.index} trace needs at least two points.")

    @property
    def effective_top_depth(self) -> float:  # numpydoc ignore=RT01
        """float: The top of the seismogenic part of the section (km)."""
        return self.top_depth + self.aseismic_factor * (
            self.lower_depth - self.top_depth
        )

    @property
    def width(self) -> float:  # numpydoc ignore=RT01
        """float: The down-dip width of the seismogenic part of the section (km)."""
        return (self.lower_depth - self.effective_top_depth) / np.sin(
            np.radians(self.dip)
        )

    @property
    def length(self) -> float:  # numpydoc ignore=RT01
        """float: The length of the section trace (km)."""
        return geometry.trace_length(self.trace)

    @property
    def area(self) -> float:  # numpydoc ignore=RT01
        """float: The seismogenic area of the section (km^2)."""
        return self.length * self.width


def build_sections(
    name: str,
    trace: np.ndarray,
    slip_anchors: Mapping[int, float],
    dip: float,
    top_depth: float,
    lower_depth: float,
    target_section_length: float = 4.0,
    aseismic_factor: float = 0.0,
    dip_dir: float | None = None,
    start_index: int = 0,
) -> list[SectionGeometry]:
    """Split a fault trace into sections with interpolated slip rates.

    Parameters
    ----------
    name : str
        The fault name. Sections are named "<name> [<index>]".
    trace : np.ndarray
        The fault trace (n x 2, (lat, lon)).
    slip_anchors : Mapping[int, float]
        Known slip rates (mm/yr) keyed by trace vertex index, including the
        first and last vertex.
    dip : float
        Fault dip (degrees).
    top_depth : float
        Top depth of the fault (km).
    lower_depth : float
        Lower depth of the fault (km).
    target_section_length : float, optional
        Preferred section length (km). Default is 4 km.
    aseismic_factor : float, optional
        Aseismic slip factor for every section. Default is 0.
    dip_dir : float, optional
        Dip direction (degrees). If None, derived from the whole trace by
        the right-hand rule.
    start_index : int, optional
        Index of the first section. Default is 0.

    Returns
    -------
    list[SectionGeometry]
        The sections in order along the trace.
    """
    trace = np.asarray(trace, dtype=np.float64)
    section_traces = geometry.partition_trace(trace, target_section_length)
    slip_rates = slip_rate.interpolate_trace_slip_rates(
        trace, slip_anchors, target_section_length
    )
    if dip_dir is None:
        dip_dir = geometry.dip_direction(trace)

    return [
        SectionGeometry(
            index=start_index + i,
            name=f"{name} [{start_index + i}]",
            trace=section_trace,
            dip=dip,
            dip_dir=dip_dir,
            top_depth=top_depth,
            lower_depth=lower_depth,
            aseismic_factor=aseismic_factor,
            slip_rate=float(section_slip_rate),
        )
        for i, (section_trace, section_slip_rate) in enumerate(
            zip(section_traces, slip_rates)
        )
    ]
