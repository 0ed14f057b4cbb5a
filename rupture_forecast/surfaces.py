"""Rupture surfaces for single sections and for multi-section ruptures.

A rupture spanning several sections is reduced to one composite surface
with an area-weighted dip, width and depth, and a single trace built from
the section upper edges. Because the sections making up a rupture may be
digitised in inconsistent directions, the composite surface first decides
which sections must be reversed so that consecutive sections join
end-to-end.

                section 0          section 1          section 2
            first ────── last  first ────── last  last ────── first
                                                   (reversed)

The resulting trace follows the right-hand rule: looking along the trace
the surface dips to the right. A dip greater than 90 degrees after
averaging means the whole rupture has to be flipped.
"""

import dataclasses
from collections.abc import Iterable, Sequence

import numpy as np
import shapely

from rupture_forecast import geometry
from rupture_forecast.sections import SectionGeometry


@dataclasses.dataclass(frozen=True)
class SectionSurface:
    """The rupture surface of a single section.

    Attributes
    ----------
    index : int
        The index of the section this surface belongs to.
    upper_edge : np.ndarray
        The upper edge of the seismogenic surface (n x 3, (lat, lon, depth)).
    dip : float
        The dip of the surface (degrees).
    width : float
        The down-dip width of the surface (km).
    depth : float
        The depth of the upper edge (km).
    length : float
        The length of the upper edge (km).
    """

    index: int
    upper_edge: np.ndarray
    dip: float
    width: float
    depth: float
    length: float

    @property
    def area(self) -> float:  # numpydoc ignore=RT01
        """float: The area of the surface (km^2)."""
        return self.length * self.width

    @property
    def geometry(self) -> shapely.LineString:  # numpydoc ignore=RT01
        """shapely.LineString: The upper edge as a (lon, lat) line."""
        return shapely.LineString(self.upper_edge[:, [1, 0]])

    @classmethod
    def from_section(cls, section: SectionGeometry) -> "SectionSurface":
        """Build the rupture surface of a section.

        The upper edge is the section trace moved down-dip to the
        aseismic-corrected top depth.

        Parameters
        ----------
        section : SectionGeometry
            The section to build a surface for.

        Returns
        -------
        SectionSurface
            The surface of the seismogenic part of the section.
        """
        trace = np.asarray(section.trace, dtype=np.float64)[:, :2]
        depth = section.effective_top_depth
        offset = depth - section.top_depth
        if offset > 0 and not np.isclose(section.dip, 90):
            trace = geometry.translate(
                trace, section.dip_dir, offset / np.tan(np.radians(section.dip))
            )
        upper_edge = np.column_stack((trace, np.full(len(trace), depth)))
        return cls(
            index=section.index,
            upper_edge=upper_edge,
            dip=section.dip,
            width=section.width,
            depth=depth,
            length=geometry.trace_length(section.trace),
        )


@dataclasses.dataclass(frozen=True)
class CompositeSurface:
    """An aggregate rupture surface spanning one or more sections.

    Attributes
    ----------
    dip : float
        Area-weighted average dip (degrees, at most 90).
    width : float
        Area-weighted average down-dip width (km).
    depth : float
        Area-weighted average upper-edge depth (km).
    area : float
        Total area (km^2).
    length : float
        Total length (km).
    trace : np.ndarray
        The joined upper edges of all sections (lat, lon, depth).
    """

    dip: float
    width: float
    depth: float
    area: float
    length: float
    trace: np.ndarray

    @property
    def geometry(self) -> shapely.LineString:  # numpydoc ignore=RT01
        """shapely.LineString: The trace as a (lon, lat) line."""
        return shapely.LineString(self.trace[:, [1, 0]])


def resolve_orientation(surfaces: Sequence[SectionSurface]) -> list[bool]:
    """Determine which section upper edges must be reversed.

    The first two sections are oriented by the closest pair of their
    endpoints. Every following section is reversed if its last point is at
    least as close to the end of the previous section as its first point.

    Parameters
    ----------
    surfaces : Sequence[SectionSurface]
        At least two section surfaces, in rupture order.

    Returns
    -------
    list[bool]
        True for each section whose upper edge must be reversed.
    """
    first, second = surfaces[0].upper_edge, surfaces[1].upper_edge
    distances = geometry.horizontal_distance(
        np.array([first[0], first[0], first[-1], first[-1]]),
        np.array([second[0], second[-1], second[0], second[-1]]),
    )
    # first-first, first-last, last-first, last-last. argmin keeps the
    # earliest pair on ties.
    reverse_first, reverse_second = [
        (True, False),
        (True, True),
        (False, False),
        (False, True),
    ][int(np.argmin(distances))]
    reversed_ = [reverse_first, reverse_second]

    for previous, current in zip(surfaces[1:-1], surfaces[2:]):
        previous_last = previous.upper_edge[-1]
        to_first, to_last = geometry.horizontal_distance(
            previous_last, np.array([current.upper_edge[0], current.upper_edge[-1]])
        )
        reversed_.append(not to_first < to_last)
    return reversed_


def build_composite_surface(surfaces: Sequence[SectionSurface]) -> CompositeSurface:
    """Combine the surfaces of the sections in a rupture into one surface.

    Disjoint or non-adjacent sections are not detected; they give a
    meaningless (but well-defined) surface.

    Parameters
    ----------
    surfaces : Sequence[SectionSurface]
        The section surfaces, in the order they participate in the rupture.

    Returns
    -------
    CompositeSurface
        The combined surface.

    Raises
    ------
    ValueError
        If no surfaces are given.
    """
    if not surfaces:
        raise ValueError("Cannot build a composite surface from no sections.")

    areas = np.array([surface.area for surface in surfaces])
    total_area = areas.sum()
    length = float(sum(surface.length for surface in surfaces))

    if len(surfaces) == 1:
        (surface,) = surfaces
        return CompositeSurface(
            dip=surface.dip,
            width=surface.width,
            depth=surface.depth,
            area=float(total_area),
            length=length,
            trace=surface.upper_edge,
        )

    reversed_ = resolve_orientation(surfaces)
    dips = np.array(
        [
            180 - surface.dip if is_reversed else surface.dip
            for surface, is_reversed in zip(surfaces, reversed_)
        ]
    )
    dip = float(np.sum(dips * areas) / total_area)
    reverse_all = dip > 90
    if reverse_all:
        dip = 180 - dip

    width = float(np.sum([s.width for s in surfaces] * areas) / total_area)
    depth = float(np.sum([s.depth for s in surfaces] * areas) / total_area)

    trace = np.vstack(
        [
            surface.upper_edge[::-1] if is_reversed else surface.upper_edge
            for surface, is_reversed in zip(surfaces, reversed_)
        ]
    )
    if reverse_all:
        trace = trace[::-1]

    return CompositeSurface(
        dip=dip,
        width=width,
        depth=depth,
        area=float(total_area),
        length=length,
        trace=trace,
    )


class SurfaceContext:
    """Section surfaces for a fault system, computed once and shared by index.

    Composite surfaces are memoised by section index signature, so every
    rupture spanning the same sections reuses one composite surface.

    Parameters
    ----------
    sections : Iterable[SectionGeometry]
        The sections of the fault system.
    """

    def __init__(self, sections: Iterable[SectionGeometry]):
        self.surfaces: dict[int, SectionSurface] = {
            section.index: SectionSurface.from_section(section)
            for section in sections
        }
        self._composites: dict[tuple[int, ...], CompositeSurface] = {}

    def __contains__(self, index: int) -> bool:
        return index in self.surfaces

    def extend(self, sections: Iterable[SectionGeometry]) -> None:
        """Add surfaces for sections not already in the context.

        Parameters
        ----------
        sections : Iterable[SectionGeometry]
            Sections to add. Sections whose index is already present are
            ignored.
        """
        for section in sections:
            if section.index not in self.surfaces:
                self.surfaces[section.index] = SectionSurface.from_section(section)

    def composite(self, section_indices: Sequence[int]) -> CompositeSurface:
        """Get the composite surface of a rupture.

        Parameters
        ----------
        section_indices : Sequence[int]
            The participating section indices, in rupture order.

        Returns
        -------
        CompositeSurface
            The composite surface for these sections.

        Raises
        ------
        KeyError
            If a section index is not in the context.
        """
        signature = tuple(section_indices)
        if signature not in self._composites:
            self._composites[signature] = build_composite_surface(
                [self.surfaces[index] for index in signature]
            )
        return self._composites[signature]
