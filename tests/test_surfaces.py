import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rupture_forecast.sections import SectionGeometry
from rupture_forecast.surfaces import (
    SectionSurface,
    SurfaceContext,
    build_composite_surface,
    resolve_orientation,
)


def equator_section(
    index: int,
    start_lon: float,
    end_lon: float,
    dip: float = 90.0,
    aseismic_factor: float = 0.0,
    lower_depth: float = 10.0,
    dip_dir: float = 180.0,
) -> SectionGeometry:
    return SectionGeometry(
        index=index,
        name=f"section {index}",
        trace=np.array([[0.0, start_lon], [0.0, end_lon]]),
        dip=dip,
        dip_dir=dip_dir,
        top_depth=0.0,
        lower_depth=lower_depth,
        aseismic_factor=aseismic_factor,
    )


def surfaces(*sections: SectionGeometry) -> list[SectionSurface]:
    return [SectionSurface.from_section(section) for section in sections]


def test_section_surface_without_aseismic_slip():
    surface = SectionSurface.from_section(equator_section(0, 0.0, 0.1))
    assert surface.depth == 0.0
    assert surface.width == pytest.approx(10.0)
    assert surface.upper_edge.shape == (2, 3)
    assert surface.upper_edge[:, :2] == pytest.approx([[0.0, 0.0], [0.0, 0.1]])
    assert surface.area == pytest.approx(surface.length * 10.0)
    assert len(surface.geometry.coords) == 2


def test_section_surface_moves_down_dip():
    surface = SectionSurface.from_section(
        equator_section(0, 0.0, 0.1, dip=45.0, aseismic_factor=0.2)
    )
    # 2 km down at 45 degrees is 2 km horizontally, to the south.
    assert surface.depth == pytest.approx(2.0)
    assert surface.upper_edge[:, 0] == pytest.approx(
        [-np.degrees(2.0 / 6370.997)] * 2, rel=1e-4
    )
    assert surface.upper_edge[:, 2] == pytest.approx([2.0, 2.0])
    assert surface.width == pytest.approx(8.0 * np.sqrt(2))


def test_single_section_bypass():
    (surface,) = surfaces(equator_section(0, 0.0, 0.1, dip=60.0))
    composite = build_composite_surface([surface])
    assert composite.dip == 60.0
    assert composite.trace is surface.upper_edge
    assert composite.area == pytest.approx(surface.area)


def test_empty_surface_list():
    with pytest.raises(ValueError):
        build_composite_surface([])


@pytest.mark.parametrize(
    "first, second, expected",
    [
        ((0.0, 0.1), (0.1, 0.2), [False, False]),
        ((0.1, 0.0), (0.1, 0.2), [True, False]),
        ((0.1, 0.0), (0.2, 0.1), [True, True]),
        ((0.0, 0.1), (0.2, 0.1), [False, True]),
    ],
)
def test_first_pair_orientation(
    first: tuple[float, float], second: tuple[float, float], expected: list[bool]
):
    pair = surfaces(equator_section(0, *first), equator_section(1, *second))
    assert resolve_orientation(pair) == expected


def test_subsequent_section_orientation():
    sections = surfaces(
        equator_section(0, 0.0, 0.1),
        equator_section(1, 0.1, 0.2),
        equator_section(2, 0.3, 0.2),
        equator_section(3, 0.3, 0.4),
    )
    assert resolve_orientation(sections) == [False, False, True, False]
    composite = build_composite_surface(sections)
    assert composite.trace[:, 1] == pytest.approx(
        [0.0, 0.1, 0.1, 0.2, 0.2, 0.3, 0.3, 0.4]
    )


@settings(deadline=None)
@given(dip=st.floats(min_value=10.0, max_value=90.0))
def test_orientation_idempotence(dip: float):
    forward = surfaces(
        equator_section(0, 0.0, 0.1, dip=dip),
        equator_section(1, 0.1, 0.25, dip=dip, aseismic_factor=0.3),
    )
    # The same planes digitised in the opposite direction, measured from the
    # opposite side.
    backward = surfaces(
        equator_section(0, 0.1, 0.0, dip=180 - dip, dip_dir=0.0),
        equator_section(
            1, 0.25, 0.1, dip=180 - dip, aseismic_factor=0.3, dip_dir=0.0
        ),
    )
    forward_composite = build_composite_surface(forward)
    backward_composite = build_composite_surface(backward)
    assert forward_composite.dip == pytest.approx(dip)
    assert backward_composite.dip == pytest.approx(forward_composite.dip)
    assert backward_composite.width == pytest.approx(forward_composite.width)
    assert backward_composite.depth == pytest.approx(forward_composite.depth)
    assert backward_composite.trace == pytest.approx(forward_composite.trace)


def test_reversed_rupture_when_average_dip_exceeds_90():
    composite = build_composite_surface(
        surfaces(
            equator_section(0, 0.0, 0.1, dip=60.0),
            equator_section(1, 0.3, 0.1, dip=60.0),
        )
    )
    # Weighted (60 x 1 + 120 x 2) / 3 = 100, flipped to 80.
    assert composite.dip == pytest.approx(80.0)
    assert composite.trace[0, 1] == pytest.approx(0.3)
    assert composite.trace[-1, 1] == pytest.approx(0.0)


def test_area_weighted_width_and_depth():
    composite = build_composite_surface(
        surfaces(
            equator_section(0, 0.0, 0.1),
            equator_section(1, 0.1, 0.2, aseismic_factor=0.5),
        )
    )
    assert composite.width == pytest.approx(125 / 15)
    assert composite.depth == pytest.approx(25 / 15)
    assert composite.length == pytest.approx(2 * np.radians(0.1) * 6370.997)


def test_surface_context_memoises_composites():
    context = SurfaceContext(
        [equator_section(0, 0.0, 0.1), equator_section(1, 0.1, 0.2)]
    )
    assert 0 in context
    assert context.composite([0, 1]) is context.composite((0, 1))
    with pytest.raises(KeyError):
        context.composite([0, 2])


def test_surface_context_extend():
    context = SurfaceContext([equator_section(0, 0.0, 0.1)])
    original = context.surfaces[0]
    context.extend([equator_section(0, 0.5, 0.6), equator_section(1, 0.1, 0.2)])
    assert context.surfaces[0] is original
    assert 1 in context
