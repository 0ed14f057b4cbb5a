import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rupture_forecast import geometry

# Radius of the pyproj "sphere" ellipsoid (km).
EARTH_RADIUS = 6370.997
ONE_DEGREE = np.radians(1) * EARTH_RADIUS

EQUATOR_TRACE = np.array([[0.0, 0.0], [0.0, 1.0]])


def test_trace_length_equator():
    assert geometry.trace_length(EQUATOR_TRACE) == pytest.approx(ONE_DEGREE, rel=1e-6)


def test_trace_length_single_point():
    assert geometry.trace_length(np.array([[0.0, 0.0]])) == 0.0


def test_horizontal_distance_ignores_depth():
    assert geometry.horizontal_distance(
        [0.0, 0.0, 0.0], [0.0, 1.0, 20.0]
    ) == pytest.approx(ONE_DEGREE, rel=1e-6)


def test_horizontal_distance_vectorised():
    distances = geometry.horizontal_distance(
        np.array([0.0, 0.0]), np.array([[0.0, 1.0], [0.0, 2.0]])
    )
    assert distances == pytest.approx([ONE_DEGREE, 2 * ONE_DEGREE], rel=1e-6)


@pytest.mark.parametrize(
    "trace, expected_strike, expected_dip_dir",
    [
        (np.array([[0.0, 0.0], [1.0, 0.0]]), 0.0, 90.0),
        (np.array([[0.0, 0.0], [0.0, 1.0]]), 90.0, 180.0),
        (np.array([[0.0, 1.0], [0.0, 0.0]]), 270.0, 0.0),
    ],
)
def test_strike_and_dip_direction(
    trace: np.ndarray, expected_strike: float, expected_dip_dir: float
):
    assert geometry.strike(trace) == pytest.approx(expected_strike, abs=1e-6)
    assert geometry.dip_direction(trace) % 360 == pytest.approx(
        expected_dip_dir, abs=1e-6
    )


def test_translate_preserves_extra_columns():
    moved = geometry.translate(np.array([[0.0, 0.0, 5.0]]), 90, ONE_DEGREE)
    assert moved[0] == pytest.approx([0.0, 1.0, 5.0], abs=1e-6)


def test_translate_negative_distance():
    moved = geometry.translate(np.array([0.0, 1.0]), 90, -ONE_DEGREE)
    assert moved[0] == pytest.approx([0.0, 0.0], abs=1e-6)


@pytest.mark.parametrize("target_length", [1.0, 4.0, 11.0, 50.0, 500.0])
def test_partition_trace_count_and_endpoints(target_length: float):
    sections = geometry.partition_trace(EQUATOR_TRACE, target_length)
    assert len(sections) == max(1, round(ONE_DEGREE / target_length))
    assert sections[0][0] == pytest.approx(EQUATOR_TRACE[0])
    assert sections[-1][-1] == pytest.approx(EQUATOR_TRACE[-1])
    for section_a, section_b in zip(sections[:-1], sections[1:]):
        assert section_a[-1] == pytest.approx(section_b[0])


def test_partition_trace_preserves_interior_vertices():
    trace = np.array([[0.0, 0.0], [0.0, 0.53], [0.0, 1.0]])
    sections = geometry.partition_trace(trace, 11.0)
    assert len(sections) == 10
    with_vertex = [section for section in sections if len(section) == 3]
    assert len(with_vertex) == 1
    assert with_vertex[0][1] == pytest.approx([0.0, 0.53])


@settings(deadline=None)
@given(target_length=st.floats(min_value=1.0, max_value=60.0))
def test_partition_trace_equal_lengths(target_length: float):
    trace = np.array([[0.0, 0.0], [0.2, 0.4], [0.3, 1.0]])
    length = geometry.trace_length(trace)
    sections = geometry.partition_trace(trace, target_length)
    lengths = np.array([geometry.trace_length(section) for section in sections])
    assert lengths.sum() == pytest.approx(length, rel=1e-6)
    assert lengths == pytest.approx(length / len(sections), rel=1e-3)


def test_partition_trace_invalid():
    with pytest.raises(ValueError):
        geometry.partition_trace(np.array([[0.0, 0.0]]), 4.0)
    with pytest.raises(ValueError):
        geometry.partition_trace(EQUATOR_TRACE, 0.0)
