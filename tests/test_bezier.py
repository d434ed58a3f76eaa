import math

import pytest

from evidence_map.bezier import (
    clamp_curvature,
    curved_path,
    format_coord,
    label_geometry,
    point_at,
    tangent_angle,
)

SEGMENTS = [
    ((0, 0), (100, 0)),
    ((10, 20), (-40, 75)),
    ((300, 100), (200, 300)),
    ((-5.5, 3.25), (0.5, -7)),
]


@pytest.mark.parametrize('start,end', SEGMENTS)
@pytest.mark.parametrize('curvature', [-40, -15, 0, 20, 40])
def test_curve_passes_through_endpoints(start, end, curvature):
    controls = curved_path(start, end, curvature).control_points

    assert point_at(start, end, controls, 0) == pytest.approx(start)
    assert point_at(start, end, controls, 1) == pytest.approx(end)


def test_path_for_horizontal_segment():
    curve = curved_path((0, 0), (100, 0), 20)

    assert curve.path == 'M 0,0 C 33.333,20 66.667,20 100,0'
    assert not curve.degenerate


def test_curvature_is_clamped():
    assert curved_path((0, 0), (120, 60), 500) == curved_path((0, 0), (120, 60), 40)
    assert curved_path((0, 0), (120, 60), -500) == curved_path((0, 0), (120, 60), -40)
    assert clamp_curvature(12.5) == 12.5
    assert clamp_curvature(-41) == -40


@pytest.mark.parametrize('start,end', SEGMENTS)
def test_zero_curvature_control_points_are_collinear(start, end):
    (c1x, c1y), (c2x, c2y) = curved_path(start, end, 0).control_points
    dx, dy = end[0] - start[0], end[1] - start[1]

    for cx, cy in ((c1x, c1y), (c2x, c2y)):
        cross = dx * (cy - start[1]) - dy * (cx - start[0])
        assert cross == pytest.approx(0, abs=1e-9)


def test_positive_and_negative_curvature_bend_opposite_ways():
    up = curved_path((0, 0), (100, 0), 20).control_points[0]
    down = curved_path((0, 0), (100, 0), -20).control_points[0]

    assert up.y == pytest.approx(20)
    assert down.y == pytest.approx(-20)


def test_zero_length_segment_gives_stub_path():
    curve = curved_path((5, 5), (5, 5), 30)

    assert curve.degenerate
    assert curve.path == 'M 5,5 L 5,5'
    assert tangent_angle((5, 5), (5, 5), curve.control_points, 0.5) == 0.0


def test_label_sits_on_midpoint_and_follows_direction():
    straight = label_geometry('Straight', (0, 0), (100, 0), 0)
    assert (straight.x, straight.y) == pytest.approx((50, 0))
    assert straight.rotation_degrees == pytest.approx(0)

    bent = label_geometry('Curved', (0, 0), (100, 0), 20)
    # Midpoint of the cubic is 3/4 of the way to the shared control offset
    assert (bent.x, bent.y) == pytest.approx((50, 15))
    assert bent.rotation_degrees == pytest.approx(0, abs=1e-9)

    vertical = label_geometry('Down', (0, 0), (0, 100), 0)
    assert vertical.rotation_degrees == pytest.approx(90)


def test_label_on_degenerate_segment():
    label = label_geometry('Loop', (7, 8), (7, 8), 10)

    assert (label.x, label.y, label.rotation_degrees) == (7, 8, 0)


def test_tangent_is_finite_along_curve():
    controls = curved_path((0, 0), (80, 30), -35).control_points
    for i in range(11):
        assert math.isfinite(tangent_angle((0, 0), (80, 30), controls, i / 10))


@pytest.mark.parametrize('value,expected', [
    (2.0, '2'),
    (1.5, '1.5'),
    (1 / 3, '0.333'),
    (-0.0001, '0'),
    (-12.3456, '-12.346'),
])
def test_format_coord(value, expected):
    assert format_coord(value) == expected
