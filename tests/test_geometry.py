"""
Test the frame geometry solver.

Tests triangle construction from side lengths, apex construction from an
edge, centroid/area helpers, and full anchor generation from parameters.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import math
import numpy as np
import pytest
from types import SimpleNamespace

from pymotorig.errors import GeometryError, ParameterError
from pymotorig.geometry import (
    centroid,
    distance,
    generate_geometry,
    triangle_apex_from_edge,
    triangle_area,
    triangle_from_named_sides,
    triangle_from_three_sides,
)
from pymotorig.parameters import DEFAULT_PARAMETERS, Parameter, ParameterSet


def test_triangle_from_three_sides():
    """Test the 3-4-5 triangle is placed with C at the origin and B on -x."""
    print("=" * 70)
    print("TEST: Triangle From Three Sides")
    print("=" * 70)

    C, B, A = triangle_from_three_sides(3, 4, 5)
    print(f"C = {C}, B = {B}, A = {A}")

    assert np.allclose(C, [0.0, 0.0])
    assert np.allclose(B, [-5.0, 0.0])
    assert np.allclose(A, [-3.2, -2.4]), f"Unexpected apex {A}"

    # Sides land where they were asked for
    assert abs(distance(B, A) - 3.0) < 1e-12, "Side a is edge B-A"
    assert abs(distance(C, A) - 4.0) < 1e-12, "Side b is edge C-A"
    assert abs(distance(C, B) - 5.0) < 1e-12, "Side c is edge C-B"

    # Apex sits above the base (negative y is up)
    assert A[1] < 0

    print("✓ 3-4-5 triangle constructed correctly\n")


def test_triangle_inequality_rejected():
    """Test degenerate and impossible triangles raise GeometryError."""
    print("=" * 70)
    print("TEST: Triangle Inequality")
    print("=" * 70)

    for sides in [(1, 1, 3), (3, 1, 1), (1, 3, 1), (1, 1, 2)]:
        with pytest.raises(GeometryError, match="Invalid triangle"):
            triangle_from_three_sides(*sides)
        print(f"✓ Rejected sides {sides}")

    with pytest.raises(GeometryError):
        triangle_from_three_sides(1, 'two', 1.5)

    # GeometryError is a ValueError
    with pytest.raises(ValueError):
        triangle_from_three_sides(0, 0, 0)

    print("✓ Invalid triangles rejected\n")


def test_triangle_from_named_sides():
    """Test the parameter-based variant converts units and names the culprit."""
    print("=" * 70)
    print("TEST: Triangle From Named Sides")
    print("=" * 70)

    C, B, A = triangle_from_named_sides(
        Parameter("Side A", 3000.0, 'mm'),
        Parameter("Side B", 400.0, 'cm'),
        Parameter("Side C", 5.0, 'm'),
    )
    assert np.allclose(B, [-5.0, 0.0]), "Lengths should be converted to meters"
    assert np.allclose(A, [-3.2, -2.4])
    print("✓ Mixed units converted to meters")

    with pytest.raises(GeometryError) as excinfo:
        triangle_from_named_sides(
            Parameter("Short One", 1.0),
            Parameter("Way Too Long", 5.0),
            Parameter("Short Two", 1.5),
        )
    error = excinfo.value
    print(f"Error: {error}")
    assert error.side == "Way Too Long"
    assert error.compared_to == (1.0, 1.5)
    assert "Way Too Long" in str(error)
    assert "Short One" in str(error) and "Short Two" in str(error)
    print("✓ Culprit side named in error")

    # Any object with display_name and value works
    C, B, A = triangle_from_named_sides(
        SimpleNamespace(display_name="a", value=3.0),
        SimpleNamespace(display_name="b", value=4.0),
        SimpleNamespace(display_name="c", value=5.0),
    )
    assert np.allclose(B, [-5.0, 0.0])

    with pytest.raises(GeometryError, match="position 1"):
        triangle_from_named_sides(
            Parameter("a", 3.0), SimpleNamespace(value=4.0), Parameter("c", 5.0))
    with pytest.raises(GeometryError, match="Bad Value"):
        triangle_from_named_sides(
            Parameter("a", 3.0), Parameter("b", 4.0), Parameter("Bad Value", "five"))
    print("✓ Malformed sides rejected\n")


def test_triangle_apex_from_edge():
    """Test apex construction places C with clockwise winding."""
    print("=" * 70)
    print("TEST: Triangle Apex From Edge")
    print("=" * 70)

    apex = triangle_apex_from_edge((0, 0), (3, 0), 4, 5)
    print(f"Apex: {apex}")

    assert abs(distance(apex, (0, 0)) - 4.0) < 1e-9
    assert abs(distance(apex, (3, 0)) - 5.0) < 1e-9
    assert apex[1] < 0, "Apex should be above the A->B edge"
    assert np.allclose(apex, [0.0, -4.0])

    # Works with x/y objects and rotated edges
    apex = triangle_apex_from_edge(SimpleNamespace(x=1.0, y=1.0), np.array([1.0, 4.0]), 3.0, 3.0)
    assert abs(distance(apex, (1, 1)) - 3.0) < 1e-9
    assert abs(distance(apex, (1, 4)) - 3.0) < 1e-9
    print("✓ Apex distances correct")

    with pytest.raises(GeometryError):
        triangle_apex_from_edge((0, 0), (3, 0), 1, 1)
    with pytest.raises(GeometryError):
        triangle_apex_from_edge((0, 0), (3, 0), 0, 4)
    with pytest.raises(GeometryError):
        triangle_apex_from_edge((0, 0), (3, 0), -4, 5)
    with pytest.raises(GeometryError):
        triangle_apex_from_edge((0, 0), (3, 0), '4', 5)
    with pytest.raises(GeometryError):
        triangle_apex_from_edge(None, (3, 0), 4, 5)
    with pytest.raises(GeometryError):
        triangle_apex_from_edge((0, 'zero'), (3, 0), 4, 5)
    print("✓ Invalid input rejected\n")


def test_centroid_partitions_area():
    """Test the centroid splits a triangle into three sub-triangles of equal total area."""
    print("=" * 70)
    print("TEST: Centroid")
    print("=" * 70)

    for vertices in [
        [(0, 0), (4, 0), (0, 3)],
        triangle_from_three_sides(3, 4, 5),
        triangle_from_three_sides(0.2, 0.75, 0.8),
    ]:
        p1, p2, p3 = vertices
        g = centroid(vertices)
        total = triangle_area(p1, p2, p3)
        parts = triangle_area(g, p2, p3) + triangle_area(p1, g, p3) + triangle_area(p1, p2, g)
        print(f"Area {total:.6f}, sum of parts {parts:.6f}")
        assert abs(total - parts) < 1e-10

    assert np.allclose(centroid([(0, 0), (3, 0), (0, 3)]), [1.0, 1.0])

    with pytest.raises(GeometryError):
        centroid([(0, 0), (1, 1)])
    print("✓ Centroid correct\n")


def test_generate_geometry_default():
    """Test anchor generation from the default parameters."""
    print("=" * 70)
    print("TEST: Generate Geometry")
    print("=" * 70)

    anchors = generate_geometry(DEFAULT_PARAMETERS)
    frame = DEFAULT_PARAMETERS.frame

    assert np.allclose(anchors.swing_arm_pivot, [0.0, 0.0])
    assert abs(distance(anchors.head_tube_bottom, anchors.head_tube_top) - 0.20) < 1e-12
    assert abs(distance(anchors.swing_arm_pivot, anchors.head_tube_top) - 0.75) < 1e-12
    assert abs(distance(anchors.swing_arm_pivot, anchors.head_tube_bottom) - 0.80) < 1e-12
    print(f"Head tube top:    {anchors.head_tube_top}")
    print(f"Head tube bottom: {anchors.head_tube_bottom}")

    assert abs(distance(anchors.rear_shock_upper_pivot, anchors.head_tube_top) - 0.50) < 1e-9
    assert abs(distance(anchors.rear_shock_upper_pivot, anchors.swing_arm_pivot) - 0.40) < 1e-9
    print(f"Rear shock upper pivot: {anchors.rear_shock_upper_pivot}")

    # Spring rest length is exactly bottom + top - head tube
    expected_rest = (frame['bottom_fork_tube_length'].value
                     + frame['top_fork_tube_length'].value
                     - frame['head_tube_length'].value)
    assert anchors.spring_rest_length == expected_rest
    print(f"✓ Spring rest length: {anchors.spring_rest_length} m")

    # Fork bottom sits one rest length below the head tube bottom, along the fork axis
    assert abs(distance(anchors.fork_bottom, anchors.head_tube_bottom)
               - anchors.spring_rest_length) < 1e-12
    assert abs(np.linalg.norm(anchors.fork_axis) - 1.0) < 1e-12
    axis_angle = math.atan2(anchors.fork_axis[1], anchors.fork_axis[0])
    assert abs(anchors.fork_angle - (axis_angle - math.pi / 2)) < 1e-12

    assert np.allclose(anchors.rear_axle, [0.55, 0.0])
    assert anchors.front_wheel_radius == 0.30
    assert anchors.rear_wheel_radius == 0.30

    assert np.allclose(anchors.frame_centroid, centroid(anchors.frame_vertices))
    assert len(anchors.fork_top_vertices) == 4
    assert len(anchors.swingarm_vertices) == 4

    ground = anchors.ground_geometry
    assert (ground.x, ground.y, ground.width, ground.height) == (0.0, 1.2, 4.0, 0.1)
    print("✓ Default geometry consistent\n")


def test_generate_geometry_is_deterministic():
    """Test the same parameters always give the same anchors."""
    first = generate_geometry(DEFAULT_PARAMETERS)
    second = generate_geometry(DEFAULT_PARAMETERS.to_dict())
    for name in ('head_tube_top', 'rear_shock_upper_pivot', 'fork_slider_anchor', 'fork_bottom'):
        assert np.array_equal(getattr(first, name), getattr(second, name)), name


def test_generate_geometry_errors():
    """Test invalid frames fail before any geometry is returned."""
    print("=" * 70)
    print("TEST: Generate Geometry Errors")
    print("=" * 70)

    too_long = DEFAULT_PARAMETERS.with_value('frame', 'head_tube_length', 2.0)
    with pytest.raises(GeometryError) as excinfo:
        generate_geometry(too_long)
    assert excinfo.value.side == "Head Tube Length"
    print(f"✓ {excinfo.value}")

    unreachable = DEFAULT_PARAMETERS.with_value('frame', 'rear_shock_upper_pivot_to_head_tube_top', 5.0)
    with pytest.raises(GeometryError, match="Rear Shock Upper Pivot"):
        generate_geometry(unreachable)

    short_fork = (DEFAULT_PARAMETERS
                  .with_value('frame', 'top_fork_tube_length', 0.1)
                  .with_value('frame', 'bottom_fork_tube_length', 0.05))
    with pytest.raises(GeometryError, match="fork tubes"):
        generate_geometry(short_fork)

    negative = DEFAULT_PARAMETERS.with_value('frame', 'swingarm_length', -0.5)
    with pytest.raises(GeometryError, match="positive"):
        generate_geometry(negative)

    with pytest.raises(ParameterError):
        generate_geometry(ParameterSet({'frame': DEFAULT_PARAMETERS.frame}))

    frame = DEFAULT_PARAMETERS.frame
    del frame['swingarm_length']
    with pytest.raises(ParameterError, match="swingarm_length"):
        generate_geometry(ParameterSet({'frame': frame, 'simulation': DEFAULT_PARAMETERS.simulation}))

    with pytest.raises(ParameterError):
        generate_geometry("not parameters")
    print("✓ Invalid parameter sets rejected\n")


def run_all_tests():
    """Run all geometry tests."""
    print("\n" + "=" * 70)
    print("GEOMETRY TEST SUITE")
    print("=" * 70 + "\n")

    test_triangle_from_three_sides()
    test_triangle_inequality_rejected()
    test_triangle_from_named_sides()
    test_triangle_apex_from_edge()
    test_centroid_partitions_area()
    test_generate_geometry_default()
    test_generate_geometry_is_deterministic()
    test_generate_geometry_errors()

    print("=" * 70)
    print("ALL GEOMETRY TESTS PASSED!")
    print("=" * 70)


if __name__ == "__main__":
    run_all_tests()
