"""
Test building the motorcycle rig from parameters.

Tests body/shape/joint counts, zero joint error at construction, the exact
spring rest length, collision categories, and that invalid parameters
leave the space untouched.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pymunk
import pytest
from types import SimpleNamespace

from pymotorig.errors import GeometryError, ParameterError
from pymotorig.geometry import distance, generate_geometry
from pymotorig.joint_types import ComponentKind, JointType
from pymotorig.motorcycle import FORK_TRAVEL_UPPER, JOINT_NAMES, MotorcycleRig
from pymotorig.parameters import DEFAULT_PARAMETERS, Parameter, ParameterSet
from pymotorig.physics import FRAME_FILTER, WHEEL_FILTER
from pymotorig.units import convert


def make_host():
    space = pymunk.Space()
    space.gravity = (0.0, 9.81)
    return SimpleNamespace(space=space)


def in_unit(parameters, unit):
    """Restate every frame length of a parameter set in another length unit."""
    frame = {
        key: Parameter(p.display_name, float(convert(p.get_value('m'), 'm', unit)), unit)
        for key, p in parameters.frame.items()
    }
    return ParameterSet({'frame': frame, 'simulation': parameters.simulation})


FRAME_VARIANTS = [
    DEFAULT_PARAMETERS,
    DEFAULT_PARAMETERS.with_value('frame', 'head_tube_length', 0.15),
    DEFAULT_PARAMETERS.with_value('frame', 'top_fork_tube_length', 0.6),
    in_unit(DEFAULT_PARAMETERS, 'mm'),
    in_unit(DEFAULT_PARAMETERS, 'in'),
    in_unit(DEFAULT_PARAMETERS.with_value('frame', 'bottom_fork_tube_length', 0.4), 'cm'),
]


def test_rig_structure():
    """Test the rig has five bodies, seven shapes and five named joints."""
    print("=" * 70)
    print("TEST: Rig Structure")
    print("=" * 70)

    host = make_host()
    rig = MotorcycleRig(host, DEFAULT_PARAMETERS)
    print(rig)

    assert rig.kind == ComponentKind.FRAME
    assert [child.kind for child in rig.children] == [
        ComponentKind.FORK, ComponentKind.WHEEL, ComponentKind.SWINGARM, ComponentKind.WHEEL]
    assert rig.children == [rig.bottom_fork, rig.front_wheel, rig.swingarm, rig.rear_wheel]

    assert len(host.space.bodies) == 5
    assert len(host.space.shapes) == 7
    assert len(rig.shapes) == 3, "Frame triangle, shock mount and top fork tube"
    assert tuple(rig.joints) == JOINT_NAMES
    # the slider is a groove plus a rotation lock
    assert len(host.space.constraints) == 6

    for component in rig.walk():
        assert component.body.body_type == pymunk.Body.DYNAMIC
        assert component.body.mass > 0

    types = {name: joint.joint_type for name, joint in rig.joints.items()}
    assert types == {
        'fork_slider': JointType.PRISMATIC,
        'fork_spring': JointType.DISTANCE,
        'front_axle': JointType.REVOLUTE,
        'swingarm_pivot': JointType.REVOLUTE,
        'rear_axle': JointType.REVOLUTE,
    }
    print("✓ Structure correct\n")


def test_joint_anchors_coincide():
    """Test every joint starts with zero error."""
    print("=" * 70)
    print("TEST: Joint Anchors at Construction")
    print("=" * 70)

    for parameters in FRAME_VARIANTS + [DEFAULT_PARAMETERS.with_value('frame', 'swingarm_length', 0.7)]:
        rig = MotorcycleRig(make_host(), parameters)
        for name, error in rig.joint_errors().items():
            print(f"  {name:16s} {error:.2e}")
            assert error < 1e-9, f"{name} should start satisfied"
        assert abs(rig.joints['fork_slider'].translation()) < 1e-9

    print("✓ All joints satisfied\n")


@pytest.mark.parametrize("parameters", FRAME_VARIANTS)
def test_spring_rest_length(parameters):
    """Test the fork spring rest length is exactly bottom + top - head tube, in meters."""
    rig = MotorcycleRig(make_host(), parameters)
    frame = parameters.frame
    expected = (float(frame['bottom_fork_tube_length'].get_value('m'))
                + float(frame['top_fork_tube_length'].get_value('m'))
                - float(frame['head_tube_length'].get_value('m')))

    spring = rig.joints['fork_spring']
    assert spring.properties['rest_length'] == expected
    assert spring.constraints[0].rest_length == expected
    assert spring.separation() == pytest.approx(expected, abs=1e-12)
    assert spring.properties['frequency'] == 4.0
    assert spring.properties['damping_ratio'] == 0.5
    assert spring.properties['stiffness'] > 0

    slider = rig.joints['fork_slider']
    assert (slider.properties['lower'], slider.properties['upper']) == (0.0, FORK_TRAVEL_UPPER)
    assert np.allclose(slider.properties['axis'], rig.anchors.fork_axis)


def test_units_do_not_change_the_rig():
    """Test a frame given in millimeters or inches builds the same rig as in meters."""
    reference = MotorcycleRig(make_host(), DEFAULT_PARAMETERS)
    for unit in ('mm', 'cm', 'in', 'ft'):
        rig = MotorcycleRig(make_host(), in_unit(DEFAULT_PARAMETERS, unit))
        assert rig.anchors.spring_rest_length == pytest.approx(0.75, abs=1e-12)
        for a, b in zip(reference.walk(), rig.walk()):
            assert np.allclose(a.position, b.position, atol=1e-12), f"{b.kind} moved in {unit}"
            assert a.angle == pytest.approx(b.angle, abs=1e-12)
            assert a.body.mass == pytest.approx(b.body.mass)
        assert rig.front_wheel.shapes[0].radius == pytest.approx(0.30)


def test_body_placement():
    """Test children sit where the anchor set puts them."""
    host = make_host()
    rig = MotorcycleRig(host, DEFAULT_PARAMETERS)
    anchors = rig.anchors

    assert np.allclose(rig.position, [0.0, 0.0])
    assert np.allclose(rig.bottom_fork.position, anchors.fork_slider_anchor)
    assert rig.bottom_fork.angle == pytest.approx(anchors.fork_angle)
    assert np.allclose(rig.front_wheel.position, anchors.fork_bottom)
    assert np.allclose(rig.swingarm.position, anchors.swing_arm_pivot)
    assert rig.swingarm.angle == 0.0
    assert np.allclose(rig.rear_wheel.position, [0.55, 0.0])

    assert rig.front_wheel.shapes[0].radius == pytest.approx(0.30)
    assert rig.rear_wheel.shapes[0].radius == pytest.approx(0.30)
    assert rig.front_wheel.payload['spokes'] == 8

    # Top fork tube hangs from the head tube top down to the slider anchor
    top_fork = rig.shapes[2]
    center = np.mean([tuple(v) for v in top_fork.get_vertices()], axis=0)
    assert np.allclose(center, (anchors.head_tube_top + anchors.fork_slider_anchor) / 2)

    # Bottom fork tube ends at the front axle
    bottom_fork = rig.bottom_fork.shapes[0]
    world = [rig.bottom_fork.body.local_to_world(v) for v in bottom_fork.get_vertices()]
    center = np.mean([tuple(v) for v in world], axis=0)
    assert np.allclose(center, (anchors.fork_slider_anchor + anchors.fork_bottom) / 2)


def test_collision_filters():
    """Test frame parts and wheels only collide with the ground."""
    rig = MotorcycleRig(make_host(), DEFAULT_PARAMETERS)

    for component in (rig, rig.bottom_fork, rig.swingarm):
        for shape in component.shapes:
            assert shape.filter == FRAME_FILTER
    for component in (rig.front_wheel, rig.rear_wheel):
        for shape in component.shapes:
            assert shape.filter == WHEEL_FILTER
            assert shape.friction == 0.7

    for joint in rig.joints.values():
        for constraint in joint.constraints:
            assert constraint.collide_bodies is False


def test_density_scales_mass():
    light = MotorcycleRig(make_host(), DEFAULT_PARAMETERS)
    heavy = MotorcycleRig(make_host(), DEFAULT_PARAMETERS.with_value('simulation', 'density', 20.0))
    for a, b in zip(light.walk(), heavy.walk()):
        assert b.body.mass == pytest.approx(2.0 * a.body.mass)


def test_precomputed_anchors_are_used():
    parameters = DEFAULT_PARAMETERS.with_value('frame', 'rear_wheel_diameter', 0.7)
    anchors = generate_geometry(parameters)
    rig = MotorcycleRig(make_host(), parameters, anchors)
    assert rig.anchors is anchors
    assert rig.rear_wheel.shapes[0].radius == pytest.approx(0.35)


def test_invalid_parameters_build_nothing():
    """Test errors are raised before any body reaches the space."""
    print("=" * 70)
    print("TEST: Invalid Parameters")
    print("=" * 70)

    host = make_host()
    with pytest.raises(GeometryError) as excinfo:
        MotorcycleRig(host, DEFAULT_PARAMETERS.with_value('frame', 'head_tube_length', 2.0))
    print(f"✓ {excinfo.value}")
    assert len(host.space.bodies) == 0

    simulation = DEFAULT_PARAMETERS.simulation
    del simulation['fork_spring_frequency']
    incomplete = ParameterSet({'frame': DEFAULT_PARAMETERS.frame, 'simulation': simulation})
    with pytest.raises(ParameterError, match="fork_spring_frequency"):
        MotorcycleRig(host, incomplete)
    assert len(host.space.bodies) == 0
    assert len(host.space.constraints) == 0
    print("✓ Space untouched\n")


def test_destroy_and_rebuild_are_idempotent():
    """Test destroying the rig empties the space and rebuilding restores the same world."""
    host = make_host()
    first = MotorcycleRig(host, DEFAULT_PARAMETERS)
    counts = (len(host.space.bodies), len(host.space.shapes), len(host.space.constraints))
    positions = [tuple(c.position) for c in first.walk()]

    first.destroy()
    assert (len(host.space.bodies), len(host.space.shapes), len(host.space.constraints)) == (0, 0, 0)
    assert first.joints == {}

    second = MotorcycleRig(host, DEFAULT_PARAMETERS)
    assert (len(host.space.bodies), len(host.space.shapes), len(host.space.constraints)) == counts
    assert [tuple(c.position) for c in second.walk()] == positions


def test_rig_holds_together_while_falling():
    """Test joints stay satisfied and the fork stays within its travel in free fall."""
    host = make_host()
    rig = MotorcycleRig(host, DEFAULT_PARAMETERS)

    for _ in range(60):
        host.space.step(1.0 / 60.0)
    rig.update()

    assert rig.position[1] > 1.0, "Rig should have fallen"
    for name in ('front_axle', 'swingarm_pivot', 'rear_axle'):
        assert rig.joints[name].error() < 1e-2, f"{name} drifted"
    travel = rig.bottom_fork.state['travel']
    assert -0.01 < travel < FORK_TRAVEL_UPPER + 0.01
    assert 'angular_velocity' in rig.front_wheel.state


def run_all_tests():
    """Run all motorcycle rig tests."""
    print("\n" + "=" * 70)
    print("MOTORCYCLE RIG TEST SUITE")
    print("=" * 70 + "\n")

    test_rig_structure()
    test_joint_anchors_coincide()
    for parameters in FRAME_VARIANTS:
        test_spring_rest_length(parameters)
    test_units_do_not_change_the_rig()
    test_body_placement()
    test_collision_filters()
    test_density_scales_mass()
    test_precomputed_anchors_are_used()
    test_invalid_parameters_build_nothing()
    test_destroy_and_rebuild_are_idempotent()
    test_rig_holds_together_while_falling()

    print("=" * 70)
    print("ALL MOTORCYCLE RIG TESTS PASSED!")
    print("=" * 70)


if __name__ == "__main__":
    run_all_tests()
