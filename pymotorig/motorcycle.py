"""
Motorcycle rig: frame, fork, wheels and swingarm assembled from parameters.

The rig's own body is the frame. Everything else hangs off it as child
components:

    frame (MotorcycleRig)
    ├── bottom fork      prismatic slider + spring to the frame
    ├── front wheel      revolute on the bottom fork
    ├── swingarm         revolute on the frame
    └── rear wheel       revolute on the swingarm

Every anchor comes from a single AnchorSet, so all joints start with zero
error. A parameter edit never modifies a rig in place; the owner destroys it
and builds a new one.
"""

import logging
import numpy as np
from typing import Dict, Optional

from .geometry import AnchorSet, generate_geometry
from .joint_types import ComponentKind
from .parameters import ParameterSet, SimulationSettings, ensure_parameter_set, simulation_settings
from .physics import (
    FRAME_FILTER,
    WHEEL_FILTER,
    Joint,
    circle_shape,
    distance_joint,
    polygon_shape,
    prismatic_joint,
    revolute_joint,
)
from .scene_component import SceneComponent
from .transforms import apply_to_points, compose, rotate, translate


logger = logging.getLogger(__name__)

FRAME_COLOR = (51, 51, 51)
SHOCK_FRAME_COLOR = (102, 102, 102)
TOP_FORK_COLOR = (65, 105, 225)
BOTTOM_FORK_COLOR = (60, 179, 113)
WHEEL_COLOR = (51, 51, 51)
SWINGARM_COLOR = (51, 51, 51)

# Fork slider travel along the fork axis (m)
FORK_TRAVEL_LOWER = 0.0
FORK_TRAVEL_UPPER = 0.15

FRAME_FRICTION = 0.3
WHEEL_FRICTION = 0.7
RESTITUTION = 0.2
WHEEL_SPOKES = 8

JOINT_NAMES = ('fork_slider', 'fork_spring', 'front_axle', 'swingarm_pivot', 'rear_axle')


class MotorcycleRig(SceneComponent):
    """
    The complete motorcycle: frame body plus four child components and five joints.

    Attributes:
        parameters: ParameterSet the rig was built from
        anchors: AnchorSet solved from ``parameters``
        bottom_fork: Sliding lower fork tube
        front_wheel: Front wheel, pinned to the bottom of the fork
        swingarm: Swingarm, pinned to the frame at the swing arm pivot
        rear_wheel: Rear wheel, pinned to the end of the swingarm
        joints: Joints by name (see JOINT_NAMES)
    """

    def __init__(self, simulation, parameters: ParameterSet, anchors: Optional[AnchorSet] = None,
                 settings: Optional[SimulationSettings] = None):
        """
        Build the rig and add it to the simulation's space.

        Args:
            simulation: Object exposing the pymunk ``space``
            parameters: ParameterSet with ``frame`` and ``simulation`` groups
            anchors: AnchorSet already solved from ``parameters`` (solved here
                when omitted)
            settings: SimulationSettings already checked from ``parameters``
                (checked here when omitted)

        Raises:
            GeometryError: If the frame dimensions cannot be assembled
            ParameterError: If a simulation parameter is missing or malformed
        """
        parameters = ensure_parameter_set(parameters)
        # solve before any body exists so a bad edit leaves the space untouched
        if anchors is None:
            anchors = generate_geometry(parameters)
        if settings is None:
            settings = simulation_settings(parameters)
        density = settings.density
        frequency = settings.fork_spring_frequency
        damping_ratio = settings.fork_spring_damping

        super().__init__(simulation, ComponentKind.FRAME, position=(0.0, 0.0), angle=0.0)
        self.parameters = parameters
        self.anchors = anchors
        self.joints: Dict[str, Joint] = {}

        self._build_frame(density)
        self.bottom_fork = self._build_bottom_fork(density)
        self.front_wheel = self._build_wheel(anchors.fork_bottom, anchors.front_wheel_radius, density)
        self.swingarm = self._build_swingarm(density)
        self.rear_wheel = self._build_wheel(anchors.rear_axle, anchors.rear_wheel_radius, density)
        for child in (self.bottom_fork, self.front_wheel, self.swingarm, self.rear_wheel):
            self.add_child(child)

        # joints derive spring stiffness from body masses, which pymunk only
        # knows once the bodies and their shapes are in the space
        for component in self.walk():
            component.add_to_space()
        self._build_joints(frequency, damping_ratio)

        self.bottom_fork.payload['slider'] = self.joints['fork_slider']
        logger.debug("Built motorcycle rig: %d bodies, %d joints, spring rest length %.4f m",
                     len(list(self.walk())), len(self.joints), anchors.spring_rest_length)

    def _local(self, point) -> np.ndarray:
        return self.anchors.to_local(point)

    def _build_frame(self, density: float) -> None:
        anchors = self.anchors
        self.add_shape(polygon_shape(
            self.body, [self._local(v) for v in anchors.frame_vertices], density,
            friction=FRAME_FRICTION, restitution=RESTITUTION,
            shape_filter=FRAME_FILTER, color=FRAME_COLOR))
        self.add_shape(polygon_shape(
            self.body, [self._local(v) for v in anchors.shock_frame_vertices], density,
            friction=FRAME_FRICTION, restitution=RESTITUTION,
            shape_filter=FRAME_FILTER, color=SHOCK_FRAME_COLOR))

        # top fork tube is welded to the frame, hanging from the head tube top
        top = self._local(anchors.head_tube_top)
        transform = compose(translate(top[0], top[1]), rotate(anchors.fork_angle))
        self.add_shape(polygon_shape(
            self.body, apply_to_points(transform, anchors.fork_top_vertices), density,
            friction=FRAME_FRICTION, restitution=RESTITUTION,
            shape_filter=FRAME_FILTER, color=TOP_FORK_COLOR))

    def _build_bottom_fork(self, density: float) -> SceneComponent:
        anchors = self.anchors
        fork = SceneComponent(self.simulation, ComponentKind.FORK,
                              position=anchors.fork_slider_anchor, angle=anchors.fork_angle)
        fork.add_shape(polygon_shape(
            fork.body, anchors.fork_bottom_vertices, density,
            friction=FRAME_FRICTION, restitution=RESTITUTION,
            shape_filter=FRAME_FILTER, color=BOTTOM_FORK_COLOR))
        return fork

    def _build_wheel(self, center, radius: float, density: float) -> SceneComponent:
        wheel = SceneComponent(self.simulation, ComponentKind.WHEEL, position=center)
        wheel.add_shape(circle_shape(
            wheel.body, radius, density,
            friction=WHEEL_FRICTION, restitution=RESTITUTION,
            shape_filter=WHEEL_FILTER, color=WHEEL_COLOR))
        wheel.payload['spokes'] = WHEEL_SPOKES
        return wheel

    def _build_swingarm(self, density: float) -> SceneComponent:
        anchors = self.anchors
        swingarm = SceneComponent(self.simulation, ComponentKind.SWINGARM,
                                  position=anchors.swing_arm_pivot, angle=0.0)
        swingarm.add_shape(polygon_shape(
            swingarm.body, anchors.swingarm_vertices, density,
            friction=FRAME_FRICTION, restitution=RESTITUTION,
            shape_filter=FRAME_FILTER, color=SWINGARM_COLOR))
        return swingarm

    def _build_joints(self, frequency: float, damping_ratio: float) -> None:
        anchors = self.anchors
        frame = self.body
        fork_tube_bottom = (0.0, -anchors.bottom_fork_length)

        joints = [
            prismatic_joint(
                'fork_slider', frame, self.bottom_fork.body,
                self._local(anchors.fork_slider_anchor), (0.0, 0.0),
                anchors.fork_axis, FORK_TRAVEL_LOWER, FORK_TRAVEL_UPPER),
            distance_joint(
                'fork_spring', frame, self.bottom_fork.body,
                self._local(anchors.head_tube_bottom), fork_tube_bottom,
                anchors.spring_rest_length, frequency, damping_ratio),
            revolute_joint(
                'front_axle', self.bottom_fork.body, self.front_wheel.body,
                fork_tube_bottom, (0.0, 0.0)),
            revolute_joint(
                'swingarm_pivot', frame, self.swingarm.body,
                self._local(anchors.swing_arm_pivot), (0.0, 0.0)),
            revolute_joint(
                'rear_axle', self.swingarm.body, self.rear_wheel.body,
                (anchors.swingarm_length, 0.0), (0.0, 0.0)),
        ]
        for joint in joints:
            joint.add_to(self.space)
            self.joints[joint.name] = joint

    def joint_errors(self) -> Dict[str, float]:
        """Current error of every joint, by name."""
        return {name: joint.error() for name, joint in self.joints.items()}

    def destroy(self) -> None:
        for joint in self.joints.values():
            joint.remove_from(self.space)
        self.joints = {}
        super().destroy()

    def __repr__(self) -> str:
        return f"MotorcycleRig(bodies={len(list(self.walk()))}, joints={len(self.joints)})"


if __name__ == "__main__":
    import pymunk
    from types import SimpleNamespace
    from .parameters import DEFAULT_PARAMETERS

    print("=" * 60)
    print("MOTORCYCLE RIG")
    print("=" * 60)

    host = SimpleNamespace(space=pymunk.Space())
    host.space.gravity = (0.0, 9.81)
    rig = MotorcycleRig(host, DEFAULT_PARAMETERS)

    print(f"\n{rig}")
    for component in rig.walk():
        x, y = component.position
        print(f"  {component.kind.value:10s} at ({x:+.4f}, {y:+.4f}) m, "
              f"angle {np.degrees(component.angle):+.2f}°, mass {component.body.mass:.3f} kg")

    print("\nJoint errors at construction:")
    for name, error in rig.joint_errors().items():
        print(f"  {name:16s} {error:.2e}")

    for _ in range(120):
        host.space.step(1.0 / 60.0)
    rig.update()
    print(f"\nFork travel after 2 s: {rig.bottom_fork.state['travel']:.4f} m")
