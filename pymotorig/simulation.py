"""
Simulation orchestrator: physics space, drawing, pointer drag, world rebuilds.

A Simulation owns one pymunk Space and a Canvas over a pygame Surface. The
world consists of two top-level components, the ground and the motorcycle
rig, and is always rebuilt as a whole:

    validate (solve geometry, check simulation values)
        -> destroy old components -> build new ones

Validation runs before anything is destroyed, so an invalid parameter edit
raises and leaves the running rig untouched.

World coordinates are meters with y pointing down the screen. The viewport
maps 1 m to ``viewport_scale`` pixels with the world origin at the centre
of the canvas.
"""

import logging
import numpy as np
import pygame
import pymunk
from typing import List, Optional, Sequence, Tuple

from .canvas import Canvas
from .errors import RigError
from .geometry import generate_geometry
from .ground import GroundComponent
from .joint_types import ANCHOR_A_COLOR, ANCHOR_B_COLOR, JOINT_COLORS, JointType
from .motorcycle import MotorcycleRig
from .parameters import (
    DEFAULT_GRAVITY,
    DEFAULT_PARAMETERS,
    SIMULATION_GROUP,
    ParameterSet,
    ensure_parameter_set,
    simulation_settings,
)
from .physics import Joint, pointer_joint
from .scene_component import SceneComponent


logger = logging.getLogger(__name__)

TIME_STEP = 1.0 / 60.0
VIEWPORT_SCALE = 200.0
BACKGROUND_COLOR = (255, 255, 255)

# pymunk's default slop assumes pixel units; the world is in meters
COLLISION_SLOP = 0.001

# Simulation parameters a rebuild cannot proceed without
REQUIRED_SIMULATION_KEYS = (
    'ground_width', 'ground_height', 'ground_offset',
    'density', 'fork_spring_frequency', 'fork_spring_damping',
)

# Pointer click box half-size; divided by the viewport scale to get meters
CLICK_RADIUS = 0.05
POINTER_FREQUENCY = 2.0
POINTER_DAMPING_RATIO = 0.5
POINTER_MAX_FORCE_PER_KG = 2000.0

ANCHOR_RADIUS = 0.01
PRISMATIC_LINE_WIDTH = 0.008
SPRING_LINE_WIDTH = 0.005
SPRING_SEGMENTS = 12
SPRING_OFFSET = 0.0125


class Simulation:
    """
    Runs and draws a motorcycle rig sitting on the ground.

    Attributes:
        space: pymunk Space holding every body, shape and joint
        canvas: Canvas the world is drawn on
        components: Top-level components (ground first, then the rig)
        ground: Current GroundComponent (None before create_world)
        rig: Current MotorcycleRig (None before create_world)
        parameters: ParameterSet the current world was built from
        running: Whether step() advances the physics
        viewport_scale: Pixels per meter
        time: Simulated time (s)
    """

    def __init__(self,
                 surface: Optional[pygame.Surface] = None,
                 canvas_size: Tuple[int, int] = (800, 600),
                 viewport_scale: float = VIEWPORT_SCALE):
        """
        Initialize an empty simulation.

        Args:
            surface: Surface to draw on (an off-screen surface of
                ``canvas_size`` is created when omitted)
            canvas_size: (width, height) in pixels of the off-screen surface
            viewport_scale: Pixels per meter
        """
        if viewport_scale <= 0:
            raise ValueError(f"Viewport scale must be positive, got {viewport_scale}")
        if surface is None:
            surface = pygame.Surface(canvas_size)
        self.canvas = Canvas(surface)
        self.viewport_scale = float(viewport_scale)

        self.space = pymunk.Space()
        self.space.gravity = (0.0, DEFAULT_GRAVITY)
        self.space.collision_slop = COLLISION_SLOP

        self.components: List[SceneComponent] = []
        self.ground: Optional[GroundComponent] = None
        self.rig: Optional[MotorcycleRig] = None
        self.parameters: Optional[ParameterSet] = None
        self.running = False
        self.time = 0.0

        # the handle is moved by hand and never added to the space
        self.pointer_handle = pymunk.Body(body_type=pymunk.Body.KINEMATIC)
        self.pointer: Optional[Joint] = None

    @property
    def viewport_translation(self) -> Tuple[float, float]:
        return self.canvas.width / 2.0, self.canvas.height / 2.0

    def screen_to_world(self, point: Sequence[float]) -> np.ndarray:
        """Convert a pixel position on the canvas to world meters."""
        tx, ty = self.viewport_translation
        return np.array([(point[0] - tx) / self.viewport_scale,
                         (point[1] - ty) / self.viewport_scale])

    def world_to_screen(self, point: Sequence[float]) -> np.ndarray:
        """Convert a world position in meters to canvas pixels."""
        tx, ty = self.viewport_translation
        return np.array([point[0] * self.viewport_scale + tx,
                         point[1] * self.viewport_scale + ty])

    # ------------------------------------------------------------------
    # World construction
    # ------------------------------------------------------------------

    def create_world(self, parameters=None) -> MotorcycleRig:
        """
        Build the ground and the rig from a parameter set, replacing any existing world.

        Args:
            parameters: ParameterSet (or its dict form); defaults to the
                current parameters, or DEFAULT_PARAMETERS on first use

        Returns:
            The new MotorcycleRig

        Raises:
            GeometryError: If the frame cannot be assembled (world unchanged)
            ParameterError: If a parameter is missing, malformed or out of
                range (world unchanged)
        """
        if parameters is None:
            parameters = self.parameters if self.parameters is not None else DEFAULT_PARAMETERS
        parameters = ensure_parameter_set(parameters)

        anchors = generate_geometry(parameters)
        parameters.require(SIMULATION_GROUP, REQUIRED_SIMULATION_KEYS)
        settings = simulation_settings(parameters)

        self.release_pointer()
        self.clear_world()

        self.space.gravity = (0.0, settings.gravity)
        self.ground = GroundComponent(self, anchors.ground_geometry, settings.density)
        self.rig = MotorcycleRig(self, parameters, anchors, settings)
        self.components = [self.ground, self.rig]
        self.parameters = parameters
        self.time = 0.0

        logger.info("Created world: %d bodies, %d shapes, %d constraints",
                    len(self.space.bodies), len(self.space.shapes), len(self.space.constraints))
        return self.rig

    def update_bodies(self, parameters) -> MotorcycleRig:
        """
        Apply a new parameter set to the world.

        Every edit rebuilds the whole world from the new snapshot.
        """
        return self.create_world(parameters)

    def reset(self) -> MotorcycleRig:
        """Rebuild the world from the current parameters."""
        return self.create_world(self.parameters)

    def apply_parameter(self, group: str, key: str, value: float) -> MotorcycleRig:
        """
        Change one parameter and rebuild.

        Args:
            group: Parameter group ('frame' or 'simulation')
            key: Parameter key within the group
            value: New value in the parameter's unit

        Returns:
            The rebuilt MotorcycleRig

        Raises:
            RigError: If the edited parameters are invalid; the previous
                parameters and world are kept
        """
        current = self.parameters if self.parameters is not None else DEFAULT_PARAMETERS
        try:
            return self.update_bodies(current.with_value(group, key, value))
        except RigError as e:
            logger.warning("Rejected %s.%s = %r: %s", group, key, value, e)
            raise

    def clear_world(self) -> None:
        """Destroy every top-level component."""
        for component in self.components:
            component.destroy()
        self.components = []
        self.ground = None
        self.rig = None

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def set_running(self, running: bool) -> None:
        self.running = bool(running)

    def step(self, dt: float = TIME_STEP) -> None:
        """
        Run one frame: advance the physics (when running), update, then draw.

        Args:
            dt: Physics time step in seconds
        """
        if self.running:
            self.space.step(dt)
            self.time += dt
        params = {'dt': dt, 'time': self.time, 'running': self.running}
        for component in self.components:
            component.update(params)
        self.draw()

    def draw(self) -> None:
        """Draw every component and the joint overlay in the viewport transform."""
        canvas = self.canvas
        canvas.reset_transform()
        canvas.clear(BACKGROUND_COLOR)

        canvas.save()
        canvas.translate(*self.viewport_translation)
        canvas.scale(self.viewport_scale)
        for component in self.components:
            component.draw(canvas)
        for joint in self.joints():
            draw_joint(canvas, joint)
        canvas.restore()

    def joints(self) -> List[Joint]:
        """Rig joints plus the pointer joint while dragging."""
        joints = list(self.rig.joints.values()) if self.rig is not None else []
        if self.pointer is not None:
            joints.append(self.pointer)
        return joints

    # ------------------------------------------------------------------
    # Pointer drag
    # ------------------------------------------------------------------

    def body_at(self, point: Sequence[float]) -> Optional[pymunk.Body]:
        """
        Find a dynamic body under a world point.

        Args:
            point: World position [x, y] in meters

        Returns:
            The first dynamic body whose shapes overlap a small box around
            the point, or None
        """
        radius = CLICK_RADIUS / self.viewport_scale
        x, y = float(point[0]), float(point[1])
        bb = pymunk.BB(x - radius, y - radius, x + radius, y + radius)
        for shape in self.space.bb_query(bb, pymunk.ShapeFilter()):
            if shape.body is not None and shape.body.body_type == pymunk.Body.DYNAMIC:
                return shape.body
        return None

    def pointer_down(self, point: Sequence[float]) -> Optional[pymunk.Body]:
        """
        Grab the dynamic body under a world point.

        Does nothing while a body is already grabbed.

        Returns:
            The grabbed body, or None
        """
        if self.pointer is not None:
            return None
        body = self.body_at(point)
        if body is None:
            return None
        self.pointer = pointer_joint(
            self.pointer_handle, body, point,
            frequency=POINTER_FREQUENCY,
            damping_ratio=POINTER_DAMPING_RATIO,
            max_force_per_kg=POINTER_MAX_FORCE_PER_KG,
        )
        self.pointer.add_to(self.space)
        logger.debug("Grabbed body at (%.3f, %.3f)", float(point[0]), float(point[1]))
        return body

    def pointer_move(self, point: Sequence[float]) -> None:
        """Move the drag target (no-op when nothing is grabbed)."""
        if self.pointer is not None:
            self.pointer_handle.position = (float(point[0]), float(point[1]))

    def pointer_up(self) -> None:
        self.release_pointer()

    def release_pointer(self) -> None:
        if self.pointer is not None:
            self.pointer.remove_from(self.space)
            self.pointer = None

    def __repr__(self) -> str:
        return (f"Simulation(components={len(self.components)}, running={self.running}, "
                f"time={self.time:.3f})")


def draw_joint(canvas: Canvas, joint: Joint) -> None:
    """
    Draw a joint's anchors and, for sliders and springs, its connection.

    Anchor A is a red dot and anchor B a blue dot. Prismatic joints get a
    straight line between the anchors; distance joints a zigzag spring.
    """
    a = joint.anchor_a_world()
    b = joint.anchor_b_world()
    canvas.circle(a, ANCHOR_RADIUS, ANCHOR_A_COLOR, 0)
    canvas.circle(b, ANCHOR_RADIUS, ANCHOR_B_COLOR, 0)

    color = JOINT_COLORS.get(joint.joint_type)
    if joint.joint_type == JointType.PRISMATIC:
        canvas.line(a, b, color, PRISMATIC_LINE_WIDTH)
    elif joint.joint_type == JointType.DISTANCE:
        canvas.lines(spring_points(a, b), color, SPRING_LINE_WIDTH)


def spring_points(start: Sequence[float], end: Sequence[float],
                  segments: int = SPRING_SEGMENTS, offset: float = SPRING_OFFSET) -> List[np.ndarray]:
    """
    Zigzag polyline between two points.

    Interior points alternate ``offset`` to either side of the straight line.
    A zero-length spring is drawn as a single point.
    """
    start = np.asarray(start, dtype=float)
    end = np.asarray(end, dtype=float)
    delta = end - start
    length = float(np.linalg.norm(delta))
    if length == 0:
        return [start, end]
    normal = np.array([-delta[1], delta[0]]) / length

    points = [start]
    for i in range(1, segments):
        side = 1.0 if i % 2 == 0 else -1.0
        points.append(start + delta * (i / segments) + normal * offset * side)
    points.append(end)
    return points


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("SIMULATION")
    print("=" * 60)

    sim = Simulation()
    rig = sim.create_world(DEFAULT_PARAMETERS)
    print(f"\n{sim}")
    print(f"{rig}")

    sim.set_running(True)
    for _ in range(180):
        sim.step()
    print(f"\nAfter {sim.time:.2f} s:")
    print(f"  Frame position: {rig.state['position']}")
    print(f"  Fork travel:    {rig.bottom_fork.state['travel']:.4f} m")

    print("\nEditing head tube length to 2.0 m (cannot close the frame triangle)...")
    try:
        sim.apply_parameter('frame', 'head_tube_length', 2.0)
    except RigError as e:
        print(f"  Rejected: {e}")
    print(f"  Rig unchanged: {sim.rig is rig}")
