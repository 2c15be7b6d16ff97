"""
Thin layer over pymunk for bodies, collision shapes and joints.

Collision categories:
- FRAME: frame, fork tubes and swingarm; collide with the ground only
- WHEEL: both wheels; collide with the ground only
- GROUND: the static ground; collides with frame parts and wheels

Joints are wrapped in :class:`Joint` so a rig can report each joint's
anchors in world space regardless of how many pymunk constraints back it.
"""

import math
import numpy as np
import pymunk
from typing import List, Sequence, Tuple

from .joint_types import JointType


FRAME_CATEGORY = 0x0001
GROUND_CATEGORY = 0x0002
WHEEL_CATEGORY = 0x0004

FRAME_FILTER = pymunk.ShapeFilter(categories=FRAME_CATEGORY, mask=GROUND_CATEGORY)
WHEEL_FILTER = pymunk.ShapeFilter(categories=WHEEL_CATEGORY, mask=GROUND_CATEGORY)
GROUND_FILTER = pymunk.ShapeFilter(categories=GROUND_CATEGORY, mask=FRAME_CATEGORY | WHEEL_CATEGORY)

# Velocity damping applied to every dynamic body (1/s)
LINEAR_DAMPING = 0.1
ANGULAR_DAMPING = 0.1

BODY_TYPES = {
    'dynamic': pymunk.Body.DYNAMIC,
    'static': pymunk.Body.STATIC,
    'kinematic': pymunk.Body.KINEMATIC,
}


def _damped_velocity(linear_damping: float, angular_damping: float):
    """Build a velocity function applying v *= 1 / (1 + dt * damping) each step."""
    def velocity_func(body, gravity, damping, dt):
        pymunk.Body.update_velocity(body, gravity, damping, dt)
        body.velocity = body.velocity * (1.0 / (1.0 + dt * linear_damping))
        body.angular_velocity = body.angular_velocity * (1.0 / (1.0 + dt * angular_damping))
    return velocity_func


def create_body(body_type: str = 'dynamic',
                position: Sequence[float] = (0.0, 0.0),
                angle: float = 0.0,
                linear_damping: float = LINEAR_DAMPING,
                angular_damping: float = ANGULAR_DAMPING) -> pymunk.Body:
    """
    Create a body that is not yet part of any space.

    Dynamic bodies get their mass and moment from the density of the shapes
    attached to them once body and shapes are added to a space.

    Args:
        body_type: 'dynamic', 'static' or 'kinematic'
        position: World position of the body origin [x, y]
        angle: World angle in radians
        linear_damping: Linear velocity damping (dynamic bodies only)
        angular_damping: Angular velocity damping (dynamic bodies only)

    Returns:
        New pymunk.Body

    Raises:
        ValueError: If body_type is unknown
    """
    if body_type not in BODY_TYPES:
        raise ValueError(f"Unknown body type '{body_type}'. Valid types: {sorted(BODY_TYPES)}")
    body = pymunk.Body(body_type=BODY_TYPES[body_type])
    body.position = (float(position[0]), float(position[1]))
    body.angle = float(angle)
    if body_type == 'dynamic' and (linear_damping or angular_damping):
        body.velocity_func = _damped_velocity(linear_damping, angular_damping)
    return body


def _configure(shape: pymunk.Shape, density: float, friction: float, restitution: float,
               shape_filter: pymunk.ShapeFilter, color) -> pymunk.Shape:
    shape.density = density
    shape.friction = friction
    shape.elasticity = restitution
    shape.filter = shape_filter
    if color is not None:
        shape.color = color
    return shape


def polygon_shape(body: pymunk.Body, vertices: Sequence, density: float,
                  friction: float = 0.3, restitution: float = 0.2,
                  shape_filter: pymunk.ShapeFilter = FRAME_FILTER,
                  color=None) -> pymunk.Poly:
    """Convex polygon from body-local vertices."""
    points = [(float(v[0]), float(v[1])) for v in vertices]
    return _configure(pymunk.Poly(body, points), density, friction, restitution, shape_filter, color)


def circle_shape(body: pymunk.Body, radius: float, density: float,
                 friction: float = 0.7, restitution: float = 0.2,
                 shape_filter: pymunk.ShapeFilter = WHEEL_FILTER,
                 color=None) -> pymunk.Circle:
    """Circle centred on the body origin."""
    return _configure(pymunk.Circle(body, float(radius)), density, friction, restitution,
                      shape_filter, color)


def box_shape(body: pymunk.Body, half_width: float, half_height: float, density: float,
              friction: float = 0.3, restitution: float = 0.2,
              shape_filter: pymunk.ShapeFilter = GROUND_FILTER,
              color=None) -> pymunk.Poly:
    """Axis-aligned box centred on the body origin."""
    shape = pymunk.Poly.create_box(body, (2.0 * half_width, 2.0 * half_height))
    return _configure(shape, density, friction, restitution, shape_filter, color)


def spring_coefficients(frequency: float, damping_ratio: float,
                        mass_a: float, mass_b: float) -> Tuple[float, float]:
    """
    Convert a spring's natural frequency and damping ratio to stiffness/damping.

    Uses the effective mass of the two bodies, m = ma·mb / (ma + mb), with a
    non-positive or infinite mass treated as immovable:

        ω = 2π·f
        k = m·ω²
        c = 2·m·ζ·ω

    Args:
        frequency: Natural frequency (Hz)
        damping_ratio: Damping ratio ζ (0 = undamped, 1 = critical)
        mass_a: Mass of the first body (kg)
        mass_b: Mass of the second body (kg)

    Returns:
        (stiffness in N/m, damping in N·s/m)
    """
    finite = [m for m in (mass_a, mass_b) if 0 < m < math.inf]
    if not finite:
        return 0.0, 0.0
    if len(finite) == 2:
        mass = mass_a * mass_b / (mass_a + mass_b)
    else:
        mass = finite[0]
    omega = 2.0 * math.pi * frequency
    return mass * omega * omega, 2.0 * mass * damping_ratio * omega


class Joint:
    """
    A named joint between two bodies backed by one or more pymunk constraints.

    Attributes:
        name: Identifier for the joint
        joint_type: JointType of the joint
        body_a: First body
        body_b: Second body
        anchor_a: Anchor on body_a in body_a-local coordinates
        anchor_b: Anchor on body_b in body_b-local coordinates
        constraints: pymunk constraints implementing the joint
        properties: Joint-type specific values (axis, limits, rest length...)
    """

    def __init__(self, name: str, joint_type: JointType,
                 body_a: pymunk.Body, body_b: pymunk.Body,
                 anchor_a: Sequence[float], anchor_b: Sequence[float],
                 constraints: List[pymunk.Constraint], **properties):
        self.name = name
        self.joint_type = joint_type
        self.body_a = body_a
        self.body_b = body_b
        self.anchor_a = (float(anchor_a[0]), float(anchor_a[1]))
        self.anchor_b = (float(anchor_b[0]), float(anchor_b[1]))
        self.constraints = list(constraints)
        self.properties = properties

    def anchor_a_world(self) -> np.ndarray:
        return np.array(self.body_a.local_to_world(self.anchor_a), dtype=float)

    def anchor_b_world(self) -> np.ndarray:
        return np.array(self.body_b.local_to_world(self.anchor_b), dtype=float)

    def separation(self) -> float:
        """Current world-space distance between the two anchors."""
        return float(np.linalg.norm(self.anchor_b_world() - self.anchor_a_world()))

    def error(self) -> float:
        """
        Current constraint error.

        Distance joints are satisfied at their rest length; every other joint
        is satisfied when its anchors coincide.
        """
        if self.joint_type == JointType.DISTANCE:
            return abs(self.separation() - self.properties['rest_length'])
        return self.separation()

    def translation(self) -> float:
        """Slide of body_b along the prismatic axis (prismatic joints only)."""
        if self.joint_type != JointType.PRISMATIC:
            raise ValueError(f"Joint '{self.name}' is not prismatic")
        axis = np.array(self.body_a.local_to_world(self.properties['axis']), dtype=float) \
            - np.array(self.body_a.position, dtype=float)
        return float(np.dot(axis, self.anchor_b_world() - self.anchor_a_world()))

    def add_to(self, space: pymunk.Space) -> None:
        space.add(*self.constraints)

    def remove_from(self, space: pymunk.Space) -> None:
        present = [c for c in self.constraints if c in space.constraints]
        if present:
            space.remove(*present)

    def __repr__(self) -> str:
        return f"Joint('{self.name}', {self.joint_type.value}, constraints={len(self.constraints)})"


def _unit(vector: Sequence[float]) -> np.ndarray:
    v = np.array([float(vector[0]), float(vector[1])])
    length = np.linalg.norm(v)
    if length <= 0:
        raise ValueError("Axis must have non-zero length")
    return v / length


def prismatic_joint(name: str, body_a: pymunk.Body, body_b: pymunk.Body,
                    anchor_a: Sequence[float], anchor_b: Sequence[float],
                    axis: Sequence[float], lower: float, upper: float) -> Joint:
    """
    Slider joint: body_b's anchor travels along ``axis`` through body_a's anchor.

    Built from a GrooveJoint running from ``anchor_a + axis*lower`` to
    ``anchor_a + axis*upper`` (travel limits) and a RotaryLimitJoint pinned
    at the bodies' current relative angle. There is no motor.

    Args:
        name: Joint name
        body_a: Body carrying the groove
        body_b: Sliding body
        anchor_a: Anchor on body_a (local)
        anchor_b: Anchor on body_b (local)
        axis: Slide direction in body_a-local coordinates
        lower: Lower translation limit
        upper: Upper translation limit (must exceed lower)
    """
    if upper <= lower:
        raise ValueError(f"Upper translation {upper} must exceed lower translation {lower}")
    unit_axis = _unit(axis)
    origin = np.array([float(anchor_a[0]), float(anchor_a[1])])
    groove_a = origin + unit_axis * lower
    groove_b = origin + unit_axis * upper

    groove = pymunk.GrooveJoint(body_a, body_b, tuple(groove_a), tuple(groove_b),
                                (float(anchor_b[0]), float(anchor_b[1])))
    reference_angle = body_b.angle - body_a.angle
    rotation_lock = pymunk.RotaryLimitJoint(body_a, body_b, reference_angle, reference_angle)
    for constraint in (groove, rotation_lock):
        constraint.collide_bodies = False

    return Joint(name, JointType.PRISMATIC, body_a, body_b, anchor_a, anchor_b,
                 [groove, rotation_lock], axis=tuple(unit_axis), lower=lower, upper=upper,
                 reference_angle=reference_angle)


def distance_joint(name: str, body_a: pymunk.Body, body_b: pymunk.Body,
                   anchor_a: Sequence[float], anchor_b: Sequence[float],
                   rest_length: float, frequency: float, damping_ratio: float) -> Joint:
    """
    Spring-damper pulling two anchors toward ``rest_length``.

    Stiffness and damping are derived from the bodies' masses, so both bodies
    must already be in a space with their shapes. A non-positive frequency
    gives a rigid rod (PinJoint) instead of a spring.
    """
    a = (float(anchor_a[0]), float(anchor_a[1]))
    b = (float(anchor_b[0]), float(anchor_b[1]))
    if frequency > 0:
        stiffness, damping = spring_coefficients(frequency, damping_ratio, body_a.mass, body_b.mass)
        constraint = pymunk.DampedSpring(body_a, body_b, a, b, rest_length, stiffness, damping)
    else:
        stiffness, damping = math.inf, 0.0
        constraint = pymunk.PinJoint(body_a, body_b, a, b)
        constraint.distance = rest_length
    constraint.collide_bodies = False

    return Joint(name, JointType.DISTANCE, body_a, body_b, a, b, [constraint],
                 rest_length=rest_length, frequency=frequency, damping_ratio=damping_ratio,
                 stiffness=stiffness, damping=damping)


def revolute_joint(name: str, body_a: pymunk.Body, body_b: pymunk.Body,
                   anchor_a: Sequence[float], anchor_b: Sequence[float]) -> Joint:
    """Pin two bodies together at a shared point; free rotation, no motor."""
    a = (float(anchor_a[0]), float(anchor_a[1]))
    b = (float(anchor_b[0]), float(anchor_b[1]))
    constraint = pymunk.PivotJoint(body_a, body_b, a, b)
    constraint.collide_bodies = False
    return Joint(name, JointType.REVOLUTE, body_a, body_b, a, b, [constraint])


def pointer_joint(handle: pymunk.Body, body: pymunk.Body, target: Sequence[float],
                  frequency: float = 2.0, damping_ratio: float = 0.5,
                  max_force_per_kg: float = 2000.0) -> Joint:
    """
    Soft spring from a kinematic handle body to the grabbed point on ``body``.

    The handle is moved to ``target``; moving the handle later drags the body.
    """
    handle.position = (float(target[0]), float(target[1]))
    local = body.world_to_local((float(target[0]), float(target[1])))
    stiffness, damping = spring_coefficients(frequency, damping_ratio, math.inf, body.mass)
    spring = pymunk.DampedSpring(handle, body, (0.0, 0.0), local, 0.0, stiffness, damping)
    spring.max_force = max_force_per_kg * body.mass
    spring.collide_bodies = False
    return Joint("pointer", JointType.POINTER, handle, body, (0.0, 0.0), local, [spring],
                 rest_length=0.0, frequency=frequency, damping_ratio=damping_ratio)

