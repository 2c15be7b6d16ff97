"""
Geometric construction of motorcycle frame anchor points.

This module provides:
- Triangle construction from three edge lengths (law of cosines)
- Apex construction from a known edge and two edge lengths
- Centroid, area and distance helpers
- generate_geometry(), which turns a ParameterSet into an AnchorSet

All points are 2-element numpy arrays [x, y] in meters. The y axis points
down the screen, so "up" on the motorcycle is negative y.
"""

import math
import numbers
import numpy as np
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .errors import GeometryError
from .parameters import FRAME_GROUP, SIMULATION_GROUP, FRAME_KEYS, Parameter, ParameterSet, ensure_parameter_set


def _is_number(value) -> bool:
    return (isinstance(value, numbers.Real)
            and not isinstance(value, bool)
            and math.isfinite(value))


def as_point(point, name: str = "point") -> np.ndarray:
    """
    Convert a point-like value into a 2-element float array.

    Accepts sequences of two numbers (tuples, lists, numpy arrays,
    pymunk.Vec2d) and objects with numeric ``x`` and ``y`` attributes.

    Raises:
        GeometryError: If the value has no usable x/y coordinates
    """
    if point is None:
        raise GeometryError(f"{name} is missing")
    if hasattr(point, 'x') and hasattr(point, 'y'):
        coords = (point.x, point.y)
    else:
        try:
            coords = tuple(point)
        except TypeError:
            raise GeometryError(f"{name} must have x and y coordinates, got {point!r}")
    if len(coords) != 2 or not all(_is_number(c) for c in coords):
        raise GeometryError(f"{name} must have numeric x and y coordinates, got {point!r}")
    return np.array(coords, dtype=float)


def distance(p1, p2) -> float:
    """
    Euclidean distance between two points.

    Args:
        p1: First point [x, y]
        p2: Second point [x, y]

    Returns:
        Distance in the points' units
    """
    return float(np.linalg.norm(as_point(p2, "p2") - as_point(p1, "p1")))


def centroid(vertices: Sequence) -> np.ndarray:
    """
    Arithmetic mean of a triangle's three vertices.

    Args:
        vertices: Three points [x, y]

    Returns:
        Centroid [x, y]
    """
    if len(vertices) != 3:
        raise GeometryError(f"Centroid needs exactly 3 vertices, got {len(vertices)}")
    points = np.array([as_point(v, f"vertex {i}") for i, v in enumerate(vertices)])
    return points.mean(axis=0)


def triangle_area(p1, p2, p3) -> float:
    """Unsigned area of the triangle p1-p2-p3 (shoelace formula)."""
    a, b, c = as_point(p1), as_point(p2), as_point(p3)
    return abs(a[0] * (b[1] - c[1]) + b[0] * (c[1] - a[1]) + c[0] * (a[1] - b[1])) / 2.0


def _violated_side(a: float, b: float, c: float) -> int:
    """
    Index of the side that breaks the strict triangle inequality, or -1.

    The side returned is the one on the left of the failing inequality,
    i.e. the side that is at least as long as the other two combined.
    """
    if a >= b + c:
        return 0
    if b >= a + c:
        return 1
    if c >= a + b:
        return 2
    return -1


def triangle_from_three_sides(a: float, b: float, c: float) -> List[np.ndarray]:
    """
    Construct a triangle from its three side lengths.

    Vertex C is placed at the origin and vertex B at (-c, 0). Vertex A is
    found with the law of cosines:

        cos(C) = (a² - b² - c²) / (-2bc)
        A = (-b·cos(C), -b·sin(C))

    Side ``a`` is opposite A (the B-A edge), ``b`` is the C-A edge and ``c``
    is the C-B edge.

    Args:
        a: Length of edge B-A
        b: Length of edge C-A
        c: Length of edge C-B

    Returns:
        [C, B, A] as numpy arrays

    Raises:
        GeometryError: If a length is not numeric or the strict triangle
            inequality does not hold

    Examples:
        >>> C, B, A = triangle_from_three_sides(3, 4, 5)
        >>> C.tolist(), B.tolist()
        ([0.0, 0.0], [-5.0, 0.0])
    """
    for name, side in (('a', a), ('b', b), ('c', c)):
        if not _is_number(side):
            raise GeometryError(f"Side {name} must be a finite number, got {side!r}")

    if _violated_side(a, b, c) >= 0:
        raise GeometryError(
            f"Invalid triangle: each side must be less than the sum of the other two sides "
            f"(got {a}, {b}, {c})",
            compared_to=(a, b, c),
        )

    C = np.array([0.0, 0.0])
    B = np.array([-float(c), 0.0])

    # the inequality check keeps this inside [-1, 1] up to rounding
    cos_c = np.clip((a * a - b * b - c * c) / (-2.0 * b * c), -1.0, 1.0)
    angle_c = math.acos(cos_c)
    A = np.array([-b * math.cos(angle_c), -b * math.sin(angle_c)])

    return [C, B, A]


def _side_length(side, position: int) -> float:
    if side is None or not isinstance(getattr(side, 'display_name', None), str):
        raise GeometryError(
            f"Invalid side parameter at position {position}: "
            f"must have a numeric 'value' and a string 'display_name'"
        )
    if not _is_number(getattr(side, 'value', None)):
        raise GeometryError(
            f"Invalid side parameter at position {position} (\"{side.display_name}\"): "
            f"value must be a finite number, got {getattr(side, 'value', None)!r}",
            side=side.display_name,
        )
    if isinstance(side, Parameter):
        try:
            return float(side.get_value('m'))
        except ValueError as e:
            raise GeometryError(f"\"{side.display_name}\": {e}", side=side.display_name) from e
    return float(side.value)


def triangle_from_named_sides(side_a, side_b, side_c) -> List[np.ndarray]:
    """
    Construct a triangle from three named sides.

    Each side is a :class:`Parameter` (or any object with ``display_name``
    and numeric ``value``). Parameter values are converted to meters.

    Args:
        side_a: Edge B-A
        side_b: Edge C-A
        side_c: Edge C-B

    Returns:
        [C, B, A] as numpy arrays

    Raises:
        GeometryError: If a side is malformed, or naming the side that is too
            long to close the triangle together with the two lengths it was
            compared against
    """
    sides = (side_a, side_b, side_c)
    lengths = [_side_length(side, i) for i, side in enumerate(sides)]

    culprit = _violated_side(*lengths)
    if culprit >= 0:
        long_side = sides[culprit]
        others = [sides[i] for i in range(3) if i != culprit]
        raise GeometryError(
            f"Invalid geometry: \"{long_side.display_name}\" ({_format(long_side)}) is too long "
            f"to form a valid triangle with \"{others[0].display_name}\" ({_format(others[0])}) "
            f"and \"{others[1].display_name}\" ({_format(others[1])})",
            side=long_side.display_name,
            compared_to=tuple(lengths[i] for i in range(3) if i != culprit),
        )

    return triangle_from_three_sides(*lengths)


def _format(side) -> str:
    unit = getattr(side, 'unit', '')
    return f"{side.value}{unit}"


def triangle_apex_from_edge(vertex_a, vertex_b, length_a: float, length_b: float) -> np.ndarray:
    """
    Find the third vertex of a triangle from one known edge.

    Given vertices A and B and the lengths from each of them to an unknown
    vertex C, C is placed with clockwise winding relative to the A->B
    direction: the A->B direction is rotated by -angle(A) and scaled by
    ``length_a``.

    Args:
        vertex_a: Known vertex A [x, y]
        vertex_b: Known vertex B [x, y]
        length_a: Length of edge A-C
        length_b: Length of edge B-C

    Returns:
        Vertex C [x, y]

    Raises:
        GeometryError: If a vertex is malformed, a length is not a positive
            number, or the three edges violate the triangle inequality

    Examples:
        >>> triangle_apex_from_edge((0, 0), (3, 0), 4, 5).round(9).tolist()
        [0.0, -4.0]
    """
    a = as_point(vertex_a, "vertex_a")
    b = as_point(vertex_b, "vertex_b")
    for name, length in (('length_a', length_a), ('length_b', length_b)):
        if not _is_number(length) or length <= 0:
            raise GeometryError(f"{name} must be a positive number, got {length!r}")

    edge = b - a
    length_c = float(np.linalg.norm(edge))

    if _violated_side(length_a, length_b, length_c) >= 0:
        raise GeometryError(
            f"Invalid triangle: edges {length_a}, {length_b} cannot meet over an edge of "
            f"length {length_c}",
            compared_to=(length_a, length_b, length_c),
        )

    cos_a = np.clip(
        (length_a ** 2 + length_c ** 2 - length_b ** 2) / (2.0 * length_a * length_c),
        -1.0, 1.0)
    angle_a = math.acos(cos_a)

    direction = edge / length_c
    cos_r, sin_r = math.cos(-angle_a), math.sin(-angle_a)
    rotated = np.array([
        direction[0] * cos_r - direction[1] * sin_r,
        direction[0] * sin_r + direction[1] * cos_r,
    ])
    return a + rotated * length_a


@dataclass(frozen=True)
class GroundGeometry:
    """Axis-aligned ground rectangle: centre (x, y) plus full width/height."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, eq=False)
class AnchorSet:
    """
    Every point and dimension derived from one parameter snapshot.

    Points are in world coordinates with the swing arm pivot at the origin.
    Tube vertex lists (``fork_top_vertices``, ``fork_bottom_vertices``,
    ``swingarm_vertices``) are in the tube's own frame: fork tubes hang from
    their origin along -y, the swingarm extends along +x.
    """
    swing_arm_pivot: np.ndarray
    head_tube_bottom: np.ndarray
    head_tube_top: np.ndarray
    frame_centroid: np.ndarray
    rear_shock_upper_pivot: np.ndarray
    frame_vertices: Tuple[np.ndarray, ...]
    shock_frame_vertices: Tuple[np.ndarray, ...]
    fork_top_vertices: Tuple[np.ndarray, ...]
    fork_bottom_vertices: Tuple[np.ndarray, ...]
    swingarm_vertices: Tuple[np.ndarray, ...]
    fork_axis: np.ndarray
    fork_angle: float
    fork_slider_anchor: np.ndarray
    fork_bottom: np.ndarray
    rear_axle: np.ndarray
    head_tube_length: float
    top_fork_length: float
    bottom_fork_length: float
    swingarm_length: float
    front_wheel_radius: float
    rear_wheel_radius: float
    spring_rest_length: float
    ground_geometry: GroundGeometry

    def to_local(self, point) -> np.ndarray:
        """Express a world point relative to the swing arm pivot (the frame origin)."""
        return as_point(point) - self.swing_arm_pivot


def _length(parameter: Parameter, key: str) -> float:
    if not _is_number(getattr(parameter, 'value', None)):
        name = getattr(parameter, 'display_name', key)
        raise GeometryError(f"\"{name}\" must have a numeric value, got {getattr(parameter, 'value', None)!r}",
                            side=name)
    try:
        value = float(parameter.get_value('m'))
    except ValueError as e:
        raise GeometryError(f"\"{parameter.display_name}\": {e}", side=parameter.display_name) from e
    if value <= 0:
        raise GeometryError(f"\"{parameter.display_name}\" must be positive, got {parameter.value}",
                            side=parameter.display_name)
    return value


def _tube_vertices(length: float, width: float) -> Tuple[np.ndarray, ...]:
    return (
        np.array([-width / 2, -length]),
        np.array([width / 2, -length]),
        np.array([width / 2, 0.0]),
        np.array([-width / 2, 0.0]),
    )


def generate_geometry(parameters: ParameterSet) -> AnchorSet:
    """
    Solve every anchor point of the frame from a parameter set.

    Args:
        parameters: ParameterSet with ``frame`` and ``simulation`` groups

    Returns:
        AnchorSet computed from this single snapshot

    Raises:
        ParameterError: If a required group or parameter is missing
        GeometryError: If the dimensions cannot be assembled
    """
    parameters = ensure_parameter_set(parameters)
    frame = parameters.require(FRAME_GROUP, FRAME_KEYS)
    simulation = parameters.require(SIMULATION_GROUP, ('ground_width', 'ground_height', 'ground_offset'))

    swing_arm_pivot, head_tube_bottom, head_tube_top = triangle_from_named_sides(
        frame['head_tube_length'],
        frame['swing_arm_pivot_to_head_tube_top_center'],
        frame['swing_arm_pivot_to_head_tube_bottom_center'],
    )
    frame_vertices = (swing_arm_pivot, head_tube_bottom, head_tube_top)

    to_head_tube_top = _length(frame['rear_shock_upper_pivot_to_head_tube_top'],
                               'rear_shock_upper_pivot_to_head_tube_top')
    to_frame_pivot = _length(frame['rear_shock_upper_pivot_to_frame_pivot'],
                             'rear_shock_upper_pivot_to_frame_pivot')
    try:
        rear_shock_upper_pivot = triangle_apex_from_edge(
            head_tube_top, swing_arm_pivot, to_head_tube_top, to_frame_pivot)
    except GeometryError as e:
        raise GeometryError(
            f"Invalid geometry: \"{frame['rear_shock_upper_pivot_to_head_tube_top'].display_name}\" and "
            f"\"{frame['rear_shock_upper_pivot_to_frame_pivot'].display_name}\" cannot meet: {e}",
            side=frame['rear_shock_upper_pivot_to_head_tube_top'].display_name,
            compared_to=e.compared_to,
        ) from e

    head_tube_length = _length(frame['head_tube_length'], 'head_tube_length')
    top_fork_length = _length(frame['top_fork_tube_length'], 'top_fork_tube_length')
    bottom_fork_length = _length(frame['bottom_fork_tube_length'], 'bottom_fork_tube_length')
    swingarm_length = _length(frame['swingarm_length'], 'swingarm_length')
    front_wheel_radius = _length(frame['front_wheel_diameter'], 'front_wheel_diameter') / 2
    rear_wheel_radius = _length(frame['rear_wheel_diameter'], 'rear_wheel_diameter') / 2

    spring_rest_length = bottom_fork_length + top_fork_length - head_tube_length
    if spring_rest_length <= 0:
        raise GeometryError(
            f"Invalid geometry: \"{frame['head_tube_length'].display_name}\" ({head_tube_length}m) "
            f"must be shorter than the fork tubes combined ({top_fork_length + bottom_fork_length}m)",
            side=frame['head_tube_length'].display_name,
            compared_to=(top_fork_length, bottom_fork_length),
        )

    axis = head_tube_top - head_tube_bottom
    fork_axis = axis / np.linalg.norm(axis)
    fork_angle = math.atan2(fork_axis[1], fork_axis[0]) - math.pi / 2

    fork_slider_anchor = head_tube_top - fork_axis * top_fork_length
    fork_bottom = fork_slider_anchor - fork_axis * bottom_fork_length

    swingarm_width = swingarm_length * 0.1
    swingarm_vertices = (
        np.array([0.0, swingarm_width / 2]),
        np.array([swingarm_length, swingarm_width / 2]),
        np.array([swingarm_length, -swingarm_width / 2]),
        np.array([0.0, -swingarm_width / 2]),
    )

    ground_geometry = GroundGeometry(
        x=0.0,
        y=_length(simulation['ground_offset'], 'ground_offset'),
        width=_length(simulation['ground_width'], 'ground_width'),
        height=_length(simulation['ground_height'], 'ground_height'),
    )

    return AnchorSet(
        swing_arm_pivot=swing_arm_pivot,
        head_tube_bottom=head_tube_bottom,
        head_tube_top=head_tube_top,
        frame_centroid=centroid(frame_vertices),
        rear_shock_upper_pivot=rear_shock_upper_pivot,
        frame_vertices=frame_vertices,
        shock_frame_vertices=(swing_arm_pivot, head_tube_top, rear_shock_upper_pivot),
        fork_top_vertices=_tube_vertices(top_fork_length, top_fork_length * 0.2),
        fork_bottom_vertices=_tube_vertices(bottom_fork_length, bottom_fork_length * 0.2),
        swingarm_vertices=swingarm_vertices,
        fork_axis=fork_axis,
        fork_angle=fork_angle,
        fork_slider_anchor=fork_slider_anchor,
        fork_bottom=fork_bottom,
        rear_axle=swing_arm_pivot + np.array([swingarm_length, 0.0]),
        head_tube_length=head_tube_length,
        top_fork_length=top_fork_length,
        bottom_fork_length=bottom_fork_length,
        swingarm_length=swingarm_length,
        front_wheel_radius=front_wheel_radius,
        rear_wheel_radius=rear_wheel_radius,
        spring_rest_length=spring_rest_length,
        ground_geometry=ground_geometry,
    )
