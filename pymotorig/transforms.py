"""
2D affine transforms as 3x3 homogeneous matrices.

Matrices follow the column-vector convention:
``compose(translate(...), rotate(...))`` rotates a point first and then
translates it.
"""

import math
import numpy as np
from typing import Iterable, List


def identity() -> np.ndarray:
    return np.eye(3)


def translate(dx: float, dy: float) -> np.ndarray:
    m = np.eye(3)
    m[0, 2] = dx
    m[1, 2] = dy
    return m


def rotate(angle: float) -> np.ndarray:
    """Counter-clockwise rotation (in a y-up frame) by ``angle`` radians."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, -s, 0.0],
        [s, c, 0.0],
        [0.0, 0.0, 1.0],
    ])


def scale(sx: float, sy: float = None) -> np.ndarray:
    if sy is None:
        sy = sx
    return np.diag([sx, sy, 1.0])


def compose(*matrices: np.ndarray) -> np.ndarray:
    """
    Multiply transforms together.

    Args:
        *matrices: 3x3 transforms; the last one is applied to points first

    Returns:
        Combined 3x3 transform
    """
    result = np.eye(3)
    for m in matrices:
        result = result @ m
    return result


def apply_to_point(matrix: np.ndarray, point) -> np.ndarray:
    """
    Apply a transform to one point.

    Args:
        matrix: 3x3 transform
        point: [x, y]

    Returns:
        Transformed [x, y]
    """
    x, y = float(point[0]), float(point[1])
    result = matrix @ np.array([x, y, 1.0])
    return result[:2]


def apply_to_points(matrix: np.ndarray, points: Iterable) -> List[np.ndarray]:
    """Apply a transform to every point in a sequence."""
    return [apply_to_point(matrix, p) for p in points]


def linear_scale(matrix: np.ndarray) -> float:
    """Uniform scale factor of a transform (square root of the 2x2 determinant)."""
    return math.sqrt(abs(np.linalg.det(matrix[:2, :2])))
