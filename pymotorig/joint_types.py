"""
Joint and component type definitions for the motorcycle rig.

These enums drive per-type behaviour (drawing, per-frame bookkeeping) through
lookup tables instead of subclass overrides.
"""

from enum import Enum


class JointType(Enum):
    """
    Kinds of joints the rig builder creates.

    A joint may be backed by more than one pymunk constraint (a prismatic
    joint is a groove plus a rotation lock).
    """
    PRISMATIC = "prismatic"      # Slides along one axis, travel limited
    DISTANCE = "distance"        # Spring-damper toward a rest length
    REVOLUTE = "revolute"        # Shared pivot, free rotation
    POINTER = "pointer"          # Soft spring from the mouse to a body


class ComponentKind(Enum):
    """Kinds of scene components."""
    GROUND = "ground"
    FRAME = "frame"
    FORK = "fork"
    WHEEL = "wheel"
    SWINGARM = "swingarm"


# Overlay colours used when drawing joints (RGB)
JOINT_COLORS = {
    JointType.PRISMATIC: (255, 215, 0),     # Gold axis line
    JointType.DISTANCE: (255, 105, 180),    # Pink zigzag spring
    JointType.REVOLUTE: (255, 255, 255),
    JointType.POINTER: (0, 200, 255),
}

ANCHOR_A_COLOR = (255, 0, 0)
ANCHOR_B_COLOR = (0, 0, 255)
