"""
Static ground the rig rests on.
"""

from .geometry import GroundGeometry
from .joint_types import ComponentKind
from .physics import GROUND_FILTER, box_shape
from .scene_component import SceneComponent


GROUND_FRICTION = 0.9
GROUND_COLOR = (51, 51, 51)


class GroundComponent(SceneComponent):
    """
    Immovable box-shaped collision surface.

    One static body, one box shape in the GROUND collision category. No
    joints and no children.
    """

    def __init__(self, simulation, geometry: GroundGeometry, density: float = 1.0):
        """
        Initialize the ground.

        Args:
            simulation: Object exposing the pymunk ``space``
            geometry: Ground rectangle (centre, width, height) in meters
            density: Material density (static bodies ignore mass)
        """
        super().__init__(simulation, ComponentKind.GROUND, body_type='static',
                         position=(geometry.x, geometry.y))
        self.geometry = geometry
        self.payload.update(width=geometry.width, height=geometry.height, color=GROUND_COLOR)
        self.add_shape(box_shape(
            self.body,
            geometry.width / 2,
            geometry.height / 2,
            density=density,
            friction=GROUND_FRICTION,
            restitution=0.2,
            shape_filter=GROUND_FILTER,
            color=GROUND_COLOR,
        ))
        self.add_to_space()

    def add_child(self, child) -> None:
        raise TypeError("GroundComponent cannot have children")
