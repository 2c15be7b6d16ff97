"""
Scene tree node owning at most one physics body.

Each SceneComponent owns an optional pymunk body, the shapes attached to it
and a list of child components. Children are owned outright: destroying a
component destroys every descendant's body first.

Transforms are not inherited. A component's world position and angle are
whatever its own body reports, so drawing re-establishes each node's world
transform instead of compounding it onto the parent's.

Per-kind behaviour (drawing, per-frame bookkeeping) is looked up from the
component's ComponentKind in the handler tables at the bottom of this module.
"""

import logging
import math
import numpy as np
import pymunk
from typing import Dict, List, Optional, Sequence

from .joint_types import ComponentKind
from .physics import create_body


logger = logging.getLogger(__name__)

DEFAULT_COLOR = (76, 175, 80)
SPOKE_COLOR = (102, 102, 102)
LINE_WIDTH = 0.005


class SceneComponent:
    """
    A node in the scene tree.

    Attributes:
        simulation: Owning object exposing a pymunk ``space``
        kind: ComponentKind selecting draw/update behaviour
        body: Owned pymunk body, or None
        shapes: Shapes attached to the owned body
        children: Child components (owned)
        payload: Kind-specific data used by the draw/update handlers
        state: Values recorded by the update handler each frame
    """

    def __init__(self,
                 simulation,
                 kind: ComponentKind,
                 body_type: Optional[str] = 'dynamic',
                 position: Sequence[float] = (0.0, 0.0),
                 angle: float = 0.0):
        """
        Initialize a scene component.

        Args:
            simulation: Object exposing the pymunk ``space`` bodies are added to
            kind: ComponentKind of this component
            body_type: 'dynamic', 'static', 'kinematic', or None for no body
            position: Initial world position of the body origin
            angle: Initial world angle of the body (radians)
        """
        self.simulation = simulation
        self.kind = ComponentKind(kind)
        self.children: List['SceneComponent'] = []
        self.shapes: List[pymunk.Shape] = []
        self.payload: Dict[str, object] = {}
        self.state: Dict[str, object] = {}
        self.body: Optional[pymunk.Body] = None
        if body_type is not None:
            self.body = create_body(body_type, position, angle)

    @property
    def space(self) -> pymunk.Space:
        return self.simulation.space

    @property
    def position(self) -> np.ndarray:
        if self.body is None:
            return np.zeros(2)
        return np.array(self.body.position, dtype=float)

    @position.setter
    def position(self, position: Sequence[float]) -> None:
        self.body.position = (float(position[0]), float(position[1]))

    @property
    def angle(self) -> float:
        if self.body is None:
            return 0.0
        return float(self.body.angle)

    @angle.setter
    def angle(self, angle: float) -> None:
        self.body.angle = float(angle)

    @property
    def in_space(self) -> bool:
        return self.body is not None and self.body in self.space.bodies

    def add_shape(self, shape: pymunk.Shape) -> pymunk.Shape:
        """
        Attach a shape created on this component's body.

        Shapes of a component whose body is already in the space are added
        to the space immediately.
        """
        if self.body is None or shape.body is not self.body:
            raise ValueError("Shape must be created on this component's body")
        self.shapes.append(shape)
        if self.in_space:
            self.space.add(shape)
        return shape

    def add_to_space(self) -> None:
        """Add the body and its shapes to the space (no-op when already added)."""
        if self.body is None or self.in_space:
            return
        self.space.add(self.body, *self.shapes)

    def add_child(self, child: 'SceneComponent') -> None:
        """
        Add a child component.

        Raises:
            TypeError: If child is not a SceneComponent
        """
        if not isinstance(child, SceneComponent):
            raise TypeError(f"Child must be a SceneComponent, got {type(child).__name__}")
        self.children.append(child)

    def remove_child(self, child: 'SceneComponent') -> None:
        """
        Remove a child component (it is not destroyed).

        Raises:
            TypeError: If child is not a SceneComponent
        """
        if not isinstance(child, SceneComponent):
            raise TypeError(f"Child must be a SceneComponent, got {type(child).__name__}")
        if child in self.children:
            self.children.remove(child)

    def walk(self):
        """Yield this component and all descendants, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def draw(self, canvas) -> None:
        """
        Draw this component in its own world transform, then its children.

        Args:
            canvas: Canvas (or any object with save/restore/translate/rotate
                and the drawing primitives)
        """
        canvas.save()
        if self.body is not None:
            x, y = self.body.position
            canvas.translate(x, y)
            canvas.rotate(self.body.angle)
        handler = DRAW_HANDLERS.get(self.kind)
        if handler is not None:
            handler(self, canvas)
        canvas.restore()

        for child in self.children:
            child.draw(canvas)

    def update(self, params: Optional[dict] = None) -> None:
        """Run this component's update handler, then each child's (pre-order)."""
        handler = UPDATE_HANDLERS.get(self.kind)
        if handler is not None:
            handler(self, params or {})
        for child in self.children:
            child.update(params)

    def destroy(self) -> None:
        """
        Destroy all children, then this component's body.

        Removes the body, its shapes and every constraint attached to it from
        the space. Afterwards the component owns nothing.
        """
        for child in self.children:
            child.destroy()
        self.children = []

        if self.body is not None:
            space = self.space
            attached = [c for c in space.constraints if c.a is self.body or c.b is self.body]
            if attached:
                space.remove(*attached)
            shapes = [shape for shape in self.shapes if shape in space.shapes]
            if self.body in space.bodies:
                space.remove(self.body, *shapes)
            elif shapes:
                space.remove(*shapes)
            logger.debug("Destroyed %s body (%d shapes, %d constraints)",
                         self.kind.value, len(shapes), len(attached))
        self.body = None
        self.shapes = []
        self.payload = {}

    def __repr__(self) -> str:
        return f"SceneComponent({self.kind.value}, children={len(self.children)})"


def _shape_color(shape: pymunk.Shape):
    return getattr(shape, 'color', DEFAULT_COLOR)


def _draw_shapes(component: SceneComponent, canvas) -> None:
    for shape in component.shapes:
        if isinstance(shape, pymunk.Circle):
            canvas.circle(tuple(shape.offset), shape.radius, _shape_color(shape), LINE_WIDTH)
        elif isinstance(shape, pymunk.Poly):
            canvas.polygon([tuple(v) for v in shape.get_vertices()], _shape_color(shape), LINE_WIDTH)


def _draw_wheel(component: SceneComponent, canvas) -> None:
    spokes = component.payload.get('spokes', 8)
    for shape in component.shapes:
        if not isinstance(shape, pymunk.Circle):
            continue
        radius = shape.radius
        canvas.circle((0.0, 0.0), radius, _shape_color(shape), LINE_WIDTH)
        for i in range(spokes):
            theta = i * 2.0 * math.pi / spokes
            canvas.line((0.0, 0.0), (radius * math.cos(theta), radius * math.sin(theta)),
                        SPOKE_COLOR, 0.003)


def _draw_ground(component: SceneComponent, canvas) -> None:
    width = component.payload['width']
    height = component.payload['height']
    color = component.payload.get('color', (51, 51, 51))
    canvas.rect(-width / 2, -height / 2, width, height, color, LINE_WIDTH)


def _update_frame(component: SceneComponent, params: dict) -> None:
    component.state['position'] = tuple(component.position)
    component.state['angle'] = component.angle


def _update_fork(component: SceneComponent, params: dict) -> None:
    slider = component.payload.get('slider')
    if slider is None:
        return
    travel = slider.translation()
    component.state['travel'] = travel
    component.state['max_travel'] = max(travel, component.state.get('max_travel', travel))


def _update_swingarm(component: SceneComponent, params: dict) -> None:
    component.state['angle'] = component.angle


def _update_wheel(component: SceneComponent, params: dict) -> None:
    if component.body is not None:
        component.state['angular_velocity'] = float(component.body.angular_velocity)


DRAW_HANDLERS = {
    ComponentKind.GROUND: _draw_ground,
    ComponentKind.FRAME: _draw_shapes,
    ComponentKind.FORK: _draw_shapes,
    ComponentKind.SWINGARM: _draw_shapes,
    ComponentKind.WHEEL: _draw_wheel,
}

# Ground has nothing to record
UPDATE_HANDLERS = {
    ComponentKind.FRAME: _update_frame,
    ComponentKind.FORK: _update_fork,
    ComponentKind.SWINGARM: _update_swingarm,
    ComponentKind.WHEEL: _update_wheel,
}
