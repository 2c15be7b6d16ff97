"""
pymotorig - Parametric 2D motorcycle suspension rigs for physics simulation.

This package turns a handful of frame dimensions (tube lengths, pivot
distances, wheel diameters) into a consistent rigid-body-and-joint assembly
that pymunk simulates and pygame draws.

All internal calculations use:
- meters (m) for length, with y pointing down the screen
- seconds (s) for time
- kg/m^2 for material density

Basic usage:
    >>> from pymotorig import Simulation, DEFAULT_PARAMETERS
    >>> sim = Simulation()
    >>> rig = sim.create_world(DEFAULT_PARAMETERS)
    >>> sim.set_running(True)
    >>> sim.step()
"""

# Version information
__version__ = "0.1.0"
__author__ = "pymotorig contributors"

# Errors
from .errors import RigError, GeometryError, ParameterError

# Parameters
from .parameters import (
    Parameter,
    ParameterSet,
    SimulationSettings,
    DEFAULT_PARAMETERS,
    FRAME_GROUP,
    SIMULATION_GROUP,
    parameter_range,
    simulation_settings,
    save_parameters,
    load_parameters,
)

# Geometry solver
from .geometry import (
    AnchorSet,
    GroundGeometry,
    triangle_from_three_sides,
    triangle_from_named_sides,
    triangle_apex_from_edge,
    centroid,
    distance,
    triangle_area,
    generate_geometry,
)

# Joint and component types
from .joint_types import JointType, ComponentKind

# Physics
from .physics import (
    Joint,
    FRAME_CATEGORY,
    GROUND_CATEGORY,
    WHEEL_CATEGORY,
    spring_coefficients,
)

# Scene
from .canvas import Canvas
from .scene_component import SceneComponent
from .ground import GroundComponent
from .motorcycle import MotorcycleRig
from .simulation import Simulation

# Unit conversion utilities
from .units import (
    UNIT_TO_M,
    M_TO_UNIT,
    validate_unit,
    to_m,
    from_m,
    convert,
    format_value,
)

# Define public API
__all__ = [
    # Version
    '__version__',
    '__author__',

    # Errors
    'RigError',
    'GeometryError',
    'ParameterError',

    # Parameters
    'Parameter',
    'ParameterSet',
    'SimulationSettings',
    'DEFAULT_PARAMETERS',
    'FRAME_GROUP',
    'SIMULATION_GROUP',
    'parameter_range',
    'simulation_settings',
    'save_parameters',
    'load_parameters',

    # Geometry
    'AnchorSet',
    'GroundGeometry',
    'triangle_from_three_sides',
    'triangle_from_named_sides',
    'triangle_apex_from_edge',
    'centroid',
    'distance',
    'triangle_area',
    'generate_geometry',

    # Types
    'JointType',
    'ComponentKind',

    # Physics
    'Joint',
    'FRAME_CATEGORY',
    'GROUND_CATEGORY',
    'WHEEL_CATEGORY',
    'spring_coefficients',

    # Scene
    'Canvas',
    'SceneComponent',
    'GroundComponent',
    'MotorcycleRig',
    'Simulation',

    # Unit conversion
    'UNIT_TO_M',
    'M_TO_UNIT',
    'validate_unit',
    'to_m',
    'from_m',
    'convert',
    'format_value',
]
