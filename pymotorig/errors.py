"""
Exception types raised while turning frame parameters into a rig.

Both errors are raised synchronously, before the physics space is touched,
so a caller that catches them can rely on the previous rig being intact.
"""


class RigError(ValueError):
    """Base class for invalid rig input."""


class GeometryError(RigError):
    """
    Raised when lengths or points cannot form the requested geometry.

    Attributes:
        side: Display name of the offending side (None when not applicable)
        compared_to: Lengths the offending side was compared against
    """

    def __init__(self, message: str, side: str = None, compared_to: tuple = ()):
        super().__init__(message)
        self.side = side
        self.compared_to = tuple(compared_to)


class ParameterError(RigError):
    """Raised when a required parameter group or parameter is missing."""
