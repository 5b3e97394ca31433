"""
Error Types for the Snowflake Simulation

Stepping and construction are total over well-formed input, so the only
failures are bad lattice coordinates and malformed shared history strings.
All serializer failures derive from SerializationError so a caller can
catch one type at the string boundary.
"""


class SnowflakeError(Exception):
    """Base class for all snowflake_sim errors."""


class BoundsError(SnowflakeError, IndexError):
    """Coordinate outside the interior [0, width) x [0, height) domain."""

    def __init__(self, x, y, width, height):
        super().__init__(
            f"Cell ({x}, {y}) is outside the {width}x{height} lattice")
        self.x = x
        self.y = y
        self.width = width
        self.height = height


class SerializationError(SnowflakeError, ValueError):
    """A shared history string could not be turned back into a history."""


class DecodeError(SerializationError):
    """Input is not valid unpadded URL-safe base64."""


class DecompressError(SerializationError):
    """Compressed stream is corrupt or truncated."""


class SchemaError(SerializationError):
    """Binary layout does not match the expected record format."""
