"""
Hex lattice snowflake growth with recordable, shareable replays.
"""

from .errors import (
    SnowflakeError, BoundsError, SerializationError,
    DecodeError, DecompressError, SchemaError,
)
from .snowflake import SnowflakeSim
from .history import AttribHistory, SimStateHistory
from .serialize import serialize_to_str, deserialize_from_str
from .presets import PRESETS, get_preset, list_presets

__all__ = [
    "SnowflakeSim", "AttribHistory", "SimStateHistory",
    "serialize_to_str", "deserialize_from_str",
    "PRESETS", "get_preset", "list_presets",
    "SnowflakeError", "BoundsError", "SerializationError",
    "DecodeError", "DecompressError", "SchemaError",
]
