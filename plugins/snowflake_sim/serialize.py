"""
History Serialization

Turns a SimStateHistory into a short, URL-safe string and back:

    struct-packed record -> zlib (level 9) -> base64url without padding

Record layout (little-endian), version 2:

    u8   version
    u64  seed
    u32  width, u32 height
    u32  last tracked tick
    u32  n_start, n_start x (u32 x, u32 y)
    4 x  (u32 n_points, n_points x (u32 tick, f64 value))
         alpha, beta, gamma, alpha_rand

Strings from an unknown version are rejected rather than guessed at.
Version 1 lacked the last tracked tick.
"""

import base64
import binascii
import logging
import struct
import zlib

from .errors import DecodeError, DecompressError, SchemaError
from .history import SimStateHistory

logger = logging.getLogger(__name__)

FORMAT_VERSION = 2
COMPRESSION_LEVEL = 9

_VERSION = struct.Struct("<B")
_HEADER = struct.Struct("<QIII")
_COUNT = struct.Struct("<I")
_COORD = struct.Struct("<II")
_POINT = struct.Struct("<Id")


def serialize_to_str(history):
    """Encode a history as an opaque shareable string.

    Raises:
        SchemaError: a seed, size, coordinate or tick does not fit the
            record layout
    """
    try:
        payload = _pack(history)
    except struct.error as exc:
        raise SchemaError(
            f"History does not fit the record layout: {exc}") from exc
    compressed = zlib.compress(payload, COMPRESSION_LEVEL)
    text = base64.urlsafe_b64encode(compressed).rstrip(b"=").decode("ascii")
    logger.debug("Serialized history: %d bytes packed, %d chars encoded",
                 len(payload), len(text))
    return text


def deserialize_from_str(text):
    """Rebuild a history from a string made by serialize_to_str.

    Raises:
        DecodeError: text is not unpadded URL-safe base64
        DecompressError: compressed stream is corrupt or truncated
        SchemaError: record layout or version does not match
    """
    try:
        raw = text.encode("ascii")
    except (AttributeError, UnicodeEncodeError) as exc:
        raise DecodeError("History string must be ASCII text") from exc
    if raw.endswith(b"="):
        raise DecodeError("History string must not be padded")
    if b"+" in raw or b"/" in raw:
        raise DecodeError("History string must use the URL-safe alphabet")
    try:
        compressed = base64.b64decode(raw + b"=" * (-len(raw) % 4),
                                      altchars=b"-_", validate=True)
    except binascii.Error as exc:
        raise DecodeError(f"Invalid base64 history string: {exc}") from exc
    try:
        payload = zlib.decompress(compressed)
    except zlib.error as exc:
        raise DecompressError(f"Corrupt history stream: {exc}") from exc
    return _unpack(payload)


def _pack(history):
    width, height = history.size
    parts = [_VERSION.pack(FORMAT_VERSION),
             _HEADER.pack(history.seed, width, height,
                          history.last_tick)]
    parts.append(_COUNT.pack(len(history.start_filled)))
    parts.extend(_COORD.pack(x, y) for x, y in history.start_filled)
    for timeline in history.timelines():
        parts.append(_COUNT.pack(len(timeline.history)))
        parts.extend(_POINT.pack(tick, value)
                     for tick, value in timeline.history)
    return b"".join(parts)


class _Reader:
    """Sequential struct reader over a byte payload."""

    def __init__(self, payload):
        self.payload = payload
        self.offset = 0

    def read(self, fmt):
        try:
            values = fmt.unpack_from(self.payload, self.offset)
        except struct.error as exc:
            raise SchemaError(
                f"Truncated history record at byte {self.offset}") from exc
        self.offset += fmt.size
        return values

    def read_count(self, item_fmt):
        (count,) = self.read(_COUNT)
        remaining = len(self.payload) - self.offset
        if count * item_fmt.size > remaining:
            raise SchemaError(
                f"Record claims {count} entries but only {remaining} bytes remain")
        return count


def _unpack(payload):
    reader = _Reader(payload)
    (version,) = reader.read(_VERSION)
    if version != FORMAT_VERSION:
        raise SchemaError(f"Unsupported history format version {version}")
    seed, width, height, last_tick = reader.read(_HEADER)

    history = SimStateHistory(seed=seed, size=(width, height),
                              last_tick=last_tick)
    for _ in range(reader.read_count(_COORD)):
        x, y = reader.read(_COORD)
        if x >= width or y >= height:
            raise SchemaError(
                f"Start cell ({x}, {y}) outside {width}x{height} lattice")
        history.start_filled.append((x, y))

    for timeline in history.timelines():
        points = [reader.read(_POINT)
                  for _ in range(reader.read_count(_POINT))]
        _check_ticks(points)
        timeline.history.extend(points)

    _check_timelines(history)

    if reader.offset != len(payload):
        raise SchemaError(
            f"{len(payload) - reader.offset} trailing bytes after history record")
    logger.debug("Deserialized history: %dx%d, %d start cells",
                 width, height, len(history.start_filled))
    return history


def _check_ticks(points):
    for (tick_a, _), (tick_b, _) in zip(points, points[1:]):
        if tick_b <= tick_a:
            raise SchemaError(
                f"Timeline ticks not increasing ({tick_a} then {tick_b})")


def _check_timelines(history):
    """Playback needs all four timelines, or none for an untracked history."""
    filled = [bool(t.history) for t in history.timelines()]
    if not any(filled):
        return
    width, height = history.size
    if not all(filled):
        raise SchemaError("History record has empty parameter timelines")
    if width <= 0 or height <= 0:
        raise SchemaError(f"Tracked history has empty {width}x{height} lattice")
    last_point = max(t.last_tick for t in history.timelines())
    if history.last_tick < last_point:
        raise SchemaError(
            f"Last tracked tick {history.last_tick} precedes change point "
            f"at tick {last_point}")
