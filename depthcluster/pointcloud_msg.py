"""Decoding of packed point cloud messages into points with ring information."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass, field

from depthcluster.cloud_projection import Point

_X_FIELD = 0
_Y_FIELD = 1
_Z_FIELD = 2
_RING_FIELD = 4


@dataclass(frozen=True)
class PointField:
    """Layout of one named field inside every point of a message."""

    name: str
    offset: int
    datatype: int = 7
    count: int = 1


@dataclass
class PointCloudMessage:
    """A point cloud as sent over the wire: a flat byte buffer plus its layout."""

    fields: Sequence[PointField]
    data: bytes
    point_step: int
    row_step: int = 0
    height: int = 1
    width: int = 0
    is_bigendian: bool = False
    is_dense: bool = True
    seq: int = 0
    extra: dict = field(default_factory=dict)


def decode_cloud(message: PointCloudMessage) -> list[Point]:
    """Read x, y, z (float32) and ring (uint16) of every point in the message.

    The coordinates come from the first three fields and the ring from the
    fifth one, as laid out by the sensor driver.
    """
    if len(message.fields) <= _RING_FIELD:
        raise ValueError(
            f"message needs at least {_RING_FIELD + 1} fields, "
            f"got {len(message.fields)}"
        )
    if message.point_step <= 0:
        raise ValueError(f"point step must be positive, got {message.point_step}")
    order = ">" if message.is_bigendian else "<"
    float_fmt = struct.Struct(order + "f")
    ring_fmt = struct.Struct(order + "H")
    x_offset = message.fields[_X_FIELD].offset
    y_offset = message.fields[_Y_FIELD].offset
    z_offset = message.fields[_Z_FIELD].offset
    ring_offset = message.fields[_RING_FIELD].offset
    data = bytes(message.data)

    points: list[Point] = []
    for start in range(0, len(data), message.point_step):
        try:
            (x,) = float_fmt.unpack_from(data, start + x_offset)
            (y,) = float_fmt.unpack_from(data, start + y_offset)
            (z,) = float_fmt.unpack_from(data, start + z_offset)
            (ring,) = ring_fmt.unpack_from(data, start + ring_offset)
        except struct.error as err:
            raise ValueError(
                f"point starting at byte {start} runs past the end of the data"
            ) from err
        points.append(Point(x, y, z, ring))
    return points


def format_message_stats(message: PointCloudMessage) -> str:
    """Human readable summary of a message's header and field layout."""
    lines = [
        "<<<<<<<<<<<<<<< new cloud >>>>>>>>>>>>>>>",
        f"received msg   {message.seq}",
        f"height:        {message.height}",
        f"width:         {message.width}",
        f"num of fields: {len(message.fields)}",
        "fields of each point:",
    ]
    for point_field in message.fields:
        lines.extend(
            [
                f"\tname:     {point_field.name}",
                f"\toffset:   {point_field.offset}",
                f"\tdatatype: {point_field.datatype}",
                f"\tcount:    {point_field.count}",
                "",
            ]
        )
    lines.extend(
        [
            f"is bigendian:  {'true' if message.is_bigendian else 'false'}",
            f"point step:    {message.point_step}",
            f"row step:      {message.row_step}",
            f"data size:     {len(message.data)}",
            f"is dense:      {'true' if message.is_dense else 'false'}",
            "=========================================",
        ]
    )
    return "\n".join(lines) + "\n"