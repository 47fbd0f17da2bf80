"""Outlines of point clusters: axis-aligned boxes and extruded convex hulls."""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, Union

Vec3 = tuple[float, float, float]
Segment = tuple[Vec3, Vec3]

DEFAULT_COLOR: Vec3 = (1.0, 0.5, 0.2)
OVERSIZED_COLOR: Vec3 = (0.3, 0.3, 0.3)
MIN_HEIGHT = 0.3
_MAX_VOLUME = 20.0
_MAX_EXTENT = 5.0

# Unit box vertices drawn as one connected strip, then the four side edges.
_CUBE_STRIP: tuple[Vec3, ...] = (
    (-0.5, -0.5, -0.5),
    (-0.5, -0.5, 0.5),
    (0.5, -0.5, 0.5),
    (0.5, -0.5, -0.5),
    (-0.5, -0.5, -0.5),
    (-0.5, 0.5, -0.5),
    (-0.5, 0.5, 0.5),
    (0.5, 0.5, 0.5),
    (0.5, 0.5, -0.5),
    (-0.5, 0.5, -0.5),
)
_CUBE_SIDES: tuple[Segment, ...] = (
    ((-0.5, 0.5, -0.5), (-0.5, -0.5, -0.5)),
    ((-0.5, -0.5, 0.5), (-0.5, 0.5, 0.5)),
    ((0.5, -0.5, 0.5), (0.5, 0.5, 0.5)),
    ((0.5, -0.5, -0.5), (0.5, 0.5, -0.5)),
)


class _PointLike(Protocol):
    x: float
    y: float
    z: float


class OutlineType(enum.Enum):
    """Shape used to outline a cluster."""

    BOX = "box"
    POLYGON3D = "polygon3d"


def _strip_segments(vertices: Sequence[Vec3]) -> list[Segment]:
    return list(zip(vertices, vertices[1:]))


@dataclass(frozen=True)
class Cube:
    """An axis-aligned box given by its center and its extent along each axis."""

    center: Vec3
    scale: Vec3
    color: Vec3 = DEFAULT_COLOR

    @property
    def visible(self) -> bool:
        """Boxes lower than the minimal height are not shown."""
        return self.scale[2] >= MIN_HEIGHT

    @property
    def display_color(self) -> Vec3:
        """Color to draw with; oversized boxes are greyed out."""
        sx, sy, sz = self.scale
        if (
            sx * sy * sz > _MAX_VOLUME
            or sx > _MAX_EXTENT
            or sy > _MAX_EXTENT
            or sz > _MAX_EXTENT
        ):
            return OVERSIZED_COLOR
        return self.color

    def _transform(self, vertex: Vec3) -> Vec3:
        return tuple(  # type: ignore[return-value]
            c + s * v for c, s, v in zip(self.center, self.scale, vertex)
        )

    def segments(self) -> list[Segment]:
        """Line segments of the box in world coordinates; empty if not visible."""
        if not self.visible:
            return []
        strip = [self._transform(v) for v in _CUBE_STRIP]
        sides = [(self._transform(a), self._transform(b)) for a, b in _CUBE_SIDES]
        return _strip_segments(strip) + sides


@dataclass(frozen=True)
class Polygon3d:
    """A horizontal polygon extruded upwards by a height."""

    polygon: tuple[Vec3, ...]
    height: float
    color: Vec3 = DEFAULT_COLOR

    def segments(self) -> list[Segment]:
        """Line segments of the bottom, top and vertical edges."""
        if not self.polygon:
            return []
        start = self.polygon[0]
        raised = [(x, y, z + self.height) for x, y, z in self.polygon]
        strip = [*self.polygon, start, *raised, raised[0]]
        sides = [(bottom, top) for bottom, top in zip(self.polygon, raised)]
        return _strip_segments(strip) + sides


Outline = Union[Cube, Polygon3d]


def _cross(o: Sequence[float], a: Sequence[float], b: Sequence[float]) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull_2d(points: Sequence[Sequence[float]]) -> list[int]:
    """Indices of the convex hull vertices of 2D points, counter-clockwise."""
    order = sorted(range(len(points)), key=lambda i: (points[i][0], points[i][1]))
    unique: list[int] = []
    for index in order:
        if not unique or tuple(points[unique[-1]][:2]) != tuple(points[index][:2]):
            unique.append(index)
    if len(unique) <= 2:
        return unique

    def half(indices: Iterable[int]) -> list[int]:
        chain: list[int] = []
        for index in indices:
            while (
                len(chain) >= 2
                and _cross(points[chain[-2]], points[chain[-1]], points[index]) <= 0
            ):
                chain.pop()
            chain.append(index)
        return chain

    lower = half(unique)
    upper = half(reversed(unique))
    return lower[:-1] + upper[:-1]


def cube_from_points(points: Sequence[_PointLike]) -> Cube:
    """Bounding box of a cluster, centered on the mean of its points."""
    if not points:
        raise ValueError("cannot outline an empty cluster")
    count = len(points)
    center = (
        sum(p.x for p in points) / count,
        sum(p.y for p in points) / count,
        sum(p.z for p in points) / count,
    )
    min_point = (min(p.x for p in points), min(p.y for p in points), min(p.z for p in points))
    max_point = (max(p.x for p in points), max(p.y for p in points), max(p.z for p in points))
    extent: Vec3 = (0.0, 0.0, 0.0)
    if min_point[0] < max_point[0]:
        extent = (
            max_point[0] - min_point[0],
            max_point[1] - min_point[1],
            max_point[2] - min_point[2],
        )
    return Cube(center, extent)


def polygon_from_points(points: Sequence[_PointLike]) -> Polygon3d | None:
    """Convex hull of a cluster extruded over its height, or None if it is too flat."""
    min_z = math.inf
    max_z = -math.inf
    flat = []
    for point in points:
        flat.append((point.x, point.y))
        min_z = min(min_z, point.z)
        max_z = max(max_z, point.z)
    if not flat:
        return None
    diff_z = max_z - min_z
    if diff_z < MIN_HEIGHT:
        return None
    hull = tuple((flat[i][0], flat[i][1], min_z) for i in convex_hull_2d(flat))
    return Polygon3d(hull, diff_z)


def outlines_for_clusters(
    clusters: Mapping[object, Sequence[_PointLike]], outline_type: OutlineType
) -> list[Outline]:
    """Outline every cluster with the requested shape, skipping those that give none."""
    outlines: list[Outline] = []
    for cluster in clusters.values():
        if outline_type is OutlineType.BOX:
            outline: Outline | None = cube_from_points(cluster)
        elif outline_type is OutlineType.POLYGON3D:
            outline = polygon_from_points(cluster)
        else:
            raise ValueError(f"unknown outline type: {outline_type!r}")
        if outline is not None:
            outlines.append(outline)
    return outlines