"""Projection of 3D point clouds onto a depth image laid out by ProjectionParams."""

from __future__ import annotations

import abc
import copy
import enum
import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass, replace

import numpy as np

from depthcluster.projection_params import ProjectionError, ProjectionParams

logger = logging.getLogger(__name__)

_MIN_DIST_TO_SENSOR = 0.01
_MIN_CORRECTED_DEPTH = 0.001


@dataclass
class Point:
    """A 3D point with the index of the laser ring that measured it."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    ring: int = 0

    def dist_to_sensor_2d(self) -> float:
        """Distance to the sensor in the horizontal plane."""
        return math.hypot(self.x, self.y)

    def dist_to_sensor_3d(self) -> float:
        """Euclidean distance to the sensor."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


class ProjectionType(enum.Enum):
    """Kind of projection used to build a depth image."""

    SPHERICAL = "spherical"
    CYLINDRICAL = "cylindrical"


class CloudProjection(abc.ABC):
    """A depth image together with the indices of the points that fell into each pixel."""

    def __init__(self, params: ProjectionParams) -> None:
        params.validate()
        self._params = params
        self._data: list[list[list[int]]] = [
            [[] for _ in range(params.cols)] for _ in range(params.rows)
        ]
        self._depth_image = np.zeros((params.rows, params.cols), dtype=np.float32)
        self._corrections: list[float] = []

    @property
    def rows(self) -> int:
        return self._params.rows

    @property
    def cols(self) -> int:
        return self._params.cols

    @property
    def size(self) -> int:
        return self._params.size

    @property
    def params(self) -> ProjectionParams:
        return self._params

    @property
    def depth_image(self) -> np.ndarray:
        """The depth image; float32 array of shape (rows, cols)."""
        return self._depth_image

    def clone_depth_image(self, image: np.ndarray) -> None:
        """Replace the depth image with a copy of the given one."""
        self._depth_image = np.array(image, copy=True)

    def at(self, row: int, col: int) -> list[int]:
        """Indices of the points projected into the given pixel."""
        return self._data[row][col]

    def check_image_and_storage(self, image: np.ndarray) -> None:
        """Raise ProjectionError unless the image fits this projection."""
        if image.dtype != np.float32:
            raise ProjectionError("wrong image format")
        if not self._data:
            raise ProjectionError("_data size is < 1")
        if image.ndim != 2 or image.shape != (self.rows, self.cols):
            raise ProjectionError("_data dimensions do not correspond to image ones")

    def check_cloud_and_storage(self, points: Sequence[Point]) -> None:
        """Raise ProjectionError if there is no storage or no points."""
        if not self._data:
            raise ProjectionError("_data size is < 1")
        if not points:
            raise ProjectionError("cannot fill from cloud: no points")

    def unproject_point(self, image: np.ndarray, row: int, col: int) -> Point:
        """Turn a pixel of a depth image back into a 3D point."""
        depth = float(image[row, col])
        angle_z = self._params.angle_from_row(row)
        angle_xy = self._params.angle_from_col(col)
        return Point(
            depth * math.cos(angle_z) * math.cos(angle_xy),
            depth * math.cos(angle_z) * math.sin(angle_xy),
            depth * math.sin(angle_z),
        )

    def set_corrections(self, corrections: Sequence[float]) -> None:
        """Set per-beam depth corrections for systematic sensor error."""
        self._corrections = [float(c) for c in corrections]

    def fix_depth_systematic_error_if_needed(self) -> bool:
        """Subtract the per-row correction from every measured pixel.

        Returns True if corrections were applied.
        """
        image_rows = self._depth_image.shape[0]
        if image_rows < 1:
            logger.info("image of wrong size, not correcting depth")
            return False
        if len(self._corrections) != image_rows:
            logger.info("Not correcting depth data.")
            return False
        corrections = np.asarray(self._corrections, dtype=np.float32)[:, np.newaxis]
        measured = self._depth_image >= _MIN_CORRECTED_DEPTH
        self._depth_image -= np.where(measured, corrections, np.float32(0.0))
        return True

    def _store(self, index: int, row: int, col: int, depth: float) -> None:
        self._data[row][col].append(index)
        if self._depth_image[row, col] < depth:
            self._depth_image[row, col] = depth

    @abc.abstractmethod
    def init_from_points(self, points: Sequence[Point]) -> None:
        """Fill the projection from 3D points."""

    @abc.abstractmethod
    def clone(self) -> CloudProjection:
        """Return an independent copy of this projection."""


class SphericalProjection(CloudProjection):
    """Projection binning points by their elevation and azimuth angles."""

    def init_from_points(self, points: Sequence[Point]) -> None:
        self.check_cloud_and_storage(points)
        for index, point in enumerate(points):
            dist = point.dist_to_sensor_3d()
            if dist < _MIN_DIST_TO_SENSOR:
                continue
            ratio = max(-1.0, min(1.0, point.z / dist))
            angle_rows = math.asin(ratio)
            angle_cols = math.atan2(point.y, point.x)
            row = self._params.row_from_angle(angle_rows)
            col = self._params.col_from_angle(angle_cols)
            self._store(index, row, col, dist)
        self.fix_depth_systematic_error_if_needed()

    def clone(self) -> SphericalProjection:
        return copy.deepcopy(self)


class RingProjection(CloudProjection):
    """Projection using each point's ring as its row and its azimuth as its column."""

    def init_from_points(self, points: Sequence[Point]) -> None:
        logger.info("Projecting cloud with %d points", len(points))
        started = time.perf_counter()
        self.check_cloud_and_storage(points)
        for index, point in enumerate(points):
            dist = point.dist_to_sensor_2d()
            if dist < _MIN_DIST_TO_SENSOR:
                continue
            angle_cols = math.atan2(point.y, point.x)
            col = self._params.col_from_angle(angle_cols)
            row = point.ring
            if not 0 <= row < self.rows:
                raise IndexError(f"ring {row} is outside of {self.rows} rows")
            self._store(index, row, col, dist)
        elapsed_us = int((time.perf_counter() - started) * 1e6)
        logger.info("Cloud projected in %d us", elapsed_us)

    def clone(self) -> RingProjection:
        return copy.deepcopy(self)

    def unproject_point(self, image: np.ndarray, row: int, col: int) -> Point:
        point = super().unproject_point(image, row, col)
        return replace(point, ring=row)