"""Angular layout of a range image: which beam angle belongs to which row and column."""

from __future__ import annotations

import enum
import logging
import math
from bisect import bisect_right
from collections.abc import Iterable, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class ProjectionError(ValueError):
    """Raised when projection parameters are missing, malformed or inconsistent."""


class Direction(enum.Enum):
    """Direction in which a span of beams is laid out."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class SpanParams:
    """A range of angles (in radians) covered by a number of equally spaced beams."""

    __slots__ = ("start_angle", "end_angle", "num_beams", "_step")

    def __init__(
        self, start_angle: float = 0.0, end_angle: float = 0.0, num_beams: int = 0
    ) -> None:
        self.start_angle = float(start_angle)
        self.end_angle = float(end_angle)
        self.num_beams = int(num_beams)
        self._step = (
            (self.end_angle - self.start_angle) / self.num_beams
            if self.num_beams
            else 0.0
        )

    @classmethod
    def from_step(cls, start_angle: float, end_angle: float, step: float) -> SpanParams:
        """Build a span from its angular step; the beam count is rounded down."""
        num_beams = math.floor((end_angle - start_angle) / step)
        span = cls(start_angle, end_angle, num_beams)
        span._step = float(step)
        return span

    @property
    def step(self) -> float:
        """Angle between neighbouring beams (negative for descending spans)."""
        return self._step

    @property
    def span(self) -> float:
        """Absolute angle covered by the span."""
        return abs(self.end_angle - self.start_angle)

    @property
    def valid(self) -> bool:
        return self.num_beams > 0 and self.span > 0.0

    def __repr__(self) -> str:
        return (
            f"SpanParams(start_angle={self.start_angle!r}, "
            f"end_angle={self.end_angle!r}, num_beams={self.num_beams!r}, "
            f"step={self._step!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpanParams):
            return NotImplemented
        return (
            self.start_angle,
            self.end_angle,
            self.num_beams,
            self._step,
        ) == (other.start_angle, other.end_angle, other.num_beams, other._step)


def _beam_angles(spans: Iterable[SpanParams]) -> list[float]:
    angles: list[float] = []
    for span in spans:
        angle = span.start_angle
        for _ in range(span.num_beams):
            angles.append(angle)
            angle += span.step
    return angles


def _find_closest(angles: Sequence[float], value: float) -> int:
    if not angles:
        raise ProjectionError("no angles to search")
    count = len(angles)
    if angles[0] < angles[-1]:
        found = bisect_right(angles, value)
    else:
        found = count - bisect_right(angles[::-1], value)
    if found == 0:
        return 0
    if found == count:
        return count - 1
    diff_next = abs(angles[found] - value)
    diff_prev = abs(value - angles[found - 1])
    return found if diff_next < diff_prev else found - 1


class ProjectionParams:
    """Row and column angles of a projection, with their sines and cosines."""

    def __init__(self) -> None:
        self._v_span = SpanParams()
        self._h_span = SpanParams()
        self._col_angles: list[float] = []
        self._row_angles: list[float] = []
        self._col_sines: list[float] = []
        self._col_cosines: list[float] = []
        self._row_sines: list[float] = []
        self._row_cosines: list[float] = []

    def set_span(
        self, spans: SpanParams | Sequence[SpanParams], direction: Direction
    ) -> None:
        """Lay out one or several consecutive spans along a direction."""
        span_list = [spans] if isinstance(spans, SpanParams) else list(spans)
        if not span_list:
            raise ProjectionError("at least one span is needed")
        num_beams = sum(span.num_beams for span in span_list)
        combined = SpanParams(
            span_list[0].start_angle, span_list[-1].end_angle, num_beams
        )
        if direction is Direction.HORIZONTAL:
            self._h_span = combined
            self._col_angles = _beam_angles(span_list)
        elif direction is Direction.VERTICAL:
            self._v_span = combined
            self._row_angles = _beam_angles(span_list)
        else:
            raise ProjectionError(f"unknown direction: {direction!r}")
        self._fill_cos_sin()

    @property
    def rows(self) -> int:
        return len(self._row_angles)

    @property
    def cols(self) -> int:
        return len(self._col_angles)

    @property
    def size(self) -> int:
        return self.rows * self.cols

    @property
    def v_start_angle(self) -> float:
        return self._v_span.start_angle

    @property
    def v_end_angle(self) -> float:
        return self._v_span.end_angle

    @property
    def v_span(self) -> float:
        return self._v_span.span

    @property
    def h_start_angle(self) -> float:
        return self._h_span.start_angle

    @property
    def h_end_angle(self) -> float:
        return self._h_span.end_angle

    @property
    def h_span(self) -> float:
        return self._h_span.span

    def angle_from_row(self, row: int) -> float:
        """Vertical angle of a row."""
        if 0 <= row < len(self._row_angles):
            return self._row_angles[row]
        raise IndexError(f"row {row} is wrong")

    def angle_from_col(self, col: int) -> float:
        """Horizontal angle of a column; one turn past either end wraps around."""
        count = len(self._col_angles)
        actual = col
        if col < 0:
            actual = col + count
        elif col >= count:
            actual = col - count
        if not 0 <= actual < count:
            raise IndexError(f"col {col} is wrong")
        return self._col_angles[actual]

    def row_from_angle(self, angle: float) -> int:
        """Row whose angle is closest to the given one."""
        return _find_closest(self._row_angles, angle)

    def col_from_angle(self, angle: float) -> int:
        """Column whose angle is closest to the given one."""
        return _find_closest(self._col_angles, angle)

    @property
    def row_angle_cosines(self) -> tuple[float, ...]:
        return tuple(self._row_cosines)

    @property
    def col_angle_cosines(self) -> tuple[float, ...]:
        return tuple(self._col_cosines)

    @property
    def row_angle_sines(self) -> tuple[float, ...]:
        return tuple(self._row_sines)

    @property
    def col_angle_sines(self) -> tuple[float, ...]:
        return tuple(self._col_sines)

    def validate(self) -> bool:
        """Return True, or raise ProjectionError describing what is missing."""
        if not (self._v_span.valid and self._h_span.valid):
            raise ProjectionError("Projection parameters invalid.")
        if not self._row_angles and not self._col_angles:
            raise ProjectionError("Projection parameters arrays not filled.")
        if not (
            self._row_sines or self._row_cosines or self._col_sines or self._col_cosines
        ):
            raise ProjectionError(
                "Projection parameters sin and cos arrays not filled."
            )
        return True

    def _fill_cos_sin(self) -> None:
        self._row_sines = [math.sin(a) for a in self._row_angles]
        self._row_cosines = [math.cos(a) for a in self._row_angles]
        self._col_sines = [math.sin(a) for a in self._col_angles]
        self._col_cosines = [math.cos(a) for a in self._col_angles]

    @classmethod
    def _preset(cls, horizontal: SpanParams, vertical: Sequence[SpanParams]) -> ProjectionParams:
        params = cls()
        params.set_span(horizontal, Direction.HORIZONTAL)
        params.set_span(vertical, Direction.VERTICAL)
        params.validate()
        return params

    @classmethod
    def vlp_16(cls) -> ProjectionParams:
        """Parameters for a 16 beam Velodyne."""
        return cls._preset(
            SpanParams(math.radians(-180), math.radians(180), 870),
            [SpanParams(math.radians(15), math.radians(-15), 16)],
        )

    @classmethod
    def hdl_32(cls) -> ProjectionParams:
        """Parameters for a 32 beam Velodyne."""
        return cls._preset(
            SpanParams(math.radians(-180), math.radians(180), 870),
            [SpanParams(math.radians(10.0), math.radians(-30.0), 32)],
        )

    @classmethod
    def hdl_64_equal(cls) -> ProjectionParams:
        """Parameters for a 64 beam Velodyne with equally spaced lasers."""
        return cls._preset(
            SpanParams(math.radians(-180), math.radians(180), 870),
            [SpanParams(math.radians(2.0), math.radians(-24.0), 64)],
        )

    @classmethod
    def hdl_64(cls) -> ProjectionParams:
        """Parameters for a 64 beam Velodyne with its two laser blocks."""
        return cls._preset(
            SpanParams(math.radians(-180), math.radians(180), 870),
            [
                SpanParams(math.radians(2.0), math.radians(-8.5), 32),
                SpanParams(math.radians(-8.87), math.radians(-24.87), 32),
            ],
        )

    @classmethod
    def full_sphere(cls, discretization: float = math.radians(5)) -> ProjectionParams:
        """Parameters covering the whole sphere at the given angular step."""
        return cls._preset(
            SpanParams.from_step(math.radians(-180), math.radians(180), discretization),
            [SpanParams.from_step(math.radians(-90), math.radians(90), discretization)],
        )

    @classmethod
    def from_config_file(cls, path: str | Path) -> ProjectionParams:
        """Read parameters from a text config.

        Each non-comment line reads ``cols;rows;h_start;h_end;row_1;...;row_n``
        with angles in degrees; lines starting with ``#`` are skipped.
        """
        logger.info("Reading config.")
        params = cls()
        with open(path, encoding="utf-8") as config:
            for raw_line in config:
                line = raw_line.rstrip("\n")
                if line.startswith("#"):
                    logger.info("Skipping commentary: %s", line)
                    continue
                fields = line.split(";")
                if len(fields) < 5:
                    raise ProjectionError("format of line is wrong.")
                cols = int(fields[0])
                rows = int(fields[1])
                params._h_span = SpanParams(
                    math.radians(float(fields[2])),
                    math.radians(float(fields[3])),
                    cols,
                )
                h_span = params._h_span
                logger.info(
                    "start:%f, stop:%f, span:%f, step:%f",
                    math.degrees(h_span.start_angle),
                    math.degrees(h_span.end_angle),
                    math.degrees(h_span.span),
                    math.degrees(h_span.step),
                )
                params._col_angles.extend(
                    h_span.start_angle + h_span.step * c for c in range(cols)
                )
                params._v_span = SpanParams(
                    math.radians(float(fields[4])),
                    math.radians(float(fields[-1])),
                    rows,
                )
                params._row_angles.extend(
                    math.radians(float(value)) for value in fields[4:]
                )
                if len(params._row_angles) != rows:
                    raise ProjectionError("wrong config")
        params._fill_cos_sin()
        params.validate()
        logger.info(
            "Params successfully read. Rows: %d, Cols: %d", params.rows, params.cols
        )
        return params