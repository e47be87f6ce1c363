"""
Wall segments and the wall index the sweep engine reads from.

The sweep engine never owns walls. It receives a WallIndex capability and
asks it for the segments near the region being swept. SegmentIndex is an
immutable in-memory snapshot suitable for one or many computations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Protocol, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

Point = Tuple[float, float]


class WallIndexUnavailable(RuntimeError):
    """Raised by a wall index that cannot answer queries yet (scene not ready)."""

    pass


class WallSense(IntEnum):
    """How a wall interacts with the sweep.

    NONE walls are ignored, NORMAL walls block, and LIMITED walls are seen
    through once: a ray stops at the second limited wall it crosses.
    """

    NONE = 0
    LIMITED = 10
    NORMAL = 20


@dataclass(frozen=True)
class BoundarySegment:
    """An opaque line segment.

    Attributes:
        a: First endpoint (x, y)
        b: Second endpoint (x, y)
        sense: Blocking behaviour for the sweep
        id: Optional identifier of the wall this segment came from; synthetic
            segments leave it as None
    """

    a: Point
    b: Point
    sense: WallSense = WallSense.NORMAL
    id: str | int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "a", (float(self.a[0]), float(self.a[1])))
        object.__setattr__(self, "b", (float(self.b[0]), float(self.b[1])))
        object.__setattr__(self, "sense", WallSense(self.sense))

    @property
    def blocks(self) -> bool:
        """True when the segment can stop a ray."""
        return self.sense != WallSense.NONE

    @property
    def is_degenerate(self) -> bool:
        """True when both endpoints coincide."""
        return self.a == self.b


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding region."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def around(cls, center: Point, radius: float) -> "Bounds":
        """Square region enclosing the circle of `radius` around `center`."""
        cx, cy = center
        return cls(cx - radius, cy - radius, cx + radius, cy + radius)


class WallIndex(Protocol):
    """Read-only spatial query over the scene's walls."""

    def query_near(self, bounds: Bounds) -> Iterable[BoundarySegment]:
        """Return segments potentially relevant to `bounds`.

        Must accept regions larger than the scene. May return extra
        segments; the sweep engine discards what it does not hit.
        """
        ...


class SegmentIndex:
    """Immutable snapshot of walls with bounding-box queries.

    Parameters:
        segments: Walls in the scene, in world coordinates
    """

    def __init__(self, segments: Iterable[BoundarySegment] = ()) -> None:
        self._segments: Tuple[BoundarySegment, ...] = tuple(segments)
        if self._segments:
            coords = np.array(
                [[s.a[0], s.a[1], s.b[0], s.b[1]] for s in self._segments],
                dtype=np.float64
            )
            self._min = np.minimum(coords[:, 0:2], coords[:, 2:4])
            self._max = np.maximum(coords[:, 0:2], coords[:, 2:4])
        else:
            self._min = np.empty((0, 2), dtype=np.float64)
            self._max = np.empty((0, 2), dtype=np.float64)

    @classmethod
    def from_coordinates(
        cls,
        coordinates: Sequence[Sequence[float]],
        sense: WallSense = WallSense.NORMAL
    ) -> "SegmentIndex":
        """Build an index from (x1, y1, x2, y2) rows."""
        segments = []
        for i, row in enumerate(coordinates):
            if len(row) != 4:
                raise ValueError(f"coordinates[{i}] must have 4 values (x1, y1, x2, y2), got {len(row)}")
            x1, y1, x2, y2 = row
            segments.append(BoundarySegment((x1, y1), (x2, y2), sense=sense, id=i))
        return cls(segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self):
        return iter(self._segments)

    def query_near(self, bounds: Bounds) -> Tuple[BoundarySegment, ...]:
        if not self._segments:
            return ()
        mask = (
            (self._max[:, 0] >= bounds.min_x)
            & (self._min[:, 0] <= bounds.max_x)
            & (self._max[:, 1] >= bounds.min_y)
            & (self._min[:, 1] <= bounds.max_y)
        )
        return tuple(s for s, keep in zip(self._segments, mask) if keep)


def segments_to_arrays(
    segments: Sequence[BoundarySegment]
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Split segments into (M, 2) start and end arrays."""
    if not segments:
        empty = np.empty((0, 2), dtype=np.float64)
        return empty, empty.copy()
    starts = np.array([s.a for s in segments], dtype=np.float64)
    ends = np.array([s.b for s in segments], dtype=np.float64)
    return starts, ends


def closed_loop(corners: Sequence[Point], sense: WallSense = WallSense.NORMAL) -> list:
    """Synthetic segments joining `corners` in order and back to the first."""
    n = len(corners)
    return [
        BoundarySegment(corners[i], corners[(i + 1) % n], sense=sense)
        for i in range(n)
    ]
