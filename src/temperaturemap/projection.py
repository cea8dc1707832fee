"""Coordinate projection — geographic (lon, lat) → canvas (x, y), computed once.

Every frame reuses the same projected arrays; only the temperature values
change between frames, so per-frame work is an index lookup instead of a
trigonometric pass over every grid point.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from temperaturemap.models import RawPoint, ScreenPoint


@dataclass(frozen=True)
class EquirectangularProjection:
    """Plate carrée centred on the canvas midpoint.

    x = width/2 + scale * λ,  y = height/2 - scale * φ   (λ, φ in radians)
    """

    width: float = 960
    height: float = 480
    scale: float = 153

    @classmethod
    def fitted(cls, width: float, height: float) -> "EquirectangularProjection":
        """Largest scale at which the whole world fits the canvas."""
        scale = min(width / (2 * math.pi), height / math.pi)
        return cls(width=width, height=height, scale=scale)

    @classmethod
    def for_canvas(
        cls, width: float, height: float, scale: float | None = None
    ) -> "EquirectangularProjection":
        """Explicit scale when given, otherwise the fitted one."""
        if scale is None:
            return cls.fitted(width, height)
        return cls(width=width, height=height, scale=scale)

    def __call__(self, lon: float, lat: float) -> ScreenPoint | None:
        """Project a single coordinate. None when outside the domain."""
        if not (math.isfinite(lon) and math.isfinite(lat)):
            return None
        if not (-180 <= lon <= 180 and -90 <= lat <= 90):
            return None
        return ScreenPoint(
            x=self.width / 2 + self.scale * math.radians(lon),
            y=self.height / 2 - self.scale * math.radians(lat),
        )

    def project_arrays(
        self, lons: np.ndarray, lats: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Vectorised form. Returns (xs, ys, valid) with NaN where invalid."""
        lons = np.asarray(lons, dtype=float)
        lats = np.asarray(lats, dtype=float)
        with np.errstate(invalid="ignore"):
            valid = (
                np.isfinite(lons)
                & np.isfinite(lats)
                & (np.abs(lons) <= 180)
                & (np.abs(lats) <= 90)
            )
        xs = np.where(valid, self.width / 2 + self.scale * np.radians(lons), np.nan)
        ys = np.where(valid, self.height / 2 - self.scale * np.radians(lats), np.nan)
        return xs, ys, valid


@dataclass(frozen=True)
class ProjectedGrid:
    """Screen positions aligned index-for-index with the raw coordinates.

    ``points[i]`` is None for unprojectable coordinates. ``index`` lists the
    raw indices that did project, in ascending order, with ``xs``/``ys`` as
    the matching positions.
    """

    points: tuple[ScreenPoint | None, ...]
    index: np.ndarray = field(repr=False)
    xs: np.ndarray = field(repr=False)
    ys: np.ndarray = field(repr=False)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def projected_count(self) -> int:
        return len(self.index)


def project_all(
    coordinates: Sequence[RawPoint], projection: EquirectangularProjection
) -> ProjectedGrid:
    """Project every raw coordinate once.

    Args:
        coordinates: Raw archive coordinates (length N).
        projection: Projection to apply.

    Returns:
        ProjectedGrid of length N.
    """
    n = len(coordinates)
    lons = np.fromiter((c.lon for c in coordinates), dtype=float, count=n)
    lats = np.fromiter((c.lat for c in coordinates), dtype=float, count=n)
    xs, ys, valid = projection.project_arrays(lons, lats)

    points = tuple(
        ScreenPoint(x=float(x), y=float(y)) if ok else None
        for x, y, ok in zip(xs, ys, valid)
    )
    index = np.flatnonzero(valid)
    return ProjectedGrid(points=points, index=index, xs=xs[index], ys=ys[index])


def project_ring(
    ring: Sequence[Sequence[float]], projection: EquirectangularProjection
) -> np.ndarray:
    """Project a polygon ring, dropping vertices outside the domain. Shape (k, 2)."""
    if not len(ring):
        return np.empty((0, 2))
    arr = np.asarray([p[:2] for p in ring], dtype=float)
    xs, ys, valid = projection.project_arrays(arr[:, 0], arr[:, 1])
    return np.column_stack([xs[valid], ys[valid]])
