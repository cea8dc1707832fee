from __future__ import annotations

import math

import numpy as np
import pytest

from temperaturemap.models import RawPoint, ScreenPoint
from temperaturemap.projection import (
    EquirectangularProjection,
    project_all,
    project_ring,
)


@pytest.fixture
def projection() -> EquirectangularProjection:
    return EquirectangularProjection(width=960, height=480, scale=153)


def test_origin_maps_to_canvas_centre(projection):
    assert projection(0, 0) == ScreenPoint(480.0, 240.0)


def test_north_is_up_and_east_is_right(projection):
    p = projection(90, 45)
    assert p.x == pytest.approx(480 + 153 * math.pi / 2)
    assert p.y == pytest.approx(240 - 153 * math.pi / 4)


def test_out_of_domain_projects_to_none(projection):
    assert projection(181, 0) is None
    assert projection(0, -91) is None
    assert projection(float("nan"), 0) is None
    assert projection(0, float("inf")) is None


def test_fitted_scale_keeps_world_inside_canvas():
    proj = EquirectangularProjection.fitted(960, 480)
    left, right = proj(-180, 0), proj(180, 0)
    top, bottom = proj(0, 90), proj(0, -90)
    assert left.x >= 0 and right.x <= 960
    assert top.y >= 0 and bottom.y <= 480


def test_for_canvas_without_scale_is_fitted():
    assert EquirectangularProjection.for_canvas(960, 480) == (
        EquirectangularProjection.fitted(960, 480)
    )
    assert EquirectangularProjection.for_canvas(960, 480, 153).scale == 153

def test_project_all_is_index_aligned_with_gaps(projection):
    raw = (RawPoint(0, 0), RawPoint(200, 0), RawPoint(-10, 5))
    grid = project_all(raw, projection)
    assert len(grid) == 3
    assert grid.points[1] is None
    assert grid.points[0] == projection(0, 0)
    assert grid.points[2] == projection(-10, 5)
    np.testing.assert_array_equal(grid.index, [0, 2])
    assert grid.projected_count == 2
    assert grid.xs[1] == pytest.approx(grid.points[2].x)


def test_project_all_is_deterministic(projection):
    raw = tuple(RawPoint(lon, lat) for lon, lat in [(1.5, 2.5), (-179.9, 89.9)])
    first = project_all(raw, projection)
    second = project_all(raw, projection)
    assert first.points == second.points


def test_vectorised_matches_scalar(projection):
    lons = np.array([-120.0, 0.0, 33.3])
    lats = np.array([10.0, -45.0, 80.0])
    xs, ys, valid = projection.project_arrays(lons, lats)
    assert valid.all()
    for x, y, lon, lat in zip(xs, ys, lons, lats):
        p = projection(lon, lat)
        assert (x, y) == pytest.approx((p.x, p.y))


def test_project_ring_drops_invalid_vertices_and_extra_dimensions(projection):
    ring = [[0, 0, 12.0], [10, 0, 3.0], [999, 0, 0.0], [10, 10, 1.0]]
    out = project_ring(ring, projection)
    assert out.shape == (3, 2)
    assert tuple(out[0]) == (480.0, 240.0)


def test_project_ring_empty(projection):
    assert project_ring([], projection).shape == (0, 2)
