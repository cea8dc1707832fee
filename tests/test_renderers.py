from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from temperaturemap.colors import legend_for, scale_for  # noqa: E402
from temperaturemap.models import DisplayMode, Region, ScreenPoint  # noqa: E402
from temperaturemap.renderers.plotly_map import (  # noqa: E402
    picked_regions,
    render_map_figure,
)
from temperaturemap.renderers.static import frame_png  # noqa: E402
from temperaturemap.selection import SelectionLedger  # noqa: E402

RING = np.array([[100.0, 100.0], [200.0, 100.0], [200.0, 200.0], [100.0, 200.0]])
REGIONS = (
    Region(id="AAA", name="Alpha", rings=(RING,), label_point=ScreenPoint(150, 150)),
    Region(
        id="BBB", name="Beta", rings=(RING + 300,), label_point=ScreenPoint(450, 450)
    ),
)


def _trace(fig, name):
    return next(t for t in fig.data if t.name == name)


def test_plotly_figure_layers(session):
    ledger = SelectionLedger()
    ledger.toggle("BBB", "Beta")
    mode = DisplayMode.ABSOLUTE
    fig = render_map_figure(
        session.frame,
        scale_for(mode),
        legend_for(mode),
        regions=REGIONS,
        selection=ledger,
    )
    heat = _trace(fig, "heat")
    assert len(heat.x) == 2
    assert len(heat.marker.color) == 2
    # Only the unselected region stays masked
    masks = _trace(fig, "masks")
    assert list(masks.x).count(None) == 1
    selected = _trace(fig, "selected")
    assert list(selected.x).count(None) == 1
    labels = _trace(fig, "regions")
    assert [tuple(c) for c in labels.customdata] == [("AAA", "Alpha"), ("BBB", "Beta")]
    assert tuple(fig.layout.yaxis.range) == (480, 0)


def test_plotly_figure_without_regions(session):
    mode = DisplayMode.ANOMALY
    fig = render_map_figure(session.frame, scale_for(mode), legend_for(mode))
    assert len(_trace(fig, "regions").x) == 0


def test_picked_regions_reads_customdata():
    event = {
        "selection": {
            "points": [
                {"customdata": ["AAA", "Alpha"]},
                {"x": 1.0},
            ]
        }
    }
    assert picked_regions(event) == [("AAA", "Alpha")]
    assert picked_regions(None) == []
    assert picked_regions({"selection": {"points": []}}) == []


def test_static_png(session):
    ledger = SelectionLedger()
    ledger.toggle("AAA", "Alpha")
    mode = DisplayMode.ANOMALY
    png = frame_png(
        session.frame,
        scale_for(mode),
        legend_for(mode),
        regions=REGIONS,
        selection=ledger,
    )
    assert png.startswith(b"\x89PNG")


def test_static_png_closes_figure_when_saving_fails(session, monkeypatch):
    def broken_savefig(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(Figure, "savefig", broken_savefig)
    before = set(plt.get_fignums())
    mode = DisplayMode.ABSOLUTE
    with pytest.raises(OSError):
        frame_png(session.frame, scale_for(mode), legend_for(mode))
    assert set(plt.get_fignums()) == before
