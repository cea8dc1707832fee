"""Plotly interactive heat map renderer.

Draws in canvas coordinates produced by the projector (x right, y down),
so the y axis is reversed. Layer order, bottom to top: ocean, heat points,
country masks, borders, pickable label points.

Clicking a label point selects it; the app reads ``customdata`` (region id,
name) from the selection event and toggles the ledger.
"""

import numpy as np
import plotly.graph_objects as go

from temperaturemap.colors import ColorScale, Legend
from temperaturemap.models import Frame, Region
from temperaturemap.selection import SelectionLedger

_OCEAN = "#a8d8ea"
_MASK = "#e2e8f0"
_BORDER = "#94a3b8"
_BORDER_SELECTED = "#3b82f6"
_LABEL_TRACE = "regions"


def _ring_path(
    regions: list[Region],
) -> tuple[list[float | None], list[float | None]]:
    """All rings of all regions as one trace using None separators."""
    xs: list[float | None] = []
    ys: list[float | None] = []
    for region in regions:
        for ring in region.rings:
            xs += ring[:, 0].tolist() + [ring[0, 0], None]
            ys += ring[:, 1].tolist() + [ring[0, 1], None]
    return xs, ys


def _colorbar(scale: ColorScale, legend: Legend) -> dict:
    lo, hi = sorted(scale.domain)
    return dict(
        cmin=lo,
        cmax=hi,
        colorscale=[[stop, color] for stop, color in legend.stops],
        colorbar=dict(
            orientation="h",
            thickness=12,
            len=0.3,
            x=0.98,
            xanchor="right",
            y=0.02,
            yanchor="bottom",
            tickvals=[lo, hi],
            ticktext=[legend.low_label, legend.high_label],
            tickfont=dict(size=10, color="#475569"),
        ),
    )


def render_map_figure(
    frame: Frame,
    scale: ColorScale,
    legend: Legend,
    regions: tuple[Region, ...] = (),
    selection: SelectionLedger | None = None,
    width: int = 960,
    height: int = 480,
    point_radius: float = 3.0,
) -> go.Figure:
    """Render one frame plus the region overlay as a Plotly figure.

    Args:
        frame: Composed frame for the current (time, mode).
        scale: Active color scale.
        legend: Active legend (stops and end labels).
        regions: Projected country outlines; may be empty.
        selection: Marked regions are drawn unmasked with a blue border.
        width: Canvas width in projection units.
        height: Canvas height in projection units.
        point_radius: Heat point radius in canvas units.

    Returns:
        Plotly Figure object.
    """
    marked = {rid for rid, _ in selection.entries()} if selection is not None else set()
    masked = [r for r in regions if r.id not in marked]
    revealed = [r for r in regions if r.id in marked]

    heat_trace = go.Scattergl(
        x=frame.xs,
        y=frame.ys,
        mode="markers",
        marker=dict(
            size=point_radius * 2,
            color=scale.colors(frame.values),
            line=dict(width=0),
        ),
        hoverinfo="skip",
        name="heat",
    )

    # Invisible trace that only carries the colorbar
    legend_trace = go.Scatter(
        x=[None],
        y=[None],
        mode="markers",
        marker=dict(size=0, color=[0], showscale=True, **_colorbar(scale, legend)),
        hoverinfo="skip",
        name="legend",
    )

    mx, my = _ring_path(masked)
    mask_trace = go.Scatter(
        x=mx,
        y=my,
        mode="lines",
        fill="toself",
        fillcolor=_MASK,
        line=dict(color=_BORDER, width=0.5),
        hoverinfo="skip",
        name="masks",
    )

    rx, ry = _ring_path(revealed)
    border_trace = go.Scatter(
        x=rx,
        y=ry,
        mode="lines",
        line=dict(color=_BORDER_SELECTED, width=1.2),
        hoverinfo="skip",
        name="selected",
    )

    labelled = [r for r in regions if r.label_point is not None]
    label_trace = go.Scatter(
        x=[r.label_point.x for r in labelled],
        y=[r.label_point.y for r in labelled],
        mode="markers",
        marker=dict(
            size=10,
            color=[_BORDER_SELECTED if r.id in marked else _BORDER for r in labelled],
            opacity=0.35,
        ),
        customdata=np.array([[r.id, r.name] for r in labelled], dtype=object)
        if labelled
        else None,
        hovertemplate="<b>%{customdata[1]}</b><br>Click to toggle mask<extra></extra>",
        name=_LABEL_TRACE,
    )

    fig = go.Figure(
        data=[heat_trace, mask_trace, border_trace, label_trace, legend_trace]
    )
    fig.update_layout(
        paper_bgcolor="#ffffff",
        plot_bgcolor=_OCEAN,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=width,
        height=height,
        dragmode=False,
        clickmode="event+select",
        xaxis=dict(visible=False, range=[0, width], fixedrange=True),
        yaxis=dict(
            visible=False,
            range=[height, 0],
            fixedrange=True,
            scaleanchor="x",
        ),
    )
    return fig


def picked_regions(event) -> list[tuple[str, str]]:
    """(region id, name) pairs from a Streamlit plotly selection event."""
    if not event:
        return []
    selection = event.get("selection") or {}
    picked: list[tuple[str, str]] = []
    for point in selection.get("points", []):
        data = point.get("customdata")
        if data and len(data) >= 2:
            picked.append((str(data[0]), str(data[1])))
    return picked
