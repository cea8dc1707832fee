"""Matplotlib static PNG renderer for the current frame."""

import io

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.figure import Figure
from matplotlib.patches import Polygon

from temperaturemap.colors import ColorScale, Legend
from temperaturemap.models import Frame, Region
from temperaturemap.selection import SelectionLedger


def render_static_frame(
    frame: Frame,
    scale: ColorScale,
    legend: Legend,
    regions: tuple[Region, ...] = (),
    selection: SelectionLedger | None = None,
    width: int = 960,
    height: int = 480,
    dpi: int = 100,
) -> Figure:
    """Render one frame as a static matplotlib image.

    Args:
        frame: Composed frame for the current (time, mode).
        scale: Active color scale.
        legend: Active legend, drawn as a gradient bar in the lower right.
        regions: Projected country outlines; may be empty.
        selection: Marked regions are left unmasked with a blue border.
        width: Canvas width in projection units (pixels at ``dpi``).
        height: Canvas height in projection units.
        dpi: Output resolution.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
    fig.subplots_adjust(left=0, right=1, top=1, bottom=0)
    ax.set_facecolor("#a8d8ea")

    finite = np.isfinite(frame.values)
    ax.scatter(
        frame.xs[finite],
        frame.ys[finite],
        s=9,
        c=scale.colors(frame.values[finite]),
        marker="o",
        linewidths=0,
        zorder=1,
    )

    marked = {rid for rid, _ in selection.entries()} if selection is not None else set()
    for region in regions:
        selected = region.id in marked
        for ring in region.rings:
            ax.add_patch(
                Polygon(
                    ring,
                    closed=True,
                    facecolor="none" if selected else "#e2e8f0",
                    edgecolor="#3b82f6" if selected else "#94a3b8",
                    linewidth=1.2 if selected else 0.5,
                    zorder=3 if selected else 2,
                )
            )

    cmap = LinearSegmentedColormap.from_list("legend", list(legend.stops))
    bar = fig.add_axes([0.76, 0.05, 0.21, 0.03])
    bar.imshow([[i / 255 for i in range(256)]], aspect="auto", cmap=cmap)
    bar.set_yticks([])
    bar.set_xticks([0, 255], [legend.low_label, legend.high_label], fontsize=7)

    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.axis("off")
    ax.text(8, 16, frame.time_key, fontsize=10, color="#1e293b", zorder=4)
    return fig


def frame_png(frame: Frame, scale: ColorScale, legend: Legend, **kwargs) -> bytes:
    """Render a frame and return PNG bytes (for download buttons)."""
    fig = render_static_frame(frame, scale, legend, **kwargs)
    buf = io.BytesIO()
    try:
        fig.savefig(buf, format="png")
    finally:
        plt.close(fig)
    return buf.getvalue()
