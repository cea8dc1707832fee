"""Frame composition — projected positions + one instant's values, per display mode."""

import numpy as np

from temperaturemap.models import DisplayMode, Frame, RenderPoint
from temperaturemap.projection import ProjectedGrid
from temperaturemap.store import TemperatureStore


class FrameCompositor:
    """Builds the renderable point set for a (time index, mode) pair.

    Stateless apart from the immutable store and grid; every call recomputes.
    """

    def __init__(self, store: TemperatureStore, grid: ProjectedGrid):
        if len(grid) != store.point_count:
            raise ValueError(
                f"Projected grid has {len(grid)} points, "
                f"store frames have {store.point_count}"
            )
        self._store = store
        self._grid = grid

    def compose_frame(self, time_index: int, mode: DisplayMode) -> Frame:
        """Arrays for every projectable point, in raw index order.

        Anomaly mode subtracts the reference-year frame of the same month.
        Points with no baseline value (no frame for the month, or NaN at
        that point) get 0.

        Raises:
            IndexError: When time_index is outside the timeline.
        """
        time_key = self._store.key_at(time_index)
        idx = self._grid.index
        values = self._store.frame(time_key)[idx]

        if mode is DisplayMode.ANOMALY:
            baseline = self._store.baseline_for(time_key)
            if baseline is None:
                values = np.zeros(len(idx))
            else:
                base = baseline[idx]
                values = np.where(np.isnan(base), 0.0, values - base)

        return Frame(
            time_index=time_index,
            time_key=time_key,
            mode=mode,
            xs=self._grid.xs,
            ys=self._grid.ys,
            values=values,
        )

    def compose(self, time_index: int, mode: DisplayMode) -> list[RenderPoint]:
        return self.compose_frame(time_index, mode).points()
