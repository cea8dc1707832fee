"""Legend / color mapping for the heat overlay.

Absolute mode: inferno over 230–310 K.
Anomaly mode: RdBu over +5 → −5 °C. The domain runs max-first because RdBu
starts at red, so warmer values land on red and cooler values on blue.
"""

from dataclasses import dataclass

import matplotlib
import numpy as np
from matplotlib.colors import to_hex

from temperaturemap.models import DisplayMode

NO_DATA_COLOR = "rgba(0,0,0,0)"

# Five-stop inferno ramp shown in the absolute-mode legend
_INFERNO_STOPS: tuple[tuple[float, str], ...] = (
    (0.0, "#000004"),
    (0.25, "#57106e"),
    (0.5, "#bc3754"),
    (0.75, "#f98e09"),
    (1.0, "#fcffa4"),
)
_ANOMALY_LEGEND_STOPS = 10


@dataclass(frozen=True)
class ColorScale:
    """Sequential scale: value → hex color, clamped to the domain ends."""

    cmap_name: str
    domain: tuple[float, float]  # (value at t=0, value at t=1); may run high→low

    def normalize(self, values) -> np.ndarray:
        lo, hi = self.domain
        t = (np.asarray(values, dtype=float) - lo) / (hi - lo)
        return np.clip(t, 0.0, 1.0)

    def colors(self, values) -> list[str]:
        """Vectorised mapping. Non-finite values get NO_DATA_COLOR."""
        values = np.asarray(values, dtype=float)
        cmap = matplotlib.colormaps[self.cmap_name]
        rgba = cmap(self.normalize(values))
        finite = np.isfinite(values)
        return [
            to_hex(c) if ok else NO_DATA_COLOR for c, ok in zip(rgba, finite)
        ]

    def __call__(self, value: float) -> str:
        return self.colors([value])[0]


ABSOLUTE_SCALE = ColorScale(cmap_name="inferno", domain=(230.0, 310.0))
ANOMALY_SCALE = ColorScale(cmap_name="RdBu", domain=(5.0, -5.0))


@dataclass(frozen=True)
class Legend:
    """Horizontal gradient bar: stops left → right plus end labels."""

    mode: DisplayMode
    stops: tuple[tuple[float, str], ...]
    low_label: str
    high_label: str


def scale_for(mode: DisplayMode) -> ColorScale:
    return ANOMALY_SCALE if mode is DisplayMode.ANOMALY else ABSOLUTE_SCALE


def legend_for(mode: DisplayMode) -> Legend:
    """Legend for the active mode. Anomaly reads blue (cool) left to red (warm) right."""
    if mode is DisplayMode.ANOMALY:
        rdbu = matplotlib.colormaps["RdBu"]
        stops = tuple(
            (i / _ANOMALY_LEGEND_STOPS, to_hex(rdbu(1 - i / _ANOMALY_LEGEND_STOPS)))
            for i in range(_ANOMALY_LEGEND_STOPS + 1)
        )
        return Legend(
            mode=mode,
            stops=stops,
            low_label="-5°C (Cooler)",
            high_label="+5°C (Warmer)",
        )
    return Legend(
        mode=mode,
        stops=_INFERNO_STOPS,
        low_label="230K (-43°C)",
        high_label="310K (37°C)",
    )
