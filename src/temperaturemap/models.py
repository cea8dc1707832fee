"""Data model definitions — explicit boundaries between load, compute, playback, and render layers."""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np


class DisplayMode(str, Enum):
    """What the heat overlay shows."""

    ABSOLUTE = "absolute"  # Raw temperature (Kelvin)
    ANOMALY = "anomaly"  # Deviation from the reference-year month (°C == K delta)


@dataclass(frozen=True)
class RawPoint:
    """Geographic coordinate as supplied by the archive."""

    lon: float  # Longitude (decimal degrees)
    lat: float  # Latitude (decimal degrees)


@dataclass(frozen=True)
class ScreenPoint:
    """Projected canvas position. y grows downward."""

    x: float
    y: float


@dataclass(frozen=True)
class RawArchive:
    """Decoded archive document. Input to the store and the projector."""

    coordinates: tuple[RawPoint, ...]
    temperatures: dict[str, np.ndarray]  # TimeKey → float array of length N
    entry_name: str  # Zip entry the document was read from


@dataclass(frozen=True)
class RenderPoint:
    """A single point handed to the rendering collaborator. Never stored."""

    x: float
    y: float
    value: float


@dataclass(frozen=True)
class Frame:
    """Renderable point set for one instant, as parallel arrays."""

    time_index: int
    time_key: str
    mode: DisplayMode
    xs: np.ndarray
    ys: np.ndarray
    values: np.ndarray

    def __len__(self) -> int:
        return len(self.values)

    def points(self) -> list[RenderPoint]:
        return [
            RenderPoint(x=float(x), y=float(y), value=float(v))
            for x, y, v in zip(self.xs, self.ys, self.values)
        ]


@dataclass
class PlaybackState:
    """The single mutable playback record, owned by PlaybackController."""

    time_index: int = 0
    is_playing: bool = False
    mode: DisplayMode = DisplayMode.ABSOLUTE


@dataclass(frozen=True)
class Region:
    """A selectable map region with its projected outline."""

    id: str  # Stable identifier (ISO A3 where available)
    name: str  # Display label
    rings: tuple[np.ndarray, ...] = field(repr=False)  # Each (k, 2) screen coords
    label_point: ScreenPoint | None = None  # Pointer target for picking


# --- Commands emitted by user controls ---


@dataclass(frozen=True)
class Scrub:
    index: int


@dataclass(frozen=True)
class TogglePlay:
    pass


@dataclass(frozen=True)
class SetMode:
    mode: DisplayMode


@dataclass(frozen=True)
class ToggleSelection:
    region_id: str
    label: str


@dataclass(frozen=True)
class RemoveSelection:
    region_id: str


Command = Scrub | TogglePlay | SetMode | ToggleSelection | RemoveSelection
