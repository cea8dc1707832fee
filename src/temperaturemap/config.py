"""Runtime settings read from the environment (.env is loaded by the app entry point)."""

import os
from dataclasses import dataclass

DEFAULT_DATA_URL = "data/temperature_data.zip"
DEFAULT_REGIONS_URL = (
    "https://raw.githubusercontent.com/nvkelso/natural-earth-vector/"
    "master/geojson/ne_110m_admin_0_countries.geojson"
)


class ConfigError(ValueError):
    """An environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    data_url: str = DEFAULT_DATA_URL
    regions_url: str = DEFAULT_REGIONS_URL
    baseline_year: str = "2015"
    frame_interval_ms: int = 150
    map_width: int = 960
    map_height: int = 480
    # None fits the whole world to the canvas
    projection_scale: float | None = None
    point_radius: float = 3.0

    @property
    def frame_interval(self) -> float:
        """Animation period in seconds."""
        return self.frame_interval_ms / 1000


def _env_number(
    name: str, default: float | None, cast: type = float, minimum: float = 0
):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= minimum:
        raise ConfigError(f"{name} must be greater than {minimum}, got {value}")
    return value


def load_settings() -> Settings:
    """Build Settings from environment variables, falling back to defaults.

    Raises:
        ConfigError: When a numeric variable is not a positive number or
            BASELINE_YEAR is not a four-digit year.
    """
    baseline_year = os.environ.get("BASELINE_YEAR", "2015").strip()
    if not (len(baseline_year) == 4 and baseline_year.isdigit()):
        raise ConfigError(
            f"BASELINE_YEAR must be a four-digit year, got {baseline_year!r}"
        )

    return Settings(
        data_url=os.environ.get("TEMPERATURE_DATA_URL") or DEFAULT_DATA_URL,
        regions_url=os.environ.get("REGIONS_URL") or DEFAULT_REGIONS_URL,
        baseline_year=baseline_year,
        frame_interval_ms=_env_number("FRAME_INTERVAL_MS", 150, int),
        map_width=_env_number("MAP_WIDTH", 960, int),
        map_height=_env_number("MAP_HEIGHT", 480, int),
        projection_scale=_env_number("PROJECTION_SCALE", None),
        point_radius=_env_number("POINT_RADIUS", 3.0),
    )
