"""Temperature time series and the per-month reference-year baseline."""

import logging
from collections.abc import Mapping

import numpy as np

from temperaturemap.loader import FormatError
from temperaturemap.models import RawArchive

logger = logging.getLogger(__name__)


def month_of(time_key: str) -> str | None:
    """Month component of a "YYYY-MM[-DD...]" key, or None if the key has none."""
    parts = time_key.split("-")
    if len(parts) > 1:
        return parts[1]
    return None


class TemperatureStore:
    """Read-only after construction: frames, sorted timeline, and baseline.

    Every frame has the same length N, aligned with the archive coordinates.
    """

    def __init__(self, frames: Mapping[str, np.ndarray], reference_year: str):
        if not frames:
            raise FormatError("Temperature store requires at least one frame")
        lengths = {len(v) for v in frames.values()}
        if len(lengths) != 1:
            raise FormatError(f"Frames differ in length: {sorted(lengths)}")

        self._frames: dict[str, np.ndarray] = {}
        for key, values in frames.items():
            arr = np.array(values, dtype=float)
            arr.setflags(write=False)
            self._frames[key] = arr
        self._n = lengths.pop()
        self._timeline: tuple[str, ...] = tuple(sorted(self._frames))
        self._reference_year = reference_year
        self._baseline = self._build_baseline(reference_year)

    @classmethod
    def from_archive(
        cls, archive: RawArchive, reference_year: str
    ) -> "TemperatureStore":
        return cls(archive.temperatures, reference_year)

    def _build_baseline(self, reference_year_prefix: str) -> dict[str, np.ndarray]:
        """Map month → frame for every key starting with the reference year.

        Keys are visited in timeline order; if two keys share a month the
        later one overwrites the earlier.
        """
        baseline: dict[str, np.ndarray] = {}
        for key in self._timeline:
            if not key.startswith(reference_year_prefix):
                continue
            month = month_of(key)
            if month is not None:
                baseline[month] = self._frames[key]
        logger.info(
            "Baseline data extracted for %d months of %s.",
            len(baseline),
            reference_year_prefix,
        )
        return baseline

    @property
    def point_count(self) -> int:
        return self._n

    @property
    def timeline(self) -> tuple[str, ...]:
        return self._timeline

    @property
    def reference_year(self) -> str:
        return self._reference_year

    @property
    def baseline(self) -> Mapping[str, np.ndarray]:
        return dict(self._baseline)

    @property
    def baseline_months(self) -> tuple[str, ...]:
        return tuple(sorted(self._baseline))

    def __len__(self) -> int:
        return len(self._timeline)

    def key_at(self, time_index: int) -> str:
        """TimeKey at a timeline position.

        Raises:
            IndexError: When time_index is outside [0, len - 1].
        """
        if not 0 <= time_index < len(self._timeline):
            raise IndexError(
                f"time index {time_index} outside [0, {len(self._timeline) - 1}]"
            )
        return self._timeline[time_index]

    def frame(self, time_key: str) -> np.ndarray:
        return self._frames[time_key]

    def baseline_for(self, time_key: str) -> np.ndarray | None:
        """Reference-year frame for the month of time_key, or None."""
        month = month_of(time_key)
        if month is None:
            return None
        return self._baseline.get(month)
