from __future__ import annotations

import numpy as np
import pytest

from temperaturemap.clock import VirtualClock
from temperaturemap.config import Settings
from temperaturemap.models import RawArchive, RawPoint
from temperaturemap.session import MapSession


@pytest.fixture
def two_point_archive() -> RawArchive:
    return RawArchive(
        coordinates=(RawPoint(0.0, 0.0), RawPoint(10.0, 20.0)),
        temperatures={
            "2015-01-15": np.array([240.0, 260.0]),
            "2016-01-15": np.array([245.0, 258.0]),
        },
        entry_name="temperature_data.json",
    )


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def session(two_point_archive, clock) -> MapSession:
    return MapSession.from_archive(two_point_archive, Settings(), clock)
