"""One viewing session: the loaded dataset plus playback and selection state.

Nothing here is module-global, so several sessions (or tests) can coexist.
"""

import logging
from collections.abc import Callable

import httpx

from temperaturemap.clock import Scheduler
from temperaturemap.colors import ColorScale, Legend, legend_for, scale_for
from temperaturemap.compositor import FrameCompositor
from temperaturemap.config import Settings
from temperaturemap.loader import load_archive
from temperaturemap.models import (
    Command,
    Frame,
    RawArchive,
    RemoveSelection,
    Scrub,
    SetMode,
    TogglePlay,
    ToggleSelection,
)
from temperaturemap.playback import PlaybackController
from temperaturemap.projection import (
    EquirectangularProjection,
    ProjectedGrid,
    project_all,
)
from temperaturemap.selection import SelectionChange, SelectionLedger
from temperaturemap.store import TemperatureStore

logger = logging.getLogger(__name__)

STATUS_FAILED = "Data Load Failed"


class MapSession:
    def __init__(
        self,
        store: TemperatureStore,
        grid: ProjectedGrid,
        scheduler: Scheduler,
        interval: float = 0.15,
    ):
        self.store = store
        self.grid = grid
        self.compositor = FrameCompositor(store, grid)
        self.controller = PlaybackController(
            self.compositor, len(store), scheduler, interval=interval
        )
        self.selection = SelectionLedger()
        self.legend: Legend = legend_for(self.controller.state.mode)
        self.status: str = store.key_at(0)
        self.controller.add_listener(self._on_render)
        self._frame: Frame = self.controller.render()

    @classmethod
    def from_archive(
        cls,
        archive: RawArchive,
        settings: Settings,
        scheduler: Scheduler,
        projection: EquirectangularProjection | None = None,
    ) -> "MapSession":
        """Project coordinates once and build the store from a decoded archive."""
        if projection is None:
            projection = projection_for(settings)
        grid = project_all(archive.coordinates, projection)
        if grid.projected_count < len(grid):
            logger.info(
                "%d of %d coordinates could not be projected",
                len(grid) - grid.projected_count,
                len(grid),
            )
        store = TemperatureStore.from_archive(archive, settings.baseline_year)
        return cls(store, grid, scheduler, interval=settings.frame_interval)

    @classmethod
    async def open(
        cls,
        settings: Settings,
        scheduler: Scheduler,
        client: httpx.AsyncClient | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> "MapSession":
        """Load the archive and build a ready session.

        Raises:
            LoadError: Propagated from the loader; no session is created.
        """
        archive = await load_archive(
            settings.data_url, client=client, on_status=on_status
        )
        session = cls.from_archive(archive, settings, scheduler)
        logger.info(
            "Session ready: %d points, %d frames (%s → %s)",
            session.store.point_count,
            len(session.store),
            session.store.timeline[0],
            session.store.timeline[-1],
        )
        return session

    # --- derived views ---

    @property
    def timeline(self) -> tuple[str, ...]:
        return self.store.timeline

    @property
    def color_scale(self) -> ColorScale:
        return scale_for(self.controller.state.mode)

    @property
    def frame(self) -> Frame:
        """Most recently rendered frame."""
        return self._frame

    def _on_render(self, frame: Frame) -> None:
        self._frame = frame
        self.status = frame.time_key
        if frame.mode is not self.legend.mode:
            self.legend = legend_for(frame.mode)

    # --- commands ---

    def dispatch(self, command: Command) -> SelectionChange | bool | Frame | None:
        """Apply one user command.

        Returns the command's natural result: the rendered Frame for Scrub and
        SetMode, the new is_playing for TogglePlay, the SelectionChange for
        ToggleSelection, and whether anything was removed for RemoveSelection.

        Raises:
            TypeError: For an object that is not a known command.
        """
        if isinstance(command, Scrub):
            return self.controller.scrub(command.index)
        if isinstance(command, TogglePlay):
            return self.controller.toggle_play()
        if isinstance(command, SetMode):
            return self.controller.toggle_mode(command.mode)
        if isinstance(command, ToggleSelection):
            return self.selection.toggle(command.region_id, command.label)
        if isinstance(command, RemoveSelection):
            return self.selection.remove(command.region_id)
        raise TypeError(f"Unknown command: {command!r}")

    def close(self) -> None:
        self.controller.stop()


def projection_for(settings: Settings) -> EquirectangularProjection:
    return EquirectangularProjection.for_canvas(
        settings.map_width, settings.map_height, settings.projection_scale
    )
