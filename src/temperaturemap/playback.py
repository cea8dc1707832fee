"""Playback controller — Paused/Playing state machine over the timeline.

Transitions:
  play()          Paused → Playing, schedules a tick every ``interval`` seconds
  pause()         Playing → Paused, cancels the pending tick
  scrub(i)        any state → Paused, jumps to i and renders
  toggle_mode(m)  orthogonal; re-renders the current index
  tick()          Playing only; advances (index + 1) mod len and renders

Only the handle held in ``_timer`` may advance time. Cancelling clears it
before any state is touched, so a tick that was already queued when the user
paused or scrubbed finds itself stale and does nothing.
"""

import logging
from collections.abc import Callable

from temperaturemap.clock import Scheduler, TimerHandle
from temperaturemap.compositor import FrameCompositor
from temperaturemap.models import DisplayMode, Frame, PlaybackState

logger = logging.getLogger(__name__)

RenderCallback = Callable[[Frame], None]


class PlaybackController:
    def __init__(
        self,
        compositor: FrameCompositor,
        timeline_length: int,
        scheduler: Scheduler,
        interval: float = 0.15,
    ):
        if timeline_length <= 0:
            raise ValueError("Playback requires a non-empty timeline")
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._compositor = compositor
        self._length = timeline_length
        self._scheduler = scheduler
        self._interval = interval
        self._state = PlaybackState()
        self._timer: TimerHandle | None = None
        self._listeners: list[RenderCallback] = []
        self._last_frame: Frame | None = None

    # --- read side ---

    @property
    def state(self) -> PlaybackState:
        """Snapshot of the playback state."""
        s = self._state
        return PlaybackState(
            time_index=s.time_index, is_playing=s.is_playing, mode=s.mode
        )

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def last_frame(self) -> Frame | None:
        return self._last_frame

    @property
    def timeline_length(self) -> int:
        return self._length

    def add_listener(self, callback: RenderCallback) -> None:
        self._listeners.append(callback)

    # --- rendering ---

    def render(self) -> Frame:
        """Compose the current (index, mode) fresh and hand it to listeners."""
        frame = self._compositor.compose_frame(
            self._state.time_index, self._state.mode
        )
        self._last_frame = frame
        for callback in self._listeners:
            callback(frame)
        return frame

    # --- transitions ---

    def play(self) -> None:
        if self._state.is_playing:
            return
        self._state.is_playing = True
        self._schedule_next()
        logger.debug("play from index %d", self._state.time_index)

    def pause(self) -> None:
        if not self._state.is_playing:
            return
        self._cancel_timer()
        self._state.is_playing = False
        logger.debug("pause at index %d", self._state.time_index)

    def toggle_play(self) -> bool:
        """Flip between Playing and Paused. Returns the new is_playing."""
        if self._state.is_playing:
            self.pause()
        else:
            self.play()
        return self._state.is_playing

    def scrub(self, time_index: int) -> Frame:
        """Jump to time_index, stopping autoplay first.

        Raises:
            IndexError: When time_index is outside [0, len - 1].
        """
        if not 0 <= time_index < self._length:
            raise IndexError(
                f"time index {time_index} outside [0, {self._length - 1}]"
            )
        self.pause()
        self._state.time_index = time_index
        return self.render()

    def toggle_mode(self, mode: DisplayMode | bool) -> Frame:
        """Switch display mode (True/False accepted for the anomaly checkbox)."""
        if isinstance(mode, bool):
            mode = DisplayMode.ANOMALY if mode else DisplayMode.ABSOLUTE
        self._state.mode = mode
        return self.render()

    def stop(self) -> None:
        """Cancel any scheduled tick. Used when the session is torn down."""
        self.pause()

    # --- clock ---

    def _schedule_next(self) -> None:
        handle: TimerHandle | None = None

        def fire() -> None:
            if self._timer is not handle:
                return  # stale tick
            self._timer = None
            self.tick()
            if self._state.is_playing and self._timer is None:
                self._schedule_next()

        handle = self._scheduler.call_later(self._interval, fire)
        self._timer = handle

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def tick(self) -> Frame | None:
        """Advance one step with wraparound. No-op unless Playing."""
        if not self._state.is_playing:
            return None
        self._state.time_index = (self._state.time_index + 1) % self._length
        return self.render()
