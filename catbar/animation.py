from catbar.constants import (
    FRAME_COUNTS, FRAME_INTERVALS, LEFT_BOUND, POSITION_INTERVAL_SECONDS,
    SCREEN_WIDTH, SPEED_TIERS, START_INSET, STEP_SIZES,
)
from catbar.models import AnimationState, Direction, SpeedState

INITIAL_DIRECTION = Direction.LEFT


def classify_speed(satiety):
    """Maps satiety to a speed state. Lower bounds are inclusive:
    <20 STOPPED, [20,50) SLOW, [50,70) NORMAL, >=70 FAST.
    """
    for lower_bound, name in SPEED_TIERS:
        if satiety >= lower_bound:
            return SpeedState[name]
    return SpeedState.STOPPED


def frame_interval(speed_state):
    return FRAME_INTERVALS[speed_state.name]


def frame_count(speed_state):
    return FRAME_COUNTS[speed_state.name]


def step_size(speed_state):
    return STEP_SIZES[speed_state.name]


class AnimationDriver:
    """Turns the cat's satiety into a frame index and a bouncing position.

    Two jobs run on the scheduler: the frame cadence, whose interval depends
    on the speed state and is rescheduled whenever that state changes, and a
    fixed-rate position update. Satiety is only ever read.
    """
    def __init__(self, engine, scheduler, frames=None, left_bound=LEFT_BOUND,
                 start_bound=None, screen_width=SCREEN_WIDTH):
        self.engine = engine
        self.scheduler = scheduler
        self.frames = frames
        self.left_bound = float(left_bound)
        if start_bound is None:
            start_bound = screen_width - START_INSET
        self.start_bound = max(self.left_bound, float(start_bound))

        self.frame_index = 0
        self.direction = INITIAL_DIRECTION
        self.position_x = self.start_bound
        self._last_speed_state = self.speed_state
        self._frame_job = None
        self._position_job = None

    @property
    def speed_state(self):
        return classify_speed(self.engine.satiety)

    @property
    def frame_job(self):
        return self._frame_job

    def start(self):
        if self._frame_job is None:
            self._frame_job = self.scheduler.register_periodic(
                frame_interval(self._last_speed_state), self.tick_frame)
        if self._position_job is None:
            self._position_job = self.scheduler.register_periodic(
                POSITION_INTERVAL_SECONDS, self.tick_position)

    def stop(self):
        for job in (self._frame_job, self._position_job):
            if job is not None:
                self.scheduler.cancel(job)
        self._frame_job = None
        self._position_job = None

    def snapshot(self):
        return AnimationState(speed_state=self.speed_state, frame_index=self.frame_index,
                              direction=self.direction, position_x=self.position_x)

    def tick_frame(self):
        current = self.speed_state
        if current != self._last_speed_state:
            self._last_speed_state = current
            self.frame_index = 0
            if self._frame_job is not None:
                self.scheduler.reschedule(self._frame_job, frame_interval(current))
            if current == SpeedState.STOPPED:
                self._reset_position()
        self.frame_index = (self.frame_index + 1) % self._frame_count(current)

    def tick_position(self):
        current = self.speed_state
        if current == SpeedState.STOPPED:
            # A starving cat doesn't coast
            self._reset_position()
            return

        step = step_size(current)
        if self.direction == Direction.LEFT:
            self.position_x -= step
            if self.position_x <= self.left_bound:
                self.position_x = self.left_bound
                self.direction = Direction.RIGHT
        else:
            self.position_x += step
            if self.position_x >= self.start_bound:
                self.position_x = self.start_bound
                self.direction = Direction.LEFT

    def _reset_position(self):
        self.position_x = self.start_bound
        self.direction = INITIAL_DIRECTION

    def current_frame(self):
        """The image to draw right now, or None when no frame is available."""
        if self.frames is None:
            return None
        # The index belongs to the state of the last cadence tick, not the live one
        return self.frames.get_frame(self._last_speed_state, self.direction, self.frame_index)

    def _frame_count(self, speed_state):
        """Frames to cycle through, capped by what the provider actually has."""
        count = frame_count(speed_state)
        if self.frames is not None and hasattr(self.frames, "frame_count"):
            available = self.frames.frame_count(speed_state)
            if available > 0:
                count = min(count, available)
        return count
