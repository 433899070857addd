from catbar.constants import (
    COUNTDOWN_INTERVAL_SECONDS, DEFAULT_DURATIONS, MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES, SOUND_COMPLETE,
)
from catbar.models import FocusSession, TimerSettings, TimerState


def format_remaining(seconds):
    """mm:ss, zero padded. Minutes keep growing past 59 (90 min -> '90:00')."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class FocusTimer:
    """A single countdown session that turns focus time into food.

    Idle -> Running -> (Completed | Cancelled) -> Idle. There is no pause.
    """
    def __init__(self, engine, scheduler, notifier=None, sounds=None, store=None):
        self.engine = engine
        self.scheduler = scheduler
        self.notifier = notifier
        self.sounds = sounds
        self.store = store
        self.session = FocusSession()
        self.settings = TimerSettings()
        self.last_result = None
        self._job = None

    # --- Read models ---
    @property
    def is_running(self):
        return self.session.state == TimerState.RUNNING

    @property
    def remaining_seconds(self):
        return self.session.remaining_seconds

    @property
    def total_seconds(self):
        return self.session.total_seconds

    @property
    def formatted_remaining(self):
        return format_remaining(self.session.remaining_seconds)

    @property
    def progress(self):
        if not self.is_running or self.session.total_seconds <= 0:
            return 0.0
        done = self.session.total_seconds - self.session.remaining_seconds
        return done / self.session.total_seconds

    # --- Session control ---
    def start(self, minutes):
        """Starts a session. Returns False (and changes nothing) while one is running."""
        if self.is_running:
            return False
        try:
            minutes = int(minutes)
        except (TypeError, ValueError):
            return False
        if minutes <= 0:
            return False

        self.session = FocusSession(total_seconds=minutes * 60,
                                    remaining_seconds=minutes * 60,
                                    state=TimerState.RUNNING)
        self._job = self.scheduler.register_periodic(COUNTDOWN_INTERVAL_SECONDS, self.tick)
        return True

    def cancel(self):
        """Abandons the running session. No food, no statistics."""
        if not self.is_running:
            return False
        self._stop_ticking()
        self.session.state = TimerState.CANCELLED
        self.last_result = TimerState.CANCELLED
        self._reset()
        return True

    def tick(self):
        if not self.is_running:
            return
        self.session.remaining_seconds -= 1
        if self.session.remaining_seconds <= 0:
            self._complete()

    def _complete(self):
        self._stop_ticking()
        self.session.state = TimerState.COMPLETED
        self.last_result = TimerState.COMPLETED
        completed_minutes = self.session.total_seconds // 60

        self.engine.complete_focus(completed_minutes)

        if self.settings.notification_enabled and self.notifier is not None:
            try:
                self.notifier.notify("Focus complete!", "Your cat's food is ready - click the bar to feed it!")
            except Exception as e:
                print(f"Warning: completion notification failed: {e}")
        if self.settings.sound_enabled and self.sounds is not None:
            self.sounds.play(SOUND_COMPLETE)

        self._reset()

    def _stop_ticking(self):
        if self._job is not None:
            self.scheduler.cancel(self._job)
            self._job = None

    def _reset(self):
        self.session = FocusSession()

    # --- Settings ---
    @property
    def available_durations(self):
        return list(self.settings.available_durations)

    def add_duration(self, minutes):
        try:
            minutes = int(minutes)
        except (TypeError, ValueError):
            return False
        if not MIN_DURATION_MINUTES <= minutes <= MAX_DURATION_MINUTES:
            return False
        if minutes in self.settings.available_durations:
            return False
        self.settings.available_durations.append(minutes)
        self.settings.available_durations.sort()
        self.save_settings()
        return True

    def remove_duration(self, minutes):
        durations = self.settings.available_durations
        if minutes not in durations or len(durations) <= 1:
            return False
        durations.remove(minutes)
        self.save_settings()
        return True

    def set_notification_enabled(self, enabled):
        self.settings.notification_enabled = bool(enabled)
        self.save_settings()

    def set_sound_enabled(self, enabled):
        self.settings.sound_enabled = bool(enabled)
        self.save_settings()

    def load_settings(self):
        settings = TimerSettings()
        if self.store is not None:
            saved = self.store.get("availableDurations")
            if isinstance(saved, list):
                durations = sorted({int(m) for m in saved
                                    if isinstance(m, (int, float)) and not isinstance(m, bool)
                                    and MIN_DURATION_MINUTES <= m <= MAX_DURATION_MINUTES})
                settings.available_durations = durations or list(DEFAULT_DURATIONS)
            notification = self.store.get("notificationEnabled")
            if isinstance(notification, bool):
                settings.notification_enabled = notification
            sound = self.store.get("soundEnabled")
            if isinstance(sound, bool):
                settings.sound_enabled = sound
        self.settings = settings
        return settings

    def save_settings(self):
        if self.store is None:
            return True
        return self.store.set_many({
            "availableDurations": list(self.settings.available_durations),
            "notificationEnabled": self.settings.notification_enabled,
            "soundEnabled": self.settings.sound_enabled,
        })
