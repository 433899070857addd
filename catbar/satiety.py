import datetime

from catbar.constants import (
    DAILY_LOG_DAYS, DECAY_INTERVAL_SECONDS, DECAY_PER_MINUTE, DEFAULT_SATIETY,
    FOOD_TIERS, HUNGER_FULL_AT, HUNGER_NORMAL_AT, SATIETY_MAX, SATIETY_MIN,
)
from catbar.models import (
    COMPANION_SPECS, DEFAULT_COMPANION_ID, CompanionId, HungerLevel, SatietyState,
)


def clamp_satiety(value):
    return max(SATIETY_MIN, min(SATIETY_MAX, float(value)))


def food_value_for(minutes):
    """Food earned by a session of `minutes`: [0,20)->15, [20,40)->25, [40,55)->40, 55+->50."""
    for min_minutes, value in FOOD_TIERS:
        if minutes >= min_minutes:
            return value
    return FOOD_TIERS[-1][1]


def decay_for_minutes(minutes):
    """Linear decay model: satiety lost after `minutes` (never negative)."""
    return max(0.0, minutes) * DECAY_PER_MINUTE


def next_streak(streak_days, last_day, today):
    """Streak after completing a session on `today`.

    A day missed resets to 1; a second session the same day keeps the count.
    If the clock went backwards the streak is left alone.
    """
    if last_day is None:
        return 1
    days_diff = (today - last_day).days
    if days_diff == 1:
        return streak_days + 1
    if days_diff > 1:
        return 1
    return streak_days


def hunger_level_for(satiety):
    if satiety >= HUNGER_FULL_AT:
        return HungerLevel.FULL
    if satiety >= HUNGER_NORMAL_AT:
        return HungerLevel.NORMAL
    return HungerLevel.HUNGRY


class SatietyEngine:
    """Owns the hunger resource, feeding, companion unlocks and streaks.

    Mutating operations return the resulting `SatietyState`. Persistence is
    separate: with a store and `autosave` on, every mutation is followed by
    `save()`; without a store `save()` does nothing.
    """
    def __init__(self, store=None, clock=None, notifier=None, autosave=True):
        self.store = store
        self.clock = clock
        self.notifier = notifier
        self.autosave = autosave
        self.state = SatietyState(last_feed_time=self._now())
        self._decay_job = None

    def _now(self):
        if self.clock is None:
            return datetime.datetime.now()
        return self.clock.now()

    # --- Read models ---
    @property
    def satiety(self):
        return self.state.satiety

    @property
    def hunger_level(self):
        return hunger_level_for(self.state.satiety)

    @property
    def pending_food(self):
        return self.state.pending_food

    @property
    def pending_food_value(self):
        return self.state.pending_food_value

    @property
    def current_companion(self):
        return self.state.current_companion

    @property
    def unlocked_companions(self):
        return frozenset(self.state.unlocked_companions)

    @property
    def total_focus_minutes(self):
        return self.state.total_focus_minutes

    @property
    def total_pomodoros(self):
        return self.state.total_pomodoros

    @property
    def streak_days(self):
        return self.state.streak_days

    @property
    def today_focus_minutes(self):
        return self.state.daily_focus_minutes.get(self._now().date().isoformat(), 0)

    def weekly_focus(self):
        """[(date, minutes)] for the last seven days, oldest first."""
        today = self._now().date()
        days = [today - datetime.timedelta(days=offset) for offset in range(6, -1, -1)]
        return [(day, self.state.daily_focus_minutes.get(day.isoformat(), 0)) for day in days]

    # --- Lifecycle ---
    def load(self):
        """Loads persisted state with defaults, then applies offline decay once."""
        store = self.store
        data = {}
        if store is not None:
            for key in ("satiety", "currentCompanion", "unlockedCompanions", "totalFocusMinutes",
                        "totalPomodoros", "streakDays", "lastFocusDate", "lastFeedTime",
                        "lastDecayTime", "pendingFood", "pendingFoodValue", "dailyFocusMinutes"):
                data[key] = store.get(key)

        now = self._now()
        state = SatietyState(last_feed_time=now)

        satiety = _get_num(data.get("satiety"), None)
        state.satiety = DEFAULT_SATIETY if satiety is None else clamp_satiety(satiety)

        unlocked = {DEFAULT_COMPANION_ID}
        if isinstance(data.get("unlockedCompanions"), list):
            for raw in data["unlockedCompanions"]:
                companion = _get_companion(raw)
                if companion is not None:
                    unlocked.add(companion)
        state.unlocked_companions = unlocked

        current = _get_companion(data.get("currentCompanion"))
        state.current_companion = current if current in unlocked else DEFAULT_COMPANION_ID

        state.total_focus_minutes = _get_count(data.get("totalFocusMinutes"))
        state.total_pomodoros = _get_count(data.get("totalPomodoros"))
        state.streak_days = _get_count(data.get("streakDays"))
        state.last_focus_date = _get_date(data.get("lastFocusDate"))

        pending_value = _get_num(data.get("pendingFoodValue"), 0.0)
        if data.get("pendingFood") is True and pending_value > 0:
            state.pending_food = True
            state.pending_food_value = pending_value

        log = data.get("dailyFocusMinutes")
        if isinstance(log, dict):
            state.daily_focus_minutes = {
                day: _get_count(minutes) for day, minutes in log.items() if _get_date(day) is not None
            }

        last_feed = _get_timestamp(data.get("lastFeedTime"))
        state.last_feed_time = last_feed if last_feed is not None else now

        # Catch up on the hunger lost while the app was closed, counted from the
        # later of the last feed and the last running decay tick. An anchor in
        # the future (clock skew) counts as no time passed.
        anchor = state.last_feed_time
        last_decay = _get_timestamp(data.get("lastDecayTime"))
        if last_decay is not None and last_decay > anchor:
            anchor = last_decay
        minutes_away = (now - anchor).total_seconds() / 60.0
        state.satiety = clamp_satiety(state.satiety - decay_for_minutes(minutes_away))
        state.last_decay_time = max(now, anchor)

        self.state = state
        self._check_unlocks(notify=False)
        return self.state

    def start_decay(self, scheduler):
        """Registers the once-a-minute hunger decay on the scheduler."""
        if self._decay_job is None:
            self._decay_job = scheduler.register_periodic(DECAY_INTERVAL_SECONDS, self.tick)
        return self._decay_job

    def save(self):
        """Flushes the full state to the store. Returns False if the write failed."""
        if self.store is None:
            return True
        state = self.state
        return self.store.set_many({
            "satiety": float(state.satiety),
            "currentCompanion": state.current_companion.value,
            "unlockedCompanions": sorted(companion.value for companion in state.unlocked_companions),
            "totalFocusMinutes": int(state.total_focus_minutes),
            "totalPomodoros": int(state.total_pomodoros),
            "streakDays": int(state.streak_days),
            "lastFocusDate": state.last_focus_date.isoformat() if state.last_focus_date else None,
            "lastFeedTime": state.last_feed_time.timestamp(),
            "lastDecayTime": state.last_decay_time.timestamp() if state.last_decay_time else None,
            "pendingFood": bool(state.pending_food),
            "pendingFoodValue": float(state.pending_food_value),
            "dailyFocusMinutes": dict(state.daily_focus_minutes),
        })

    def _changed(self):
        if self.autosave:
            self.save()
        return self.state

    # --- Operations ---
    def tick(self):
        """One minute of running decay."""
        self.state.satiety = clamp_satiety(self.state.satiety - DECAY_PER_MINUTE)
        self.state.last_decay_time = self._now()
        return self._changed()

    def complete_focus(self, minutes):
        state = self.state
        minutes = max(0, int(minutes))
        state.pending_food_value = food_value_for(minutes)
        state.pending_food = True

        state.total_focus_minutes += minutes
        state.total_pomodoros += 1
        self._check_unlocks()
        self._update_streak()
        self._log_focus(minutes)
        return self._changed()

    def feed(self):
        state = self.state
        if not state.pending_food:
            return state

        state.satiety = clamp_satiety(state.satiety + state.pending_food_value)
        state.pending_food = False
        state.pending_food_value = 0.0
        state.last_feed_time = self._now()
        return self._changed()

    def select_companion(self, companion):
        """Switches the displayed companion. Locked companions are ignored."""
        try:
            companion = CompanionId(companion)
        except ValueError:
            return self.state
        if companion not in self.state.unlocked_companions or companion == self.state.current_companion:
            return self.state
        self.state.current_companion = companion
        return self._changed()

    def set_satiety(self, value):
        """Debug override. Out of range values are clamped, never rejected."""
        try:
            self.state.satiety = clamp_satiety(value)
        except (TypeError, ValueError):
            return self.state
        return self._changed()

    # --- Internals ---
    def _check_unlocks(self, notify=True):
        total_hours = self.state.total_focus_minutes / 60.0
        for companion in CompanionId:
            if companion in self.state.unlocked_companions:
                continue
            if total_hours >= COMPANION_SPECS[companion].unlock_threshold_hours:
                self.state.unlocked_companions.add(companion)
                if notify:
                    self._notify_unlock(companion)

    def _notify_unlock(self, companion):
        if self.notifier is None:
            return
        hours = COMPANION_SPECS[companion].unlock_threshold_hours
        try:
            self.notifier.notify("New companion unlocked!",
                                 f"{companion.display_name} joined you after {hours:g} hours of focus.")
        except Exception as e:
            print(f"Warning: unlock notification failed: {e}")

    def _update_streak(self):
        today = self._now().date()
        self.state.streak_days = next_streak(self.state.streak_days, self.state.last_focus_date, today)
        self.state.last_focus_date = today

    def _log_focus(self, minutes):
        today = self._now().date()
        log = self.state.daily_focus_minutes
        key = today.isoformat()
        log[key] = log.get(key, 0) + minutes
        cutoff = (today - datetime.timedelta(days=DAILY_LOG_DAYS - 1)).isoformat()
        for day in [day for day in log if day < cutoff]:
            del log[day]


# --- Loader helpers: malformed values fall back to defaults ---
def _get_num(value, default):
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _get_count(value):
    try:
        return max(0, int(_get_num(value, 0.0)))
    except (OverflowError, ValueError):  # inf / NaN
        return 0


def _get_companion(value):
    if value is None:
        return None
    try:
        return CompanionId(value)
    except ValueError:
        return None


def _get_date(value):
    if not isinstance(value, str):
        return None
    try:
        return datetime.date.fromisoformat(value[:10])
    except ValueError:
        return None


def _get_timestamp(value):
    number = _get_num(value, None)
    if number is None:
        return None
    try:
        return datetime.datetime.fromtimestamp(number)
    except (OverflowError, OSError, ValueError):
        return None
