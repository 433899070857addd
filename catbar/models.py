import datetime
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from catbar.constants import COMPANIONS, DEFAULT_COMPANION, DEFAULT_DURATIONS, DEFAULT_SATIETY

# Names older releases stored for each companion
_LEGACY_COMPANION_NAMES = {
    '橘猫': 'orange',
    '黑猫': 'black',
    '白猫': 'white',
    '奶牛猫': 'cow',
}


class CompanionId(Enum):
    """
    Unlockable pet variants.
    Includes logic to handle legacy save data names.
    """
    ORANGE = 'orange'
    BLACK = 'black'
    WHITE = 'white'
    COW = 'cow'

    @classmethod
    def _missing_(cls, value):
        """
        Flexible lookup for ids written by older versions ('Orange', '橘猫', 'ORANGE').
        Anything unrecognized still raises ValueError so the loader can drop it.
        """
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member

            if value.strip() in _LEGACY_COMPANION_NAMES:
                print(f"WARNING: Mapping legacy companion name '{value}'.")
                return cls(_LEGACY_COMPANION_NAMES[value.strip()])

        return super()._missing_(value)

    @property
    def spec(self):
        return COMPANION_SPECS[self]

    @property
    def display_name(self):
        return self.spec.name


@dataclass(frozen=True)
class CompanionSpec:
    name: str
    unlock_threshold_hours: float


COMPANION_SPECS = {
    CompanionId(key): CompanionSpec(value['name'], float(value['unlock_hours']))
    for key, value in COMPANIONS.items()
}
DEFAULT_COMPANION_ID = CompanionId(DEFAULT_COMPANION)


class HungerLevel(Enum):
    FULL = auto()     # 70-100
    NORMAL = auto()   # 30-70
    HUNGRY = auto()   # 0-30


class SpeedState(Enum):
    STOPPED = auto()
    SLOW = auto()
    NORMAL = auto()
    FAST = auto()


class Direction(Enum):
    LEFT = auto()
    RIGHT = auto()


class TimerState(Enum):
    IDLE = auto()
    RUNNING = auto()
    COMPLETED = auto()
    CANCELLED = auto()


@dataclass
class SatietyState:
    """Everything about the pet that survives a restart."""
    satiety: float = DEFAULT_SATIETY  # 100 = Full, 0 = Starving
    current_companion: CompanionId = DEFAULT_COMPANION_ID
    unlocked_companions: Set[CompanionId] = field(default_factory=lambda: {DEFAULT_COMPANION_ID})
    total_focus_minutes: int = 0
    total_pomodoros: int = 0
    streak_days: int = 0
    last_focus_date: Optional[datetime.date] = None
    pending_food: bool = False
    pending_food_value: float = 0.0
    last_feed_time: datetime.datetime = field(default_factory=datetime.datetime.now)
    last_decay_time: Optional[datetime.datetime] = None
    daily_focus_minutes: Dict[str, int] = field(default_factory=dict)


@dataclass
class FocusSession:
    total_seconds: int = 0
    remaining_seconds: int = 0
    state: TimerState = TimerState.IDLE


@dataclass
class TimerSettings:
    available_durations: list = field(default_factory=lambda: list(DEFAULT_DURATIONS))
    notification_enabled: bool = True
    sound_enabled: bool = True


@dataclass
class AnimationState:
    speed_state: SpeedState = SpeedState.STOPPED
    frame_index: int = 0
    direction: Direction = Direction.LEFT
    position_x: float = 0.0
