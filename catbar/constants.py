import os

# --- GLOBAL CONFIGURATION ---
SCREEN_WIDTH = int(os.getenv("CATBAR_SCREEN_WIDTH", "800"))
STRIP_HEIGHT = 28           # height of the strip the cat runs along
PANEL_HEIGHT = 150          # extra space below the strip for menu / stats overlays
FPS = int(os.getenv("CATBAR_FPS", "30"))
DB_FILE = os.getenv("CATBAR_DB_FILE", "catbar.db")
# Time scaling for development/testing. 1 = real time, 60 = one minute per second
TIME_SCALE = float(os.getenv("CATBAR_TIME_SCALE", "1.0"))
DESKTOP_NOTIFY = os.getenv("CATBAR_DESKTOP_NOTIFY", "0") == "1"
SPRITE_SHEET = os.getenv("CATBAR_SPRITE_SHEET", "")

# --- SATIETY ---
SATIETY_MIN = 0.0
SATIETY_MAX = 100.0
DEFAULT_SATIETY = 100.0          # first-ever run starts full
DECAY_PER_MINUTE = 0.5           # same rate online and offline
DECAY_INTERVAL_SECONDS = 60.0

# Food awarded per session length: (minimum minutes, food value), checked top down
FOOD_TIERS = [
    (55, 50.0),
    (40, 40.0),
    (20, 25.0),
    (0, 15.0),
]

# Hunger level thresholds (read model only)
HUNGER_FULL_AT = 70.0
HUNGER_NORMAL_AT = 30.0

# Keep this many days of per-day focus totals
DAILY_LOG_DAYS = 30

# --- COMPANIONS ---
# id: (display name, unlock threshold in hours of total focus)
COMPANIONS = {
    'orange': {'name': 'Orange Cat', 'unlock_hours': 0.0},
    'black': {'name': 'Black Cat', 'unlock_hours': 5.0},
    'white': {'name': 'White Cat', 'unlock_hours': 15.0},
    'cow': {'name': 'Cow Cat', 'unlock_hours': 30.0},
}
DEFAULT_COMPANION = 'orange'

# --- FOCUS TIMER ---
DEFAULT_DURATIONS = [15, 25, 45, 60]
MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 180
COUNTDOWN_INTERVAL_SECONDS = 1.0

# --- ANIMATION ---
# Speed tiers: (lower bound inclusive, speed state name), checked top down
SPEED_TIERS = [
    (70.0, 'FAST'),
    (50.0, 'NORMAL'),
    (20.0, 'SLOW'),
    (0.0, 'STOPPED'),
]
FRAME_INTERVALS = {
    'STOPPED': 0.30,
    'SLOW': 0.15,
    'NORMAL': 0.10,
    'FAST': 0.07,
}
FRAME_COUNTS = {
    'STOPPED': 2,
    'SLOW': 4,
    'NORMAL': 4,
    'FAST': 4,
}
STEP_SIZES = {
    'STOPPED': 0,
    'SLOW': 2,
    'NORMAL': 5,
    'FAST': 7,
}
POSITION_INTERVAL_SECONDS = 0.1
LEFT_BOUND = 10.0
START_INSET = 100.0     # room left free for the status text on the right
PIXEL_SIZE = 2

# --- SOUNDS ---
SOUND_COMPLETE = 'complete'
SOUND_FEED = 'feed'

# --- RETRO UI PALETTE ---
COLOR_BG = (40, 44, 52)
COLOR_STRIP = (30, 30, 36)
COLOR_TEXT = (171, 178, 191)
COLOR_UI_BAR_BG = (62, 68, 81)
COLOR_FULLNESS = (224, 108, 117)
COLOR_HAPPY = (229, 192, 123)
COLOR_PROGRESS = (97, 175, 239)
COLOR_MESSAGE_BOX_BG = (50, 50, 50, 200)

# Pixel art palettes per companion: pixel code -> colour
# 1 = fur, 2 = markings, 4 = eyes, 5 = nose
CAT_PALETTES = {
    'orange': {1: (255, 153, 51), 2: (230, 128, 26), 4: (0, 0, 0), 5: (255, 153, 153)},
    'black': {1: (40, 40, 40), 2: (20, 20, 20), 4: (255, 215, 0), 5: (255, 153, 153)},
    'white': {1: (245, 245, 245), 2: (220, 220, 220), 4: (0, 0, 0), 5: (255, 153, 153)},
    'cow': {1: (245, 245, 245), 2: (30, 30, 30), 4: (0, 0, 0), 5: (255, 153, 153)},
}
