import os
import pygame

# Configure mixer pre-init from environment; conservative defaults keep short effects snappy
_AUDIO_FREQ = int(os.getenv("CATBAR_AUDIO_FREQ", "22050"))
_AUDIO_CHANNELS = int(os.getenv("CATBAR_AUDIO_CHANNELS", "2"))
_AUDIO_BUFFER = int(os.getenv("CATBAR_AUDIO_BUF", "512"))
# Must run before pygame.init(), which brings the mixer up with its own defaults
try:
    pygame.mixer.pre_init(_AUDIO_FREQ, -16, _AUDIO_CHANNELS, _AUDIO_BUFFER)
except pygame.error as e:
    print(f"Warning: mixer pre-init failed ({e})")

SOUNDS_DIR = os.path.join(os.path.dirname(__file__), "assets", "sounds")


class SoundManager:
    """Sound sink with asset loading and a safe no-op fallback.

    Environment variables:
      - CATBAR_AUDIO_FREQ (Hz, default 22050)
      - CATBAR_AUDIO_BUF (samples, default 512)
      - CATBAR_AUDIO_CHANNELS (1 or 2, default 2)

    `play(name)` plays a preloaded sound, lazily loads `assets/sounds/<name>.wav`,
    or just records the attempt when audio is unavailable (headless tests).
    """
    def __init__(self):
        self.enabled = False
        self.last_played = None
        self.assets = {}
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            self.enabled = True
        except pygame.error as e:
            print(f"Warning: audio unavailable, sounds disabled ({e})")
            self.enabled = False

    def load(self, name, path):
        """Load a sound asset into memory for quicker playback. Returns True on success."""
        self.assets[name] = None
        if not self.enabled:
            return False
        try:
            self.assets[name] = pygame.mixer.Sound(path)
            return True
        except (pygame.error, FileNotFoundError) as e:
            print(f"Warning: could not load sound '{path}': {e}")
            return False

    def play(self, name):
        """Play a named effect; safe no-op if audio or the asset is unavailable."""
        self.last_played = name
        if not self.enabled:
            return
        snd = self.assets.get(name)
        if snd is None and name not in self.assets:
            self.load(name, os.path.join(SOUNDS_DIR, f"{name}.wav"))
            snd = self.assets.get(name)
        if snd is None:
            return
        try:
            snd.play()
        except pygame.error as e:
            print(f"Warning: playback of '{name}' failed: {e}")
