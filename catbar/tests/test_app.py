import time

import pygame
import pytest

from catbar.database import DatabaseManager
from catbar.main import CatBarApp, format_minutes


@pytest.fixture
def app(tmp_path):
    eng = CatBarApp(db_path=str(tmp_path / "catbar.db"), time_scale=1.0)
    yield eng
    if pygame.get_init():
        eng.shutdown()


def press(key):
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "mod": 0, "unicode": ""}))


def click(pos):
    pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": pos, "button": 1}))


def test_format_minutes():
    assert format_minutes(45) == "45m"
    assert format_minutes(90) == "1h 30m"


def test_fresh_app_shows_a_full_cat(app):
    assert app.step() is True
    assert app.engine.satiety == 100.0
    assert app.status_text() == "CatBar"
    assert app.animation.current_frame() is not None


def test_number_key_starts_focus_and_c_cancels(app):
    press(pygame.K_2)
    app.step()
    assert app.timer.is_running
    assert app.status_text() == "25:00"
    press(pygame.K_c)
    app.step()
    assert not app.timer.is_running
    assert app.engine.total_pomodoros == 0


def test_click_on_status_feeds_pending_food(app):
    app.engine.set_satiety(40.0)
    app.engine.complete_focus(25)
    assert app.status_text() == "Feed me!"
    click(app.status_rect.center)
    app.step()
    assert app.engine.satiety == 65.0
    assert app.engine.pending_food is False
    assert app.sounds.last_played == "feed"


def test_hungry_marker(app):
    app.engine.set_satiety(10.0)
    assert app.status_text().endswith(":(")


def test_menu_click_starts_focus(app):
    press(pygame.K_m)
    app.step()
    assert app.menu_open
    rect, label, handler = app.menu_items()[0]
    assert label == "Focus 15 min"
    click(rect.center)
    app.step()
    assert app.timer.is_running
    assert app.timer.total_seconds == 15 * 60


def test_time_passing_decays_satiety(app):
    app.step()
    app._last_step_time = time.time() - 61.0
    app.step()
    assert app.engine.satiety == 99.5


def test_quit_saves_state(app, tmp_path):
    app.engine.complete_focus(20)
    press(pygame.K_q)
    assert app.step() is False
    app.shutdown()
    db = DatabaseManager(str(tmp_path / "catbar.db"))
    assert db.get("totalPomodoros") == 1
    assert db.get("pendingFood") is True
    assert db.get("availableDurations") == [15, 25, 45, 60]
    db.close()


def test_mixer_uses_configured_settings(app):
    from catbar import sound
    if not app.sounds.enabled:
        pytest.skip("no audio device")
    frequency, _size, channels = pygame.mixer.get_init()
    assert frequency == sound._AUDIO_FREQ
    assert channels == sound._AUDIO_CHANNELS
