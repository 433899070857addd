import subprocess

import pygame

from catbar import notifications
from catbar.constants import PIXEL_SIZE
from catbar.models import CompanionId, Direction, SpeedState
from catbar.notifications import Notifier
from catbar.sprites import FRAME_HEIGHT, FRAME_WIDTH, REST_FRAMES, RUN_FRAMES, PixelCatFrames
from conftest import FakeClock


def test_grids_have_the_frame_shape():
    assert len(RUN_FRAMES) == 4
    assert len(REST_FRAMES) == 2
    for grid in RUN_FRAMES + REST_FRAMES:
        assert len(grid) == FRAME_HEIGHT
        assert all(len(row) == FRAME_WIDTH for row in grid)


def test_frames_per_state_and_direction():
    frames = PixelCatFrames()
    run = frames.get_frame(SpeedState.FAST, Direction.LEFT, 3)
    assert isinstance(run, pygame.Surface)
    assert run.get_size() == (FRAME_WIDTH * PIXEL_SIZE, FRAME_HEIGHT * PIXEL_SIZE)
    assert frames.get_frame(SpeedState.STOPPED, Direction.RIGHT, 1) is not None
    assert frames.get_frame(SpeedState.STOPPED, Direction.LEFT, 2) is None
    assert frames.get_frame(SpeedState.SLOW, Direction.LEFT, 4) is None


def test_switching_companion_rebuilds_frames():
    frames = PixelCatFrames(CompanionId.ORANGE)
    before = frames.get_frame(SpeedState.NORMAL, Direction.LEFT, 0)
    frames.set_companion("cow")
    assert frames.companion == CompanionId.COW
    assert frames.get_frame(SpeedState.NORMAL, Direction.LEFT, 0) is not before


def test_missing_sheet_uses_builtin_frames(tmp_path, capsys):
    frames = PixelCatFrames(sheet_path=str(tmp_path / "missing.png"))
    assert frames.get_frame(SpeedState.FAST, Direction.LEFT, 0) is not None
    assert "Warning" in capsys.readouterr().out


def test_notifier_keeps_a_bounded_log():
    clock = FakeClock()
    notifier = Notifier(desktop=False, clock=clock, max_messages=3)
    for i in range(5):
        notifier.notify("Title", f"body {i}")
    assert [m["body"] for m in notifier.messages] == ["body 2", "body 3", "body 4"]
    assert notifier.latest()["time"] == clock.now()
    assert notifier.unread == 5
    notifier.mark_read()
    assert notifier.unread == 0


def test_desktop_notification_is_sent(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(notifications.subprocess, "run", fake_run)
    notifier = Notifier(desktop=False, clock=FakeClock())
    notifier.desktop = True
    notifier.notify("Focus complete!", "Time to eat")
    assert calls == [["notify-send", "--app-name=CatBar", "Focus complete!", "Time to eat"]]


def test_desktop_notification_failures_are_reported(monkeypatch, capsys):
    notifier = Notifier(desktop=False, clock=FakeClock())
    notifier.desktop = True

    monkeypatch.setattr(notifications.subprocess, "run",
                        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1))
    assert notifier._send_desktop("Title", "body") is False
    assert "exited with status 1" in capsys.readouterr().out

    def broken_run(cmd, **kwargs):
        raise OSError("no display")

    monkeypatch.setattr(notifications.subprocess, "run", broken_run)
    notifier.notify("Title", "still logged")
    assert notifier.latest()["body"] == "still logged"
    assert "Warning: desktop notification failed" in capsys.readouterr().out
