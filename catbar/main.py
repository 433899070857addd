#!/usr/bin/env python3
import sys
import time
import pygame

from catbar.animation import AnimationDriver
from catbar.constants import (
    COLOR_BG, COLOR_FULLNESS, COLOR_HAPPY, COLOR_MESSAGE_BOX_BG, COLOR_PROGRESS, COLOR_STRIP,
    COLOR_TEXT, COLOR_UI_BAR_BG, DB_FILE, FPS, PANEL_HEIGHT, PIXEL_SIZE, SCREEN_WIDTH, SOUND_FEED,
    SPRITE_SHEET, START_INSET, STRIP_HEIGHT, TIME_SCALE,
)
from catbar.database import open_store
from catbar.focus_timer import FocusTimer
from catbar.models import CompanionId, HungerLevel
from catbar.notifications import Notifier
from catbar.satiety import SatietyEngine
from catbar.scheduler import Scheduler, SystemClock
from catbar.sound import SoundManager
from catbar.sprites import FRAME_WIDTH, PixelCatFrames

MENU_ROW_HEIGHT = 20
MENU_COLUMN_WIDTH = 170


def format_minutes(minutes):
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


class CatBarApp:
    """Wires the engine, timer and animation together and draws them.

    The top strip holds the running cat and the status text; the panel below
    it shows the menu, the stats page and transient HUD messages.
    """
    def __init__(self, db_path=None, clock=None, time_scale=TIME_SCALE):
        pygame.init()
        self.width = SCREEN_WIDTH
        self.height = STRIP_HEIGHT + PANEL_HEIGHT
        try:
            self.screen = pygame.display.set_mode((self.width, self.height), pygame.NOFRAME)
        except pygame.error:
            # Some drivers refuse borderless windows; fall back to a plain one
            self.screen = pygame.display.set_mode((self.width, self.height))
            print("Warning: borderless window unavailable")
        pygame.display.set_caption("CatBar")
        self.fps_clock = pygame.time.Clock()
        self.fps = FPS
        self.font = pygame.font.Font(None, 22)
        self.small_font = pygame.font.Font(None, 18)
        self.time_scale = time_scale

        # Collaborators are owned here and handed to whoever needs them
        self.clock = clock or SystemClock()
        self.store = open_store(db_path or DB_FILE)
        self.scheduler = Scheduler()
        self.notifier = Notifier(clock=self.clock)
        self.sounds = SoundManager()

        self.engine = SatietyEngine(self.store, self.clock, self.notifier)
        self.engine.load()
        self.timer = FocusTimer(self.engine, self.scheduler, self.notifier, self.sounds, self.store)
        self.timer.load_settings()
        self.frames = PixelCatFrames(self.engine.current_companion, sheet_path=SPRITE_SHEET)
        # The cat turns around just before it would run into the status text
        self.animation = AnimationDriver(self.engine, self.scheduler, self.frames,
                                         start_bound=self.width - START_INSET - FRAME_WIDTH * PIXEL_SIZE)

        self.engine.start_decay(self.scheduler)
        self.animation.start()

        self.status_rect = pygame.Rect(self.width - int(START_INSET), 0, int(START_INSET), STRIP_HEIGHT)
        self.menu_open = False
        self.stats_open = False
        self._quit_requested = False
        self.hud_text = None
        self.hud_expiry = 0.0

    # --- Actions ---
    def show_hud(self, text, duration=1.5):
        self.hud_text = text
        self.hud_start = time.time()
        self.hud_duration = duration
        self.hud_expiry = self.hud_start + duration

    def feed(self):
        if not self.engine.pending_food:
            return False
        self.engine.feed()
        self.sounds.play(SOUND_FEED)
        self.show_hud("Yummy!")
        return True

    def start_focus(self, minutes):
        if self.timer.start(minutes):
            self.menu_open = False
            self.show_hud(f"Focus {minutes} min")
            return True
        return False

    def cancel_focus(self):
        if self.timer.cancel():
            self.show_hud("Focus cancelled")
            return True
        return False

    def cycle_companion(self):
        """Switch to the next unlocked companion."""
        unlocked = [c for c in CompanionId if c in self.engine.unlocked_companions]
        index = unlocked.index(self.engine.current_companion)
        companion = unlocked[(index + 1) % len(unlocked)]
        self.engine.select_companion(companion)
        self.frames.set_companion(self.engine.current_companion)
        self.show_hud(self.engine.current_companion.display_name)

    def toggle_notifications(self):
        self.timer.set_notification_enabled(not self.timer.settings.notification_enabled)

    def toggle_sound(self):
        self.timer.set_sound_enabled(not self.timer.settings.sound_enabled)

    def toggle_stats(self):
        self.stats_open = not self.stats_open
        if self.stats_open:
            self.menu_open = False
            self.notifier.mark_read()

    def request_quit(self):
        self._quit_requested = True

    def status_text(self):
        if self.engine.pending_food:
            text = "Feed me!"
        elif self.timer.is_running:
            text = self.timer.formatted_remaining
        else:
            text = "CatBar"
        if self.engine.hunger_level == HungerLevel.HUNGRY:
            text += " :("
        return text

    def menu_items(self):
        """[(rect, label, handler)] for the open menu, laid out in columns."""
        items = []
        for minutes in self.timer.available_durations:
            items.append((f"Focus {minutes} min", lambda m=minutes: self.start_focus(m)))
        if self.timer.is_running:
            items.append(("Cancel focus", self.cancel_focus))
        items.append((f"Satiety: {self.engine.satiety:.0f}%", None))
        items.append((f"Cat: {self.engine.current_companion.display_name}", self.cycle_companion))
        items.append(("Stats", self.toggle_stats))
        items.append((f"Notifications: {'on' if self.timer.settings.notification_enabled else 'off'}",
                      self.toggle_notifications))
        items.append((f"Sound: {'on' if self.timer.settings.sound_enabled else 'off'}", self.toggle_sound))
        items.append(("Quit", self.request_quit))

        rows_per_column = max(1, (PANEL_HEIGHT - 10) // MENU_ROW_HEIGHT)
        laid_out = []
        for i, (label, handler) in enumerate(items):
            col, row = divmod(i, rows_per_column)
            rect = pygame.Rect(8 + col * MENU_COLUMN_WIDTH, STRIP_HEIGHT + 5 + row * MENU_ROW_HEIGHT,
                               MENU_COLUMN_WIDTH - 8, MENU_ROW_HEIGHT - 2)
            laid_out.append((rect, label, handler))
        return laid_out

    # --- Loop ---
    def _handle_key(self, key):
        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.request_quit()
        elif key == pygame.K_f:
            self.feed()
        elif key == pygame.K_c:
            self.cancel_focus()
        elif key == pygame.K_m:
            self.menu_open = not self.menu_open
            self.stats_open = False
        elif key == pygame.K_s:
            self.toggle_stats()
        elif key == pygame.K_n:
            self.cycle_companion()
        elif pygame.K_1 <= key <= pygame.K_9:
            index = key - pygame.K_1
            durations = self.timer.available_durations
            if index < len(durations):
                self.start_focus(durations[index])

    def _handle_click(self, pos):
        if self.status_rect.collidepoint(pos):
            # Left click on the status text feeds when food is waiting, otherwise opens the menu
            if not self.feed():
                self.menu_open = not self.menu_open
                self.stats_open = False
            return
        if self.menu_open:
            for rect, _label, handler in self.menu_items():
                if handler and rect.collidepoint(pos):
                    handler()
                    return

    def step(self):
        """Process a single loop iteration (useful for headless tests). Returns False to stop."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                self._handle_key(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_click(event.pos)
        if self._quit_requested:
            return False

        # Logic update: all timers run from here, one callback at a time
        now = time.time()
        dt = now - getattr(self, "_last_step_time", now)
        self._last_step_time = now
        self.scheduler.advance(dt * self.time_scale)

        self.render()
        pygame.display.flip()
        self.fps_clock.tick(self.fps)
        return True

    # --- Rendering ---
    def render(self):
        self.screen.fill(COLOR_BG)
        pygame.draw.rect(self.screen, COLOR_STRIP, (0, 0, self.width, STRIP_HEIGHT))

        frame = self.animation.current_frame()
        if frame is not None:
            y = (STRIP_HEIGHT - frame.get_height()) // 2
            self.screen.blit(frame, (int(self.animation.position_x), y))

        status = self.font.render(self.status_text(), True, COLOR_TEXT)
        self.screen.blit(status, status.get_rect(midright=(self.width - 8, STRIP_HEIGHT // 2)))
        if self.timer.is_running:
            bar_w = int(self.width * self.timer.progress)
            pygame.draw.rect(self.screen, COLOR_PROGRESS, (0, STRIP_HEIGHT - 2, bar_w, 2))

        if self.menu_open:
            self._render_menu()
        elif self.stats_open:
            self._render_stats()
        else:
            self._render_overview()
        self._render_hud()

    def draw_bar(self, x, y, value, color, label):
        """Renders a 0-100 progress bar with a label above it."""
        pygame.draw.rect(self.screen, COLOR_UI_BAR_BG, (x, y, 100, 10))
        width = max(0, min(100, int(value)))
        pygame.draw.rect(self.screen, color, (x, y, width, 10))
        lbl = self.small_font.render(label, True, COLOR_TEXT)
        self.screen.blit(lbl, (x, y - 14))

    def _render_overview(self):
        self.draw_bar(10, STRIP_HEIGHT + 22, self.engine.satiety, COLOR_FULLNESS,
                      f"Satiety {self.engine.satiety:.0f}%")
        hint = "M menu  F feed  1-9 focus  C cancel  S stats  N cat  Q quit"
        self.screen.blit(self.small_font.render(hint, True, COLOR_TEXT), (10, STRIP_HEIGHT + 44))
        latest = self.notifier.latest()
        if latest:
            text = f"[{latest['time'].strftime('%H:%M')}] {latest['title']} {latest['body']}"
            self.screen.blit(self.small_font.render(text, True, COLOR_HAPPY), (10, STRIP_HEIGHT + 64))

    def _render_menu(self):
        for rect, label, handler in self.menu_items():
            color = COLOR_TEXT if handler else COLOR_HAPPY
            pygame.draw.rect(self.screen, COLOR_UI_BAR_BG, rect, border_radius=4)
            self.screen.blit(self.small_font.render(label, True, color), (rect.x + 6, rect.y + 3))

    def _render_stats(self):
        engine = self.engine
        lines = [
            f"Today: {format_minutes(engine.today_focus_minutes)}",
            f"Pomodoros: {engine.total_pomodoros}",
            f"Streak: {engine.streak_days} days",
            f"Total focus: {format_minutes(engine.total_focus_minutes)}",
        ]
        for i, line in enumerate(lines):
            self.screen.blit(self.small_font.render(line, True, COLOR_TEXT), (10, STRIP_HEIGHT + 8 + i * 18))

        # Last seven days as a small bar chart
        week = engine.weekly_focus()
        peak = max([minutes for _day, minutes in week] + [60])
        base_y = STRIP_HEIGHT + PANEL_HEIGHT - 20
        for i, (day, minutes) in enumerate(week):
            x = 220 + i * 30
            h = int((PANEL_HEIGHT - 50) * minutes / peak)
            pygame.draw.rect(self.screen, COLOR_HAPPY, (x, base_y - h, 20, h))
            lbl = self.small_font.render(day.strftime("%a")[:2], True, COLOR_TEXT)
            self.screen.blit(lbl, (x + 2, base_y + 4))

    def _render_hud(self):
        if not self.hud_text:
            return
        now = time.time()
        if now >= self.hud_expiry:
            self.hud_text = None
            return
        frac = max(0.0, min(1.0, (now - self.hud_start) / self.hud_duration))
        hud_surf = self.font.render(self.hud_text, True, COLOR_TEXT)
        hud_w = hud_surf.get_width() + 20
        hud_h = hud_surf.get_height() + 10
        bg = pygame.Surface((hud_w, hud_h), pygame.SRCALPHA)
        r, g, b, a = COLOR_MESSAGE_BOX_BG
        bg.fill((r, g, b, int(a * (1.0 - frac))))
        x = self.width // 2 - hud_w // 2
        y = STRIP_HEIGHT + PANEL_HEIGHT - hud_h - 4
        self.screen.blit(bg, (x, y))
        self.screen.blit(hud_surf, (x + 10, y + 5))

    def shutdown(self):
        """Persist everything and release pygame."""
        self.animation.stop()
        self.engine.save()
        self.timer.save_settings()
        self.store.close()
        pygame.quit()

    def run(self):
        running = True
        try:
            while running:
                running = self.step()
        finally:
            self.shutdown()


def main():
    print("Starting CatBar...")
    app = CatBarApp()
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
