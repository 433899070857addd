import datetime
import shutil
import subprocess

from catbar.constants import DESKTOP_NOTIFY


class Notifier:
    """Notification sink.

    Keeps a timestamped log the shell shows in its message panel, echoes each
    message to stdout and, when enabled, forwards it to the desktop through
    `notify-send`. Delivery problems are reported, never raised.
    """
    def __init__(self, desktop=DESKTOP_NOTIFY, clock=None, max_messages=50):
        self.clock = clock
        self.max_messages = max_messages
        self.messages = []
        self.unread = 0
        self.desktop = desktop and shutil.which("notify-send") is not None

    def notify(self, title, body):
        now = self.clock.now() if self.clock else datetime.datetime.now()
        entry = {"time": now, "title": title, "body": body}
        self.messages.append(entry)
        del self.messages[:-self.max_messages]
        self.unread += 1
        print(f"[{now.strftime('%H:%M')}] {title} {body}")
        if self.desktop:
            self._send_desktop(title, body)
        return entry

    def latest(self):
        return self.messages[-1] if self.messages else None

    def mark_read(self):
        self.unread = 0

    def _send_desktop(self, title, body):
        try:
            result = subprocess.run(["notify-send", "--app-name=CatBar", title, body],
                                    check=False, timeout=5)
        except (OSError, subprocess.SubprocessError) as e:
            print(f"Warning: desktop notification failed: {e}")
            return False
        if result.returncode != 0:
            print(f"Warning: notify-send exited with status {result.returncode}")
            return False
        return True
