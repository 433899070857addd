import datetime
import itertools


class SystemClock:
    """Wall clock used by the app; tests swap in a fake with the same now()."""
    def now(self):
        return datetime.datetime.now()


class _Job:
    __slots__ = ("handle", "interval", "callback", "next_due")

    def __init__(self, handle, interval, callback, next_due):
        self.handle = handle
        self.interval = interval
        self.callback = callback
        self.next_due = next_due


class Scheduler:
    """Cooperative scheduler for periodic callbacks.

    Time only moves when `advance(dt)` is called. The pygame loop feeds it the
    frame delta; tests feed it whatever they want to simulate. Callbacks fire
    one at a time in due order (ties go to the job registered first), so
    nothing they touch needs locking.
    """
    def __init__(self):
        self.elapsed = 0.0
        self._jobs = {}
        self._ids = itertools.count(1)

    def register_periodic(self, interval, callback):
        """Call `callback()` every `interval` seconds. Returns a handle."""
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        handle = next(self._ids)
        self._jobs[handle] = _Job(handle, float(interval), callback, self.elapsed + interval)
        return handle

    def cancel(self, handle):
        """Stops a job. Unknown or already-cancelled handles are ignored."""
        self._jobs.pop(handle, None)

    def reschedule(self, handle, interval):
        """Restarts a job from now with a new interval."""
        job = self._jobs.get(handle)
        if job is None:
            return
        job.interval = float(interval)
        job.next_due = self.elapsed + job.interval

    def is_active(self, handle):
        return handle in self._jobs

    def interval_of(self, handle):
        job = self._jobs.get(handle)
        return job.interval if job else None

    def advance(self, dt):
        """Moves time forward by dt seconds, firing every job that comes due."""
        target = self.elapsed + max(0.0, dt)
        while True:
            job = self._next_due(target)
            if job is None:
                break
            due = job.next_due
            self.elapsed = max(self.elapsed, due)
            job.callback()
            # The callback may have cancelled or rescheduled its own job
            if self._jobs.get(job.handle) is job and job.next_due == due:
                job.next_due = due + job.interval
        self.elapsed = target

    def _next_due(self, target):
        best = None
        for job in self._jobs.values():
            if job.next_due > target + 1e-9:
                continue
            if best is None or job.next_due < best.next_due:
                best = job
        return best
