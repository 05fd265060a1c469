"""
Timer registry
In-memory map of pending reminder timers, at most one per (medicine, dose time)
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from medilinko.domain.reminders.clock import TimerCallback, TimerHandle, TimerSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerKey:
    """Registry key"""
    medicine_id: str
    dose_time: str

    def __str__(self) -> str:
        return f"{self.medicine_id}_{self.dose_time}"


@dataclass
class ScheduledTimer:
    """A pending reminder"""
    key: TimerKey
    fire_at: datetime
    handle: Optional[TimerHandle] = field(default=None, repr=False)


class TimerRegistry:
    """
    Pending one-shot reminder timers

    Operations never await, so on a single event loop they cannot interleave
    with other scheduler code.
    """

    def __init__(self, timer_source: TimerSource):
        """
        Args:
            timer_source: creates the underlying timers
        """
        self._timer_source = timer_source
        self._timers: Dict[TimerKey, ScheduledTimer] = {}

    def schedule(
        self,
        key: TimerKey,
        fire_at: datetime,
        delay: float,
        callback: TimerCallback
    ) -> ScheduledTimer:
        """
        Install a timer, replacing any pending timer with the same key

        The old timer is cancelled before the new one is registered. When the
        timer fires its entry is removed first, then callback() runs; a
        failing callback is logged and not re-armed.

        Args:
            key: (medicine, dose time)
            fire_at: absolute fire time (informational)
            delay: seconds until the timer fires
            callback: coroutine function to run

        Returns:
            the registered timer
        """
        self.cancel(key)
        entry = ScheduledTimer(key=key, fire_at=fire_at)

        async def _fire():
            if self._timers.get(key) is not entry:
                return
            del self._timers[key]
            try:
                await callback()
            except Exception as e:
                logger.error(f"Reminder timer {key} failed: {e}", exc_info=True)

        entry.handle = self._timer_source.call_later(delay, _fire, job_id=str(key))
        self._timers[key] = entry
        return entry

    def cancel(self, key: TimerKey) -> bool:
        """
        Cancel one timer

        Args:
            key: registry key

        Returns:
            whether a timer was pending
        """
        entry = self._timers.pop(key, None)
        if entry is None:
            return False
        if entry.handle is not None:
            entry.handle.cancel()
        return True

    def cancel_medicine(self, medicine_id: str) -> int:
        """
        Cancel every dose timer of one medicine

        Args:
            medicine_id: medicine ID

        Returns:
            number of cancelled timers
        """
        keys = [key for key in self._timers if key.medicine_id == medicine_id]
        for key in keys:
            self.cancel(key)
            logger.debug(f"Cleared timer: {key}")
        return len(keys)

    def cancel_all(self) -> int:
        """
        Cancel every pending timer

        Returns:
            number of cancelled timers
        """
        keys = list(self._timers)
        for key in keys:
            self.cancel(key)
        return len(keys)

    def get(self, key: TimerKey) -> Optional[ScheduledTimer]:
        return self._timers.get(key)

    def pending(self) -> List[ScheduledTimer]:
        """Pending timers ordered by fire time"""
        return sorted(self._timers.values(), key=lambda t: (t.fire_at, str(t.key)))

    def __len__(self) -> int:
        return len(self._timers)

    def __contains__(self, key: object) -> bool:
        return key in self._timers
