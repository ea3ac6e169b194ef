"""
Fixed-period scheduling loop.

Collects once shortly after startup, then once per interval forever.
Time is measured on the boot clock where the host has one, so a device
that spends most of the day suspended still collects once per day of
elapsed time instead of once per day awake.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from sysfstats.config import COLLECTION_INTERVAL_SECONDS, STARTUP_DELAY_SECONDS

log = logging.getLogger(__name__)

# Upper bound on a single sleep. time.sleep runs on a clock that stops
# during suspend, so long sleeps are cut up and the boot clock re-checked.
MAX_SLEEP_SLICE_SECONDS = 60.0


class TimerError(Exception):
    """The periodic timer could not be created, armed, or waited on."""


class PeriodicTicker(ABC):
    """Delivers a tick every fixed interval after an initial delay."""

    @abstractmethod
    def arm(self, initial_delay: float, interval: float) -> None:
        ...

    @abstractmethod
    def wait(self) -> None:
        """Block until the next tick.

        Raises InterruptedError if the wait was cut short by a signal
        (callers retry), TimerError or OSError for anything fatal.
        """
        ...

    def close(self) -> None:
        pass


def _boot_clock() -> Callable[[], float]:
    clock_id = getattr(time, "CLOCK_BOOTTIME", None)
    if clock_id is None:
        log.debug("No CLOCK_BOOTTIME on this host, falling back to the monotonic clock")
        return time.monotonic
    return lambda: time.clock_gettime(clock_id)


class BoottimeTicker(PeriodicTicker):

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        sleep: Callable[[float], None] = time.sleep,
        max_slice: float = MAX_SLEEP_SLICE_SECONDS,
    ):
        self._clock = clock or _boot_clock()
        self._sleep = sleep
        self._max_slice = max_slice
        self._deadline: Optional[float] = None
        self._interval: Optional[float] = None
        try:
            self._clock()
        except OSError as e:
            raise TimerError(f"boot clock unavailable: {e}") from e

    def arm(self, initial_delay: float, interval: float) -> None:
        if interval <= 0 or initial_delay < 0:
            raise TimerError(f"invalid timer settings: delay={initial_delay} interval={interval}")
        self._interval = interval
        self._deadline = self._clock() + initial_delay

    def wait(self) -> None:
        if self._deadline is None:
            raise TimerError("timer not armed")

        while True:
            remaining = self._deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(remaining, self._max_slice))

        # Slept through several periods (e.g. suspended): one tick, skip the rest
        now = self._clock()
        while self._deadline <= now:
            self._deadline += self._interval


class Scheduler:
    """Runs ``collect_round`` on a fixed period. ``run()`` only returns on timer failure."""

    def __init__(
        self,
        collect_round: Callable[[], object],
        ticker_factory: Callable[[], PeriodicTicker] = BoottimeTicker,
        startup_delay: float = STARTUP_DELAY_SECONDS,
        interval: float = COLLECTION_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._collect_round = collect_round
        self._ticker_factory = ticker_factory
        self._startup_delay = startup_delay
        self._interval = interval
        self._sleep = sleep

    def run(self) -> None:
        try:
            ticker = self._ticker_factory()
        except (TimerError, OSError) as e:
            log.error("Unable to create collection timer - %s", e)
            return

        try:
            self._loop(ticker)
        finally:
            ticker.close()

    def _loop(self, ticker: PeriodicTicker) -> None:
        if self._startup_delay > 0:
            log.info("Waiting %.0fs before first collection", self._startup_delay)
            self._sleep(self._startup_delay)

        self._collect_round()

        try:
            ticker.arm(self._interval, self._interval)
        except (TimerError, OSError) as e:
            log.error("Unable to set %.0fs collection timer - %s", self._interval, e)
            return

        while True:
            try:
                ticker.wait()
            except InterruptedError:
                continue
            except (TimerError, OSError) as e:
                log.error("Collection timer error - %s", e)
                return
            self._collect_round()
