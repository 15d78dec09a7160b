"""Heartbeat-guarded watchdog driven entirely by virtual time.

An auto-reload heartbeat timer kicks a single-shot watchdog timer. The kick is
deferred with `pend_function_call`, the way an interrupt handler would hand
work to the timer service, so it lands at the start of the next tick. After
`heartbeat_failure_at_ms` the heartbeat stops kicking and the watchdog is left
to expire one full watchdog period after the last kick.
"""

from typing import Any, List

from faketimers.fake_timers import FakeTimers
from faketimers.timer_table import TimerBehavior


class WatchdogSim:
    """
    Run a heartbeat/watchdog pair for `run_ms` of virtual time, one tick at a
    time, and record when the watchdog expired.
    """

    def __init__(
        self,
        heartbeat_ms=50,
        watchdog_ms=200,
        heartbeat_failure_at_ms=500,
        run_ms=1000,
        tick_ms=10,
    ):
        self.params = {
            "heartbeat_ms": heartbeat_ms,
            "watchdog_ms": watchdog_ms,
            "heartbeat_failure_at_ms": heartbeat_failure_at_ms,
            "run_ms": run_ms,
            "tick_ms": tick_ms,
        }

        self.timers = FakeTimers(tick_ms=tick_ms)
        self.watchdog = self.timers.create(
            "watchdog", watchdog_ms, TimerBehavior.SINGLE_SHOT, self, self.on_watchdog_expired
        )
        self.heartbeat = self.timers.create(
            "heartbeat", heartbeat_ms, TimerBehavior.AUTO_RELOAD, self, self.on_heartbeat
        )
        if not self.watchdog or not self.heartbeat:
            raise ValueError(f"periods must be positive multiples of {tick_ms}ms: {self.params}")

        self.kicks: List[int] = []
        self.expirations: List[int] = []
        self.results = {}

    def on_heartbeat(self, handle: int, context: Any) -> None:
        now = self.timers.get_current_time()
        if now >= self.params["heartbeat_failure_at_ms"]:
            # The heartbeat task has died; no more kicks.
            self.timers.stop(handle)
            return
        self.timers.pend_function_call(self.kick_watchdog, self.watchdog, now)

    def kick_watchdog(self, watchdog: int, sent_at_ms: int) -> None:
        self.timers.reset(watchdog)
        self.kicks.append(sent_at_ms)

    def on_watchdog_expired(self, handle: int, context: Any) -> None:
        self.expirations.append(self.timers.get_current_time())

    def run_scenario(self):
        self.timers.start(self.watchdog)
        self.timers.start(self.heartbeat)

        for _ in range(self.params["run_ms"] // self.params["tick_ms"]):
            self.timers.tick()

        self.results = {
            "kicks": len(self.kicks),
            "last_kick_ms": self.kicks[-1] if self.kicks else None,
            "watchdog_expirations": list(self.expirations),
            "heartbeat_active": self.timers.is_active(self.heartbeat),
            "watchdog_active": self.timers.is_active(self.watchdog),
        }


def main():
    sim = WatchdogSim()
    sim.run_scenario()
    print(sim.results)
    print(sim.timers.dump_state())


if __name__ == "__main__":
    main()
