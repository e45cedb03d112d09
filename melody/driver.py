"""
Polling driver that owns the Sequencer's control thread.

All Sequencer entry points run on the driver's worker thread. Other threads
(hotkey listeners, hooks reporting stopped actions) only post work into the
queue, which is drained before every tick.
"""

from __future__ import annotations

import queue
import threading
from typing import Callable, Optional

from .sequencer import Sequencer


class MelodyDriver:
    def __init__(self, sequencer: Sequencer, poll_interval_ms: int = 50):
        if poll_interval_ms <= 0:
            raise ValueError("Poll interval must be positive")
        self._sequencer = sequencer
        self._poll_interval = poll_interval_ms / 1000.0
        self._pending: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._on_log: Optional[Callable[[str], None]] = None
        self._on_done: Optional[Callable[[bool, str], None]] = None

    def on_log(self, cb: Callable[[str], None]) -> None:
        self._on_log = cb

    def on_done(self, cb: Callable[[bool, str], None]) -> None:
        self._on_done = cb

    def submit(self, work: Callable[[], None]) -> None:
        """Run ``work`` on the control thread before the next tick."""
        self._pending.put(work)

    def post_stop_notification(self, reason: int) -> None:
        self.submit(lambda: self._sequencer.on_stop_notified(reason))

    def on_character_select(self) -> None:
        self.submit(self._sequencer.end)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._worker, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=2.0)

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def wait(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout)

    def run_cycle(self) -> None:
        """Drain posted work, then tick once."""
        while True:
            try:
                work = self._pending.get_nowait()
            except queue.Empty:
                break
            try:
                work()
            except Exception as e:
                self._log(f"Posted work failed: {e}")
        self._sequencer.tick()

    def _worker(self) -> None:
        self._log("Driver started")
        try:
            while not self._stop.is_set():
                self.run_cycle()
                self._stop.wait(self._poll_interval)
            self._finish(True, "Stopped")
        except Exception as e:  # pragma: no cover - runtime path
            self._finish(False, f"Error: {e}")

    def _log(self, msg: str) -> None:
        if self._on_log:
            try:
                self._on_log(msg)
            except Exception:
                pass

    def _finish(self, ok: bool, msg: str) -> None:
        if self._on_done:
            try:
                self._on_done(ok, msg)
            except Exception:
                pass
