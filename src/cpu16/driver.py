"""Cycle driver: runs a CPU16 until it halts.

Pacing between instructions is a policy of the driver, not of the engine.
A Pacer is handed the driver's stop event so any delay can be cut short by
stop(); tests use NoDelay and run at full speed.
"""

import logging
import threading
from typing import TYPE_CHECKING, Optional

from .errors import CycleLimitExceeded

if TYPE_CHECKING:
    from .cpu import CPU16

logger = logging.getLogger(__name__)


class Pacer:
    """Waits between two cycles."""

    def wait(self, stop_event: threading.Event) -> None:
        raise NotImplementedError


class NoDelay(Pacer):
    """Run as fast as possible."""

    def wait(self, stop_event: threading.Event) -> None:
        return None


class FixedDelay(Pacer):
    """Fixed wall-clock delay per instruction, cancellable through stop_event."""

    def __init__(self, seconds: float):
        if seconds < 0:
            raise ValueError(f"Delay must be non-negative, got {seconds}")
        self.seconds = seconds

    def wait(self, stop_event: threading.Event) -> None:
        stop_event.wait(self.seconds)


class CycleDriver:
    """Repeatedly steps a CPU until halt, stop() or the cycle limit.

    Attributes:
        cpu: CPU to drive
        pacer: Delay policy between cycles
        max_cycles: Safety limit on cycles per run (None for no limit)
    """

    def __init__(self, cpu: "CPU16", pacer: Optional[Pacer] = None,
                 max_cycles: Optional[int] = None):
        self.cpu = cpu
        self.pacer = pacer or NoDelay()
        self.max_cycles = max_cycles
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    def run(self) -> int:
        """Step the CPU until it halts or stop() is called.

        Returns:
            Number of cycles executed by this call

        Raises:
            CycleLimitExceeded: If max_cycles ran without a halt
        """
        self._stop.clear()
        return self._loop()

    def _loop(self) -> int:
        executed = 0
        halted = self.cpu.is_halted()
        while not halted and not self._stop.is_set():
            if self.max_cycles is not None and executed >= self.max_cycles:
                raise CycleLimitExceeded(self.max_cycles)
            halted = self.cpu.step()
            executed += 1
            if not halted:
                self.pacer.wait(self._stop)
        if self._stop.is_set() and not halted:
            logger.info("Driver stopped after %d cycles", executed)
        return executed

    def stop(self) -> None:
        """Ask the loop to exit before the next cycle."""
        self._stop.set()

    def is_running(self) -> bool:
        """Check if a background run is in progress."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Run the loop on a background daemon thread.

        Raises:
            RuntimeError: If a background run is already in progress
        """
        if self.is_running():
            raise RuntimeError("Driver is already running")
        self._error = None
        self._stop.clear()
        self._thread = threading.Thread(target=self._run_background, daemon=True,
                                        name="cpu16-driver")
        self._thread.start()

    def _run_background(self) -> None:
        try:
            self._loop()
        except Exception as e:
            logger.error("Driver thread failed: %s", e)
            self._error = e

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the background run; re-raise any error it hit."""
        if self._thread is not None:
            self._thread.join(timeout)
        if self._error is not None:
            error, self._error = self._error, None
            raise error
