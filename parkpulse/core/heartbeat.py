"""
Heartbeat scheduler - runs registered periodic tasks on a dedicated worker thread.
Drives the availability simulation that perturbs the parking store.
"""

import threading
import time
from typing import Callable, Dict, Optional

from .config import get_simulation_interval, is_simulation_enabled, validate_simulation_config
from ..util.logging import logger

SIMULATION_TASK = "availability_simulation"


class Heartbeat:
    """
    Cooperative scheduler for named periodic tasks.

    start() launches the loop on a daemon thread; stop() signals it and joins,
    so no task runs once stop() has returned. A task that is executing when
    stop() is called finishes first.
    """

    def __init__(self, tick_sec: float = 0.1):
        self.tick_sec = tick_sec
        self.tasks: Dict[str, Dict] = {}  # task_name -> {func, interval, last_run, runs, failures}
        self._tasks_lock = threading.Lock()
        self._shutdown_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def register_task(self, name: str, interval_sec: int, func: Callable, run_immediately: bool = True):
        """
        Register a task to be executed periodically.

        Args:
            name: Unique task identifier (re-registering replaces the task)
            interval_sec: How often to run this task in seconds
            func: Function to call (should be fast and not block)
            run_immediately: If False, the first run waits one full interval
        """
        if not callable(func):
            raise ValueError(f"Task function must be callable: {func}")

        if interval_sec < 1:
            raise ValueError(f"Interval must be >= 1 second: {interval_sec}")

        with self._tasks_lock:
            self.tasks[name] = {
                "func": func,
                "interval": interval_sec,
                "last_run": None if run_immediately else time.monotonic(),
                "runs": 0,
                "failures": 0,
            }

        logger.info(f"Registered heartbeat task '{name}' (every {interval_sec}s)")

    def unregister_task(self, name: str):
        """Remove a task from the registry."""
        with self._tasks_lock:
            removed = self.tasks.pop(name, None)
        if removed is not None:
            logger.info(f"Unregistered heartbeat task '{name}'")

    def list_tasks(self):
        """Return list of registered task names."""
        with self._tasks_lock:
            return list(self.tasks.keys())

    def reset_task(self, name: str):
        """Reset a task's last_run time to force execution on the next cycle."""
        with self._tasks_lock:
            if name in self.tasks:
                self.tasks[name]["last_run"] = None

    def start(self):
        """Start the scheduling loop on a background thread."""
        if self.running:
            raise RuntimeError("Heartbeat already running")

        issues = validate_simulation_config()
        if issues:
            raise ValueError(f"Heartbeat configuration invalid: {issues}")

        self._shutdown_event.clear()
        self._started_at = time.monotonic()
        self._thread = threading.Thread(target=self._loop, name="parkpulse-heartbeat", daemon=True)
        self._thread.start()
        logger.info(f"Heartbeat started with tasks: {self.list_tasks()}")

    def stop(self, timeout: Optional[float] = 5.0):
        """Stop the loop and wait for the worker thread to exit."""
        if not self.running:
            logger.info("Heartbeat not running")
            return

        self._shutdown_event.set()
        if threading.current_thread() is self._thread:
            # Called from a task: the loop exits once the task returns, and
            # running stays True until then so start() cannot spawn a second loop
            logger.info("Heartbeat stop requested from worker thread")
            return

        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"Heartbeat thread did not exit within {timeout}s")
            return
        self._thread = None
        logger.info("Heartbeat stopped")

    def _loop(self):
        while not self._shutdown_event.is_set():
            with self._tasks_lock:
                due = [(name, info) for name, info in self.tasks.items() if self.should_run_task(name, info)]

            for name, task_info in due:
                # Cancellation wins over any task still queued in this cycle
                if self._shutdown_event.is_set():
                    break
                try:
                    self.run_task(name, task_info)
                except Exception as e:
                    # Error isolation - log error but continue loop
                    logger.error(f"Heartbeat task '{name}' failed: {e}")

            self._shutdown_event.wait(self.tick_sec)

    def should_run_task(self, name: str, task_info: Dict) -> bool:
        """Check if a task should run this cycle."""
        if task_info["last_run"] is None:
            return True  # Run immediately if never run

        elapsed = time.monotonic() - task_info["last_run"]
        return elapsed >= task_info["interval"]

    def run_task(self, name: str, task_info: Dict):
        """Execute a task and record timing."""
        start_time = time.monotonic()

        try:
            result = task_info["func"]()
        except Exception as e:
            end_time = time.monotonic()
            task_info["last_run"] = end_time
            task_info["failures"] += 1
            logger.log_heartbeat_task(name, start_time, end_time, status="failed", details={"error": str(e)})
            raise RuntimeError(f"Task '{name}' failed after {end_time - start_time:.2f}s: {e}") from e

        end_time = time.monotonic()
        task_info["last_run"] = end_time
        task_info["runs"] += 1
        details = {"result": result} if result is not None else None
        logger.log_heartbeat_task(name, start_time, end_time, details=details)
        return result

    def get_status(self):
        """Return current heartbeat status for monitoring."""
        with self._tasks_lock:
            tasks = {
                name: {
                    "interval_sec": info["interval"],
                    "last_run": info["last_run"],
                    "next_run": info["last_run"] + info["interval"] if info["last_run"] else None,
                    "runs": info["runs"],
                    "failures": info["failures"],
                }
                for name, info in self.tasks.items()
            }

        uptime = time.monotonic() - self._started_at if self.running and self._started_at else 0.0
        return {
            "status": "running" if self.running else "stopped",
            "tasks": tasks,
            "uptime_sec": round(uptime, 3),
        }


def start_simulation(store, heartbeat: Optional[Heartbeat] = None, interval_sec: Optional[int] = None) -> Optional[Heartbeat]:
    """
    Register the store's periodic perturbation and start the heartbeat.

    Returns the running heartbeat, or None when SIMULATION_ENABLED is false.
    """
    if not is_simulation_enabled():
        logger.info("Simulation disabled (SIMULATION_ENABLED=false). Skipping start.")
        return None

    heartbeat = heartbeat or Heartbeat()
    interval = get_simulation_interval() if interval_sec is None else interval_sec
    # The seed data is fresh, so the first perturbation waits one full interval
    heartbeat.register_task(SIMULATION_TASK, interval, store.run_periodic_update, run_immediately=False)
    heartbeat.start()
    return heartbeat
