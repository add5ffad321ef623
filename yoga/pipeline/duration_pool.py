"""Background duration probing.

Uses a "self-feeding slots" pattern: a fixed number of probe slots
(min(cpu count, max workers, queue length)) is filled from a FIFO queue, and
every completion frees its slot for exactly one next path. The scheduler is
plain bookkeeping driven by completion events, it never touches threads; the
worker pool runs the blocking ffprobe calls and writes through to the cache.
"""

import logging
import os
import concurrent.futures
from collections import deque
from pathlib import Path
from typing import Callable, Deque, Iterable, List, Optional, Set, Tuple

from yoga.domain.commands import ProbeDuration
from yoga.domain.events import DurationResolved
from yoga.infrastructure.duration_cache import DurationCache
from yoga.infrastructure.ffprobe import FFprobeAdapter

MAX_PROBE_WORKERS = 6

logger = logging.getLogger(__name__)


def worker_count(queue_length: int, cpu_count: Optional[int] = None, max_workers: int = MAX_PROBE_WORKERS) -> int:
    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    return max(0, min(max(1, cpus), max_workers, queue_length))


class DurationScheduler:
    """Tracks the pending queue and in-flight probes of one probing run.

    A path is never queued or in flight twice. The run is finished when every
    queued path has completed and no probe is in flight; counters then reset
    for the next run.
    """

    def __init__(self, max_workers: int = MAX_PROBE_WORKERS, cpu_count: Optional[int] = None):
        self.max_workers = max_workers
        self.cpu_count = cpu_count
        self._pending: Deque[Path] = deque()
        self._queued: Set[Path] = set()
        self._in_flight: Set[Path] = set()
        self._slots = 0
        self.total = 0
        self.done = 0

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    @property
    def slots(self) -> int:
        return self._slots

    @property
    def active(self) -> bool:
        return self.total > 0

    @property
    def finished(self) -> bool:
        return self.done >= self.total and not self._in_flight

    def is_tracked(self, path: Path) -> bool:
        return path in self._queued or path in self._in_flight

    def enqueue(self, paths: Iterable[Path]) -> List[ProbeDuration]:
        """Queues new paths and returns the probes to start right away."""
        added = 0
        for path in paths:
            if self.is_tracked(path):
                continue
            self._pending.append(path)
            self._queued.add(path)
            added += 1
        self.total += added
        wanted = worker_count(len(self._pending) + len(self._in_flight), self.cpu_count, self.max_workers)
        self._slots = max(self._slots, wanted)
        if added:
            logger.debug(f"Queued {added} probes (total={self.total}, slots={self._slots})")
        return self._fill_slots()

    def complete(self, path: Path) -> Tuple[List[ProbeDuration], bool]:
        """Registers a finished probe.

        Returns the next probe to start (at most one) and whether this
        completion finished the run.
        """
        if path not in self._in_flight:
            logger.warning(f"Ignoring result for untracked probe: {path}")
            return [], False
        self._in_flight.discard(path)
        self.done += 1
        commands = self._fill_slots()
        if self.finished:
            self._reset()
            return commands, True
        return commands, False

    def _fill_slots(self) -> List[ProbeDuration]:
        commands: List[ProbeDuration] = []
        while self._pending and len(self._in_flight) < self._slots:
            path = self._pending.popleft()
            self._queued.discard(path)
            self._in_flight.add(path)
            commands.append(ProbeDuration(path=path))
        return commands

    def _reset(self):
        self._pending.clear()
        self._queued.clear()
        self._slots = 0
        self.total = 0
        self.done = 0


class DurationWorkerPool:
    """Runs probes on a bounded thread pool and reports each result.

    Successful durations are recorded in the cache (not flushed). Results are
    handed to `on_result` from the worker thread.

    Args:
        ffprobe_adapter: FFprobeAdapter used for the blocking probe call.
        duration_cache: DurationCache receiving successful results.
        on_result: Callback receiving a DurationResolved per probe.
        max_workers: Upper bound on concurrently running probes.
    """

    def __init__(
        self,
        ffprobe_adapter: FFprobeAdapter,
        duration_cache: Optional[DurationCache],
        on_result: Callable[[DurationResolved], None],
        max_workers: int = MAX_PROBE_WORKERS,
    ):
        self.ffprobe_adapter = ffprobe_adapter
        self.duration_cache = duration_cache
        self.on_result = on_result
        self.logger = logging.getLogger(__name__)
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="probe"
        )

    def probe(self, path: Path) -> DurationResolved:
        try:
            duration = self.ffprobe_adapter.probe_duration(path)
        except Exception as e:
            self.logger.warning(f"Duration probe failed for {path.name}: {e}")
            return DurationResolved(path=path, error=str(e) or type(e).__name__)

        if self.duration_cache is not None:
            try:
                self.duration_cache.record(path, os.stat(path), duration)
            except OSError as e:
                self.logger.debug(f"Not caching duration for {path.name}: {e}")
        return DurationResolved(path=path, duration=duration)

    def _run(self, path: Path):
        self.on_result(self.probe(path))

    def submit(self, path: Path) -> concurrent.futures.Future:
        return self._executor.submit(self._run, path)

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
