"""
Sequential prefetch dispatcher for the slideshow.

Owns the fetch queue, the generation counter and the dispatching flag.
Exactly one fetch is in flight at a time; each completion resumes the loop.
"""

import logging
from collections import deque
from typing import Callable, Deque, Optional, Sequence

from prefetch_queue import build_queue
from resource_tracker import ResourceStateTracker
from slide_models import FetchResult, ImageResource, QueueTask, ResourceState, Slide

LoadedCallback = Callable[[ImageResource, ResourceState, str, object], None]


class PrefetchDispatcher:
    """Drains the prefetch queue one task at a time.

    ``fetcher`` must provide ``fetch(url, on_complete)`` and call
    ``on_complete(FetchResult)`` exactly once, after ``fetch`` has returned.
    """

    def __init__(self, fetcher, tracker: Optional[ResourceStateTracker] = None,
                 on_loaded: Optional[LoadedCallback] = None):
        self.fetcher = fetcher
        self.tracker = tracker or ResourceStateTracker()
        self.on_loaded = on_loaded
        self.logger = logging.getLogger(__name__)

        self.queue: Deque[QueueTask] = deque()
        self.generation = 0
        self.dispatching = False
        self.in_flight: Optional[QueueTask] = None

        self.loaded_count = 0
        self.failed_count = 0
        self.stale_count = 0

    @property
    def idle(self) -> bool:
        return not self.dispatching and not self.queue

    def advance_generation(self) -> int:
        """Invalidate every queued and in-flight task."""
        self.generation += 1
        return self.generation

    def rebuild(self, center: int, slides: Sequence[Slide]) -> None:
        """Replace the queue with a fresh plan centered on ``center``."""
        self.queue = build_queue(center, slides, self.tracker, self.generation)
        self.logger.debug(f"Rebuilt prefetch queue around slide {center}: "
                          f"{len(self.queue)} tasks (generation {self.generation})")

    def dispatch(self) -> None:
        """Start the next fetch unless one is already running."""
        if self.dispatching:
            return

        while True:
            task = self._pop_actionable_task()
            if task is None:
                self.logger.debug(f"Prefetch queue idle: {self.tracker.counts()}")
                return

            url = task.resource.url_for(task.tier)
            if url:
                break
            self.logger.debug(f"No {task.tier.name.lower()} URL for {task.resource.key}, dropping")

        self.dispatching = True
        self.in_flight = task
        self.fetcher.fetch(url, lambda result: self._on_fetch_complete(task, url, result))

    def _pop_actionable_task(self) -> Optional[QueueTask]:
        while self.queue:
            task = self.queue.popleft()
            if not self.tracker.is_satisfied(task.resource, task.tier):
                return task
        return None

    def _on_fetch_complete(self, task: QueueTask, url: str, result: FetchResult) -> None:
        self.dispatching = False
        self.in_flight = None

        if task.generation != self.generation:
            self.stale_count += 1
            self.logger.debug(f"Discarding stale result for {task.resource.key} "
                              f"(generation {task.generation}, now {self.generation})")
        elif result.ok:
            self._apply_success(task, url, result)
        else:
            self._apply_failure(task, result)

        self.dispatch()

    def _apply_success(self, task: QueueTask, url: str, result: FetchResult) -> None:
        if not self.tracker.set_state(task.resource, task.tier):
            return
        self.loaded_count += 1
        if self.on_loaded is None:
            return
        try:
            self.on_loaded(task.resource, task.tier, url, result.image)
        except Exception as e:
            self.logger.exception(f"Error notifying display of {task.resource.key}: {e}")

    def _apply_failure(self, task: QueueTask, result: FetchResult) -> None:
        self.failed_count += 1
        if task.tier == ResourceState.LOW:
            # Older uploads may lack the low-resolution derivative
            self.logger.debug(f"Low-res fetch failed for {task.resource.key}, falling back to full: {result.error}")
            self.queue.appendleft(QueueTask(task.resource, ResourceState.HIGH, task.generation))
        else:
            self.logger.warning(f"Could not load {result.url}: {result.error}")

    def stats(self) -> dict:
        return {
            'generation': self.generation,
            'queued': len(self.queue),
            'loaded': self.loaded_count,
            'failed': self.failed_count,
            'stale': self.stale_count,
            'states': self.tracker.counts(),
        }
