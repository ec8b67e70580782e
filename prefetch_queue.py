"""
Expands the band plan into an ordered list of fetch tasks.
"""

from collections import deque
from typing import Deque, Sequence

from band_planner import plan_bands
from resource_tracker import ResourceStateTracker
from slide_models import QueueTask, ResourceState, Slide


def build_queue(center: int, slides: Sequence[Slide], tracker: ResourceStateTracker,
                generation: int) -> Deque[QueueTask]:
    """Build the fetch queue centered on ``center``.

    Duplicates across bands are left in place; the dispatcher skips tasks
    that are already satisfied when it pops them.
    """
    queue: Deque[QueueTask] = deque()
    if not slides:
        return queue

    # Current slide first, both tiers
    for resource in slides[center].resources:
        state = tracker.get_state(resource)
        if state == ResourceState.EMPTY:
            queue.append(QueueTask(resource, ResourceState.LOW, generation))
        if state != ResourceState.HIGH:
            queue.append(QueueTask(resource, ResourceState.HIGH, generation))

    for tier, index in plan_bands(center, len(slides)):
        for resource in slides[index].resources:
            if not tracker.is_satisfied(resource, tier):
                queue.append(QueueTask(resource, tier, generation))

    return queue
