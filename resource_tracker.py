"""
Per-image load state for the prefetch scheduler.
"""

import logging
from collections import Counter
from typing import Dict, Tuple

from slide_models import ImageResource, ResourceState


class ResourceStateTracker:
    """Records how much data has been realized for each image resource."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._states: Dict[Tuple[int, str], ResourceState] = {}

    def get_state(self, resource: ImageResource) -> ResourceState:
        return self._states.get(resource.key, ResourceState.EMPTY)

    def set_state(self, resource: ImageResource, tier: ResourceState) -> bool:
        """Set ``resource`` to ``tier``. A HIGH resource is never set back to LOW.

        Returns True if the stored state changed.
        """
        current = self.get_state(resource)
        if current == ResourceState.HIGH and tier == ResourceState.LOW:
            self.logger.debug(f"Ignoring low result for {resource.key}, already high")
            return False
        if current == tier:
            return False
        self._states[resource.key] = tier
        return True

    def is_satisfied(self, resource: ImageResource, tier: ResourceState) -> bool:
        """True if fetching ``tier`` would not move the resource forward."""
        return self.get_state(resource) >= tier

    def counts(self) -> Dict[str, int]:
        """Number of tracked resources per state, for logging."""
        counter = Counter(state.name.lower() for state in self._states.values())
        return dict(counter)

    def reset(self) -> None:
        self._states.clear()
