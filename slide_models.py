"""
Data types shared by the slide loader, the prefetch scheduler and the display.
"""

import dataclasses
import enum
from typing import Optional, Tuple


class ResourceState(enum.IntEnum):
    """How much of an image has been realized. Ordered: EMPTY < LOW < HIGH.

    LOW and HIGH double as the two fetch tiers.
    """
    EMPTY = 0
    LOW = 1
    HIGH = 2


LAYOUT_DUO = 'duo'
LAYOUT_SOLO = 'solo'

ROLE_LEFT = 'left'
ROLE_RIGHT = 'right'
ROLE_WIDE = 'wide'


@dataclasses.dataclass(frozen=True)
class PhotoSlot:
    """One photo position on a slide, with its two resolution URLs."""
    role: str
    url_high: Optional[str]
    url_low: Optional[str] = None
    caption: str = ''
    width: Optional[int] = None
    height: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class ImageResource:
    """The unit of tracked load state, bound to a single slot for the session."""
    slide_index: int
    slot: PhotoSlot

    @property
    def key(self) -> Tuple[int, str]:
        return (self.slide_index, self.slot.role)

    @property
    def role(self) -> str:
        return self.slot.role

    def url_for(self, tier: ResourceState) -> Optional[str]:
        """Return the URL to fetch for ``tier``, or None when the slot has none."""
        url = self.slot.url_low if tier == ResourceState.LOW else self.slot.url_high
        return url or None


@dataclasses.dataclass(frozen=True)
class Slide:
    """An immutable slide: a layout plus one or two image resources."""
    index: int
    layout: str
    resources: Tuple[ImageResource, ...] = ()

    @property
    def slots(self) -> Tuple[PhotoSlot, ...]:
        return tuple(resource.slot for resource in self.resources)

    def resource_for_role(self, role: str) -> Optional[ImageResource]:
        for resource in self.resources:
            if resource.role == role:
                return resource
        return None


@dataclasses.dataclass(frozen=True)
class QueueTask:
    """A single pending fetch. ``generation`` is captured when the task is built."""
    resource: ImageResource
    tier: ResourceState
    generation: int


@dataclasses.dataclass
class FetchResult:
    """Outcome of one fetch: either a decoded image or an error."""
    url: str
    image: object = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
