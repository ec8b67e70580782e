"""
Shared fixtures for the slideshow tests.
"""

import pytest

from slide_models import (
    LAYOUT_DUO, LAYOUT_SOLO, ROLE_LEFT, ROLE_RIGHT, ROLE_WIDE,
    FetchResult, ImageResource, PhotoSlot, Slide,
)
from slideshow_exceptions import ImageFetchError


class ManualFetcher:
    """In-memory fetcher whose completions the test resolves one at a time."""

    def __init__(self):
        self.pending = []
        self.requested = []
        self.failing = set()
        self.closed = False

    def fetch(self, url, on_complete):
        self.requested.append(url)
        self.pending.append((url, on_complete))

    def complete(self, ok=None):
        url, on_complete = self.pending.pop(0)
        if ok is None:
            ok = url not in self.failing
        if ok:
            on_complete(FetchResult(url=url, image=f"decoded:{url}"))
        else:
            on_complete(FetchResult(url=url, error=ImageFetchError(f"404 for {url}")))
        return url

    def run_until_idle(self, limit=10000):
        completed = 0
        while self.pending and completed < limit:
            self.complete()
            completed += 1
        return completed

    def process_completions(self):
        return 0

    def close(self):
        self.closed = True


def low_url(index, role=ROLE_WIDE):
    return f"http://example.test/images/{index}-{role}_half.jpg"


def high_url(index, role=ROLE_WIDE):
    return f"http://example.test/images/{index}-{role}.jpg"


def build_slides(count, duo=(), missing_low=()):
    """Solo slides by default; indices in ``duo`` get a left/right pair."""
    slides = []
    for index in range(count):
        layout = LAYOUT_DUO if index in duo else LAYOUT_SOLO
        roles = (ROLE_LEFT, ROLE_RIGHT) if layout == LAYOUT_DUO else (ROLE_WIDE,)
        resources = tuple(
            ImageResource(index, PhotoSlot(
                role=role,
                url_high=high_url(index, role),
                url_low=None if index in missing_low else low_url(index, role),
            ))
            for role in roles
        )
        slides.append(Slide(index=index, layout=layout, resources=resources))
    return slides


@pytest.fixture
def fetcher():
    return ManualFetcher()


@pytest.fixture
def make_slides():
    return build_slides
