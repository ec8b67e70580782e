"""
Slideshow controller for the Progressive Photo Slideshow.
Handles navigation, the first-slide bootstrap, and coordination between components.
"""

import logging
from typing import Callable, List, Optional, Sequence

from prefetch_dispatcher import PrefetchDispatcher
from resource_tracker import ResourceStateTracker
from slide_models import FetchResult, ImageResource, ResourceState, Slide


class SlideshowController:
    """Owns the current slide index and drives prefetching on every move."""

    def __init__(self, config, slides: Sequence[Slide], display_manager, fetcher,
                 tracker: Optional[ResourceStateTracker] = None):
        self.config = config
        self.slides: List[Slide] = list(slides)
        self.display_manager = display_manager
        self.fetcher = fetcher
        self.logger = logging.getLogger(__name__)

        self.tracker = tracker or ResourceStateTracker()
        self.dispatcher = PrefetchDispatcher(fetcher, self.tracker, on_loaded=self._show_resource)

        self.current_index = self._initial_index(config.get('start_index', 0))
        self.is_running = False
        self.is_bootstrapped = False

        self.display_manager.set_controller_reference(self)

    def _initial_index(self, start_index) -> int:
        if not self.slides:
            return 0
        if not isinstance(start_index, int) or not 0 <= start_index < len(self.slides):
            self.logger.warning(f"start_index {start_index} out of range, starting at slide 0")
            return 0
        return start_index

    @property
    def generation(self) -> int:
        return self.dispatcher.generation

    def start_slideshow(self) -> None:
        """Show the first slide, start loading, and run the display loop."""
        self.start()
        self.display_manager.start_event_loop(
            self._handle_key_event,
            self._handle_mouse_event,
            self.fetcher.process_completions,
        )

    def start(self) -> None:
        """Activate the starting slide and bootstrap it before background prefetching."""
        self.is_running = True
        self.logger.info(f"Starting slideshow with {len(self.slides)} slides at slide {self.current_index}")
        if self.slides:
            self.display_manager.activate_slide(self.current_index)
        self._bootstrap()

    # ===== Bootstrap =====

    def _bootstrap(self) -> None:
        if not self.slides:
            self.logger.warning("No slides available for slideshow")
            self._finish_bootstrap()
            return
        pending = list(self.slides[self.current_index].resources)
        self._bootstrap_next(pending)

    def _bootstrap_next(self, pending: List[ImageResource]) -> None:
        if not pending:
            self._finish_bootstrap()
            return
        resource = pending.pop(0)
        self._bootstrap_resource(resource, ResourceState.LOW, lambda: self._bootstrap_next(pending))

    def _bootstrap_resource(self, resource: ImageResource, tier: ResourceState,
                            on_settled: Callable[[], None]) -> None:
        """Load one resource at ``tier``, falling back from low to high, then settle."""
        url = resource.url_for(tier)
        if url is None:
            if tier == ResourceState.LOW:
                self._bootstrap_resource(resource, ResourceState.HIGH, on_settled)
            else:
                self.logger.warning(f"No URL to load for {resource.key}")
                on_settled()
            return

        def on_complete(result: FetchResult) -> None:
            if result.ok:
                if self.tracker.set_state(resource, tier):
                    try:
                        self._show_resource(resource, tier, url, result.image)
                    except Exception as e:
                        self.logger.exception(f"Error notifying display of {resource.key}: {e}")
            elif tier == ResourceState.LOW:
                self.logger.debug(f"Low-res bootstrap failed for {resource.key}, trying full")
                self._bootstrap_resource(resource, ResourceState.HIGH, on_settled)
                return
            else:
                self.logger.warning(f"Could not load {url}: {result.error}")
            on_settled()

        self.fetcher.fetch(url, on_complete)

    def _finish_bootstrap(self) -> None:
        self.is_bootstrapped = True
        self.display_manager.on_layout_ready()
        if not self.slides:
            return
        self.logger.debug(f"Bootstrap complete, prefetching around slide {self.current_index}")
        self.dispatcher.rebuild(self.current_index, self.slides)
        self.dispatcher.dispatch()

    def _show_resource(self, resource: ImageResource, tier: ResourceState, url: str, image) -> None:
        self.display_manager.show_resource(resource, tier, url, image)

    # ===== Navigation =====

    def go_to(self, index: int) -> None:
        """Move to slide ``index`` and restart prefetching around it."""
        if index < 0 or index >= len(self.slides) or index == self.current_index:
            return

        self.display_manager.deactivate_slide(self.current_index)
        self.display_manager.activate_slide(index)
        self.current_index = index
        self.dispatcher.advance_generation()

        if not self.is_bootstrapped:
            # Bootstrap starts the queue at whatever slide is current when it finishes
            return

        self.dispatcher.rebuild(index, self.slides)
        self.dispatcher.dispatch()

    def go_next(self) -> None:
        if len(self.slides) <= 1:
            return
        self.go_to((self.current_index + 1) % len(self.slides))

    def go_prev(self) -> None:
        if len(self.slides) <= 1:
            return
        self.go_to((self.current_index - 1 + len(self.slides)) % len(self.slides))

    def _handle_key_event(self, event) -> None:
        """Handle keyboard input."""
        try:
            key = event.keysym.lower()

            if key in ('right', 'down'):
                self.go_next()
            elif key in ('left', 'up'):
                self.go_prev()
            elif key == 'escape':
                self._stop_slideshow()

        except Exception as e:
            self.logger.error(f"Error handling key event: {e}")

    def _handle_mouse_event(self, zone: Optional[str]) -> None:
        """Handle a click resolved by the display to a 'prev' or 'next' zone."""
        if zone == 'prev':
            self.go_prev()
        elif zone == 'next':
            self.go_next()

    def _stop_slideshow(self) -> None:
        """Stop the slideshow and exit."""
        self.logger.info(f"Stopping slideshow: {self.dispatcher.stats()}")
        self.is_running = False
        self.fetcher.close()
        self.display_manager.destroy()
