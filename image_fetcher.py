"""
Image fetching for the Progressive Photo Slideshow.
Downloads and decodes images off the UI thread and hands completions back to it.
"""

import io
import logging
import queue
import threading
from typing import Callable, Optional

import requests
from PIL import Image

from slide_models import FetchResult
from slideshow_exceptions import ImageFetchError


class ImageFetcher:
    """Downloads one image per call on a worker thread.

    Completions are queued and only invoked from ``process_completions``,
    which the display polls from the tkinter main loop.
    """

    def __init__(self, config, session: Optional[requests.Session] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.timeout = config.get('request_timeout', 30)
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': config.get('user_agent', 'ProgressiveSlideshow/1.0')
        })
        self._completions: "queue.Queue[tuple]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None

    def fetch(self, url: str, on_complete: Callable[[FetchResult], None]) -> None:
        """Start downloading ``url``; ``on_complete`` receives the FetchResult later."""
        self._worker = threading.Thread(target=self._run, args=(url, on_complete), daemon=True)
        self._worker.start()

    def _run(self, url: str, on_complete: Callable[[FetchResult], None]) -> None:
        try:
            image = self.download_image(url)
            result = FetchResult(url=url, image=image)
        except ImageFetchError as e:
            result = FetchResult(url=url, error=e)
        except Exception as e:
            # Every fetch must complete, or the dispatcher stays busy forever
            self.logger.exception(f"Unexpected error fetching {url}: {e}")
            result = FetchResult(url=url, error=ImageFetchError(f"Unexpected error fetching {url}: {e}"))
        self._completions.put((on_complete, result))

    def download_image(self, url: str) -> Image.Image:
        """Fetch and fully decode ``url``. Raises ImageFetchError on any failure."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ImageFetchError(f"Request for {url} failed: {e}") from e

        try:
            image = Image.open(io.BytesIO(response.content))
            image.load()
        except Image.DecompressionBombError as e:
            raise ImageFetchError(f"Image {url} is too large to decode: {e}") from e
        except Exception as e:
            raise ImageFetchError(f"Cannot decode image {url}: {e}") from e

        self.logger.debug(f"Fetched {url} ({image.width}x{image.height})")
        return image

    def process_completions(self) -> int:
        """Run all pending completion callbacks on the calling thread."""
        handled = 0
        while True:
            try:
                on_complete, result = self._completions.get_nowait()
            except queue.Empty:
                return handled
            on_complete(result)
            handled += 1

    def close(self, timeout: float = 5.0) -> None:
        """Wait for the fetch in flight, if any, then close the session."""
        if self._worker is not None and self._worker.is_alive():
            self._worker.join(timeout)
        self._worker = None
        self.session.close()
