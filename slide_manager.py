"""
Slide management for the Progressive Photo Slideshow.
Fetches the slide list from the server and builds immutable slide records.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from slide_models import (
    LAYOUT_DUO, LAYOUT_SOLO, ROLE_LEFT, ROLE_RIGHT, ROLE_WIDE,
    ImageResource, PhotoSlot, Slide,
)
from slideshow_exceptions import SlideDataError


class SlideManager:
    """Loads the ordered slide list once per session."""

    LAYOUT_ROLES = {
        LAYOUT_DUO: (ROLE_LEFT, ROLE_RIGHT),
        LAYOUT_SOLO: (ROLE_WIDE,),
    }

    def __init__(self, config, session: Optional[requests.Session] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.server_url = config.get('server_url', 'http://localhost:8788')
        self.slides_endpoint = config.get('slides_endpoint', '/api/slides')
        self.timeout = config.get('request_timeout', 30)
        self.session = session or requests.Session()
        self.slides: List[Slide] = []

    def load_slides(self) -> List[Slide]:
        """Fetch ``/api/slides`` and build the slide list."""
        url = urljoin(self.server_url, self.slides_endpoint)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise SlideDataError(f"Failed to fetch slides from {url}: {e}") from e
        except (json.JSONDecodeError, ValueError) as e:
            raise SlideDataError(f"Invalid slide data from {url}: {e}") from e

        self.slides = self.parse_slides(data)
        self.logger.info(f"Loaded {len(self.slides)} slides from {url}")
        return self.slides

    def parse_slides(self, data: Dict[str, Any]) -> List[Slide]:
        """Build Slide records from the server payload."""
        if not isinstance(data, dict) or not isinstance(data.get('slides', []), list):
            raise SlideDataError("Slide payload must be an object with a 'slides' list")

        slides = []
        for slide_data in data.get('slides') or []:
            slides.append(self._build_slide(slide_data, len(slides)))
        return slides

    def _build_slide(self, slide_data: Dict[str, Any], index: int) -> Slide:
        layout = slide_data.get('layout')
        if layout not in self.LAYOUT_ROLES:
            self.logger.warning(f"Unknown layout {layout!r} for slide {index}, treating as solo")
            layout = LAYOUT_SOLO

        images_by_role = {}
        for image in slide_data.get('images') or []:
            images_by_role.setdefault(image.get('role'), image)

        resources = []
        for role in self.LAYOUT_ROLES[layout]:
            image = images_by_role.get(role)
            if image is None:
                continue
            resources.append(ImageResource(index, self._build_slot(role, image)))

        if not resources:
            self.logger.warning(f"Slide {index} has no images")

        return Slide(index=index, layout=layout, resources=tuple(resources))

    def _build_slot(self, role: str, image: Dict[str, Any]) -> PhotoSlot:
        return PhotoSlot(
            role=role,
            url_high=self._resolve_url(image.get('src')),
            url_low=self._resolve_url(image.get('src_half')),
            caption=image.get('caption') or '',
            width=image.get('width'),
            height=image.get('height'),
        )

    def _resolve_url(self, url: Optional[str]) -> Optional[str]:
        if not url:
            return None
        return urljoin(self.server_url, url)

    def get_slide_count(self) -> int:
        return len(self.slides)
