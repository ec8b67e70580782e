"""
Display management for the Progressive Photo Slideshow.
Handles fullscreen display, slide layout, and progressive image rendering.
"""

import tkinter as tk
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from PIL import Image, ImageTk

from slide_models import (
    LAYOUT_DUO, ROLE_LEFT, ROLE_RIGHT, ROLE_WIDE,
    ImageResource, ResourceState, Slide,
)
from slideshow_exceptions import DisplayError

Rect = Tuple[int, int, int, int]

PHOTO_GAP = 4
CAPTION_HEIGHT = 28
MAX_HEIGHT_RATIO = 0.925


def compute_layout(layout: str, screen_width: int, screen_height: int) -> Dict[str, Rect]:
    """Return the (x, y, width, height) of each photo role for a slide layout.

    Landscape screens use two 3:4 columns; portrait screens stack duo photos.
    """
    if screen_width <= 0 or screen_height <= 0:
        raise DisplayError(f"Invalid screen size {screen_width}x{screen_height}")

    usable_height = screen_height - CAPTION_HEIGHT

    if screen_height > screen_width:
        if layout == LAYOUT_DUO:
            photo_h = (usable_height - CAPTION_HEIGHT - PHOTO_GAP) // 2
            return {
                ROLE_LEFT: (0, 0, screen_width, photo_h),
                ROLE_RIGHT: (0, photo_h + CAPTION_HEIGHT + PHOTO_GAP, screen_width, photo_h),
            }
        return {ROLE_WIDE: (0, 0, screen_width, usable_height)}

    col_w = (screen_width - PHOTO_GAP) / 2
    photo_h = int(min(col_w * 4 / 3, usable_height * MAX_HEIGHT_RATIO))
    total_w = int(col_w * 2 + PHOTO_GAP)
    x = (screen_width - total_w) // 2
    y = (usable_height - photo_h) // 2

    if layout == LAYOUT_DUO:
        return {
            ROLE_LEFT: (x, y, int(col_w), photo_h),
            ROLE_RIGHT: (x + int(col_w) + PHOTO_GAP, y, int(col_w), photo_h),
        }
    return {ROLE_WIDE: (x, y, total_w, photo_h)}


def resolve_click_zone(layout: str, rects: Dict[str, Rect], x: int, y: int) -> Optional[str]:
    """Map a click to 'prev' or 'next'. Duo: left/right photo. Solo: left/right half."""
    for role, (rx, ry, rw, rh) in rects.items():
        if not (rx <= x < rx + rw and ry <= y < ry + rh):
            continue
        if layout == LAYOUT_DUO:
            return 'prev' if role == ROLE_LEFT else 'next'
        return 'prev' if x < rx + rw / 2 else 'next'
    return None


def fit_image(image: Image.Image, width: int, height: int) -> Image.Image:
    """Resize image to fit the box while maintaining aspect ratio."""
    img_width, img_height = image.size
    scale = min(width / img_width, height / img_height)
    new_size = (max(1, int(img_width * scale)), max(1, int(img_height * scale)))
    return image.resize(new_size, Image.Resampling.LANCZOS)


class DisplayManager:
    """Manages the fullscreen window and renders the active slide."""

    def __init__(self, config, slides):
        self.config = config
        self.slides = list(slides)
        self.logger = logging.getLogger(__name__)
        self.root = None
        self.canvas = None
        self.screen_width = 0
        self.screen_height = 0
        self.controller_ref = None

        self.active_index: Optional[int] = None
        self.layout_ready = False
        self._images: Dict[Tuple[int, str], Any] = {}
        self._photo_refs = []

        self._setup_display()

    def _setup_display(self) -> None:
        """Setup fullscreen tkinter display."""
        self.root = tk.Tk()
        self.root.title("Progressive Photo Slideshow")

        if self.config.get('MONITOR_RESOLUTION') == 'auto':
            self.screen_width = self.root.winfo_screenwidth()
            self.screen_height = self.root.winfo_screenheight()
        else:
            try:
                width, height = self.config.get('MONITOR_RESOLUTION').split('x')
                self.screen_width = int(width)
                self.screen_height = int(height)
            except (ValueError, AttributeError):
                self.logger.warning("Invalid monitor resolution config, using auto-detection")
                self.screen_width = self.root.winfo_screenwidth()
                self.screen_height = self.root.winfo_screenheight()

        self.root.geometry(f"{self.screen_width}x{self.screen_height}")
        self.root.attributes('-fullscreen', True)
        self.root.configure(bg='black')
        self.root.focus_set()

        self.canvas = tk.Canvas(
            self.root,
            width=self.screen_width,
            height=self.screen_height,
            bg='black',
            highlightthickness=0
        )
        self.canvas.pack(fill=tk.BOTH, expand=True)

        self.logger.info(f"Display initialized: {self.screen_width}x{self.screen_height}")

    def set_controller_reference(self, controller) -> None:
        """Set reference to controller for state checking."""
        self.controller_ref = controller

    # ===== Notifications from the controller =====

    def activate_slide(self, index: int) -> None:
        self.active_index = index
        self._redraw()

    def deactivate_slide(self, index: int) -> None:
        if self.active_index == index:
            self.active_index = None

    def show_resource(self, resource: ImageResource, tier: ResourceState, url: str, image) -> None:
        """Store a newly loaded image and draw it if its slide is on screen."""
        self._images[resource.key] = image
        self.logger.debug(f"Slide {resource.slide_index} {resource.role} now {tier.name.lower()}: {url}")
        if resource.slide_index == self.active_index:
            self._redraw()

    def on_layout_ready(self) -> None:
        """First slide has settled; lay it out and follow window resizes from now on."""
        self.layout_ready = True
        self.root.bind('<Configure>', self._on_resize)
        self._redraw()

    def _on_resize(self, event) -> None:
        if event.widget is not self.root:
            return
        if (event.width, event.height) == (self.screen_width, self.screen_height):
            return
        self.screen_width, self.screen_height = event.width, event.height
        self._redraw()

    # ===== Rendering =====

    def _active_slide(self) -> Optional[Slide]:
        if self.active_index is None or not 0 <= self.active_index < len(self.slides):
            return None
        return self.slides[self.active_index]

    def _redraw(self) -> None:
        if not self.layout_ready:
            return
        try:
            self.canvas.delete("all")
            self._photo_refs = []
            slide = self._active_slide()
            if slide is None:
                return
            rects = compute_layout(slide.layout, self.screen_width, self.screen_height)
            for resource in slide.resources:
                rect = rects.get(resource.role)
                if rect is None:
                    continue
                self._draw_resource(resource, rect)
        except DisplayError as e:
            self.logger.error(f"Cannot lay out slide {self.active_index}: {e}")
        except (OSError, ValueError, tk.TclError) as e:
            self.logger.error(f"Error drawing slide {self.active_index}: {e}")

    def _draw_resource(self, resource: ImageResource, rect: Rect) -> None:
        x, y, width, height = rect
        image = self._images.get(resource.key)

        if image is None:
            # Placeholder until some tier has arrived
            self.canvas.create_rectangle(x, y, x + width, y + height, fill='#1a1a1a', outline='')
        else:
            display_image = fit_image(image, width, height)
            photo_image = ImageTk.PhotoImage(display_image)
            self._photo_refs.append(photo_image)
            self.canvas.create_image(
                x + (width - display_image.width) // 2,
                y + (height - display_image.height) // 2,
                anchor=tk.NW, image=photo_image
            )

        if self.config.get('show_captions', True) and resource.slot.caption:
            self.canvas.create_text(
                x, y + height + 6,
                text=resource.slot.caption,
                font=('Arial', 14),
                fill='#cccccc',
                anchor=tk.NW,
                width=width
            )

    # ===== Event loop =====

    def _on_click(self, event, callback: Callable[[Optional[str]], None]) -> None:
        slide = self._active_slide()
        if slide is None or not self.layout_ready:
            return
        rects = compute_layout(slide.layout, self.screen_width, self.screen_height)
        callback(resolve_click_zone(slide.layout, rects, event.x, event.y))

    def bind_key_events(self, callback) -> None:
        """Bind keyboard events to callback function."""
        self.root.bind('<Key>', callback)
        self.root.focus_set()

    def bind_mouse_events(self, callback) -> None:
        """Bind mouse clicks; the callback receives 'prev', 'next' or None."""
        self.root.bind('<Button-1>', lambda e: self._on_click(e, callback))

    def _schedule_poll(self, poll_callback) -> None:
        interval = self.config.get('completion_poll_ms', 20)

        def poll():
            try:
                poll_callback()
            except Exception as e:
                self.logger.exception(f"Error processing fetch completions: {e}")
            if self.root:
                self.root.after(interval, poll)

        self.root.after(interval, poll)

    def start_event_loop(self, key_callback, mouse_callback, poll_callback) -> None:
        """Start the tkinter event loop with input bindings and completion polling."""
        try:
            self.bind_key_events(key_callback)
            self.bind_mouse_events(mouse_callback)
            self._schedule_poll(poll_callback)
            self.root.mainloop()
        except tk.TclError as e:
            self.logger.error(f"Error in event loop: {e}")
            raise DisplayError(f"Display event loop failed: {e}") from e

    def destroy(self) -> None:
        """Clean up display resources."""
        if self.root:
            self.root.destroy()
            self.root = None
