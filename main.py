#!/usr/bin/env python3
"""
Progressive Photo Slideshow - Main Application
A fullscreen slideshow that shows low-resolution photos immediately and
upgrades them to full resolution in the background.
"""

import logging
import sys

from config import SlideshowConfig
from display_manager import DisplayManager
from image_fetcher import ImageFetcher
from path_config import PathConfig
from slide_manager import SlideManager
from slideshow_controller import SlideshowController
from slideshow_exceptions import SlideshowError, SlideDataError


def setup_logging(path_config: PathConfig, verbose: bool = False) -> None:
    """Setup logging configuration based on verbose setting."""
    log_level = logging.DEBUG if verbose else logging.WARNING
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[
            logging.FileHandler(path_config.log_file),
            logging.StreamHandler(sys.stdout) if verbose else logging.NullHandler()
        ]
    )


def main() -> None:
    """Main application entry point."""
    logger = logging.getLogger(__name__)
    try:
        # Initialize path configuration (can be overridden by environment variables)
        path_config = PathConfig.create_from_env()

        # 1. Load user configuration file
        config = SlideshowConfig(path_config)
        config.load_config()

        setup_logging(path_config, config.get('LOGGING_VERBOSE', False))

        # 2. Fetch the slide list once for this session
        slide_manager = SlideManager(config)
        try:
            slides = slide_manager.load_slides()
        except SlideDataError as e:
            logger.error(f"Failed to load slides: {e}")
            slides = []

        if not slides:
            logger.warning(f"No slides available from {config.get('server_url')}")

        # 3. Start slideshow: first slide is loaded before background prefetching
        display_manager = DisplayManager(config, slides)
        fetcher = ImageFetcher(config, session=slide_manager.session)
        controller = SlideshowController(config, slides, display_manager, fetcher)

        logger.info("Controls: Arrow keys or click (prev/next), Escape (exit)")
        controller.start_slideshow()

    except KeyboardInterrupt:
        logger.info("Slideshow stopped by user.")
    except SlideshowError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
