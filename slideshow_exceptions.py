"""
Custom exceptions for the Progressive Photo Slideshow.

Provides specific exception types for better error handling and debugging.
"""


class SlideshowError(Exception):
    """Base exception for all slideshow-related errors."""
    pass


class ConfigurationError(SlideshowError):
    """Raised when there are configuration-related issues."""
    pass


class PathConfigurationError(ConfigurationError):
    """Raised when there are issues with path configuration."""
    pass


class SlideDataError(SlideshowError):
    """Raised when the slide list cannot be fetched or parsed."""
    pass


class ImageFetchError(SlideshowError):
    """Raised when an image cannot be downloaded or decoded."""
    pass


class DisplayError(SlideshowError):
    """Raised when there are issues with photo display."""
    pass
