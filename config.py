"""
Configuration management for the Progressive Photo Slideshow.
Handles loading, validation, and defaults for user configuration.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from path_config import PathConfig


class SlideshowConfig:
    """Manages slideshow configuration with validation and defaults."""
    
    # Default configuration values
    DEFAULT_CONFIG = {
        "server_url": "http://localhost:8788",
        "slides_endpoint": "/api/slides",
        "request_timeout": 30,
        "user_agent": "ProgressiveSlideshow/1.0",
        "start_index": 0,
        "completion_poll_ms": 20,
        "MONITOR_RESOLUTION": "auto",
        "show_captions": True,
        "LOGGING_VERBOSE": False
    }
    
    def __init__(self, path_config: Optional[PathConfig] = None):
        self.path_config = path_config or PathConfig()
        self.config_path = self.path_config.config_file
        self.config = self.DEFAULT_CONFIG.copy()
        self.logger = logging.getLogger(__name__)
    
    def load_config(self) -> None:
        """Load configuration from file, using defaults for missing/invalid values."""
        try:
            if self.config_path.exists():
                with open(self.config_path, 'r') as f:
                    user_config = json.load(f)
                
                # Validate and merge user config with defaults
                for key, value in user_config.items():
                    if key in self.DEFAULT_CONFIG:
                        if self._validate_config_value(key, value):
                            self.config[key] = value
                        else:
                            self.logger.warning(f"Invalid value for {key}: {value}. Using default: {self.DEFAULT_CONFIG[key]}")
                    else:
                        # Allow additional config keys not in defaults
                        self.config[key] = value
                
                self.logger.info(f"Configuration loaded from {self.config_path}")
            else:
                self.logger.info("No config file found, using defaults")
                self._create_default_config()
        
        except (json.JSONDecodeError, IOError) as e:
            self.logger.error(f"Error loading config file: {e}. Using defaults.")
            self.config = self.DEFAULT_CONFIG.copy()
    
    def _validate_config_value(self, key: str, value: Any) -> bool:
        """Validate a configuration value."""
        if key == "server_url":
            if not isinstance(value, str):
                return False
            parsed = urlparse(value)
            return parsed.scheme in ("http", "https") and bool(parsed.netloc)
        elif key == "slides_endpoint":
            return isinstance(value, str) and value.startswith('/')
        elif key == "user_agent":
            return isinstance(value, str) and bool(value)
        elif key == "request_timeout":
            return isinstance(value, (int, float)) and not isinstance(value, bool) and 0 < value <= 600
        elif key == "completion_poll_ms":
            return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 1000
        elif key == "start_index":
            return isinstance(value, int) and not isinstance(value, bool) and value >= 0
        elif key == "MONITOR_RESOLUTION":
            if value == "auto":
                return True
            if isinstance(value, str) and 'x' in value:
                try:
                    width, height = value.split('x')
                    return int(width) > 0 and int(height) > 0
                except ValueError:
                    return False
            return False
        elif key in ["show_captions", "LOGGING_VERBOSE"]:
            return isinstance(value, bool)
        
        return True
    
    def _create_default_config(self) -> None:
        """Create default configuration file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.DEFAULT_CONFIG, f, indent=2)
            self.logger.info(f"Created default config file at {self.config_path}")
        except IOError as e:
            self.logger.error(f"Could not create config file: {e}")
    
    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self.config.get(key, default)
    
    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self.config.copy()
