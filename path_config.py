"""
Path Configuration Service

Provides configurable paths for configuration and log files,
enabling dependency injection and better testability.
"""

import os
from pathlib import Path
from typing import Optional, Dict

from slideshow_exceptions import PathConfigurationError


class PathConfig:
    """Manages configurable paths for the slideshow application."""
    
    def __init__(self, 
                 base_dir: Optional[Path] = None,
                 config_dir: Optional[Path] = None,
                 log_dir: Optional[Path] = None):
        """
        Initialize path configuration.
        
        Args:
            base_dir: Base directory for all files (defaults to user home)
            config_dir: Directory for configuration files
            log_dir: Directory for log files
        """
        self.base_dir = base_dir or Path.home()
        self.config_dir = config_dir or self.base_dir
        self.log_dir = log_dir or self.base_dir
        
        self._ensure_directories()
    
    def _ensure_directories(self):
        """Ensure all configured directories exist."""
        for directory in [self.config_dir, self.log_dir]:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PathConfigurationError(f"Cannot create directory {directory}: {e}") from e
    
    @property
    def config_file(self) -> Path:
        """Path to the main configuration file."""
        return self.config_dir / '.progressive_slideshow_config.json'
    
    @property
    def log_file(self) -> Path:
        """Path to the main log file."""
        return self.log_dir / '.progressive_slideshow.log'
    
    @classmethod
    def create_for_testing(cls, temp_dir: Path) -> 'PathConfig':
        """
        Create a PathConfig instance for testing with temporary directories.
        
        Args:
            temp_dir: Temporary directory to use as base
            
        Returns:
            PathConfig: Configured for testing
        """
        return cls(
            base_dir=temp_dir,
            config_dir=temp_dir / 'config',
            log_dir=temp_dir / 'logs'
        )
    
    @classmethod
    def create_from_env(cls) -> 'PathConfig':
        """
        Create PathConfig from environment variables.
        
        Environment variables:
        - SLIDESHOW_BASE_DIR: Base directory
        - SLIDESHOW_CONFIG_DIR: Config directory
        - SLIDESHOW_LOG_DIR: Log directory
        
        Returns:
            PathConfig: Configured from environment
        """
        base_dir = None
        if base_env := os.getenv('SLIDESHOW_BASE_DIR'):
            base_dir = Path(base_env)
        
        config_dir = None
        if config_env := os.getenv('SLIDESHOW_CONFIG_DIR'):
            config_dir = Path(config_env)
        
        log_dir = None
        if log_env := os.getenv('SLIDESHOW_LOG_DIR'):
            log_dir = Path(log_env)
        
        return cls(
            base_dir=base_dir,
            config_dir=config_dir,
            log_dir=log_dir
        )
    
    def to_dict(self) -> Dict[str, str]:
        """Convert path configuration to dictionary for serialization."""
        return {
            'base_dir': str(self.base_dir),
            'config_dir': str(self.config_dir),
            'log_dir': str(self.log_dir)
        }
