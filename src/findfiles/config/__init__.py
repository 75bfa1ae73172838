"""
Configuration management package for FindFiles.

This package provides configuration parsing, validation, and management
functionality for FindFiles.
"""

from .parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
    create_config_template
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'load_config',
    'create_config_template'
]
