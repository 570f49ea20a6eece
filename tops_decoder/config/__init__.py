"""Configuration management for tops-decoder."""

from .schema import (
    TopsConfig,
    DecoderConfig,
    LoggingConfig,
    load_config,
    generate_default_config,
)

__all__ = [
    'TopsConfig',
    'DecoderConfig',
    'LoggingConfig',
    'load_config',
    'generate_default_config',
]
