"""Error taxonomy for tops-decoder."""

from .errors import (
    ErrorCode,
    ERROR_METADATA,
    DecodeError,
    IncompleteMessage,
    MalformedMessage,
    ReservedBitsError,
    UnrecognizedTag,
    ConfigError,
)

__all__ = [
    'ErrorCode',
    'ERROR_METADATA',
    'DecodeError',
    'IncompleteMessage',
    'MalformedMessage',
    'ReservedBitsError',
    'UnrecognizedTag',
    'ConfigError',
]
